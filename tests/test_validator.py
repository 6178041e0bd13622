"""Tests for the quiz authoring validator."""

from lessongate.engine import validate_quiz_draft
from lessongate.schemas import (
    Alternative,
    IssueCode,
    LessonScope,
    Question,
    Quiz,
    parse_quiz,
)


def _question(statement="What is 2 + 2?", correct=(True, False), texts=("4", "5"), order=None, qid=None):
    return Question(
        id=qid,
        statement=statement,
        order=order,
        alternatives=[Alternative(text=t, is_correct=c) for t, c in zip(texts, correct)],
    )


def _quiz(*questions, title="Arithmetic"):
    return Quiz(title=title, questions=list(questions), scope=LessonScope(lesson_id=1))


class TestAcceptedDrafts:

    def test_valid_quiz(self):
        result = validate_quiz_draft(_quiz(_question(), _question()))
        assert result.ok
        assert result.issues == []
        assert len(result.quiz.questions) == 2

    def test_orders_reindexed(self):
        result = validate_quiz_draft(_quiz(
            _question(statement="third", order=3),
            _question(statement="first", order=1),
            _question(statement="last", order=None),
            _question(statement="second", order=1),
        ))
        assert [q.statement for q in result.quiz.questions] == ["first", "second", "third", "last"]
        assert [q.order for q in result.quiz.questions] == [1, 2, 3, 4]

    def test_ties_keep_draft_position(self):
        result = validate_quiz_draft(_quiz(
            _question(statement="a", order=1, qid=10),
            _question(statement="b", order=1, qid=7),
        ))
        assert [q.id for q in result.quiz.questions] == [10, 7]

    def test_nothing_else_is_repaired(self):
        result = validate_quiz_draft(_quiz(
            _question(statement="  padded  ", texts=(" 4 ", "")),
            title=" Title ",
        ))
        assert result.ok
        assert result.quiz.title == " Title "
        assert result.quiz.questions[0].statement == "  padded  "
        assert [a.text for a in result.quiz.questions[0].alternatives] == [" 4 ", ""]

    def test_draft_is_not_mutated(self):
        draft = _quiz(_question(order=5))
        validate_quiz_draft(draft)
        assert draft.questions[0].order == 5

    def test_empty_questions_allowed_before_finalization(self):
        result = validate_quiz_draft(_quiz(), finalize=False)
        assert result.ok

    def test_round_trip_adds_no_issues(self):
        result = validate_quiz_draft(_quiz(_question(order=2), _question(order=1)))
        reparsed = parse_quiz(result.quiz.model_dump_json())
        again = validate_quiz_draft(reparsed)
        assert again.ok
        assert again.quiz == result.quiz


class TestRejectedDrafts:

    def test_no_correct_alternative_is_rejected_not_fixed(self):
        result = validate_quiz_draft(_quiz(_question(), _question(correct=(False, False))))
        assert not result.ok
        assert result.quiz is None
        assert [i.code for i in result.issues_for(1)] == [IssueCode.NO_CORRECT_ALTERNATIVE]
        assert result.issues_for(0) == []

    def test_multiple_correct_alternatives(self):
        result = validate_quiz_draft(_quiz(_question(correct=(True, True))))
        assert [i.code for i in result.issues] == [IssueCode.MULTIPLE_CORRECT_ALTERNATIVES]
        assert result.issues[0].question_index == 0

    def test_blank_statement(self):
        result = validate_quiz_draft(_quiz(_question(statement="   ")))
        assert [i.code for i in result.issues] == [IssueCode.EMPTY_STATEMENT]

    def test_alternatives_without_text(self):
        result = validate_quiz_draft(_quiz(_question(texts=(" ", ""))))
        assert [i.code for i in result.issues] == [IssueCode.NO_ALTERNATIVE_TEXT]

    def test_question_without_alternatives(self):
        result = validate_quiz_draft(_quiz(Question(statement="Empty?")))
        codes = {i.code for i in result.issues}
        assert codes == {IssueCode.NO_ALTERNATIVE_TEXT, IssueCode.NO_CORRECT_ALTERNATIVE}

    def test_blank_title(self):
        result = validate_quiz_draft(_quiz(_question(), title="  "))
        assert len(result.issues) == 1
        assert result.issues[0].code == IssueCode.EMPTY_TITLE
        assert result.issues[0].question_index is None

    def test_no_questions_at_finalization(self):
        result = validate_quiz_draft(_quiz())
        assert [i.code for i in result.issues] == [IssueCode.NO_QUESTIONS]

    def test_draft_mode_still_checks_questions(self):
        result = validate_quiz_draft(_quiz(_question(correct=(False, False))), finalize=False)
        assert not result.ok

    def test_every_failing_question_reported(self):
        result = validate_quiz_draft(_quiz(
            _question(statement=""),
            _question(),
            _question(correct=(False, False), texts=("", "")),
            title="",
        ))
        assert {i.question_index for i in result.issues} == {None, 0, 2}
        assert len(result.issues_for(2)) == 2

    def test_reason_names_question(self):
        result = validate_quiz_draft(_quiz(_question(), _question(correct=(False, False))))
        assert "Question 2" in result.issues[0].reason

    def test_duplicate_question_id_reported_on_later_question(self):
        result = validate_quiz_draft(_quiz(_question(qid=1), _question(qid=2), _question(qid=1)))
        assert not result.ok
        assert [i.code for i in result.issues] == [IssueCode.DUPLICATE_QUESTION_ID]
        assert result.issues[0].question_index == 2

    def test_unassigned_question_ids_are_not_duplicates(self):
        assert validate_quiz_draft(_quiz(_question(), _question())).ok

    def test_duplicate_alternative_id_within_question(self):
        question = Question(
            id=1,
            statement="Pick one",
            alternatives=[
                Alternative(id=5, text="a", is_correct=True),
                Alternative(id=5, text="b"),
            ],
        )
        result = validate_quiz_draft(_quiz(question))
        assert [i.code for i in result.issues] == [IssueCode.DUPLICATE_ALTERNATIVE_ID]
        assert result.issues[0].question_index == 0
