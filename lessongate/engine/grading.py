"""
Grading - score a learner submission against a quiz.

Every question counts toward the total whether answered or not. A missing
answer is scored as incorrect; an answer that points at something the quiz
does not contain is a caller error and raises InvalidInput.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional

from lessongate.errors import InvalidInput
from lessongate.schemas import AttemptResult, GradeResult, Quiz, DEFAULT_PASS_THRESHOLD

logger = logging.getLogger(__name__)


def percentage_of(part, whole) -> int:
    """Integer percentage, rounded half-up in Decimal (29/200 -> 15)."""
    ratio = Decimal(str(part)) / Decimal(str(whole)) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _check_gradable(quiz: Quiz) -> None:
    if not quiz.questions:
        raise InvalidInput(f"Quiz '{quiz.title}' has no questions to grade")

    for index, question in enumerate(quiz.questions):
        if question.id is None:
            raise InvalidInput(f"Question {index + 1} of quiz '{quiz.title}' has no id")
        if any(a.id is None for a in question.alternatives):
            raise InvalidInput(f"Question {question.id} has alternatives without ids")
        if len(question.correct_alternatives) != 1:
            raise InvalidInput(
                f"Question {question.id} must have exactly one correct alternative to be graded"
            )


def grade_submission(
    quiz: Quiz,
    answers: Mapping[int, int],
    default_pass_threshold: float = DEFAULT_PASS_THRESHOLD,
) -> GradeResult:
    """
    Grade a submission.

    Args:
        quiz: Finalized quiz; questions and alternatives must carry ids
        answers: question_id -> chosen alternative_id (may be partial)
        default_pass_threshold: Used when the quiz declares no threshold

    Returns:
        GradeResult with counts (weight sums if the quiz is weighted),
        a round-half-up percentage and the pass verdict.

    Raises:
        InvalidInput: quiz has no questions, or an answer references an
            unknown question or an alternative outside its question.
    """
    _check_gradable(quiz)

    questions = {q.id: q for q in quiz.questions}
    unknown = set(answers) - set(questions)
    if unknown:
        raise InvalidInput(f"Answers reference unknown question id(s): {sorted(unknown)}")

    weighted = quiz.is_weighted
    correct = Decimal(0)
    total = Decimal(0)

    for question in quiz.questions:
        points = Decimal(str(question.weight)) if weighted else Decimal(1)
        total += points

        chosen = answers.get(question.id)
        if chosen is None:
            continue

        alternative_ids = {a.id for a in question.alternatives}
        if chosen not in alternative_ids:
            raise InvalidInput(
                f"Answer for question {question.id} references alternative {chosen}, "
                f"which does not belong to it"
            )

        if chosen == question.correct_alternatives[0].id:
            correct += points

    percentage = percentage_of(correct, total)
    passed = percentage >= quiz.effective_pass_threshold(default_pass_threshold)

    logger.debug(f"Graded quiz '{quiz.title}': {correct}/{total} = {percentage}% (passed={passed})")

    return GradeResult(
        correct_count=float(correct),
        total_count=float(total),
        percentage=percentage,
        passed=passed,
    )


def unanswered_question_ids(quiz: Quiz, answers: Mapping[int, int]) -> list[int]:
    """Ids of questions with no answer, in quiz order."""
    return [q.id for q in quiz.questions if answers.get(q.id) is None]


def attempts_remaining(quiz: Quiz, attempts: Iterable[AttemptResult]) -> Optional[int]:
    """
    Attempts left for one learner on one quiz.

    `attempts` must already be filtered to that learner and quiz. Returns
    None when the quiz has no attempt limit.
    """
    if quiz.max_attempts is None:
        return None
    used = sum(1 for _ in attempts)
    return max(quiz.max_attempts - used, 0)
