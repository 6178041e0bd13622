"""
Quiz authoring validator.

Checks a quiz draft for structural soundness before it is persisted. Every
failing question is reported in one pass; nothing is auto-corrected except
the deterministic re-indexing of questions by declared order.
"""

import logging
import math

from lessongate.schemas import (
    IssueCode,
    Question,
    Quiz,
    ValidationIssue,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def _question_issues(index: int, question: Question) -> list[ValidationIssue]:
    issues = []

    if not question.statement.strip():
        issues.append(ValidationIssue(
            question_index=index,
            code=IssueCode.EMPTY_STATEMENT,
            reason=f"Question {index + 1} must have a statement.",
        ))

    if not any(a.text.strip() for a in question.alternatives):
        issues.append(ValidationIssue(
            question_index=index,
            code=IssueCode.NO_ALTERNATIVE_TEXT,
            reason=f"Question {index + 1} must have at least one alternative with text.",
        ))

    correct = len(question.correct_alternatives)
    if correct == 0:
        issues.append(ValidationIssue(
            question_index=index,
            code=IssueCode.NO_CORRECT_ALTERNATIVE,
            reason=f"Question {index + 1} must have one correct alternative.",
        ))
    elif correct > 1:
        issues.append(ValidationIssue(
            question_index=index,
            code=IssueCode.MULTIPLE_CORRECT_ALTERNATIVES,
            reason=f"Question {index + 1} has {correct} alternatives marked correct; exactly one is allowed.",
        ))

    alternative_ids = [a.id for a in question.alternatives if a.id is not None]
    if len(alternative_ids) != len(set(alternative_ids)):
        issues.append(ValidationIssue(
            question_index=index,
            code=IssueCode.DUPLICATE_ALTERNATIVE_ID,
            reason=f"Question {index + 1} reuses an alternative id.",
        ))

    return issues


def normalize_question_order(questions: list[Question]) -> list[Question]:
    """
    Re-index questions by declared order.

    Ties are broken by position in the draft, then by id. The returned questions
    carry consecutive orders starting at 1.
    """
    indexed = sorted(
        enumerate(questions),
        key=lambda pair: (
            math.inf if pair[1].order is None else pair[1].order,
            pair[0],
            math.inf if pair[1].id is None else pair[1].id,
        ),
    )
    return [
        question.model_copy(update={"order": position})
        for position, (_, question) in enumerate(indexed, start=1)
    ]


def validate_quiz_draft(draft: Quiz, finalize: bool = True) -> ValidationResult:
    """
    Validate a quiz draft.

    Args:
        draft: Quiz being authored
        finalize: If True the quiz is about to be published and must contain
            at least one question. Pre-save drafts may be empty.

    Returns:
        ValidationResult with the normalized quiz when there are no issues,
        otherwise the complete list of issues.
    """
    issues = []

    if not draft.title.strip():
        issues.append(ValidationIssue(
            code=IssueCode.EMPTY_TITLE,
            reason="The quiz title is required.",
        ))

    if finalize and not draft.questions:
        issues.append(ValidationIssue(
            code=IssueCode.NO_QUESTIONS,
            reason="The quiz must contain at least one question.",
        ))

    for index, question in enumerate(draft.questions):
        issues.extend(_question_issues(index, question))

    seen = {}
    for index, question in enumerate(draft.questions):
        if question.id is None:
            continue
        if question.id in seen:
            issues.append(ValidationIssue(
                question_index=index,
                code=IssueCode.DUPLICATE_QUESTION_ID,
                reason=f"Question {index + 1} reuses id {question.id} from question {seen[question.id] + 1}.",
            ))
        else:
            seen[question.id] = index

    if issues:
        logger.debug(f"Quiz draft '{draft.title}' has {len(issues)} issue(s)")
        return ValidationResult(issues=issues)

    normalized = draft.model_copy(
        update={"questions": normalize_question_order(draft.questions)}
    )
    return ValidationResult(quiz=normalized)
