"""
LessonGate Engine - Pure assessment & progression functions.

This module provides:
- order_of: deterministic sibling sequencing
- validate_quiz_draft: quiz authoring checks
- grade_submission: scoring and pass verdict
- compute_progress: lesson lock/available/completed projection
"""

from .sequencing import (
    sort_key,
    sort_siblings,
    order_of,
)

from .validator import (
    validate_quiz_draft,
    normalize_question_order,
)

from .grading import (
    grade_submission,
    percentage_of,
    unanswered_question_ids,
    attempts_remaining,
)

from .progression import (
    ordered_lessons,
    compute_progress,
    summarize_progress,
    compute_course_progress,
    predecessor_of,
)

__all__ = [
    # Sequencing
    "sort_key",
    "sort_siblings",
    "order_of",
    # Validator
    "validate_quiz_draft",
    "normalize_question_order",
    # Grading
    "grade_submission",
    "percentage_of",
    "unanswered_question_ids",
    "attempts_remaining",
    # Progression
    "ordered_lessons",
    "compute_progress",
    "summarize_progress",
    "compute_course_progress",
    "predecessor_of",
]
