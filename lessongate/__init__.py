"""
LessonGate - Assessment & progression engine for a learning-management system.

The pure engine functions are re-exported here:
- validate_quiz_draft: quiz authoring checks
- grade_submission: scoring and pass verdict
- compute_progress: lesson lock/available/completed projection
- order_of: deterministic sibling sequencing
"""

from .engine import (
    validate_quiz_draft,
    grade_submission,
    compute_progress,
    order_of,
)

__version__ = "0.1.0"

__all__ = [
    "validate_quiz_draft",
    "grade_submission",
    "compute_progress",
    "order_of",
]
