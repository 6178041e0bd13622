"""
LessonGate Classroom - Application boundary around the engine.

This module provides:
- CourseStore: SQLite persistence for structure, quizzes and attempts
- Navigator: Learner navigation, gating and quiz submission
- Reports: Module/course approval reports
"""

from .store import (
    CourseStore,
    assign_ids,
)

from .navigator import (
    Navigator,
    NavigationLesson,
    NavigationModule,
    SubmissionOutcome,
)

from .reports import (
    build_approval_report,
    report_for_course,
)

__all__ = [
    # Store
    "CourseStore",
    "assign_ids",
    # Navigator
    "Navigator",
    "NavigationLesson",
    "NavigationModule",
    "SubmissionOutcome",
    # Reports
    "build_approval_report",
    "report_for_course",
]
