"""
LessonGate Schemas - Pydantic models for the assessment & progression engine.

This module exports all schema classes for:
- Quiz: alternatives, questions, quizzes, validation results
- Course: course/module/lesson read model
- Attempt: grading results and attempt history facts
- Progress: derived lesson, module and course status
- Report: module/course approval reports
"""

# Quiz schemas
from .quiz import (
    Alternative,
    Question,
    CourseScope,
    LessonScope,
    QuizScope,
    Quiz,
    IssueCode,
    ValidationIssue,
    ValidationResult,
    DEFAULT_PASS_THRESHOLD,
)

# Course schemas
from .course import (
    Lesson,
    Module,
    Course,
)

# Attempt schemas
from .attempt import (
    GradeResult,
    AttemptResult,
)

# Progress schemas
from .progress import (
    LessonStatus,
    CompletionPolicy,
    LessonProgress,
    ModuleProgress,
    CourseProgress,
)

# Report schemas
from .report import (
    ApprovalStatus,
    ApprovalRecord,
    ReportSummary,
    ApprovalReport,
)

# Boundary parsing
from .payloads import (
    parse_model,
    parse_quiz,
    parse_course,
    parse_attempts,
    parse_answers,
    parse_siblings,
    parse_viewed,
    Sibling,
)

__all__ = [
    # Quiz
    'Alternative',
    'Question',
    'CourseScope',
    'LessonScope',
    'QuizScope',
    'Quiz',
    'IssueCode',
    'ValidationIssue',
    'ValidationResult',
    'DEFAULT_PASS_THRESHOLD',
    # Course
    'Lesson',
    'Module',
    'Course',
    # Attempt
    'GradeResult',
    'AttemptResult',
    # Progress
    'LessonStatus',
    'CompletionPolicy',
    'LessonProgress',
    'ModuleProgress',
    'CourseProgress',
    # Report
    'ApprovalStatus',
    'ApprovalRecord',
    'ReportSummary',
    'ApprovalReport',
    # Payloads
    'parse_model',
    'parse_quiz',
    'parse_course',
    'parse_attempts',
    'parse_answers',
    'parse_siblings',
    'parse_viewed',
    'Sibling',
]
