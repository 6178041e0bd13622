"""
Quiz schemas for LessonGate.

Defines Pydantic models for assessments including:
- Alternatives with a correctness flag
- Questions with score weight and declared order
- Quizzes owned by either a course or a single lesson
- Validation results returned by the authoring validator
"""

from pydantic import BaseModel, Field
from typing import Optional, Literal, Union
from enum import Enum


# -----------------------------------------------------------------------------
# Quiz content
# -----------------------------------------------------------------------------

class Alternative(BaseModel):
    id: Optional[int] = None
    text: str
    is_correct: bool = False


class Question(BaseModel):
    """
    A single question with its ordered alternatives.

    Alternatives belong to exactly one question. At finalization time exactly
    one alternative must be marked correct; drafts may violate this.
    """
    id: Optional[int] = None
    statement: str
    weight: float = Field(default=1, gt=0)
    order: Optional[int] = None   # None sorts last
    alternatives: list[Alternative] = []

    @property
    def correct_alternatives(self) -> list[Alternative]:
        return [a for a in self.alternatives if a.is_correct]


# -----------------------------------------------------------------------------
# Owner scope (a quiz belongs to a course OR a lesson, never both)
# -----------------------------------------------------------------------------

class CourseScope(BaseModel):
    kind: Literal["course"] = "course"
    course_id: int


class LessonScope(BaseModel):
    kind: Literal["lesson"] = "lesson"
    lesson_id: int


QuizScope = Union[CourseScope, LessonScope]


# Used when neither the quiz nor the engine settings give a threshold
DEFAULT_PASS_THRESHOLD = 100


class Quiz(BaseModel):
    """
    Canonical in-memory assessment.

    The same model is used for drafts being authored and for finalized quizzes;
    only `validate_quiz_draft` decides whether a draft may be persisted.
    """
    id: Optional[int] = None
    title: str
    instructions: Optional[str] = None
    pass_threshold: Optional[float] = Field(default=None, ge=0, le=100)  # None: engine default
    max_attempts: Optional[int] = Field(default=None, ge=1)
    published: bool = False
    questions: list[Question] = []
    scope: QuizScope = Field(..., discriminator="kind")

    def effective_pass_threshold(self, default: float = DEFAULT_PASS_THRESHOLD) -> float:
        return default if self.pass_threshold is None else self.pass_threshold

    @property
    def is_weighted(self) -> bool:
        """True if any question declares a weight other than 1."""
        return any(q.weight != 1 for q in self.questions)


# -----------------------------------------------------------------------------
# Validation results
# -----------------------------------------------------------------------------

class IssueCode(str, Enum):
    EMPTY_TITLE = "empty_title"
    NO_QUESTIONS = "no_questions"
    EMPTY_STATEMENT = "empty_statement"
    NO_ALTERNATIVE_TEXT = "no_alternative_text"
    NO_CORRECT_ALTERNATIVE = "no_correct_alternative"
    MULTIPLE_CORRECT_ALTERNATIVES = "multiple_correct_alternatives"
    DUPLICATE_QUESTION_ID = "duplicate_question_id"
    DUPLICATE_ALTERNATIVE_ID = "duplicate_alternative_id"


class ValidationIssue(BaseModel):
    """A single quiz defect. `question_index` is None for quiz-level issues."""
    question_index: Optional[int] = None
    code: IssueCode
    reason: str


class ValidationResult(BaseModel):
    quiz: Optional[Quiz] = None       # normalized draft, only when ok
    issues: list[ValidationIssue] = []

    @property
    def ok(self) -> bool:
        return not self.issues

    def issues_for(self, question_index: int) -> list[ValidationIssue]:
        return [i for i in self.issues if i.question_index == question_index]
