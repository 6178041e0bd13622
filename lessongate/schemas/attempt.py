"""
Attempt and grading schemas for LessonGate.

AttemptResult is a fact supplied by the grading boundary: appended once per
submission, never mutated by the engine.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Optional


class GradeResult(BaseModel):
    correct_count: float     # item count, or weight sum for weighted quizzes
    total_count: float
    percentage: int = Field(..., ge=0, le=100)
    passed: bool


class AttemptResult(BaseModel):
    id: Optional[int] = None
    lesson_id: int
    learner_id: str
    percentage: float = Field(..., ge=0, le=100)
    passed: bool
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, v):
        # Naive timestamps are read as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
