"""
Progress schemas for LessonGate.

Defines Pydantic models for derived learner progress including:
- Lesson status (locked / available / completed)
- Per-lesson progress with attempt summary
- Module and course rollups
"""

from pydantic import BaseModel
from typing import Optional
from enum import Enum


class LessonStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


class CompletionPolicy(str, Enum):
    EVER_PASSED = "ever_passed"         # any passing attempt completes (monotonic)
    LATEST_ATTEMPT = "latest_attempt"   # only the most recent attempt counts


class LessonProgress(BaseModel):
    lesson_id: int
    learner_id: str
    status: LessonStatus = LessonStatus.LOCKED
    passed: bool = False
    attempt_count: int = 0
    last_percentage: Optional[float] = None
    best_percentage: Optional[float] = None


class ModuleProgress(BaseModel):
    module_id: int
    status: LessonStatus
    completed_count: int
    total_count: int


class CourseProgress(BaseModel):
    course_id: int
    learner_id: str
    status: LessonStatus
    modules: list[ModuleProgress]
    lessons: dict[int, LessonProgress]

    @property
    def completion_percent(self) -> float:
        total = len(self.lessons)
        if total == 0:
            return 0
        completed = sum(1 for p in self.lessons.values() if p.status == LessonStatus.COMPLETED)
        return round(completed / total * 100, 1)
