"""
Course structure schemas for LessonGate.

The read model handed to the engine by the application boundary:
courses contain modules, modules contain lessons. Ordering is carried by
the nullable `order` field and resolved by `lessongate.engine.sequencing`.
"""

from pydantic import BaseModel, computed_field
from typing import Optional


class Lesson(BaseModel):
    id: int
    module_id: int
    title: str = ""
    order: Optional[int] = None
    quiz_id: Optional[int] = None

    @computed_field
    @property
    def has_quiz(self) -> bool:
        return self.quiz_id is not None


class Module(BaseModel):
    id: int
    course_id: int
    title: str = ""
    order: Optional[int] = None
    lessons: list[Lesson] = []


class Course(BaseModel):
    id: int
    title: str = ""
    quiz_id: Optional[int] = None   # course-level exam, if any
    modules: list[Module] = []

    def find_lesson(self, lesson_id: int) -> Optional[Lesson]:
        for module in self.modules:
            for lesson in module.lessons:
                if lesson.id == lesson_id:
                    return lesson
        return None

    @property
    def lesson_ids(self) -> set[int]:
        return {lesson.id for module in self.modules for lesson in module.lessons}
