"""
Navigator - Lesson sequencing, gating, and submissions for a learner.

Provides:
- Next/previous lesson navigation along the gating sequence
- Lesson status derived from attempt history
- Navigation tree with module rollups
- Quiz submission: gate check, attempt limit, grading, persistence
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

from lessongate.engine import (
    attempts_remaining,
    compute_course_progress,
    grade_submission,
    ordered_lessons,
    sort_siblings,
)
from lessongate.errors import AttemptLimitReached, InvalidInput, LessonLocked, NotFound
from lessongate.schemas import (
    AttemptResult,
    Course,
    CourseProgress,
    GradeResult,
    Lesson,
    LessonProgress,
    LessonStatus,
    Module,
    ModuleProgress,
)
from lessongate.utils import EngineSettings

from .store import CourseStore

logger = logging.getLogger(__name__)


@dataclass
class NavigationLesson:
    """Lesson with navigation metadata."""
    lesson: Lesson
    progress: LessonProgress
    is_recommended: bool


@dataclass
class NavigationModule:
    """Module with lessons and rollup status."""
    module: Module
    progress: ModuleProgress
    lessons: list[NavigationLesson]


@dataclass
class SubmissionOutcome:
    """Result of a graded submission."""
    grade: GradeResult
    attempt_id: int
    attempts_left: Optional[int]     # None when the quiz is unlimited
    next_lesson_id: Optional[int]    # next lesson now open, if any


class Navigator:
    """
    Navigate a course for one learner at a time.

    Combines CourseStore (structure and history) with the pure engine. Nothing
    is cached: every call recomputes progress from the stored attempts, and
    the learner is always passed explicitly.
    """

    def __init__(self, store: CourseStore, settings: Optional[EngineSettings] = None):
        """
        Initialize navigator.

        Args:
            store: CourseStore for structure, quizzes and attempts
            settings: Engine settings (default pass threshold, policy)
        """
        self.store = store
        self.settings = settings or EngineSettings()

    def _lesson_order(self, course: Course) -> list[int]:
        return [lesson.id for lesson in ordered_lessons(course)]

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def _progress_for(self, course: Course, learner_id: str) -> CourseProgress:
        return compute_course_progress(
            course,
            self.store.fetch_attempt_history(learner_id, course.id),
            learner_id,
            viewed_lesson_ids=self.store.get_viewed_lesson_ids(learner_id, course.id),
            policy=self.settings.completion_policy,
        )

    def get_course_progress(self, course_id: int, learner_id: str) -> CourseProgress:
        """Full progress for a learner in a course."""
        course = self.store.fetch_course_structure(course_id)
        return self._progress_for(course, learner_id)

    def get_lesson_status(self, course_id: int, learner_id: str, lesson_id: int) -> LessonStatus:
        progress = self.get_course_progress(course_id, learner_id)
        if lesson_id not in progress.lessons:
            raise NotFound(f"Lesson {lesson_id} is not part of course {course_id}")
        return progress.lessons[lesson_id].status

    def is_lesson_available(self, course_id: int, learner_id: str, lesson_id: int) -> bool:
        """Check if a lesson can be opened (available or completed)."""
        return self.get_lesson_status(course_id, learner_id, lesson_id) != LessonStatus.LOCKED

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def get_first_lesson_id(self, course_id: int) -> Optional[int]:
        """Get the ID of the first lesson."""
        order = self._lesson_order(self.store.fetch_course_structure(course_id))
        return order[0] if order else None

    def get_next_lesson_id(self, course_id: int, current_id: int) -> Optional[int]:
        """Get the ID of the next lesson in order, crossing module boundaries."""
        order = self._lesson_order(self.store.fetch_course_structure(course_id))
        if current_id not in order:
            return None
        idx = order.index(current_id)
        return order[idx + 1] if idx + 1 < len(order) else None

    def get_previous_lesson_id(self, course_id: int, current_id: int) -> Optional[int]:
        """Get the ID of the previous lesson in order."""
        order = self._lesson_order(self.store.fetch_course_structure(course_id))
        if current_id not in order:
            return None
        idx = order.index(current_id)
        return order[idx - 1] if idx > 0 else None

    def get_lesson_position(self, course_id: int, lesson_id: int) -> tuple[int, int]:
        """
        Get lesson position as (current, total).

        Returns (0, total) if lesson not found.
        """
        order = self._lesson_order(self.store.fetch_course_structure(course_id))
        if lesson_id not in order:
            return (0, len(order))
        return (order.index(lesson_id) + 1, len(order))

    def _recommended(self, course: Course, progress: CourseProgress) -> Optional[int]:
        order = self._lesson_order(course)
        for lesson_id in order:
            if progress.lessons[lesson_id].status == LessonStatus.AVAILABLE:
                return lesson_id
        return order[0] if order else None

    def get_recommended_lesson_id(self, course_id: int, learner_id: str) -> Optional[int]:
        """
        Get the recommended lesson for the learner.

        Priority:
        1. First available (unlocked, not completed) lesson
        2. First lesson, when everything is completed
        """
        course = self.store.fetch_course_structure(course_id)
        return self._recommended(course, self._progress_for(course, learner_id))

    def get_navigation_tree(self, course_id: int, learner_id: str) -> list[NavigationModule]:
        """
        Get the course tree with navigation metadata.

        Modules and lessons come back in sequencing order, each lesson
        annotated with its progress and whether it is the recommended one.
        """
        course = self.store.fetch_course_structure(course_id)
        progress = self._progress_for(course, learner_id)
        recommended = self._recommended(course, progress)
        module_progress = {m.module_id: m for m in progress.modules}

        tree = []
        for module in sort_siblings(course.modules):
            tree.append(NavigationModule(
                module=module,
                progress=module_progress[module.id],
                lessons=[
                    NavigationLesson(
                        lesson=lesson,
                        progress=progress.lessons[lesson.id],
                        is_recommended=lesson.id == recommended,
                    )
                    for lesson in sort_siblings(module.lessons)
                ],
            ))
        return tree

    # -------------------------------------------------------------------------
    # Lesson Actions
    # -------------------------------------------------------------------------

    def _require_open(self, course: Course, learner_id: str, lesson_id: int) -> CourseProgress:
        if course.find_lesson(lesson_id) is None:
            raise NotFound(f"Lesson {lesson_id} is not part of course {course.id}")
        progress = self._progress_for(course, learner_id)
        if progress.lessons[lesson_id].status == LessonStatus.LOCKED:
            logger.info(f"Learner {learner_id} tried to open locked lesson {lesson_id}")
            raise LessonLocked(lesson_id)
        return progress

    def view_lesson(self, course_id: int, learner_id: str, lesson_id: int) -> LessonStatus:
        """
        Record a lesson view and return the lesson's new status.

        Lessons without a quiz complete on view. Raises LessonLocked when the
        lesson isn't open yet.
        """
        course = self.store.fetch_course_structure(course_id)
        self._require_open(course, learner_id, lesson_id)
        self.store.mark_viewed(learner_id, lesson_id)
        return self._progress_for(course, learner_id).lessons[lesson_id].status

    def submit_attempt(
        self,
        course_id: int,
        learner_id: str,
        lesson_id: int,
        answers: Mapping[int, int],
        submitted_at: Optional[datetime] = None,
    ) -> SubmissionOutcome:
        """
        Grade and record a lesson quiz submission.

        Args:
            course_id: Course the lesson belongs to
            learner_id: Learner submitting
            lesson_id: Lesson whose quiz is answered
            answers: question_id -> alternative_id
            submitted_at: Attempt timestamp (default: now, UTC)

        Returns:
            SubmissionOutcome with the grade and the next open lesson

        Raises:
            NotFound: Unknown course or lesson
            LessonLocked: The lesson's predecessor isn't completed
            InvalidInput: The lesson has no quiz, or answers are malformed
            AttemptLimitReached: No attempts left for this quiz
        """
        course = self.store.fetch_course_structure(course_id)
        self._require_open(course, learner_id, lesson_id)

        quiz = self.store.get_lesson_quiz(lesson_id)
        if quiz is None:
            raise InvalidInput(f"Lesson {lesson_id} has no quiz")

        history = [
            a for a in self.store.fetch_attempt_history(learner_id, course_id)
            if a.lesson_id == lesson_id
        ]
        remaining = attempts_remaining(quiz, history)
        if remaining == 0:
            logger.info(f"Learner {learner_id} has no attempts left on quiz {quiz.id}")
            raise AttemptLimitReached(quiz.id, quiz.max_attempts)

        grade = grade_submission(quiz, answers, self.settings.default_pass_threshold)
        attempt_id = self.store.persist_attempt(AttemptResult(
            lesson_id=lesson_id,
            learner_id=learner_id,
            percentage=grade.percentage,
            passed=grade.passed,
            timestamp=submitted_at or datetime.now(timezone.utc),
        ))
        logger.info(
            f"Learner {learner_id} scored {grade.percentage}% on lesson {lesson_id} "
            f"({'passed' if grade.passed else 'failed'})"
        )

        next_lesson_id = None
        if grade.passed:
            progress = self._progress_for(course, learner_id)
            order = self._lesson_order(course)
            idx = order.index(lesson_id)
            if idx + 1 < len(order) and progress.lessons[order[idx + 1]].status != LessonStatus.LOCKED:
                next_lesson_id = order[idx + 1]

        return SubmissionOutcome(
            grade=grade,
            attempt_id=attempt_id,
            attempts_left=None if remaining is None else remaining - 1,
            next_lesson_id=next_lesson_id,
        )

    # -------------------------------------------------------------------------
    # Progress Summary
    # -------------------------------------------------------------------------

    def get_progress_summary(self, course_id: int, learner_id: str) -> dict:
        """Get progress summary for display."""
        course = self.store.fetch_course_structure(course_id)
        progress = self._progress_for(course, learner_id)
        statuses = [p.status for p in progress.lessons.values()]

        return {
            "course_id": course_id,
            "learner_id": learner_id,
            "status": progress.status.value,
            "total_lessons": len(statuses),
            "completed": statuses.count(LessonStatus.COMPLETED),
            "available": statuses.count(LessonStatus.AVAILABLE),
            "locked": statuses.count(LessonStatus.LOCKED),
            "completion_percent": progress.completion_percent,
            "modules": [
                {
                    "id": m.module_id,
                    "status": m.status.value,
                    "completed": m.completed_count,
                    "total": m.total_count,
                }
                for m in progress.modules
            ],
            "recommended_lesson_id": self._recommended(course, progress),
        }
