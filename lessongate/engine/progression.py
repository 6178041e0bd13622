"""
Progression - derive lesson, module and course status for one learner.

Status is a pure projection of course ordering plus the learner's attempt
history; nothing here is stored or mutated. Lessons are gated along a single
sequence: modules in sequencing order, lessons in sequencing order within
each module. A lesson unlocks when its predecessor in that sequence is
completed, and the predecessor of a module's first lesson is the last lesson
of the previous module.
"""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from lessongate.schemas import (
    AttemptResult,
    CompletionPolicy,
    Course,
    CourseProgress,
    Lesson,
    LessonProgress,
    LessonStatus,
    ModuleProgress,
)

from .sequencing import sort_siblings

logger = logging.getLogger(__name__)


def ordered_lessons(course: Course) -> list[Lesson]:
    """All lessons of a course in gating order."""
    lessons = []
    for module in sort_siblings(course.modules):
        lessons.extend(sort_siblings(module.lessons))
    return lessons


def _attempts_by_lesson(
    attempts: Iterable[AttemptResult],
    learner_id: str,
    lesson_ids: set[int],
) -> dict[int, list[AttemptResult]]:
    grouped = defaultdict(list)
    for attempt in attempts:
        if attempt.learner_id != learner_id or attempt.lesson_id not in lesson_ids:
            continue
        grouped[attempt.lesson_id].append(attempt)
    # sorted() is stable: same-timestamp attempts keep their history order
    return {lid: sorted(items, key=lambda a: a.timestamp) for lid, items in grouped.items()}


def _has_passed(history: list[AttemptResult], policy: CompletionPolicy) -> bool:
    if not history:
        return False
    if policy == CompletionPolicy.LATEST_ATTEMPT:
        return history[-1].passed
    return any(a.passed for a in history)


def compute_progress(
    course: Course,
    attempts: Iterable[AttemptResult],
    learner_id: str,
    viewed_lesson_ids: Iterable[int] = (),
    policy: CompletionPolicy = CompletionPolicy.EVER_PASSED,
) -> dict[int, LessonProgress]:
    """
    Compute the status of every lesson in a course for one learner.

    Args:
        course: Course structure with modules and lessons
        attempts: Attempt history; entries for other learners or for lessons
            outside the course are ignored
        learner_id: Learner whose progress is computed
        viewed_lesson_ids: Lessons the learner has viewed. Only used for
            lessons without a quiz, which complete once viewed while available.
        policy: Whether any passing attempt completes a lesson (default) or
            only the most recent one

    Returns:
        Mapping lesson_id -> LessonProgress
    """
    lessons = ordered_lessons(course)
    history = _attempts_by_lesson(attempts, learner_id, {lesson.id for lesson in lessons})
    viewed = set(viewed_lesson_ids)

    progress = {}
    gate_open = True  # the first lesson has no predecessor

    for lesson in lessons:
        lesson_attempts = history.get(lesson.id, [])
        completed = _has_passed(lesson_attempts, policy)
        if not lesson.has_quiz and gate_open and lesson.id in viewed:
            completed = True

        if completed:
            status = LessonStatus.COMPLETED
        elif gate_open:
            status = LessonStatus.AVAILABLE
        else:
            status = LessonStatus.LOCKED

        percentages = [a.percentage for a in lesson_attempts]
        progress[lesson.id] = LessonProgress(
            lesson_id=lesson.id,
            learner_id=learner_id,
            status=status,
            passed=any(a.passed for a in lesson_attempts),
            attempt_count=len(lesson_attempts),
            last_percentage=percentages[-1] if percentages else None,
            best_percentage=max(percentages) if percentages else None,
        )
        gate_open = status == LessonStatus.COMPLETED

    logger.debug(
        f"Computed progress for learner {learner_id} in course {course.id}: "
        f"{sum(1 for p in progress.values() if p.status == LessonStatus.COMPLETED)}"
        f"/{len(progress)} completed"
    )
    return progress


def _rollup(statuses: list[LessonStatus]) -> LessonStatus:
    if all(s == LessonStatus.COMPLETED for s in statuses):
        return LessonStatus.COMPLETED
    if all(s == LessonStatus.LOCKED for s in statuses):
        return LessonStatus.LOCKED
    return LessonStatus.AVAILABLE


def summarize_progress(
    course: Course,
    lessons: dict[int, LessonProgress],
    learner_id: str,
) -> CourseProgress:
    """
    Roll lesson progress up to modules and the course.

    A module is completed iff all its lessons are, locked iff all its lessons
    are locked, and available otherwise. The course follows the same rule
    over its modules.
    """
    modules = []
    for module in sort_siblings(course.modules):
        statuses = [lessons[lesson.id].status for lesson in module.lessons]
        modules.append(ModuleProgress(
            module_id=module.id,
            status=_rollup(statuses),
            completed_count=sum(1 for s in statuses if s == LessonStatus.COMPLETED),
            total_count=len(statuses),
        ))

    return CourseProgress(
        course_id=course.id,
        learner_id=learner_id,
        status=_rollup([m.status for m in modules]),
        modules=modules,
        lessons=lessons,
    )


def compute_course_progress(
    course: Course,
    attempts: Iterable[AttemptResult],
    learner_id: str,
    viewed_lesson_ids: Iterable[int] = (),
    policy: CompletionPolicy = CompletionPolicy.EVER_PASSED,
) -> CourseProgress:
    """compute_progress followed by summarize_progress."""
    lessons = compute_progress(course, attempts, learner_id, viewed_lesson_ids, policy)
    return summarize_progress(course, lessons, learner_id)


def predecessor_of(course: Course, lesson_id: int) -> Optional[int]:
    """Id of the lesson gating `lesson_id`, or None for the first lesson."""
    ids = [lesson.id for lesson in ordered_lessons(course)]
    if lesson_id not in ids:
        return None
    index = ids.index(lesson_id)
    return ids[index - 1] if index > 0 else None
