"""
Approval reports - which learners approved which modules and courses.

Built entirely from course structure, attempt history and lesson views,
using the same progress projection learners see.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Mapping, Optional

from lessongate.engine import compute_course_progress, sort_siblings
from lessongate.schemas import (
    ApprovalRecord,
    ApprovalReport,
    ApprovalStatus,
    AttemptResult,
    CompletionPolicy,
    Course,
    LessonStatus,
    ReportSummary,
)

from .store import CourseStore

logger = logging.getLogger(__name__)


def _latest(attempts: list[AttemptResult]) -> Optional[AttemptResult]:
    return max(attempts, key=lambda a: a.timestamp) if attempts else None


def _approved_at(attempts: list[AttemptResult]) -> Optional[datetime]:
    """Time the last lesson in scope was first passed."""
    first_pass = {}
    for attempt in sorted(attempts, key=lambda a: a.timestamp):
        if attempt.passed and attempt.lesson_id not in first_pass:
            first_pass[attempt.lesson_id] = attempt.timestamp
    return max(first_pass.values()) if first_pass else None


def _status(completed: bool, attempts: list[AttemptResult]) -> ApprovalStatus:
    if completed:
        return ApprovalStatus.APPROVED
    latest = _latest(attempts)
    if latest is not None and not latest.passed:
        return ApprovalStatus.FAILED
    return ApprovalStatus.IN_PROGRESS


def build_approval_report(
    course: Course,
    attempts: Iterable[AttemptResult],
    viewed: Optional[Mapping[str, Iterable[int]]] = None,
    policy: CompletionPolicy = CompletionPolicy.EVER_PASSED,
) -> ApprovalReport:
    """
    Build module and course approval records for every active learner.

    Args:
        course: Course structure
        attempts: Attempt history of all learners in the course
        viewed: learner_id -> viewed lesson ids
        policy: Completion policy used for progress

    Returns:
        ApprovalReport with one record per learner and touched module, one
        course record per learner, and summary counts.
    """
    viewed = viewed or {}
    by_learner = defaultdict(list)
    for attempt in attempts:
        by_learner[attempt.learner_id].append(attempt)
    learners = sorted(set(by_learner) | set(viewed))

    records = []
    approved_modules = set()
    module_approvals = 0
    course_approvals = 0

    for learner_id in learners:
        history = by_learner.get(learner_id, [])
        seen = set(viewed.get(learner_id, ()))
        progress = compute_course_progress(course, history, learner_id, seen, policy)
        module_status = {m.module_id: m.status for m in progress.modules}

        for module in sort_siblings(course.modules):
            lesson_ids = {lesson.id for lesson in module.lessons}
            module_attempts = [a for a in history if a.lesson_id in lesson_ids]
            completed = module_status[module.id] == LessonStatus.COMPLETED
            if not (module_attempts or lesson_ids & seen):
                continue

            status = _status(completed, module_attempts)
            if status == ApprovalStatus.APPROVED:
                approved_modules.add(module.id)
                module_approvals += 1
            records.append(ApprovalRecord(
                learner_id=learner_id,
                kind="module",
                entity_id=module.id,
                status=status,
                approved_at=_approved_at(module_attempts) if completed else None,
            ))

        course_completed = progress.status == LessonStatus.COMPLETED
        if course_completed:
            course_approvals += 1
        records.append(ApprovalRecord(
            learner_id=learner_id,
            kind="course",
            entity_id=course.id,
            status=_status(course_completed, history),
            approved_at=_approved_at(history) if course_completed else None,
        ))

    summary = ReportSummary(
        learners=len(learners),
        modules_approved=len(approved_modules),
        courses_approved=1 if course_approvals else 0,
        module_approvals=module_approvals,
        course_approvals=course_approvals,
    )
    logger.debug(f"Approval report for course {course.id}: {summary}")
    return ApprovalReport(course_id=course.id, records=records, summary=summary)


def report_for_course(
    store: CourseStore,
    course_id: int,
    policy: CompletionPolicy = CompletionPolicy.EVER_PASSED,
) -> ApprovalReport:
    """Build the approval report for a stored course."""
    return build_approval_report(
        store.fetch_course_structure(course_id),
        store.fetch_course_attempts(course_id),
        store.get_course_viewers(course_id),
        policy,
    )
