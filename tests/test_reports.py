"""Tests for approval reports."""

from datetime import datetime, timedelta, timezone

from lessongate.classroom import build_approval_report, report_for_course
from lessongate.schemas import ApprovalStatus

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _records(report, learner_id, kind):
    return {r.entity_id: r for r in report.records if r.learner_id == learner_id and r.kind == kind}


class TestApprovalReport:

    def test_module_approved_and_failed(self, course, attempt):
        attempts = [
            attempt(101, False, 1),
            attempt(101, True, 2),
            attempt(102, True, 5),
            attempt(101, False, 3, learner_id="bob"),
        ]
        report = build_approval_report(course, attempts)

        alice = _records(report, "alice", "module")
        assert alice[10].status == ApprovalStatus.APPROVED
        assert alice[10].approved_at == T0 + timedelta(minutes=5)
        assert 20 not in alice

        bob = _records(report, "bob", "module")
        assert bob[10].status == ApprovalStatus.FAILED
        assert bob[10].approved_at is None

        assert report.summary.learners == 2
        assert report.summary.modules_approved == 1
        assert report.summary.module_approvals == 1
        assert report.summary.courses_approved == 0

    def test_in_progress_after_passing_some_lessons(self, course, attempt):
        report = build_approval_report(course, [attempt(101, True)])
        assert _records(report, "alice", "module")[10].status == ApprovalStatus.IN_PROGRESS
        assert _records(report, "alice", "course")[1].status == ApprovalStatus.IN_PROGRESS

    def test_course_approval(self, course, attempt):
        attempts = [attempt(lid, True, i) for i, lid in enumerate([101, 102, 201, 202])]
        attempts += [attempt(101, True, 0, learner_id="bob")]
        report = build_approval_report(course, attempts)

        course_record = _records(report, "alice", "course")[1]
        assert course_record.status == ApprovalStatus.APPROVED
        assert course_record.approved_at == T0 + timedelta(minutes=3)
        assert report.summary.courses_approved == 1
        assert report.summary.course_approvals == 1
        assert report.summary.module_approvals == 2

    def test_viewers_without_attempts_are_listed(self, course):
        report = build_approval_report(course, [], viewed={"carol": [101]})
        assert _records(report, "carol", "module")[10].status == ApprovalStatus.IN_PROGRESS

    def test_empty(self, course):
        report = build_approval_report(course, [])
        assert report.records == []
        assert report.summary.learners == 0

    def test_report_for_stored_course(self, store, course, attempt):
        store.save_course(course)
        store.persist_attempt(attempt(101, True))
        store.persist_attempt(attempt(102, True, 1))
        report = report_for_course(store, 1)
        assert _records(report, "alice", "module")[10].status == ApprovalStatus.APPROVED
