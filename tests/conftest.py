"""Shared fixtures for LessonGate tests."""

from datetime import datetime, timedelta, timezone

import pytest

from lessongate.classroom import CourseStore
from lessongate.schemas import (
    Alternative,
    AttemptResult,
    Course,
    Lesson,
    LessonScope,
    Module,
    Question,
    Quiz,
)

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_quiz():
    """
    Build a gradable quiz.

    Question n has id n and alternatives n*10+1 (correct), n*10+2, n*10+3.
    """
    def _make(n_questions=4, weights=None, pass_threshold=70, max_attempts=None, lesson_id=101):
        weights = weights or [1] * n_questions
        questions = [
            Question(
                id=n,
                statement=f"Question {n}?",
                weight=weights[n - 1],
                order=n,
                alternatives=[
                    Alternative(id=n * 10 + 1, text="right", is_correct=True),
                    Alternative(id=n * 10 + 2, text="wrong"),
                    Alternative(id=n * 10 + 3, text="also wrong"),
                ],
            )
            for n in range(1, n_questions + 1)
        ]
        return Quiz(
            title="Lesson check",
            pass_threshold=pass_threshold,
            max_attempts=max_attempts,
            questions=questions,
            scope=LessonScope(lesson_id=lesson_id),
        )
    return _make


@pytest.fixture
def course():
    """Two modules x two lessons, every lesson with a quiz."""
    return Course(
        id=1,
        title="Onboarding",
        modules=[
            Module(id=10, course_id=1, order=1, lessons=[
                Lesson(id=101, module_id=10, order=1, quiz_id=1),
                Lesson(id=102, module_id=10, order=2, quiz_id=2),
            ]),
            Module(id=20, course_id=1, order=2, lessons=[
                Lesson(id=201, module_id=20, order=1, quiz_id=3),
                Lesson(id=202, module_id=20, order=2, quiz_id=4),
            ]),
        ],
    )


@pytest.fixture
def attempt():
    """Build an AttemptResult `minutes` after T0."""
    def _make(lesson_id, passed, minutes=0, learner_id="alice", percentage=None):
        if percentage is None:
            percentage = 100 if passed else 25
        return AttemptResult(
            lesson_id=lesson_id,
            learner_id=learner_id,
            percentage=percentage,
            passed=passed,
            timestamp=T0 + timedelta(minutes=minutes),
        )
    return _make


@pytest.fixture
def store(tmp_path):
    return CourseStore(tmp_path / "lessongate.db")
