"""
Exception hierarchy for LessonGate.

Quiz validation defects are returned as data, not raised. Everything here is
either a caller programming error or a refusal at the application boundary.
"""


class LessonGateError(Exception):
    """Base class for all LessonGate errors."""


class InvalidInput(LessonGateError, ValueError):
    """Malformed input handed to the engine (e.g. a quiz with no questions)."""


class NotFound(LessonGateError, LookupError):
    """Unknown course, lesson or quiz id."""


class QuizRejected(LessonGateError):
    """A quiz draft failed validation and cannot be persisted."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__(f"Quiz rejected with {len(self.issues)} issue(s)")


class LessonLocked(LessonGateError):
    """The learner tried to act on a lesson that is still locked."""

    def __init__(self, lesson_id: int):
        self.lesson_id = lesson_id
        super().__init__(f"Lesson {lesson_id} is locked")


class AttemptLimitReached(LessonGateError):
    """The learner has no attempts left for a quiz."""

    def __init__(self, quiz_id, max_attempts: int):
        self.quiz_id = quiz_id
        self.max_attempts = max_attempts
        super().__init__(f"Quiz {quiz_id} allows at most {max_attempts} attempt(s)")
