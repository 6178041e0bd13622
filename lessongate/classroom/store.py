"""
CourseStore - SQLite persistence boundary for LessonGate.

Implements the operations the engine consumes from the application:
- fetch_course_structure / save_course
- persist_quiz (only through the validator's accept path) / get_quiz
- persist_attempt (append-only) / fetch_attempt_history
- lesson view tracking for lessons without a quiz
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from lessongate.engine import validate_quiz_draft
from lessongate.errors import NotFound, QuizRejected
from lessongate.schemas import (
    AttemptResult,
    Course,
    CourseScope,
    Lesson,
    Module,
    Quiz,
)

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    quiz_id INTEGER
);

CREATE TABLE IF NOT EXISTS modules (
    id INTEGER PRIMARY KEY,
    course_id INTEGER NOT NULL REFERENCES courses(id),
    title TEXT NOT NULL DEFAULT '',
    position INTEGER
);

CREATE TABLE IF NOT EXISTS lessons (
    id INTEGER PRIMARY KEY,
    module_id INTEGER NOT NULL REFERENCES modules(id),
    title TEXT NOT NULL DEFAULT '',
    position INTEGER,
    quiz_id INTEGER
);

CREATE TABLE IF NOT EXISTS quizzes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scope_kind TEXT NOT NULL,
    scope_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    content JSON NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    lesson_id INTEGER NOT NULL,
    learner_id TEXT NOT NULL,
    percentage REAL NOT NULL,
    passed INTEGER NOT NULL,
    timestamp TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS lesson_views (
    learner_id TEXT NOT NULL,
    lesson_id INTEGER NOT NULL,
    viewed_at TEXT NOT NULL,
    PRIMARY KEY (learner_id, lesson_id)
);

CREATE INDEX IF NOT EXISTS idx_attempts_learner ON attempts(learner_id, lesson_id);
CREATE INDEX IF NOT EXISTS idx_lessons_module ON lessons(module_id);
CREATE INDEX IF NOT EXISTS idx_modules_course ON modules(course_id);
"""


def assign_ids(quiz: Quiz) -> Quiz:
    """
    Give every question and alternative an id, unique within the quiz.

    Existing ids are kept; new ones continue after the highest id in use.
    """
    next_question = max((q.id for q in quiz.questions if q.id is not None), default=0) + 1
    next_alternative = max(
        (a.id for q in quiz.questions for a in q.alternatives if a.id is not None),
        default=0,
    ) + 1

    questions = []
    for question in quiz.questions:
        alternatives = []
        for alternative in question.alternatives:
            if alternative.id is None:
                alternative = alternative.model_copy(update={"id": next_alternative})
                next_alternative += 1
            alternatives.append(alternative)

        update = {"alternatives": alternatives}
        if question.id is None:
            update["id"] = next_question
            next_question += 1
        questions.append(question.model_copy(update=update))

    return quiz.model_copy(update={"questions": questions})


class CourseStore:
    """
    Course structure, quizzes and attempt history in one SQLite database.

    Each method opens its own connection, so a store can be shared between
    threads. Attempts are never updated or deleted.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize the store, creating the database if needed.

        Args:
            db_path: Path to the SQLite file
        """
        self.db_path = Path(db_path)
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    # -------------------------------------------------------------------------
    # Course structure
    # -------------------------------------------------------------------------

    def save_course(self, course: Course):
        """Insert or replace a course with its modules and lessons."""
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO courses (id, title, quiz_id) VALUES (?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET title = excluded.title, quiz_id = excluded.quiz_id""",
                (course.id, course.title, course.quiz_id)
            )
            conn.execute(
                """DELETE FROM lessons WHERE module_id IN
                   (SELECT id FROM modules WHERE course_id = ?)""",
                (course.id,)
            )
            conn.execute("DELETE FROM modules WHERE course_id = ?", (course.id,))

            for module in course.modules:
                conn.execute(
                    "INSERT INTO modules (id, course_id, title, position) VALUES (?, ?, ?, ?)",
                    (module.id, course.id, module.title, module.order)
                )
                conn.executemany(
                    """INSERT INTO lessons (id, module_id, title, position, quiz_id)
                       VALUES (?, ?, ?, ?, ?)""",
                    [
                        (lesson.id, module.id, lesson.title, lesson.order, lesson.quiz_id)
                        for lesson in module.lessons
                    ]
                )
            conn.commit()
        finally:
            conn.close()
        logger.info(f"Saved course {course.id} with {len(course.modules)} module(s)")

    def fetch_course_structure(self, course_id: int) -> Course:
        """Load a course with its modules and lessons (unsorted)."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT id, title, quiz_id FROM courses WHERE id = ?", (course_id,)
            ).fetchone()
            if not row:
                raise NotFound(f"Course {course_id} not found")

            modules = []
            for module_row in conn.execute(
                "SELECT id, course_id, title, position FROM modules WHERE course_id = ?",
                (course_id,)
            ).fetchall():
                lessons = [
                    Lesson(
                        id=lesson_row["id"],
                        module_id=lesson_row["module_id"],
                        title=lesson_row["title"],
                        order=lesson_row["position"],
                        quiz_id=lesson_row["quiz_id"],
                    )
                    for lesson_row in conn.execute(
                        """SELECT id, module_id, title, position, quiz_id
                           FROM lessons WHERE module_id = ?""",
                        (module_row["id"],)
                    ).fetchall()
                ]
                modules.append(Module(
                    id=module_row["id"],
                    course_id=module_row["course_id"],
                    title=module_row["title"],
                    order=module_row["position"],
                    lessons=lessons,
                ))

            return Course(id=row["id"], title=row["title"], quiz_id=row["quiz_id"], modules=modules)
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    def persist_quiz(self, quiz: Quiz, finalize: bool = True) -> int:
        """
        Validate and store a quiz, linking it to its lesson or course.

        Returns:
            The quiz id

        Raises:
            QuizRejected: If validation reports any issue
            NotFound: If the quiz has an id that isn't stored
        """
        result = validate_quiz_draft(quiz, finalize=finalize)
        if not result.ok:
            logger.warning(f"Rejected quiz '{quiz.title}': {len(result.issues)} issue(s)")
            raise QuizRejected(result.issues)

        stored = assign_ids(result.quiz)
        scope_id = (
            stored.scope.course_id if isinstance(stored.scope, CourseScope)
            else stored.scope.lesson_id
        )
        now = datetime.now().isoformat()

        conn = self._get_connection()
        try:
            if stored.id is None:
                cursor = conn.execute(
                    """INSERT INTO quizzes (scope_kind, scope_id, title, content, updated_at)
                       VALUES (?, ?, ?, '{}', ?)""",
                    (stored.scope.kind, scope_id, stored.title, now)
                )
                stored = stored.model_copy(update={"id": cursor.lastrowid})
            else:
                exists = conn.execute(
                    "SELECT 1 FROM quizzes WHERE id = ?", (stored.id,)
                ).fetchone()
                if not exists:
                    raise NotFound(f"Quiz {stored.id} not found")

            conn.execute(
                """UPDATE quizzes SET scope_kind = ?, scope_id = ?, title = ?,
                   content = ?, updated_at = ? WHERE id = ?""",
                (stored.scope.kind, scope_id, stored.title, stored.model_dump_json(), now, stored.id)
            )

            if isinstance(stored.scope, CourseScope):
                conn.execute("UPDATE courses SET quiz_id = ? WHERE id = ?", (stored.id, scope_id))
            else:
                conn.execute("UPDATE lessons SET quiz_id = ? WHERE id = ?", (stored.id, scope_id))

            conn.commit()
        finally:
            conn.close()

        logger.info(f"Stored quiz {stored.id} '{stored.title}' for {stored.scope.kind} {scope_id}")
        return stored.id

    def get_quiz(self, quiz_id: int) -> Quiz:
        """Load a stored quiz."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT content FROM quizzes WHERE id = ?", (quiz_id,)
            ).fetchone()
            if not row:
                raise NotFound(f"Quiz {quiz_id} not found")
            return Quiz.model_validate_json(row["content"])
        finally:
            conn.close()

    def get_lesson_quiz(self, lesson_id: int) -> Optional[Quiz]:
        """Quiz attached to a lesson, or None."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT quiz_id FROM lessons WHERE id = ?", (lesson_id,)
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFound(f"Lesson {lesson_id} not found")
        if row["quiz_id"] is None:
            return None
        return self.get_quiz(row["quiz_id"])

    # -------------------------------------------------------------------------
    # Attempts (append-only)
    # -------------------------------------------------------------------------

    def persist_attempt(self, attempt: AttemptResult) -> int:
        """Append an attempt and return its id."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO attempts (lesson_id, learner_id, percentage, passed, timestamp)
                   VALUES (?, ?, ?, ?, ?)""",
                (attempt.lesson_id, attempt.learner_id, attempt.percentage,
                 int(attempt.passed), attempt.timestamp.isoformat())
            )
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def _fetch_attempts(self, where: str, params: tuple) -> list[AttemptResult]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                f"""SELECT a.id, a.lesson_id, a.learner_id, a.percentage, a.passed, a.timestamp
                    FROM attempts a
                    JOIN lessons l ON l.id = a.lesson_id
                    JOIN modules m ON m.id = l.module_id
                    WHERE {where}
                    ORDER BY a.timestamp, a.id""",
                params
            )
            return [
                AttemptResult(
                    id=row["id"],
                    lesson_id=row["lesson_id"],
                    learner_id=row["learner_id"],
                    percentage=row["percentage"],
                    passed=bool(row["passed"]),
                    timestamp=datetime.fromisoformat(row["timestamp"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def fetch_attempt_history(self, learner_id: str, course_id: int) -> list[AttemptResult]:
        """All attempts of a learner within a course, oldest first."""
        return self._fetch_attempts("a.learner_id = ? AND m.course_id = ?", (learner_id, course_id))

    def fetch_course_attempts(self, course_id: int) -> list[AttemptResult]:
        """All attempts of every learner within a course, oldest first."""
        return self._fetch_attempts("m.course_id = ?", (course_id,))

    # -------------------------------------------------------------------------
    # Lesson views
    # -------------------------------------------------------------------------

    def mark_viewed(self, learner_id: str, lesson_id: int):
        """Record that a learner viewed a lesson (first view wins)."""
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT OR IGNORE INTO lesson_views (learner_id, lesson_id, viewed_at)
                   VALUES (?, ?, ?)""",
                (learner_id, lesson_id, datetime.now().isoformat())
            )
            conn.commit()
        finally:
            conn.close()

    def get_viewed_lesson_ids(self, learner_id: str, course_id: int) -> set[int]:
        """Lessons of a course the learner has viewed."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT v.lesson_id FROM lesson_views v
                   JOIN lessons l ON l.id = v.lesson_id
                   JOIN modules m ON m.id = l.module_id
                   WHERE v.learner_id = ? AND m.course_id = ?""",
                (learner_id, course_id)
            )
            return {row["lesson_id"] for row in cursor.fetchall()}
        finally:
            conn.close()

    def get_course_viewers(self, course_id: int) -> dict[str, set[int]]:
        """learner_id -> viewed lesson ids, for every learner in a course."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT v.learner_id, v.lesson_id FROM lesson_views v
                   JOIN lessons l ON l.id = v.lesson_id
                   JOIN modules m ON m.id = l.module_id
                   WHERE m.course_id = ?""",
                (course_id,)
            )
            result: dict[str, set[int]] = {}
            for row in cursor.fetchall():
                result.setdefault(row["learner_id"], set()).add(row["lesson_id"])
            return result
        finally:
            conn.close()
