"""
Boundary parsing for JSON payloads.

Loosely-typed payloads are validated into strict models here, so `None`
ambiguity never reaches the engine.
"""

import json
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, StrictInt, TypeAdapter, ValidationError

from lessongate.errors import InvalidInput

from .attempt import AttemptResult
from .course import Course
from .quiz import Quiz

ModelT = TypeVar("ModelT", bound=BaseModel)


class Sibling(BaseModel):
    """An orderable entity as sent to the `order` command: an id and a nullable order."""
    id: StrictInt
    order: Optional[StrictInt] = None


_attempt_list = TypeAdapter(list[AttemptResult])
_answers = TypeAdapter(dict[int, int])
_sibling_list = TypeAdapter(list[Sibling])
_viewed = TypeAdapter(dict[str, set[int]])


def parse_model(model: type[ModelT], data: Any) -> ModelT:
    """Validate a decoded payload (dict) or raw JSON text into `model`."""
    try:
        if isinstance(data, (str, bytes)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(f"Malformed {model.__name__} payload: {e}") from e


def parse_quiz(data: Any) -> Quiz:
    return parse_model(Quiz, data)


def parse_course(data: Any) -> Course:
    return parse_model(Course, data)


def parse_attempts(data: Any) -> list[AttemptResult]:
    try:
        if isinstance(data, (str, bytes)):
            return _attempt_list.validate_json(data)
        return _attempt_list.validate_python(data)
    except ValidationError as e:
        raise InvalidInput(f"Malformed attempt history payload: {e}") from e


def parse_siblings(data: Any) -> list[Sibling]:
    try:
        if isinstance(data, (str, bytes)):
            return _sibling_list.validate_json(data)
        return _sibling_list.validate_python(data)
    except ValidationError as e:
        raise InvalidInput(f"Malformed sibling list: {e}") from e


def parse_viewed(data: Any) -> dict[str, set[int]]:
    """Parse a learner_id -> viewed lesson ids mapping."""
    try:
        if isinstance(data, (str, bytes)):
            return _viewed.validate_json(data)
        return _viewed.validate_python(data)
    except ValidationError as e:
        raise InvalidInput(f"Malformed viewed-lessons payload: {e}") from e


def parse_answers(data: Any) -> dict[int, int]:
    """
    Parse a question_id -> alternative_id mapping.

    Accepts either a JSON object (keys are stringified ids) or the list form
    sent by quiz forms: [{"question_id": .., "alternative_id": ..}].
    Entries whose alternative is null are dropped; grading scores them as
    unanswered.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Answers are not valid JSON: {e}") from e
    if isinstance(data, list):
        try:
            data = {item["question_id"]: item["alternative_id"] for item in data}
        except (KeyError, TypeError) as e:
            raise InvalidInput(f"Malformed answer list: {e}") from e
    if isinstance(data, dict):
        data = {k: v for k, v in data.items() if v is not None}
    try:
        return _answers.validate_python(data)
    except ValidationError as e:
        raise InvalidInput(f"Malformed answers payload: {e}") from e
