"""
Sequencing - deterministic ordering of sibling entities.

Used identically for modules within a course, lessons within a module and
questions within a quiz: `order` ascending with None last, then `id`
ascending. The key is total, so re-sorting a sorted sequence is a no-op.
"""

import math
from collections.abc import Mapping
from typing import Any, Iterable, TypeVar

from lessongate.errors import InvalidInput

T = TypeVar("T")


def _field(sibling: Any, name: str) -> Any:
    if isinstance(sibling, Mapping):
        return sibling.get(name)
    return getattr(sibling, name, None)


def sort_key(sibling: Any) -> tuple[float, int]:
    """Sort key for anything exposing `order` and `id` (attributes or keys)."""
    order = _field(sibling, "order")
    sibling_id = _field(sibling, "id")
    if sibling_id is None:
        raise InvalidInput(f"Sibling without id cannot be sequenced: {sibling!r}")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        raise InvalidInput(f"Sibling order must be an integer or null: {sibling!r}")
    return (math.inf if order is None else order, sibling_id)


def sort_siblings(siblings: Iterable[T]) -> list[T]:
    """Return the siblings themselves in sequencing order."""
    return sorted(siblings, key=sort_key)


def order_of(siblings: Iterable[Any]) -> list[int]:
    """Return sibling ids in sequencing order."""
    return [_field(s, "id") for s in sort_siblings(siblings)]
