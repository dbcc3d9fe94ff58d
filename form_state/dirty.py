"""Dirty tracking: structural comparison of a record against its initial snapshot."""

import math
from collections.abc import Mapping, Sequence, Set
from typing import Any

from pydantic import BaseModel


class _Missing:
    """Marker for a key that is absent from a record."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_TEXT_TYPES = (str, bytes, bytearray)


def structural_equal(left: Any, right: Any) -> bool:
    """
    Compare two record values by structure and value, never by identity.

    Handles the shapes a record can hold: scalars, sequences, sets, mappings
    and pydantic models (compared by type and dumped fields). ``MISSING``
    only equals itself, so an absent key never matches a present ``None``,
    ``""`` or ``0``. Booleans never equal numbers, and NaN equals NaN.

    Args:
        left: First value.
        right: Second value.

    Returns:
        bool: True if both values have the same structure and contents.
    """
    return _equal(left, right, set())


def _equal(left: Any, right: Any, active: set[tuple[int, int]]) -> bool:
    if left is right:
        return True
    if left is MISSING or right is MISSING:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, float) and isinstance(right, float):
        if math.isnan(left) and math.isnan(right):
            return True
        return left == right

    # Containers may be self-referencing; a pair already under comparison
    # is assumed equal so the walk terminates.
    pair = (id(left), id(right))
    if pair in active:
        return True

    if isinstance(left, BaseModel) or isinstance(right, BaseModel):
        if type(left) is not type(right):
            return False
        active.add(pair)
        try:
            return _equal(left.model_dump(), right.model_dump(), active)
        finally:
            active.discard(pair)

    if isinstance(left, Mapping) or isinstance(right, Mapping):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return False
        if left.keys() != right.keys():
            return False
        active.add(pair)
        try:
            return all(_equal(left[key], right[key], active) for key in left)
        finally:
            active.discard(pair)

    if isinstance(left, _TEXT_TYPES) or isinstance(right, _TEXT_TYPES):
        return type(left) is type(right) and left == right

    if isinstance(left, Sequence) or isinstance(right, Sequence):
        if not (isinstance(left, Sequence) and isinstance(right, Sequence)):
            return False
        if len(left) != len(right):
            return False
        active.add(pair)
        try:
            return all(_equal(a, b, active) for a, b in zip(left, right))
        finally:
            active.discard(pair)

    if isinstance(left, Set) or isinstance(right, Set):
        return isinstance(left, Set) and isinstance(right, Set) and left == right

    return left == right


def is_dirty(record: Mapping[str, Any], snapshot: Mapping[str, Any]) -> bool:
    """True if the record differs from the snapshot anywhere."""
    return not structural_equal(record, snapshot)


def is_field_dirty(
    record: Mapping[str, Any], snapshot: Mapping[str, Any], field: str
) -> bool:
    """True if ``field`` differs from the snapshot, counting absence as a value."""
    return not structural_equal(record.get(field, MISSING), snapshot.get(field, MISSING))
