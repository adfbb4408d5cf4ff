"""Classification of validated values.

Every value the traverser meets is resolved once into one of four kinds.
Checkers and cascade logic branch on the kind instead of probing the value.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence, Set
from datetime import date, time
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any

_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, Decimal, Fraction, date, time, Enum)


class ValueKind(str, Enum):
    """Shape of a value as seen by the traverser."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    KEYED = "keyed"
    OBJECT = "object"


def classify(value: Any) -> ValueKind:
    """Resolve the kind of a value. ``None`` counts as a scalar."""
    if value is None or isinstance(value, _SCALAR_TYPES):
        return ValueKind.SCALAR
    if isinstance(value, Mapping):
        return ValueKind.KEYED
    if isinstance(value, (Sequence, Set)):
        return ValueKind.SEQUENCE
    if isinstance(value, type):
        return ValueKind.SCALAR
    return ValueKind.OBJECT


def is_collection(value: Any) -> bool:
    return classify(value) in (ValueKind.SEQUENCE, ValueKind.KEYED)


def iter_items(value: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate ``(key, item)`` pairs of a collection.

    Mappings yield their keys, sequences and sets their positions.
    """
    if isinstance(value, Mapping):
        yield from value.items()
    else:
        yield from enumerate(value)
