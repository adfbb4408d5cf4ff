"""Render values for use in violation message parameters."""

from __future__ import annotations

from collections.abc import Mapping, Set
from datetime import date, datetime
from typing import Any


def format_value(value: Any) -> str:
    """Return a short, human-readable rendering of a value.

    Strings are quoted, containers collapse to ``array`` and arbitrary
    objects to ``object`` so messages never leak large structures.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, date):
        return f"{value:%b} {value.day}, {value.year}"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple, Mapping, Set)):
        return "array"
    return "object"


def format_values(values: list[Any]) -> str:
    """Comma-separated rendering of several values."""
    return ", ".join(format_value(v) for v in values)


def _format_datetime(value: datetime) -> str:
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value:%M} {value:%p}"
