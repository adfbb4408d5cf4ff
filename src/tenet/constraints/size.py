"""Size rules for strings and collections."""

from __future__ import annotations

from collections.abc import Sized
from typing import Any

from tenet.constraints.base import Constraint
from tenet.constraints.registry import ConstraintChecker, register_checker
from tenet.core.errors import InvalidRuleConfigurationError, TypeMismatchError
from tenet.util.formatting import format_value


class _Size(Constraint):
    """Shared option handling for ``min``/``max`` limits.

    ``exactly`` is shorthand for equal ``min`` and ``max``.
    """

    _abstract = True

    options = {"min": None, "max": None, "exactly": None}

    def _normalize_options(self, values):
        if values["exactly"] is not None:
            values["min"] = values["max"] = values["exactly"]
        if values["min"] is None and values["max"] is None:
            raise InvalidRuleConfigurationError(
                f"Either option 'min' or 'max' must be given for constraint {self.variant}"
            )
        for name in ("min", "max"):
            limit = values[name]
            if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit < 0):
                raise InvalidRuleConfigurationError(
                    f"The option '{name}' of constraint {self.variant} must be a non-negative integer"
                )
        return values


def _check_size(size: int, value: Any, constraint: _Size, context, codes: tuple[str, str, str]) -> None:
    exact = constraint.min is not None and constraint.min == constraint.max
    too_short, too_long, wrong = codes

    if constraint.max is not None and size > constraint.max:
        message, limit, code = (constraint.exact_message, constraint.max, wrong) if exact else (
            constraint.max_message, constraint.max, too_long
        )
    elif constraint.min is not None and size < constraint.min:
        message, limit, code = (constraint.exact_message, constraint.min, wrong) if exact else (
            constraint.min_message, constraint.min, too_short
        )
    else:
        return

    context.build_violation(
        message,
        {"{{ value }}": format_value(value), "{{ limit }}": str(limit)},
    ).set_plural(limit).set_code(code).set_constraint(constraint).add()


class Length(_Size):
    """Number of characters of a string."""

    TOO_SHORT_ERROR = "too_short"
    TOO_LONG_ERROR = "too_long"
    WRONG_LENGTH_ERROR = "wrong_length"

    options = {
        "min_message": (
            "This value is too short. It should have {{ limit }} character or more."
            "|This value is too short. It should have {{ limit }} characters or more."
        ),
        "max_message": (
            "This value is too long. It should have {{ limit }} character or less."
            "|This value is too long. It should have {{ limit }} characters or less."
        ),
        "exact_message": (
            "This value should have exactly {{ limit }} character."
            "|This value should have exactly {{ limit }} characters."
        ),
    }


@register_checker(Length)
class LengthChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None or value == "":
            return
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise TypeMismatchError(value, "string")

        text = value if isinstance(value, str) else str(value)
        _check_size(
            len(text),
            text,
            constraint,
            context,
            (Length.TOO_SHORT_ERROR, Length.TOO_LONG_ERROR, Length.WRONG_LENGTH_ERROR),
        )


class Count(_Size):
    """Number of entries of a collection."""

    TOO_FEW_ERROR = "too_few"
    TOO_MANY_ERROR = "too_many"
    WRONG_COUNT_ERROR = "wrong_count"

    options = {
        "min_message": (
            "This collection should contain {{ limit }} element or more."
            "|This collection should contain {{ limit }} elements or more."
        ),
        "max_message": (
            "This collection should contain {{ limit }} element or less."
            "|This collection should contain {{ limit }} elements or less."
        ),
        "exact_message": (
            "This collection should contain exactly {{ limit }} element."
            "|This collection should contain exactly {{ limit }} elements."
        ),
    }


@register_checker(Count)
class CountChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return
        if isinstance(value, (str, bytes)) or not isinstance(value, Sized):
            raise TypeMismatchError(value, "countable")

        _check_size(
            len(value),
            value,
            constraint,
            context,
            (Count.TOO_FEW_ERROR, Count.TOO_MANY_ERROR, Count.WRONG_COUNT_ERROR),
        )
