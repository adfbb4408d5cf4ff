"""Comparison rules: equality and numeric ranges."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from tenet.constraints.base import Constraint
from tenet.constraints.registry import ConstraintChecker, register_checker
from tenet.core.errors import InvalidRuleConfigurationError
from tenet.util.formatting import format_value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class _Comparison(Constraint):
    _abstract = True

    default_option = "value"
    required_options = ("value",)


class EqualTo(_Comparison):
    NOT_EQUAL_ERROR = "not_equal"

    options = {"message": "This value should be equal to {{ compared_value }}."}


class NotEqualTo(_Comparison):
    IS_EQUAL_ERROR = "is_equal"

    options = {"message": "This value should not be equal to {{ compared_value }}."}


class _ComparisonChecker(ConstraintChecker):
    code = ""

    def compare(self, value: Any, compared: Any) -> bool:
        raise NotImplementedError

    def validate(self, value, constraint, context):
        if value is None:
            return
        if not self.compare(value, constraint.value):
            context.build_violation(
                constraint.message,
                {
                    "{{ value }}": format_value(value),
                    "{{ compared_value }}": format_value(constraint.value),
                    "{{ compared_value_type }}": type(constraint.value).__name__,
                },
            ).set_code(self.code).set_constraint(constraint).add()


@register_checker(EqualTo)
class EqualToChecker(_ComparisonChecker):
    code = EqualTo.NOT_EQUAL_ERROR

    def compare(self, value, compared):
        return value == compared


@register_checker(NotEqualTo)
class NotEqualToChecker(_ComparisonChecker):
    code = NotEqualTo.IS_EQUAL_ERROR

    def compare(self, value, compared):
        return value != compared


# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------


class Range(Constraint):
    """A number between ``min`` and ``max``, both inclusive. Numeric strings
    are accepted and compared by value."""

    INVALID_VALUE_ERROR = "invalid_value"
    TOO_LOW_ERROR = "too_low"
    TOO_HIGH_ERROR = "too_high"

    options = {
        "min": None,
        "max": None,
        "min_message": "This value should be {{ limit }} or more.",
        "max_message": "This value should be {{ limit }} or less.",
        "invalid_message": "This value should be a valid number.",
    }

    def _normalize_options(self, values):
        if values["min"] is None and values["max"] is None:
            raise InvalidRuleConfigurationError("Either option 'min' or 'max' must be given for constraint Range")
        for name in ("min", "max"):
            if values[name] is not None and not _is_number(values[name]):
                raise InvalidRuleConfigurationError(
                    f"The option '{name}' of constraint Range must be a number, {values[name]!r} given"
                )
        return values


def _as_number(value: Any) -> Any:
    if _is_number(value):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


@register_checker(Range)
class RangeChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return

        number = _as_number(value)
        if number is None:
            context.build_violation(constraint.invalid_message, {"{{ value }}": format_value(value)}).set_code(
                Range.INVALID_VALUE_ERROR
            ).set_constraint(constraint).add()
            return

        if constraint.max is not None and number > constraint.max:
            context.build_violation(
                constraint.max_message,
                {"{{ value }}": format_value(value), "{{ limit }}": format_value(constraint.max)},
            ).set_code(Range.TOO_HIGH_ERROR).set_constraint(constraint).add()
            return

        if constraint.min is not None and number < constraint.min:
            context.build_violation(
                constraint.min_message,
                {"{{ value }}": format_value(value), "{{ limit }}": format_value(constraint.min)},
            ).set_code(Range.TOO_LOW_ERROR).set_constraint(constraint).add()
