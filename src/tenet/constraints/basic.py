"""Presence, type, pattern and callback rules."""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from tenet.constraints.base import Constraint
from tenet.constraints.registry import ConstraintChecker, register_checker
from tenet.core.errors import InvalidRuleConfigurationError, TypeMismatchError
from tenet.util.formatting import format_value
from tenet.values import ValueKind, classify


def _is_blank(value: Any) -> bool:
    return value is None or value is False or value == "" or value == [] or value == {}


# ---------------------------------------------------------------------------
# NotNull / NotBlank / Blank
# ---------------------------------------------------------------------------


class NotNull(Constraint):
    IS_NULL_ERROR = "is_null"

    options = {"message": "This value should not be null."}


@register_checker(NotNull)
class NotNullChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            context.build_violation(constraint.message, {"{{ value }}": format_value(value)}).set_code(
                NotNull.IS_NULL_ERROR
            ).set_constraint(constraint).add()


class NotBlank(Constraint):
    """The value must not be ``None``, ``False``, an empty string or an empty container."""

    IS_BLANK_ERROR = "is_blank"

    options = {"message": "This value should not be blank."}


@register_checker(NotBlank)
class NotBlankChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if _is_blank(value):
            context.build_violation(constraint.message, {"{{ value }}": format_value(value)}).set_code(
                NotBlank.IS_BLANK_ERROR
            ).set_constraint(constraint).add()


class Blank(Constraint):
    NOT_BLANK_ERROR = "not_blank"

    options = {"message": "This value should be blank."}


@register_checker(Blank)
class BlankChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is not None and value != "":
            context.build_violation(constraint.message, {"{{ value }}": format_value(value)}).set_code(
                Blank.NOT_BLANK_ERROR
            ).set_constraint(constraint).add()


# ---------------------------------------------------------------------------
# Type
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_numeric(value: Any) -> bool:
    if _is_number(value):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _chars(predicate: Callable[[str], bool]) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, str) and bool(value) and all(predicate(c) for c in value)

    return check


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "bool": lambda v: isinstance(v, bool),
    "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "float": lambda v: isinstance(v, float),
    "numeric": _is_numeric,
    "str": lambda v: isinstance(v, str),
    "list": lambda v: isinstance(v, list),
    "dict": lambda v: isinstance(v, Mapping),
    "array": lambda v: classify(v) in (ValueKind.SEQUENCE, ValueKind.KEYED),
    "iterable": lambda v: isinstance(v, Iterable),
    "callable": callable,
    "scalar": lambda v: isinstance(v, (str, int, float, bool)),
    "object": lambda v: classify(v) is ValueKind.OBJECT,
    "digit": _chars(lambda c: c in string.digits),
    "alnum": _chars(str.isalnum),
    "alpha": _chars(str.isalpha),
    "lower": _chars(str.islower),
    "upper": _chars(str.isupper),
    "space": _chars(str.isspace),
    "xdigit": _chars(lambda c: c in string.hexdigits),
    "punct": _chars(lambda c: c in string.punctuation),
    "print": _chars(str.isprintable),
    "graph": _chars(lambda c: c.isprintable() and not c.isspace()),
    "cntrl": _chars(lambda c: ord(c) < 32 or ord(c) == 127),
}
_TYPE_ALIASES = {"boolean": "bool", "integer": "int", "string": "str", "double": "float", "mapping": "dict"}


class Type(Constraint):
    """The value must be of ``type``: a builtin name such as ``"int"`` or
    ``"digit"``, or a class."""

    INVALID_TYPE_ERROR = "invalid_type"

    options = {"message": "This value should be of type {{ type }}."}
    default_option = "type"
    required_options = ("type",)

    def _normalize_options(self, values):
        expected = values["type"]
        if isinstance(expected, type):
            return values
        if not isinstance(expected, str) or _TYPE_ALIASES.get(expected.lower(), expected.lower()) not in _TYPE_CHECKS:
            raise InvalidRuleConfigurationError(f"Unknown type {expected!r} in constraint Type")
        return values


@register_checker(Type)
class TypeChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return

        expected = constraint.type
        if isinstance(expected, type):
            valid = isinstance(value, expected)
            type_name = expected.__name__
        else:
            key = expected.lower()
            valid = _TYPE_CHECKS[_TYPE_ALIASES.get(key, key)](value)
            type_name = expected

        if not valid:
            context.build_violation(
                constraint.message,
                {"{{ value }}": format_value(value), "{{ type }}": type_name},
            ).set_code(Type.INVALID_TYPE_ERROR).set_constraint(constraint).add()


# ---------------------------------------------------------------------------
# Regex / Choice
# ---------------------------------------------------------------------------


class Regex(Constraint):
    """The value must match ``pattern`` (or must not, with ``match=False``)."""

    REGEX_FAILED_ERROR = "regex_failed"

    options = {"message": "This value is not valid.", "match": True}
    default_option = "pattern"
    required_options = ("pattern",)

    def _normalize_options(self, values):
        try:
            values["compiled"] = re.compile(values["pattern"])
        except (re.error, TypeError) as e:
            raise InvalidRuleConfigurationError(f"Invalid pattern {values['pattern']!r} in constraint Regex: {e}") from e
        return values


@register_checker(Regex)
class RegexChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None or value == "":
            return
        if not isinstance(value, str):
            raise TypeMismatchError(value, "string")

        if bool(constraint.compiled.search(value)) != constraint.match:
            context.build_violation(constraint.message, {"{{ value }}": format_value(value)}).set_code(
                Regex.REGEX_FAILED_ERROR
            ).set_constraint(constraint).add()


class Choice(Constraint):
    """The value must be one of ``choices``; with ``multiple`` every entry of a list must be."""

    NO_SUCH_CHOICE_ERROR = "no_such_choice"

    options = {
        "multiple": False,
        "message": "The value you selected is not a valid choice.",
        "multiple_message": "One or more of the given values is invalid.",
    }
    default_option = "choices"
    required_options = ("choices",)

    def _normalize_options(self, values):
        if isinstance(values["choices"], (str, bytes)) or not isinstance(values["choices"], Iterable):
            raise InvalidRuleConfigurationError("The option 'choices' of constraint Choice must be a list")
        values["choices"] = tuple(values["choices"])
        return values


@register_checker(Choice)
class ChoiceChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return

        if constraint.multiple:
            if classify(value) is not ValueKind.SEQUENCE:
                raise TypeMismatchError(value, "array")
            for item in value:
                if item not in constraint.choices:
                    context.build_violation(
                        constraint.multiple_message, {"{{ value }}": format_value(item)}
                    ).set_invalid_value(item).set_code(Choice.NO_SUCH_CHOICE_ERROR).set_constraint(constraint).add()
                    return
        elif value not in constraint.choices:
            context.build_violation(constraint.message, {"{{ value }}": format_value(value)}).set_code(
                Choice.NO_SUCH_CHOICE_ERROR
            ).set_constraint(constraint).add()


# ---------------------------------------------------------------------------
# Callback
# ---------------------------------------------------------------------------


class Callback(Constraint):
    """Delegates to ``callback(value, context)``, or to the value's method
    named ``callback`` called as ``method(context)``.

    Usable on classes to check an object as a whole.
    """

    default_option = "callback"
    required_options = ("callback",)

    def _normalize_options(self, values):
        callback = values["callback"]
        if not callable(callback) and not isinstance(callback, str):
            raise InvalidRuleConfigurationError("The option 'callback' of constraint Callback must be callable or a method name")
        return values


@register_checker(Callback)
class CallbackChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        callback = constraint.callback
        if isinstance(callback, str):
            method = getattr(value, callback, None)
            if not callable(method):
                raise InvalidRuleConfigurationError(
                    f"Method {callback!r} targeted by Callback does not exist on {type(value).__name__}"
                )
            method(context)
        else:
            callback(value, context)
