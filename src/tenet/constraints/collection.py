"""Composite rules over collections: ``Collection`` and ``All``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenet.constraints.base import Composite
from tenet.constraints.registry import ConstraintChecker, register_checker
from tenet.core.errors import InvalidRuleConfigurationError, TypeMismatchError
from tenet.util import property_path
from tenet.values import ValueKind, classify, is_collection, iter_items


class Required(Composite):
    """Marks a ``Collection`` field that must be present."""

    options = {"constraints": []}
    default_option = "constraints"


class Optional(Composite):
    """Marks a ``Collection`` field that may be absent."""

    options = {"constraints": []}
    default_option = "constraints"


class Collection(Composite):
    """Checks a keyed collection field by field.

    ``fields`` maps each key to the constraints for its value. A bare entry
    is required unless ``allow_missing_fields`` is set; wrap it in
    ``Required`` or ``Optional`` to decide per field. Keys not listed in
    ``fields`` are reported unless ``allow_extra_fields`` is set.
    """

    MISSING_FIELD_ERROR = "missing_field"
    NO_SUCH_FIELD_ERROR = "no_such_field"

    composite_option = "fields"
    options = {
        "allow_extra_fields": False,
        "allow_missing_fields": False,
        "extra_fields_message": "This field was not expected.",
        "missing_fields_message": "This field is missing.",
    }
    default_option = "fields"
    required_options = ("fields",)

    def _bind_nested(self) -> None:
        if not isinstance(self._raw_nested, Mapping):
            raise InvalidRuleConfigurationError(
                'The option "fields" of constraint Collection must be a mapping, '
                f"{type(self._raw_nested).__name__} given"
            )
        super()._bind_nested()

    def _bind_entry(self, entry: Any) -> Any:
        if isinstance(entry, (Required, Optional)):
            return self._bind_one(entry)
        return self._bind_list(entry)


@register_checker(Collection)
class CollectionChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return
        if classify(value) is not ValueKind.KEYED:
            raise TypeMismatchError(value, "keyed collection")

        for field, entry in constraint.fields.items():
            sub_path = property_path.index(field)
            if isinstance(entry, (Required, Optional)):
                nested = entry.constraints
                must_exist = isinstance(entry, Required)
            else:
                nested = entry
                must_exist = not constraint.allow_missing_fields

            if field in value:
                if nested:
                    context.validate_sub_value(value[field], nested, sub_path, context.group)
            elif must_exist:
                context.build_violation(
                    constraint.missing_fields_message, {"{{ field }}": str(field)}
                ).at_path(sub_path).set_invalid_value(None).set_code(
                    Collection.MISSING_FIELD_ERROR
                ).set_constraint(constraint).add()

        if not constraint.allow_extra_fields:
            for field, item in value.items():
                if field not in constraint.fields:
                    context.build_violation(
                        constraint.extra_fields_message, {"{{ field }}": str(field)}
                    ).at_path(property_path.index(field)).set_invalid_value(item).set_code(
                        Collection.NO_SUCH_FIELD_ERROR
                    ).set_constraint(constraint).add()


class All(Composite):
    """Applies the nested constraints to every entry of a collection."""

    default_option = "constraints"
    required_options = ("constraints",)


@register_checker(All)
class AllChecker(ConstraintChecker):
    def validate(self, value, constraint, context):
        if value is None:
            return
        if not is_collection(value):
            raise TypeMismatchError(value, "collection")

        for key, item in iter_items(value):
            context.validate_sub_value(item, constraint.constraints, property_path.index(key), context.group)
