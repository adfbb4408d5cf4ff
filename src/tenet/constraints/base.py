"""Constraint descriptors.

A constraint is an immutable description of one rule: its variant, its
options, its message templates and the groups it belongs to. The logic that
evaluates a constraint lives in its checker (see ``registry``).
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any, ClassVar

from tenet.core.errors import InvalidRuleConfigurationError
from tenet.groups import DEFAULT_GROUP

_CONSTRAINT_TYPES: dict[str, type[Constraint]] = {}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

_REQUIRED = object()


def _snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def constraint_type(variant: str) -> type[Constraint]:
    """Look up a constraint class by its variant name."""
    if variant not in _CONSTRAINT_TYPES:
        raise InvalidRuleConfigurationError(
            f"Unknown constraint: {variant}. Available: {sorted(_CONSTRAINT_TYPES)}"
        )
    return _CONSTRAINT_TYPES[variant]


def constraint_types() -> dict[str, type[Constraint]]:
    return dict(_CONSTRAINT_TYPES)


class Constraint:
    """Base class for all rule descriptors.

    Subclasses declare their options as a class-level mapping of option name
    to default value. Options marked required have no usable default and
    must be passed. Options can be given as a mapping, as keyword arguments,
    or as a single positional value bound to ``default_option``::

        Length(min=3)
        Length({"min": 3, "max": 10})
        Choice(["a", "b"])          # default option "choices"

    camelCase option names are accepted and stored in snake_case.
    """

    variant: ClassVar[str] = "Constraint"
    options: ClassVar[dict[str, Any]] = {}
    default_option: ClassVar[str | None] = None
    required_options: ClassVar[tuple[str, ...]] = ()

    groups: tuple[str, ...]
    payload: Any

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "variant" not in cls.__dict__:
            cls.variant = cls.__name__
        if not cls.__dict__.get("_abstract", False):
            _CONSTRAINT_TYPES[cls.variant] = cls

    def __init__(self, options: Any = None, *, groups: Any = None, payload: Any = None, **kwargs: Any):
        known = self._known_options()
        given: dict[str, Any] = {}

        if options is not None:
            if self.is_option_mapping(options):
                given.update(options)
            elif self.default_option is not None:
                given[self.default_option] = options
            else:
                raise InvalidRuleConfigurationError(
                    f"No default option is configured for constraint {self.variant}"
                )
        given.update(kwargs)

        values = dict(known)
        for raw_name, value in given.items():
            name = _snake(raw_name)
            if name == "groups":
                groups = value
            elif name == "payload":
                payload = value
            elif name in known:
                values[name] = value
            else:
                raise InvalidRuleConfigurationError(
                    f'The option "{raw_name}" does not exist in constraint {self.variant}'
                )

        missing = [name for name in self.required_options if values.get(name, _REQUIRED) is _REQUIRED]
        if missing:
            raise InvalidRuleConfigurationError(
                f"The options {', '.join(repr(m) for m in missing)} must be set for constraint {self.variant}"
            )

        values = self._normalize_options(values)
        for name, value in values.items():
            object.__setattr__(self, name, value)

        object.__setattr__(self, "_explicit_groups", groups is not None)
        object.__setattr__(self, "groups", _normalize_group_names(groups))
        object.__setattr__(self, "payload", payload)

    @classmethod
    def option_names(cls) -> list[str]:
        return list(cls._known_options())

    @classmethod
    def is_option_mapping(cls, value: Any) -> bool:
        """Whether ``value`` is a mapping of this constraint's option names."""
        if not isinstance(value, Mapping) or not value:
            return False
        known = {*cls._known_options(), "groups", "payload"}
        return all(isinstance(k, str) and _snake(k) in known for k in value)

    @classmethod
    def _known_options(cls) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            merged.update(klass.__dict__.get("options", {}))
        for name in cls.required_options:
            merged.setdefault(name, _REQUIRED)
        return merged

    def _normalize_options(self, values: dict[str, Any]) -> dict[str, Any]:
        """Hook for subclasses to check and coerce option values."""
        return values

    @property
    def has_explicit_groups(self) -> bool:
        return self._explicit_groups

    def with_groups(self, groups: tuple[str, ...]) -> Constraint:
        """Copy of this constraint assigned to ``groups``."""
        clone = copy.copy(self)
        object.__setattr__(clone, "groups", tuple(groups))
        return clone

    def option_values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._known_options()}

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.variant} constraints are immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{self.variant} constraints are immutable")

    def __repr__(self) -> str:
        shown = {k: v for k, v in self.option_values().items() if not k.endswith("message")}
        args = ", ".join(f"{k}={v!r}" for k, v in shown.items())
        return f"{self.variant}({args})"


class Composite(Constraint):
    """A constraint that embeds other constraints.

    Nested constraints without explicit groups inherit the composite's
    groups. Nested constraints with explicit groups must stay within them.
    """

    _abstract = True

    #: Name of the option holding the nested constraints
    composite_option: ClassVar[str] = "constraints"

    def __init__(self, options: Any = None, **kwargs: Any):
        super().__init__(options, **kwargs)
        object.__setattr__(self, "_raw_nested", getattr(self, self.composite_option))
        self._bind_nested()

    def _bind_nested(self) -> None:
        raw = self._raw_nested
        if isinstance(raw, Mapping):
            bound: Any = {key: self._bind_entry(entry) for key, entry in raw.items()}
        else:
            bound = self._bind_list(raw)
        object.__setattr__(self, self.composite_option, bound)

    def _bind_entry(self, entry: Any) -> Any:
        return self._bind_list(entry)

    def _bind_list(self, entry: Any) -> tuple[Constraint, ...]:
        if entry is None:
            return ()
        items = entry if isinstance(entry, (list, tuple)) else [entry]
        return tuple(self._bind_one(c) for c in items)

    def _bind_one(self, constraint: Any) -> Constraint:
        from tenet.constraints.cascade import Valid

        if not isinstance(constraint, Constraint):
            raise InvalidRuleConfigurationError(
                f"The value {constraint!r} is not an instance of Constraint in constraint {self.variant}"
            )
        if isinstance(constraint, Valid):
            raise InvalidRuleConfigurationError(
                f"The constraint Valid cannot be nested inside constraint {self.variant}"
            )
        if not constraint.has_explicit_groups:
            if constraint.groups == self.groups:
                return constraint
            return constraint.with_groups(self.groups)
        excess = set(constraint.groups) - set(self.groups)
        if excess:
            raise InvalidRuleConfigurationError(
                f"The group(s) {sorted(excess)} passed to the constraint {constraint.variant} "
                f"should also be passed to its containing constraint {self.variant}"
            )
        return constraint

    def with_groups(self, groups: tuple[str, ...]) -> Constraint:
        if tuple(groups) == self.groups:
            return self
        clone = super().with_groups(groups)
        clone._bind_nested()
        return clone


def _normalize_group_names(groups: Any) -> tuple[str, ...]:
    if groups is None:
        return (DEFAULT_GROUP,)
    if isinstance(groups, str):
        return (groups,)
    normalized = tuple(groups)
    if not normalized:
        raise InvalidRuleConfigurationError("A constraint must belong to at least one group")
    return normalized
