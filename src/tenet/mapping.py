"""Metadata model: which constraints apply to a class, a property or a value.

Metadata is built once (explicitly, or through a class's
``load_validator_metadata`` hook) and treated as read-only during runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from tenet.constraints.base import Constraint
from tenet.constraints.cascade import Traverse, Valid
from tenet.core.errors import InvalidRuleConfigurationError, NoSuchMetadataError
from tenet.groups import DEFAULT_GROUP, GroupSequence
from tenet.values import ValueKind, classify


class Cascade(str, Enum):
    """How the traverser descends into a value after checking it."""

    NONE = "none"
    OBJECT = "object"
    COLLECTION = "collection"


class GenericMetadata:
    """Constraints and cascade directive for a bare value."""

    def __init__(
        self,
        constraints: Iterable[Constraint] = (),
        cascade: Cascade = Cascade.NONE,
        deep: bool = False,
        implicit_group: str | None = None,
    ):
        self.cascade = cascade
        self.deep = deep
        self.implicit_group = implicit_group
        self._entries: list[tuple[Constraint, frozenset[str]]] = []
        self.add_constraints(constraints)

    @property
    def constraints(self) -> list[Constraint]:
        return [constraint for constraint, _ in self._entries]

    def add_constraint(self, constraint: Constraint) -> GenericMetadata:
        """Attach a constraint, or apply it as a cascade directive."""
        if isinstance(constraint, Valid):
            self.cascade = Cascade.OBJECT
            self.deep = constraint.deep
        elif isinstance(constraint, Traverse):
            self.cascade = Cascade.COLLECTION
            self.deep = constraint.deep
        else:
            self._entries.append((constraint, self._effective_groups(constraint)))
        return self

    def add_constraints(self, constraints: Iterable[Constraint]) -> GenericMetadata:
        for constraint in constraints:
            self.add_constraint(constraint)
        return self

    def _effective_groups(self, constraint: Constraint) -> frozenset[str]:
        groups = set(constraint.groups)
        if self.implicit_group and DEFAULT_GROUP in groups:
            groups.add(self.implicit_group)
        return frozenset(groups)

    def find_constraints(self, group: str) -> list[Constraint]:
        return [constraint for constraint, groups in self._entries if group in groups]

    def constraints_for(self, groups: Iterable[str]) -> list[tuple[Constraint, str]]:
        """Constraints matching any of ``groups``, in declaration order.

        Each constraint appears once, paired with the first of ``groups`` it
        belongs to.
        """
        ordered = tuple(groups)
        matched: list[tuple[Constraint, str]] = []
        for constraint, constraint_groups in self._entries:
            for group in ordered:
                if group in constraint_groups:
                    matched.append((constraint, group))
                    break
        return matched

    def __repr__(self) -> str:
        return f"{type(self).__name__}(constraints={self.constraints!r}, cascade={self.cascade.value})"


class PropertyMetadata(GenericMetadata):
    """Constraints attached to one property of a class."""

    def __init__(self, class_name: str, name: str, getter: str | None = None):
        super().__init__(implicit_group=class_name)
        self.class_name = class_name
        self.name = name
        self.getter = getter

    def get_value(self, obj: Any) -> Any:
        """Read the property from ``obj``."""
        if self.getter is not None:
            return getattr(obj, self.getter)()
        if isinstance(obj, Mapping):
            return obj.get(self.name)
        try:
            return getattr(obj, self.name)
        except AttributeError as e:
            raise InvalidRuleConfigurationError(
                f'Property "{self.name}" does not exist in class {self.class_name}'
            ) from e


class ClassMetadata(GenericMetadata):
    """Class-level constraints, property metadata and group sequence of a class.

    Constraints in the ``Default`` group also belong to the group named after
    the class, which is how a group sequence refers to them.
    """

    def __init__(self, cls: type):
        super().__init__(implicit_group=cls.__name__)
        self.cls = cls
        self.class_name = cls.__name__
        self.properties: dict[str, PropertyMetadata] = {}
        self.group_sequence: GroupSequence | None = None

    @property
    def default_group(self) -> str:
        return self.class_name

    def add_constraint(self, constraint: Constraint) -> ClassMetadata:
        if isinstance(constraint, (Valid, Traverse)):
            raise InvalidRuleConfigurationError(
                f"The constraint {constraint.variant} cannot be put on classes ({self.class_name})"
            )
        super().add_constraint(constraint)
        return self

    def property_metadata(self, name: str, getter: str | None = None) -> PropertyMetadata:
        """Get or create the metadata of property ``name``."""
        if name not in self.properties:
            self.properties[name] = PropertyMetadata(self.class_name, name, getter)
        elif getter is not None:
            self.properties[name].getter = getter
        return self.properties[name]

    def add_property_constraint(self, name: str, constraint: Constraint) -> ClassMetadata:
        self.property_metadata(name).add_constraint(constraint)
        return self

    def add_property_constraints(self, name: str, constraints: Iterable[Constraint]) -> ClassMetadata:
        self.property_metadata(name).add_constraints(constraints)
        return self

    def add_getter_constraint(self, name: str, getter: str, constraint: Constraint) -> ClassMetadata:
        """Constrain the value returned by calling method ``getter``."""
        self.property_metadata(name, getter).add_constraint(constraint)
        return self

    def cascade(self, name: str, deep: bool = False) -> ClassMetadata:
        return self.add_property_constraint(name, Valid(deep=deep))

    def traverse(self, name: str, deep: bool = False) -> ClassMetadata:
        return self.add_property_constraint(name, Traverse(deep=deep))

    def set_group_sequence(self, sequence: GroupSequence | Iterable[str | Iterable[str]]) -> ClassMetadata:
        """Replace the ``Default`` group of this class by an ordered sequence."""
        if not isinstance(sequence, GroupSequence):
            sequence = GroupSequence.of(sequence)
        for batch in sequence.batches:
            if DEFAULT_GROUP in batch:
                raise InvalidRuleConfigurationError(
                    f'The group "{DEFAULT_GROUP}" is not allowed in group sequences; '
                    f'use "{self.default_group}" instead'
                )
        self.group_sequence = sequence
        return self

    def merge(self, other: ClassMetadata, inherited: bool = True) -> ClassMetadata:
        """Copy constraints from ``other`` into this metadata.

        With ``inherited`` (``other`` describes a base class), ``Default``
        constraints additionally join this class's own group. Group
        sequences are never inherited.
        """
        for constraint, groups in other._entries:
            self._entries.append((constraint, self._merged_groups(constraint, groups, inherited)))
        for name, source in other.properties.items():
            target = self.property_metadata(name, source.getter)
            for constraint, groups in source._entries:
                target._entries.append((constraint, self._merged_groups(constraint, groups, inherited)))
            if source.cascade is not Cascade.NONE:
                target.cascade = source.cascade
                target.deep = source.deep
        if not inherited and other.group_sequence is not None:
            self.group_sequence = other.group_sequence
        return self

    def _merged_groups(self, constraint: Constraint, groups: frozenset[str], inherited: bool) -> frozenset[str]:
        if inherited and DEFAULT_GROUP in constraint.groups:
            return groups | {self.default_group}
        return groups


class MetadataFactory:
    """Builds and caches class metadata.

    Metadata for a class combines what was passed to ``register``, what the
    class's ``load_validator_metadata`` hook declares, and the metadata of
    its base classes. Any class has metadata, possibly empty.
    """

    HOOK = "load_validator_metadata"

    def __init__(self, metadata: Iterable[ClassMetadata] = ()):
        self._registered: dict[type, ClassMetadata] = {}
        self._loaded: dict[type, ClassMetadata] = {}
        for entry in metadata:
            self.register(entry)

    def register(self, metadata: ClassMetadata) -> None:
        self._registered[metadata.cls] = metadata
        self._loaded.clear()

    def has_metadata_for(self, value: Any) -> bool:
        return isinstance(value, type) or classify(value) is ValueKind.OBJECT

    def get_metadata_for(self, value: Any) -> ClassMetadata:
        """Metadata of a class, or of the class of an object."""
        if not self.has_metadata_for(value):
            raise NoSuchMetadataError(f"Cannot create metadata for non-objects. Got: {type(value).__name__}")
        cls = value if isinstance(value, type) else type(value)
        if cls not in self._loaded:
            self._loaded[cls] = self._load(cls)
        return self._loaded[cls]

    def _load(self, cls: type) -> ClassMetadata:
        metadata = ClassMetadata(cls)
        registered = self._registered.get(cls)
        if registered is not None:
            metadata.merge(registered, inherited=False)
        if self.HOOK in cls.__dict__:
            getattr(cls, self.HOOK)(metadata)
        for base in cls.__bases__:
            if base is not object:
                metadata.merge(self.get_metadata_for(base))
        return metadata
