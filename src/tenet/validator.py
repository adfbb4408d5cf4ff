"""Public entry points for validating values, objects and properties."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from tenet.config import Settings, get_settings
from tenet.constraints.base import Constraint
from tenet.constraints.cascade import Traverse
from tenet.constraints.registry import CheckerRegistry, default_registry
from tenet.context import ExecutionContext
from tenet.core.logging import ValidationLogger
from tenet.groups import DEFAULT_GROUP, GroupSpec, normalize_groups
from tenet.interpolation import MessageInterpolator, PlaceholderInterpolator
from tenet.mapping import ClassMetadata, GenericMetadata, MetadataFactory
from tenet.node import ClassNode, GenericNode, Node, PropertyNode
from tenet.traverser import NodeTraverser
from tenet.util import property_path
from tenet.values import ValueKind, classify
from tenet.violations import ViolationList

logger = logging.getLogger(__name__)

Groups = GroupSpec | Iterable[GroupSpec] | None


class Validator:
    """Validates values against constraints and objects against their metadata.

    Every ``validate*`` call is one run with its own execution context; the
    validator itself keeps no state between runs and can be reused.
    """

    def __init__(
        self,
        metadata_factory: MetadataFactory | None = None,
        checkers: CheckerRegistry | None = None,
        interpolator: MessageInterpolator | None = None,
        settings: Settings | None = None,
        run_logger: ValidationLogger | None = None,
    ):
        self.settings = settings or get_settings()
        self.metadata_factory = metadata_factory or MetadataFactory()
        self.checkers = checkers or default_registry()
        self.interpolator = interpolator or PlaceholderInterpolator()
        self.run_logger = run_logger
        self._traverser = NodeTraverser(
            self.metadata_factory,
            self.checkers,
            max_depth=self.settings.max_depth,
            run_logger=run_logger,
        )

    # -- Metadata --

    def get_metadata_for(self, value: Any) -> ClassMetadata:
        return self.metadata_factory.get_metadata_for(value)

    def has_metadata_for(self, value: Any) -> bool:
        return self.metadata_factory.has_metadata_for(value)

    # -- Entry points --

    def validate(
        self,
        value: Any,
        constraints: Constraint | Iterable[Constraint] | None = None,
        groups: Groups = None,
    ) -> ViolationList:
        """Validate a value.

        With ``constraints`` the value is checked against them as a bare
        value. Without, objects are validated against their metadata,
        collections are traversed and anything else has nothing to check.
        """
        if constraints is None:
            kind = classify(value)
            if kind is ValueKind.OBJECT:
                return self.validate_object(value, groups)
            if kind in (ValueKind.SEQUENCE, ValueKind.KEYED):
                return self.validate_collection(value, groups)
            return ViolationList()

        if isinstance(constraints, Constraint):
            constraints = [constraints]
        node = GenericNode(
            value=value,
            metadata=GenericMetadata(constraints),
            property_path=self.settings.root_path,
            groups=normalize_groups(groups),
        )
        return self._run(value, [node])

    def validate_object(self, obj: Any, groups: Groups = None) -> ViolationList:
        """Validate an object against its class metadata, cascading as declared."""
        node = ClassNode(
            value=obj,
            metadata=self.metadata_factory.get_metadata_for(obj),
            property_path=self.settings.root_path,
            groups=normalize_groups(groups),
        )
        return self._run(obj, [node])

    def validate_collection(self, collection: Any, groups: Groups = None, deep: bool = False) -> ViolationList:
        """Validate every object inside a collection."""
        node = GenericNode(
            value=collection,
            metadata=GenericMetadata([Traverse(deep=deep)]),
            property_path=self.settings.root_path,
            groups=normalize_groups(groups),
        )
        return self._run(collection, [node])

    def validate_property(self, obj: Any, name: str, groups: Groups = None) -> ViolationList:
        """Validate the current value of one property of ``obj``."""
        metadata = self.metadata_factory.get_metadata_for(obj)
        return self._run(obj, self._property_nodes(obj, metadata, name, groups, lambda pm: pm.get_value(obj)))

    def validate_property_value(self, obj_or_class: Any, name: str, value: Any, groups: Groups = None) -> ViolationList:
        """Validate ``value`` as if it were the value of property ``name``.

        The object is not modified; a class may be passed instead of an
        instance.
        """
        metadata = self.metadata_factory.get_metadata_for(obj_or_class)
        return self._run(obj_or_class, self._property_nodes(obj_or_class, metadata, name, groups, lambda pm: value))

    # -- Internals --

    def _property_nodes(self, owner, metadata: ClassMetadata, name: str, groups: Groups, read) -> list[Node]:
        property_metadata = metadata.properties.get(name)
        if property_metadata is None:
            return []
        requested = normalize_groups(groups)
        if metadata.group_sequence is not None:
            # The class sequence stands in for Default, as in validate_object
            sequence = metadata.group_sequence.replacing_default()
            requested = tuple(sequence if group == DEFAULT_GROUP else group for group in requested)
        return [
            PropertyNode(
                value=read(property_metadata),
                metadata=property_metadata,
                property_path=property_path.append(self.settings.root_path, name),
                groups=requested,
                owner=owner,
            )
        ]

    def _run(self, root: Any, nodes: list[Node]) -> ViolationList:
        context = ExecutionContext(root, self._traverser, self.interpolator)
        if self.run_logger is not None:
            self.run_logger.run_start(root)
        self._traverser.traverse(nodes, context)
        if self.run_logger is not None:
            self.run_logger.run_finish(len(context.violations))
        logger.debug("Validation of %s finished with %d violation(s)", type(root).__name__, len(context.violations))
        return context.violations


def validate(value: Any, constraints: Constraint | Iterable[Constraint] | None = None, groups: Groups = None) -> ViolationList:
    """Validate with a default ``Validator``."""
    return Validator().validate(value, constraints, groups)
