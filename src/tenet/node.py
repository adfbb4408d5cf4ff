"""Traversal nodes and their expansion into child nodes.

A node pairs a value with the metadata that applies to it, its position in
the validated graph and the groups it is validated in. Nodes are created
per run and discarded with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tenet.core.errors import TypeMismatchError
from tenet.groups import GroupSpec
from tenet.mapping import Cascade, ClassMetadata, GenericMetadata, PropertyMetadata
from tenet.util import property_path
from tenet.values import ValueKind, classify, iter_items

if TYPE_CHECKING:
    from tenet.mapping import MetadataFactory


@dataclass(frozen=True)
class Node:
    """One unit of traversal work.

    ``cascaded_groups`` are the groups cascaded objects are validated in;
    ``None`` means the node's own ``groups``.
    """

    value: Any
    metadata: GenericMetadata
    property_path: str
    groups: tuple[GroupSpec, ...]
    cascaded_groups: tuple[GroupSpec, ...] | None = None
    depth: int = 0

    @property
    def kind(self) -> str:
        return "value"

    def groups_for_children(self) -> tuple[GroupSpec, ...]:
        return self.cascaded_groups if self.cascaded_groups is not None else self.groups


@dataclass(frozen=True)
class ClassNode(Node):
    """An object validated against its class metadata."""

    metadata: ClassMetadata

    @property
    def kind(self) -> str:
        return "object"


@dataclass(frozen=True)
class PropertyNode(Node):
    """The value of one property of ``owner``."""

    metadata: PropertyMetadata
    owner: Any = None

    @property
    def kind(self) -> str:
        return "property"


@dataclass(frozen=True)
class GenericNode(Node):
    """A bare value or a collection entry."""


def expand_object(node: ClassNode, groups: tuple[str, ...], cascaded_groups: tuple[GroupSpec, ...]) -> list[Node]:
    """Property nodes of an object node, in declaration order."""
    children: list[Node] = []
    for name, metadata in node.metadata.properties.items():
        children.append(
            PropertyNode(
                value=metadata.get_value(node.value),
                metadata=metadata,
                property_path=property_path.append(node.property_path, name),
                groups=groups,
                cascaded_groups=cascaded_groups,
                depth=node.depth + 1,
                owner=node.value,
            )
        )
    return children


def expand_cascade(node: Node, groups: tuple[GroupSpec, ...], factory: MetadataFactory) -> list[Node]:
    """Child nodes produced by the node's cascade directive.

    ``Cascade.OBJECT`` descends into an object, or into the objects of a
    collection. ``Cascade.COLLECTION`` requires a collection. ``None`` is
    never cascaded.
    """
    metadata = node.metadata
    value = node.value
    if metadata.cascade is Cascade.NONE or value is None:
        return []

    kind = classify(value)
    if metadata.cascade is Cascade.OBJECT:
        if kind is ValueKind.OBJECT:
            return [_object_node(value, node.property_path, groups, node.depth + 1, factory)]
        if kind in (ValueKind.SEQUENCE, ValueKind.KEYED):
            return _expand_collection(node, groups, metadata.deep, factory)
        raise TypeMismatchError(value, "object or collection")

    if kind not in (ValueKind.SEQUENCE, ValueKind.KEYED):
        raise TypeMismatchError(value, "collection")
    return _expand_collection(node, groups, metadata.deep, factory)


def _expand_collection(node: Node, groups: tuple[GroupSpec, ...], deep: bool, factory: MetadataFactory) -> list[Node]:
    children: list[Node] = []
    for key, item in iter_items(node.value):
        path = property_path.append(node.property_path, property_path.index(key))
        kind = classify(item)
        if kind is ValueKind.OBJECT:
            children.append(_object_node(item, path, groups, node.depth + 1, factory))
        elif deep and kind in (ValueKind.SEQUENCE, ValueKind.KEYED):
            children.append(
                GenericNode(
                    value=item,
                    metadata=GenericMetadata(cascade=Cascade.COLLECTION, deep=True),
                    property_path=path,
                    groups=groups,
                    depth=node.depth + 1,
                )
            )
    return children


def _object_node(value: Any, path: str, groups: tuple[GroupSpec, ...], depth: int, factory: MetadataFactory) -> ClassNode:
    return ClassNode(
        value=value,
        metadata=factory.get_metadata_for(value),
        property_path=path,
        groups=groups,
        depth=depth,
    )
