"""Node traversal: dispatch constraints and cascade through the value graph."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from tenet.constraints.registry import CheckerRegistry
from tenet.core.errors import MaxDepthExceededError
from tenet.groups import DEFAULT_GROUP, GroupSequence, GroupSpec, resolve_groups
from tenet.mapping import MetadataFactory
from tenet.node import ClassNode, Node, PropertyNode, expand_cascade, expand_object

if TYPE_CHECKING:
    from tenet.context import ExecutionContext
    from tenet.core.logging import ValidationLogger

logger = logging.getLogger(__name__)


class NodeTraverser:
    """Works through a queue of nodes until it is empty.

    For each node the traverser resolves the node's groups, dispatches every
    matching constraint to its checker and queues the node's children.
    Children are processed before the node's later siblings, so violations
    appear in depth-first order. The queue lives on the heap; only group
    sequences and checker-triggered sub-validations nest calls.
    """

    def __init__(
        self,
        metadata_factory: MetadataFactory,
        checkers: CheckerRegistry,
        max_depth: int = 100,
        run_logger: ValidationLogger | None = None,
    ):
        self.metadata_factory = metadata_factory
        self.checkers = checkers
        self.max_depth = max_depth
        self.run_logger = run_logger

    def traverse(self, nodes: Iterable[Node], context: ExecutionContext) -> None:
        queue: deque[Node] = deque(nodes)
        while queue:
            node = queue.popleft()
            if node.depth > self.max_depth:
                raise MaxDepthExceededError(self.max_depth, node.property_path)
            if self.run_logger is not None:
                self.run_logger.node_visited(node.kind, node.property_path, node.groups)

            if isinstance(node, ClassNode):
                children = self._traverse_class_node(node, context)
            else:
                children = self._traverse_value_node(node, context)
            queue.extendleft(reversed(children))

    # -- Node kinds --

    def _traverse_class_node(self, node: ClassNode, context: ExecutionContext) -> list[Node]:
        resolved = resolve_groups(node.groups, node.metadata.group_sequence)
        object_id = context.identity_of(node.value)
        children: list[Node] = []

        if resolved.plain:
            self._dispatch(node, resolved.plain, context)

            # Mark before descending so a self-referencing graph terminates
            uncascaded: list[str] = []
            for group in resolved.plain:
                if context.is_object_validated(object_id, group):
                    logger.debug("Object at %r already cascaded in %s", node.property_path, group)
                    if self.run_logger is not None:
                        self.run_logger.cascade_skipped(node.property_path, group)
                    continue
                context.mark_object_as_validated(object_id, group)
                uncascaded.append(group)

            if uncascaded:
                children = expand_object(node, tuple(uncascaded), self._cascaded_groups(node, uncascaded))

        for sequence in resolved.sequences:
            self._traverse_group_sequence(node, sequence, context)

        return children

    def _traverse_value_node(self, node: Node, context: ExecutionContext) -> list[Node]:
        resolved = resolve_groups(node.groups)
        children: list[Node] = []

        if resolved.plain:
            self._dispatch(node, resolved.plain, context)
            children = expand_cascade(node, self._cascaded_groups(node, resolved.plain), self.metadata_factory)

        for sequence in resolved.sequences:
            self._traverse_group_sequence(node, sequence, context)

        return children

    def _traverse_group_sequence(self, node: Node, sequence: GroupSequence, context: ExecutionContext) -> None:
        """Validate ``node`` batch by batch, stopping after the first failing batch."""
        cascaded = (sequence.cascaded_group,) if sequence.cascaded_group else None
        for position, batch in enumerate(sequence.batches):
            before = len(context.violations)
            self.traverse([replace(node, groups=batch, cascaded_groups=cascaded or batch)], context)
            if len(context.violations) > before:
                skipped = sequence.batches[position + 1:]
                if skipped:
                    logger.debug("Group sequence stopped at %r after %s", node.property_path, batch)
                    if self.run_logger is not None:
                        for rest in skipped:
                            self.run_logger.batch_skipped(node.property_path, rest)
                break

    # -- Dispatch --

    def _dispatch(self, node: Node, groups: tuple[str, ...], context: ExecutionContext) -> None:
        """Run every constraint of the node that belongs to one of ``groups``."""
        owner = node.value if isinstance(node, ClassNode) else getattr(node, "owner", None)
        owner_id = context.identity_of(owner) if owner is not None else None

        for constraint, group in node.metadata.constraints_for(groups):
            if owner_id is not None:
                constraint_id = context.identity_of(constraint)
                if isinstance(node, ClassNode):
                    if context.is_class_constraint_validated(owner_id, constraint_id):
                        continue
                    context.mark_class_constraint_as_validated(owner_id, constraint_id)
                elif isinstance(node, PropertyNode):
                    name = node.metadata.name
                    if context.is_property_constraint_validated(owner_id, name, constraint_id):
                        continue
                    context.mark_property_constraint_as_validated(owner_id, name, constraint_id)

            context.set_node(node.value, owner, node.metadata, node.property_path, node.depth)
            context.set_group(group)
            if self.run_logger is not None:
                self.run_logger.constraint_dispatched(constraint.variant, node.property_path, group)
            self.checkers.resolve(constraint).validate(node.value, constraint, context)

    @staticmethod
    def _cascaded_groups(node: Node, groups: Iterable[str]) -> tuple[GroupSpec, ...]:
        if node.cascaded_groups is not None:
            return node.cascaded_groups
        return tuple(groups) or (DEFAULT_GROUP,)
