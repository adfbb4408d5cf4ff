"""Execution context of a single validation run.

The context owns the run's violation list, knows where in the validated
graph the traverser currently is, and remembers which objects and
constraints were already validated so that cyclic and diamond-shaped graphs
are handled once per object.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tenet.constraints.base import Constraint
from tenet.core.errors import MaxDepthExceededError, UnsupportedOperationError
from tenet.groups import GroupSpec, normalize_groups
from tenet.mapping import ClassMetadata, GenericMetadata, PropertyMetadata
from tenet.node import GenericNode
from tenet.util import property_path as path_util
from tenet.violations import Violation, ViolationList

if TYPE_CHECKING:
    from tenet.interpolation import MessageInterpolator
    from tenet.traverser import NodeTraverser

logger = logging.getLogger(__name__)


class ExecutionContext:
    """Shared state of one validation run.

    Checkers report failures with ``add_violation`` or ``build_violation``
    and embed checks on sub-values with ``validate_sub_value``. Both use the
    context's current position, which the traverser moves before every
    dispatch.
    """

    def __init__(self, root: Any, traverser: NodeTraverser, interpolator: MessageInterpolator):
        self._traverser = traverser
        self._interpolator = interpolator
        self.root = root
        self.violations = ViolationList()

        # Current position
        self.value: Any = root
        self.object: Any = None
        self.metadata: GenericMetadata | None = None
        self.property_path = ""
        self.group: str | None = None
        self.depth = 0

        # Identity arena: id(obj) -> stable run-local number. The objects are
        # kept alive so their ids cannot be reused during the run.
        self._identities: dict[int, int] = {}
        self._pinned: list[Any] = []

        self._validated_objects: dict[int, set[str]] = {}
        self._validated_class_constraints: dict[int, set[int]] = {}
        self._validated_property_constraints: dict[int, dict[str, set[int]]] = {}

    # -- Position --

    def set_node(self, value: Any, obj: Any, metadata: GenericMetadata | None, property_path: str, depth: int = 0) -> None:
        self.value = value
        self.object = obj
        self.metadata = metadata
        self.property_path = property_path
        self.depth = depth

    def set_group(self, group: str | None) -> None:
        self.group = group

    def get_property_path(self, sub_path: str = "") -> str:
        return path_util.append(self.property_path, sub_path)

    @property
    def class_name(self) -> str | None:
        if isinstance(self.metadata, (ClassMetadata, PropertyMetadata)):
            return self.metadata.class_name
        return None

    @property
    def property_name(self) -> str | None:
        if isinstance(self.metadata, PropertyMetadata):
            return self.metadata.name
        return None

    # -- Violations --

    def add_violation(self, message: str, parameters: dict[str, str] | None = None) -> None:
        """Record a violation at the current position."""
        parameters = dict(parameters or {})
        self.violations.add(
            Violation(
                message=self._interpolator.interpolate(message, parameters),
                message_template=message,
                parameters=parameters,
                root=self.root,
                property_path=self.property_path,
                invalid_value=self.value,
            )
        )

    def build_violation(self, message: str, parameters: dict[str, str] | None = None) -> ConstraintViolationBuilder:
        """Start a violation whose details can be adjusted before ``add()``."""
        return ConstraintViolationBuilder(
            violations=self.violations,
            message=message,
            parameters=parameters,
            root=self.root,
            property_path=self.property_path,
            invalid_value=self.value,
            interpolator=self._interpolator,
        )

    # -- Sub-validation --

    def validate_sub_value(
        self,
        value: Any,
        constraints: Constraint | Iterable[Constraint],
        sub_path: str = "",
        groups: GroupSpec | Iterable[GroupSpec] | None = None,
    ) -> None:
        """Validate ``value`` against ``constraints`` at ``current path + sub_path``.

        Runs the full traversal synchronously. Violations land in this
        context's list; the current position is restored afterwards.
        """
        if isinstance(constraints, Constraint):
            constraints = [constraints]
        if groups is None:
            groups = self.group
        node = GenericNode(
            value=value,
            metadata=GenericMetadata(constraints),
            property_path=self.get_property_path(sub_path),
            groups=normalize_groups(groups),
            depth=self.depth + 1,
        )
        logger.debug("Sub-validation at %r in %s", node.property_path, node.groups)

        saved = (self.value, self.object, self.metadata, self.property_path, self.group, self.depth)
        try:
            self._traverser.traverse([node], self)
        except RecursionError:
            # Nested sub-validations run on the call stack
            raise MaxDepthExceededError(node.depth, node.property_path) from None
        finally:
            self.value, self.object, self.metadata, self.property_path, self.group, self.depth = saved

    # -- Run-local identity and dedupe --

    def identity_of(self, obj: Any) -> int:
        """Stable number for ``obj`` within this run."""
        key = id(obj)
        number = self._identities.get(key)
        if number is None:
            number = len(self._pinned)
            self._identities[key] = number
            self._pinned.append(obj)
        return number

    def mark_object_as_validated(self, object_id: int, group: str) -> None:
        self._validated_objects.setdefault(object_id, set()).add(group)

    def is_object_validated(self, object_id: int, group: str) -> bool:
        return group in self._validated_objects.get(object_id, ())

    def mark_class_constraint_as_validated(self, object_id: int, constraint_id: int) -> None:
        self._validated_class_constraints.setdefault(object_id, set()).add(constraint_id)

    def is_class_constraint_validated(self, object_id: int, constraint_id: int) -> bool:
        return constraint_id in self._validated_class_constraints.get(object_id, ())

    def mark_property_constraint_as_validated(self, object_id: int, property_name: str, constraint_id: int) -> None:
        by_property = self._validated_property_constraints.setdefault(object_id, {})
        by_property.setdefault(property_name, set()).add(constraint_id)

    def is_property_constraint_validated(self, object_id: int, property_name: str, constraint_id: int) -> bool:
        return constraint_id in self._validated_property_constraints.get(object_id, {}).get(property_name, ())

    # -- Retired entry points --

    def add_violation_at(self, sub_path: str, message: str, parameters: dict[str, str] | None = None, *args: Any) -> None:
        raise UnsupportedOperationError(
            "add_violation_at() is not supported anymore. "
            "Use build_violation(message, parameters).at_path(sub_path).add() instead."
        )

    def validate_value(self, value: Any, constraints: Any, sub_path: str = "", groups: Any = None) -> None:
        raise UnsupportedOperationError(
            "validate_value() is not supported anymore. Use validate_sub_value() instead."
        )

    def get_metadata_factory(self) -> Any:
        raise UnsupportedOperationError(
            "get_metadata_factory() is not supported anymore. "
            "Use Validator.get_metadata_for() instead."
        )


class ConstraintViolationBuilder:
    """Fluent builder for a single violation.

    Nothing is recorded until ``add()`` is called, and ``add()`` records at
    most once.
    """

    def __init__(
        self,
        violations: ViolationList,
        message: str,
        parameters: dict[str, str] | None,
        root: Any,
        property_path: str,
        invalid_value: Any,
        interpolator: MessageInterpolator,
    ):
        self._violations = violations
        self._message = message
        self._parameters = dict(parameters or {})
        self._root = root
        self._property_path = property_path
        self._invalid_value = invalid_value
        self._interpolator = interpolator
        self._plural: int | None = None
        self._code: str | None = None
        self._constraint: Constraint | None = None
        self._added = False

    def at_path(self, sub_path: str) -> ConstraintViolationBuilder:
        self._property_path = path_util.append(self._property_path, sub_path)
        return self

    def set_parameter(self, key: str, value: str) -> ConstraintViolationBuilder:
        self._parameters[key] = value
        return self

    def set_parameters(self, parameters: dict[str, str]) -> ConstraintViolationBuilder:
        self._parameters = dict(parameters)
        return self

    def set_invalid_value(self, value: Any) -> ConstraintViolationBuilder:
        self._invalid_value = value
        return self

    def set_plural(self, number: int) -> ConstraintViolationBuilder:
        self._plural = number
        return self

    def set_code(self, code: str) -> ConstraintViolationBuilder:
        self._code = code
        return self

    def set_constraint(self, constraint: Constraint) -> ConstraintViolationBuilder:
        self._constraint = constraint
        return self

    def add(self) -> None:
        if self._added:
            return
        self._added = True
        self._violations.add(
            Violation(
                message=self._interpolator.interpolate(self._message, self._parameters, self._plural),
                message_template=self._message,
                parameters=dict(self._parameters),
                root=self._root,
                property_path=self._property_path,
                invalid_value=self._invalid_value,
                plural=self._plural,
                code=self._code,
                constraint=self._constraint,
            )
        )
