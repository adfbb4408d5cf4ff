"""Checker interface and the constraint-to-checker registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from tenet.constraints.base import Constraint
from tenet.core.errors import InvalidRuleConfigurationError

if TYPE_CHECKING:
    from tenet.context import ExecutionContext


class ConstraintChecker(ABC):
    """Evaluates one constraint variant against a value.

    Checkers are stateless: the same instance serves every run. Failures are
    reported through the context, which is positioned at the value being
    checked when ``validate`` is called and must not be kept afterwards.
    """

    @abstractmethod
    def validate(self, value: Any, constraint: Constraint, context: ExecutionContext) -> None:
        ...


_CHECKERS: dict[type[Constraint], type[ConstraintChecker]] = {}


def register_checker(constraint_cls: type[Constraint]):
    """Decorator to register the checker class for a constraint class."""

    def wrapper(cls: type[ConstraintChecker]) -> type[ConstraintChecker]:
        _CHECKERS[constraint_cls] = cls
        return cls

    return wrapper


class CheckerRegistry:
    """Maps constraint classes to checker instances.

    Lookup walks the constraint's MRO, so a subclass of a registered
    constraint is handled by its parent's checker unless it has its own.
    """

    def __init__(self, checkers: dict[type[Constraint], ConstraintChecker] | None = None):
        self._checkers: dict[type[Constraint], ConstraintChecker] = dict(checkers or {})

    @classmethod
    def from_registered(cls) -> CheckerRegistry:
        """Registry holding one instance of every decorator-registered checker."""
        import tenet.constraints  # noqa: F401  registers the built-in checkers

        return cls({constraint_cls: checker_cls() for constraint_cls, checker_cls in _CHECKERS.items()})

    def register(self, constraint_cls: type[Constraint], checker: ConstraintChecker) -> None:
        self._checkers[constraint_cls] = checker

    def resolve(self, constraint: Constraint) -> ConstraintChecker:
        for klass in type(constraint).__mro__:
            checker = self._checkers.get(klass)
            if checker is not None:
                return checker
        raise InvalidRuleConfigurationError(
            f"No checker registered for constraint {constraint.variant}"
        )

    def variants(self) -> list[str]:
        return sorted(klass.variant for klass in self._checkers)

    def __contains__(self, constraint_cls: object) -> bool:
        return constraint_cls in self._checkers


_default: CheckerRegistry | None = None


def default_registry() -> CheckerRegistry:
    """Get the cached registry of built-in and decorator-registered checkers."""
    global _default
    if _default is None:
        _default = CheckerRegistry.from_registered()
    return _default
