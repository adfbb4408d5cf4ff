"""Violation records produced by a validation run."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, overload

if TYPE_CHECKING:
    from tenet.constraints.base import Constraint


@dataclass(frozen=True)
class Violation:
    """One failed rule at one position in the validated graph."""

    message: str  # interpolated
    message_template: str
    parameters: dict[str, str] = field(default_factory=dict)
    root: Any = None
    property_path: str = ""
    invalid_value: Any = None
    plural: int | None = None
    code: str | None = None
    constraint: Constraint | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "message_template": self.message_template,
            "parameters": dict(self.parameters),
            "property_path": self.property_path,
            "invalid_value": _jsonable(self.invalid_value),
            "plural": self.plural,
            "code": self.code,
        }

    def __str__(self) -> str:
        root = type(self.root).__name__ if self.root is not None and not isinstance(self.root, (dict, list)) else "Array"
        path = self.property_path
        if path and not path.startswith("["):
            path = f".{path}"
        code = f" (code {self.code})" if self.code else ""
        return f"{root}{path}:\n    {self.message}{code}"


class ViolationList:
    """Ordered, append-only sequence of violations.

    Violations can be added but never removed or replaced. Iteration order
    is insertion order.
    """

    def __init__(self, violations: Iterable[Violation] = ()):
        self._violations: list[Violation] = list(violations)

    def add(self, violation: Violation) -> None:
        self._violations.append(violation)

    def add_all(self, violations: Iterable[Violation]) -> None:
        self._violations.extend(violations)

    def by_path(self, property_path: str) -> list[Violation]:
        """Violations recorded at exactly ``property_path``."""
        return [v for v in self._violations if v.property_path == property_path]

    def to_list(self) -> list[dict[str, Any]]:
        return [v.to_dict() for v in self._violations]

    def __len__(self) -> int:
        return len(self._violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self._violations)

    @overload
    def __getitem__(self, index: int) -> Violation: ...

    @overload
    def __getitem__(self, index: slice) -> list[Violation]: ...

    def __getitem__(self, index):
        return self._violations[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ViolationList):
            return self._violations == other._violations
        if isinstance(other, list):
            return self._violations == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ViolationList({self._violations!r})"

    def __str__(self) -> str:
        return "\n".join(str(v) for v in self._violations)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return repr(value)
