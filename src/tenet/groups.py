"""Validation groups and group sequences."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from tenet.core.errors import InvalidRuleConfigurationError

DEFAULT_GROUP = "Default"


@dataclass(frozen=True)
class GroupSequence:
    """Ordered batches of groups, validated one batch at a time.

    When a batch produces at least one violation the remaining batches are
    not evaluated. ``cascaded_group`` overrides the group that cascaded
    objects are validated in; ``None`` means the batch's own groups.
    """

    batches: tuple[tuple[str, ...], ...]
    cascaded_group: str | None = None

    @classmethod
    def of(cls, groups: Iterable[str | Iterable[str]], cascaded_group: str | None = None) -> GroupSequence:
        """Build a sequence; plain strings become single-group batches."""
        batches: list[tuple[str, ...]] = []
        for entry in groups:
            if isinstance(entry, str):
                batches.append((entry,))
            else:
                batch = tuple(entry)
                if not batch:
                    raise InvalidRuleConfigurationError("A group sequence batch must not be empty")
                batches.append(batch)
        if not batches:
            raise InvalidRuleConfigurationError("A group sequence needs at least one batch")
        return cls(batches=tuple(batches), cascaded_group=cascaded_group)

    def replacing_default(self) -> GroupSequence:
        """The same sequence used in place of the ``Default`` group.

        Objects cascaded from a replaced ``Default`` are validated in
        ``Default`` again, so their own sequences apply.
        """
        return GroupSequence(batches=self.batches, cascaded_group=DEFAULT_GROUP)

    def __str__(self) -> str:
        return " > ".join("+".join(batch) for batch in self.batches)


GroupSpec = str | GroupSequence


@dataclass(frozen=True)
class ResolvedGroups:
    """Concrete work for one node.

    ``plain`` groups are evaluated together in a single batch. Each entry of
    ``sequences`` is evaluated afterwards, batch by batch, with short-circuit.
    """

    plain: tuple[str, ...] = ()
    sequences: tuple[GroupSequence, ...] = field(default_factory=tuple)


def normalize_groups(groups: GroupSpec | Iterable[GroupSpec] | None) -> tuple[GroupSpec, ...]:
    """Turn a caller's group argument into a tuple, defaulting to ``Default``."""
    if groups is None:
        return (DEFAULT_GROUP,)
    if isinstance(groups, (str, GroupSequence)):
        return (groups,)
    normalized = tuple(groups)
    return normalized or (DEFAULT_GROUP,)


def resolve_groups(
    requested: Iterable[GroupSpec],
    group_sequence: GroupSequence | None = None,
) -> ResolvedGroups:
    """Expand requested groups for a node whose type declares ``group_sequence``.

    Explicit names form one batch. ``Default`` is replaced by the declaring
    type's sequence when it has one. Explicit ``GroupSequence`` values are
    kept as sequences.
    """
    plain: list[str] = []
    sequences: list[GroupSequence] = []
    for group in requested:
        if isinstance(group, GroupSequence):
            sequences.append(group)
        elif group == DEFAULT_GROUP and group_sequence is not None:
            sequences.append(group_sequence.replacing_default())
        elif group not in plain:
            plain.append(group)
    return ResolvedGroups(plain=tuple(plain), sequences=tuple(sequences))
