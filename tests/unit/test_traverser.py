"""Unit tests for traversal: cascading, cycle protection, group sequences and depth."""

from __future__ import annotations

import pytest

from tenet.config import Settings
from tenet.constraints import All, Callback, Length, NotBlank, NotNull
from tenet.core.errors import MaxDepthExceededError, TypeMismatchError
from tenet.groups import GroupSequence
from tenet.mapping import ClassMetadata, MetadataFactory
from tenet.validator import Validator


def _paths(violations):
    return [v.property_path for v in violations]


def _counting_callback(calls, message=None, **kwargs):
    def check(value, context):
        calls.append(id(value))
        if message:
            context.add_violation(message)

    return Callback(check, **kwargs)


class Node:
    def __init__(self, name="", child=None):
        self.name = name
        self.child = child


@pytest.fixture
def node_factory():
    """Factory for Node: name NotBlank, child cascaded."""
    metadata = ClassMetadata(Node)
    metadata.add_property_constraint("name", NotBlank())
    metadata.cascade("child")
    return MetadataFactory([metadata])


@pytest.fixture
def node_validator(node_factory, settings):
    return Validator(metadata_factory=node_factory, settings=settings)


# ---------------------------------------------------------------------------
# Cascading
# ---------------------------------------------------------------------------


class TestCascade:
    def test_object_chain(self, node_validator):
        root = Node("", Node("ok", Node("")))
        assert _paths(node_validator.validate_object(root)) == ["name", "child.child.name"]

    def test_none_not_cascaded(self, node_validator):
        assert node_validator.validate_object(Node("ok", None)) == []

    def test_depth_first_order(self, settings):
        class Root:
            def __init__(self):
                self.first = Node("")
                self.second = ""

        metadata = ClassMetadata(Root).cascade("first").add_property_constraint("second", NotBlank())
        node_meta = ClassMetadata(Node).add_property_constraint("name", NotBlank())
        validator = Validator(MetadataFactory([metadata, node_meta]), settings=settings)

        assert _paths(validator.validate_object(Root())) == ["first.name", "second"]

    def test_class_constraints_before_properties(self, node_factory, settings):
        calls = []
        node_factory.get_metadata_for(Node).add_constraint(_counting_callback(calls, "object"))
        validator = Validator(node_factory, settings=settings)

        violations = validator.validate_object(Node(""))
        assert [(v.property_path, v.message) for v in violations] == [
            ("", "object"),
            ("name", "This value should not be blank."),
        ]

    def test_collection_of_objects(self, node_validator):
        class Holder:
            def __init__(self, items):
                self.items = items

        node_validator.metadata_factory.register(ClassMetadata(Holder).cascade("items"))
        violations = node_validator.validate_object(Holder([Node("a"), Node(""), "skip-me", None]))
        assert _paths(violations) == ["items[1].name"]

    def test_keyed_collection(self, node_validator):
        violations = node_validator.validate({"x": Node(""), "y": Node("ok")})
        assert _paths(violations) == ["[x].name"]

    def test_nested_collections_need_deep(self, node_factory, settings):
        class Grid:
            def __init__(self, rows):
                self.rows = rows

        node_factory.register(ClassMetadata(Grid).traverse("rows"))
        validator = Validator(node_factory, settings=settings)
        assert validator.validate_object(Grid([[Node("")]])) == []

        node_factory.register(ClassMetadata(Grid).traverse("rows", deep=True))
        assert _paths(validator.validate_object(Grid([[Node("ok"), Node("")]]))) == ["rows[0][1].name"]

    def test_validate_collection_deep(self, node_validator):
        data = [[Node("")], Node("")]
        assert _paths(node_validator.validate_collection(data)) == ["[1].name"]
        assert _paths(node_validator.validate_collection(data, deep=True)) == ["[0][0].name", "[1].name"]

    def test_traverse_requires_collection(self, node_factory, settings):
        class Holder:
            tags = "not-a-list"

        node_factory.register(ClassMetadata(Holder).traverse("tags"))
        with pytest.raises(TypeMismatchError, match='"collection"'):
            Validator(node_factory, settings=settings).validate_object(Holder())

    def test_valid_requires_object_or_collection(self, node_factory, settings):
        class Holder:
            count = 5

        node_factory.register(ClassMetadata(Holder).cascade("count"))
        with pytest.raises(TypeMismatchError, match="object or collection"):
            Validator(node_factory, settings=settings).validate_object(Holder())

    def test_cascaded_groups(self, settings):
        class Parent:
            def __init__(self, child):
                self.child = child

        node_meta = ClassMetadata(Node).add_property_constraint("name", NotBlank(groups=["Strict"]))
        validator = Validator(MetadataFactory([ClassMetadata(Parent).cascade("child"), node_meta]), settings=settings)

        assert validator.validate_object(Parent(Node(""))) == []
        assert _paths(validator.validate_object(Parent(Node("")), groups="Strict")) == ["child.name"]


# ---------------------------------------------------------------------------
# Cycle and diamond protection
# ---------------------------------------------------------------------------


class TestCycles:
    def test_self_reference_terminates(self, node_validator):
        node = Node("")
        node.child = node
        assert _paths(node_validator.validate_object(node)) == ["name"]

    def test_two_node_cycle(self, node_factory, settings):
        calls = []
        node_factory.get_metadata_for(Node).add_constraint(_counting_callback(calls, "object"))
        validator = Validator(node_factory, settings=settings)

        a = Node("")
        b = Node("", a)
        a.child = b

        violations = validator.validate_object(a)
        assert [(v.property_path, v.message) for v in violations] == [
            ("", "object"),
            ("name", "This value should not be blank."),
            ("child", "object"),
            ("child.name", "This value should not be blank."),
        ]
        assert sorted(calls) == sorted([id(a), id(b)])

    def test_cycle_matches_unrolled_graph(self, node_validator):
        a = Node("")
        b = Node("", a)
        a.child = b
        unrolled = Node("", Node(""))

        cyclic = node_validator.validate_object(a)
        acyclic = node_validator.validate_object(unrolled)
        assert _paths(cyclic) == _paths(acyclic)
        assert [v.message for v in cyclic] == [v.message for v in acyclic]

    def test_diamond(self, settings):
        class Pair:
            def __init__(self, left, right):
                self.left = left
                self.right = right

        calls = []
        node_meta = ClassMetadata(Node).add_property_constraint("name", NotBlank())
        node_meta.add_constraint(_counting_callback(calls, "object"))
        factory = MetadataFactory([ClassMetadata(Pair).cascade("left").cascade("right"), node_meta])

        shared = Node("")
        violations = Validator(factory, settings=settings).validate_object(Pair(shared, shared))

        assert _paths(violations) == ["left", "left.name"]
        assert calls == [id(shared)]

    def test_shared_object_cascaded_once_for_all_groups(self, settings):
        class Pair:
            def __init__(self, left, right):
                self.left = left
                self.right = right

        node_meta = ClassMetadata(Node)
        node_meta.add_property_constraint("name", NotBlank(groups=["A"]))
        node_meta.add_property_constraint("name", Length(min=3, groups=["B"]))
        factory = MetadataFactory([ClassMetadata(Pair).cascade("left").cascade("right"), node_meta])

        shared = Node("x")
        violations = Validator(factory, settings=settings).validate_object(Pair(shared, shared), groups=["A", "B"])
        assert _paths(violations) == ["left.name"]

    def test_independent_runs(self, node_validator):
        node = Node("")
        first = node_validator.validate_object(node)
        second = node_validator.validate_object(node)
        assert first == second
        assert len(first) == 1


# ---------------------------------------------------------------------------
# Group sequences
# ---------------------------------------------------------------------------


class Account:
    def __init__(self, name="", password=""):
        self.name = name
        self.password = password


@pytest.fixture
def strict_calls():
    return []


@pytest.fixture
def account_validator(settings, strict_calls):
    metadata = ClassMetadata(Account)
    metadata.add_property_constraint("name", NotBlank())
    metadata.add_property_constraint("password", Length(min=8, groups=["Strict"]))
    metadata.add_property_constraint("password", _counting_callback(strict_calls, groups=["Strict"]))
    metadata.set_group_sequence(["Account", "Strict"])
    return Validator(MetadataFactory([metadata]), settings=settings)


class TestGroupSequences:
    def test_first_batch_failure_stops_sequence(self, account_validator, strict_calls):
        violations = account_validator.validate_object(Account(name="", password="x"))
        assert _paths(violations) == ["name"]
        assert strict_calls == []

    def test_later_batch_runs_when_earlier_passes(self, account_validator, strict_calls):
        violations = account_validator.validate_object(Account(name="ann", password="x"))
        assert _paths(violations) == ["password"]
        assert len(strict_calls) == 1

    def test_explicit_group_bypasses_sequence(self, account_validator):
        violations = account_validator.validate_object(Account(name="", password="x"), groups="Strict")
        assert _paths(violations) == ["password"]

    def test_class_name_group(self, account_validator):
        violations = account_validator.validate_object(Account(name="", password="x"), groups="Account")
        assert _paths(violations) == ["name"]

    def test_explicit_sequence(self, node_validator):
        seq = GroupSequence.of(["Default", "Strict"])
        assert _paths(node_validator.validate_object(Node(""), groups=seq)) == ["name"]

    def test_sequence_on_bare_value(self, validator):
        calls = []
        rules = [NotBlank(groups=["First"]), _counting_callback(calls, groups=["Second"])]

        assert len(validator.validate("", rules, groups=GroupSequence.of(["First", "Second"]))) == 1
        assert calls == []
        assert validator.validate("x", rules, groups=GroupSequence.of(["First", "Second"])) == []
        assert len(calls) == 1

    def test_batch_groups_evaluated_together(self, validator):
        rules = [NotBlank(groups=["A"]), NotNull(groups=["B"]), Length(min=3, groups=["C"])]
        seq = GroupSequence.of([["A", "B"], "C"])
        assert len(validator.validate("", rules, groups=seq)) == 1
        assert len(validator.validate(None, rules, groups=seq)) == 2

    def test_sequence_cascades_in_default(self, settings):
        class Team:
            def __init__(self, lead):
                self.lead = lead
                self.title = ""

        team_meta = ClassMetadata(Team).cascade("lead")
        team_meta.add_property_constraint("title", NotBlank(groups=["Strict"]))
        team_meta.set_group_sequence(["Team", "Strict"])
        node_meta = ClassMetadata(Node).add_property_constraint("name", NotBlank())
        validator = Validator(MetadataFactory([team_meta, node_meta]), settings=settings)

        assert _paths(validator.validate_object(Team(Node("")))) == ["lead.name"]
        assert _paths(validator.validate_object(Team(Node("ok")))) == ["title"]


# ---------------------------------------------------------------------------
# Depth guard
# ---------------------------------------------------------------------------


def _chain(length):
    head = Node("ok")
    current = head
    for _ in range(length - 1):
        current.child = Node("ok")
        current = current.child
    return head


class TestDepth:
    def test_max_depth_exceeded(self, node_factory):
        validator = Validator(node_factory, settings=Settings(_env_file=None, max_depth=5))
        with pytest.raises(MaxDepthExceededError) as exc_info:
            validator.validate_object(_chain(10))
        assert exc_info.value.depth == 5
        assert exc_info.value.property_path.startswith("child.child")

    def test_within_limit(self, node_factory):
        validator = Validator(node_factory, settings=Settings(_env_file=None, max_depth=5))
        assert validator.validate_object(_chain(2)) == []

    def test_sub_validation_counts_towards_depth(self, validator):
        rule = All(All(All(NotBlank())))
        shallow = Validator(validator.metadata_factory, settings=Settings(_env_file=None, max_depth=2))
        with pytest.raises(MaxDepthExceededError):
            shallow.validate([[[""]]], rule)

    @pytest.mark.slow
    def test_long_chain_does_not_recurse(self, node_factory):
        validator = Validator(node_factory, settings=Settings(_env_file=None, max_depth=20_000))
        assert validator.validate_object(_chain(3_000)) == []

    def test_nested_rules_just_under_default_limit(self):
        settings = Settings(_env_file=None)
        levels = settings.max_depth - 1
        rule, value = NotBlank(), ""
        for _ in range(levels):
            rule, value = All(rule), [value]

        violations = Validator(settings=settings).validate(value, rule)
        assert _paths(violations) == ["[0]" * levels]

    @pytest.mark.slow
    def test_stack_exhaustion_raises_depth_error(self):
        rule, value = NotBlank(), ""
        for _ in range(5_000):
            rule, value = All(rule), [value]

        validator = Validator(settings=Settings(_env_file=None, max_depth=100_000))
        with pytest.raises(MaxDepthExceededError):
            validator.validate(value, rule)
