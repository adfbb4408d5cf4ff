"""Unit tests for the public Validator entry points."""

from __future__ import annotations

import pytest

import tenet
from tenet.constraints import Length, NotBlank, NotNull, Valid
from tenet.core.errors import NoSuchMetadataError
from tenet.mapping import ClassMetadata
from tenet.validator import Validator


class Address:
    def __init__(self, street=""):
        self.street = street

    @classmethod
    def load_validator_metadata(cls, metadata):
        metadata.add_property_constraint("street", NotBlank())


class Account:
    def __init__(self, name=""):
        self.name = name


class User:
    def __init__(self, name="", email="", address=None):
        self.name = name
        self.email = email
        self.address = address

    def get_initials(self):
        return "".join(part[0] for part in self.name.split())

    @classmethod
    def load_validator_metadata(cls, metadata):
        metadata.add_property_constraints("name", [NotBlank(), Length(max=10)])
        metadata.add_property_constraint("email", NotBlank(groups=["Contact"]))
        metadata.add_getter_constraint("initials", "get_initials", Length(max=2))
        metadata.cascade("address")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_single_constraint(self, validator):
        assert len(validator.validate("", NotBlank())) == 1

    def test_constraint_list(self, validator):
        violations = validator.validate("", [NotNull(), NotBlank()])
        assert [v.message for v in violations] == ["This value should not be blank."]

    def test_root_path_is_empty(self, validator):
        assert validator.validate("", NotBlank())[0].property_path == ""

    def test_groups(self, validator):
        strict = NotBlank(groups=["Strict"])
        assert validator.validate("", strict) == []
        assert len(validator.validate("", strict, groups="Strict")) == 1
        assert len(validator.validate("", strict, groups=["Default", "Strict"])) == 1

    def test_object_without_constraints(self, validator):
        violations = validator.validate(User(name="ann", address=Address("")))
        assert [v.property_path for v in violations] == ["address.street"]

    def test_collection_without_constraints(self, validator):
        violations = validator.validate([User(name="ann"), User(name="")])
        assert [v.property_path for v in violations] == ["[1].name"]

    def test_scalar_without_constraints(self, validator):
        assert validator.validate("anything") == []

    def test_valid_on_bare_value(self, validator):
        violations = validator.validate(Address(""), [NotNull(), Valid()])
        assert [v.property_path for v in violations] == ["street"]

    def test_violation_root(self, validator):
        user = User()
        assert all(v.root is user for v in validator.validate_object(user))

    def test_module_helper(self):
        assert len(tenet.validate("", NotBlank())) == 1


# ---------------------------------------------------------------------------
# validate_object / validate_collection
# ---------------------------------------------------------------------------


class TestValidateObject:
    def test_properties_in_order(self, validator):
        violations = validator.validate_object(User(name="", address=Address("")))
        assert [v.property_path for v in violations] == ["name", "address.street"]

    def test_getter(self, validator):
        violations = validator.validate_object(User(name="Ann Marie Lee"))
        paths = [v.property_path for v in violations]
        assert "initials" in paths
        assert "name" in paths

    def test_group(self, validator):
        violations = validator.validate_object(User(name="ann"), groups="Contact")
        assert [v.property_path for v in violations] == ["email"]

    def test_class_group(self, validator):
        violations = validator.validate_object(User(name=""), groups="User")
        assert [v.property_path for v in violations] == ["name"]

    def test_non_object(self, validator):
        with pytest.raises(NoSuchMetadataError):
            validator.validate_object({"name": ""})

    def test_metadata_accessors(self, validator):
        assert validator.has_metadata_for(User)
        assert not validator.has_metadata_for(3)
        assert set(validator.get_metadata_for(User).properties) == {"name", "email", "initials", "address"}


class TestValidateCollection:
    def test_objects(self, validator):
        violations = validator.validate_collection({"a": Address(""), "b": Address("x")})
        assert [v.property_path for v in violations] == ["[a].street"]

    def test_groups(self, validator):
        violations = validator.validate_collection([User(name="ann")], groups="Contact")
        assert [v.property_path for v in violations] == ["[0].email"]


# ---------------------------------------------------------------------------
# validate_property / validate_property_value
# ---------------------------------------------------------------------------


class TestValidateProperty:
    def test_only_that_property(self, validator):
        user = User(name="", email="", address=Address(""))
        violations = validator.validate_property(user, "name")
        assert [v.property_path for v in violations] == ["name"]

    def test_cascades_from_property(self, validator):
        violations = validator.validate_property(User(address=Address("")), "address")
        assert [v.property_path for v in violations] == ["address.street"]

    def test_group(self, validator):
        user = User(name="", email="")
        assert validator.validate_property(user, "email") == []
        assert len(validator.validate_property(user, "email", groups="Contact")) == 1

    def test_unknown_property(self, validator):
        assert validator.validate_property(User(), "nope") == []

    def test_root_path_setting(self, factory):
        from tenet.config import Settings
        from tenet.validator import Validator

        validator = Validator(factory, settings=Settings(_env_file=None, root_path="user"))
        assert [v.property_path for v in validator.validate_property(User(), "name")] == ["user.name"]


class TestValidatePropertyValue:
    def test_candidate_value(self, validator):
        user = User(name="ann")
        violations = validator.validate_property_value(user, "name", "")
        assert [v.property_path for v in violations] == ["name"]
        assert violations[0].invalid_value == ""
        assert user.name == "ann"

    def test_class_instead_of_instance(self, validator):
        assert validator.validate_property_value(User, "name", "ok") == []
        assert len(validator.validate_property_value(User, "name", "far too long a name")) == 1

    def test_root_is_object(self, validator):
        user = User()
        violations = validator.validate_property_value(user, "name", "")
        assert violations[0].root is user



class TestPropertyGroupSequence:
    @pytest.fixture
    def account_validator(self, factory, settings):
        metadata = ClassMetadata(Account)
        metadata.add_property_constraint("name", NotBlank())
        metadata.add_property_constraint("name", Length(min=10, groups=["Strict"]))
        metadata.set_group_sequence(["Account", "Strict"])
        factory.register(metadata)
        return Validator(factory, settings=settings)

    def test_matches_validate_object(self, account_validator):
        account = Account("abc")
        by_object = account_validator.validate_object(account)
        by_property = account_validator.validate_property(account, "name")
        assert [v.code for v in by_object] == [Length.TOO_SHORT_ERROR]
        assert [v.code for v in by_property] == [Length.TOO_SHORT_ERROR]

    def test_first_failing_batch_stops(self, account_validator):
        violations = account_validator.validate_property_value(Account, "name", "")
        assert [v.code for v in violations] == [NotBlank.IS_BLANK_ERROR]

    def test_explicit_group_bypasses_sequence(self, account_validator):
        violations = account_validator.validate_property_value(Account, "name", "", groups="Strict")
        assert violations == []
