"""Unit tests for building constraints from plain data and rule files."""

from __future__ import annotations

import json
import textwrap

import pytest

from tenet.constraints import All, Choice, Collection, Length, NotBlank, Optional, Required
from tenet.core.errors import InvalidRuleConfigurationError
from tenet.loader import load_constraint, load_constraints, load_data_file, load_rules_file


class TestLoadConstraint:
    def test_name(self):
        assert isinstance(load_constraint("NotBlank"), NotBlank)

    def test_options_mapping(self):
        c = load_constraint({"Length": {"min": 3, "maxMessage": "too long"}})
        assert isinstance(c, Length)
        assert c.min == 3
        assert c.max_message == "too long"

    def test_default_option(self):
        c = load_constraint({"Choice": ["a", "b"]})
        assert isinstance(c, Choice)
        assert c.choices == ("a", "b")

    def test_null_options(self):
        assert isinstance(load_constraint({"NotBlank": None}), NotBlank)

    def test_groups(self):
        assert load_constraint({"NotBlank": {"groups": ["Strict"]}}).groups == ("Strict",)

    def test_unknown_name(self):
        with pytest.raises(InvalidRuleConfigurationError, match="Unknown constraint"):
            load_constraint("Nope")

    def test_bad_shape(self):
        with pytest.raises(InvalidRuleConfigurationError, match="single-key mapping"):
            load_constraint({"NotBlank": None, "Length": {"min": 1}})

    def test_passes_constraints_through(self):
        c = NotBlank()
        assert load_constraint(c) is c


class TestComposites:
    def test_all(self):
        c = load_constraint({"All": ["NotBlank", {"Length": {"max": 3}}]})
        assert isinstance(c, All)
        assert [n.variant for n in c.constraints] == ["NotBlank", "Length"]

    def test_all_single_rule(self):
        c = load_constraint({"All": "NotBlank"})
        assert [n.variant for n in c.constraints] == ["NotBlank"]

    def test_all_explicit_option(self):
        c = load_constraint({"All": {"constraints": ["NotBlank"], "groups": ["Strict"]}})
        assert c.groups == ("Strict",)
        assert c.constraints[0].groups == ("Strict",)

    def test_collection_fields_shorthand(self):
        c = load_constraint({"Collection": {"title": ["NotBlank"], "tags": {"Optional": {"All": ["NotBlank"]}}}})
        assert isinstance(c, Collection)
        assert [n.variant for n in c.fields["title"]] == ["NotBlank"]
        assert isinstance(c.fields["tags"], Optional)
        assert isinstance(c.fields["tags"].constraints[0], All)

    def test_collection_with_options(self):
        c = load_constraint(
            {
                "Collection": {
                    "fields": {"id": {"Required": "NotBlank"}, "note": None},
                    "allowExtraFields": True,
                }
            }
        )
        assert c.allow_extra_fields is True
        assert isinstance(c.fields["id"], Required)
        assert c.fields["note"] == ()

    def test_field_with_single_rule(self):
        c = load_constraint({"Collection": {"name": {"Length": {"min": 2}}}})
        assert isinstance(c.fields["name"][0], Length)

    def test_nested_collection(self):
        c = load_constraint({"Collection": {"address": {"Collection": {"street": "NotBlank"}}}})
        inner = c.fields["address"][0]
        assert isinstance(inner, Collection)
        assert isinstance(inner.fields["street"][0], NotBlank)


class TestLoadConstraints:
    def test_list(self):
        assert [c.variant for c in load_constraints(["NotNull", "NotBlank"])] == ["NotNull", "NotBlank"]

    def test_single(self):
        assert len(load_constraints("NotBlank")) == 1

    def test_none(self):
        assert load_constraints(None) == []


class TestFiles:
    def test_yaml_rules(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(textwrap.dedent("""\
            constraints:
              - Collection:
                  fields:
                    title: [NotBlank, {Length: {max: 80}}]
                    status: {Choice: [draft, published]}
                  allowMissingFields: true
        """))
        (rule,) = load_rules_file(path)
        assert isinstance(rule, Collection)
        assert rule.allow_missing_fields is True
        assert rule.fields["status"][0].choices == ("draft", "published")

    def test_yaml_top_level_list(self, tmp_path):
        path = tmp_path / "rules.yml"
        path.write_text("- NotBlank\n- Length: {min: 2}\n")
        assert [c.variant for c in load_rules_file(path)] == ["NotBlank", "Length"]

    def test_json_rules(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"constraints": [{"Length": {"min": 1}}]}))
        assert isinstance(load_rules_file(path)[0], Length)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("constraints: [NotBlank\n")
        with pytest.raises(InvalidRuleConfigurationError, match="Cannot parse"):
            load_rules_file(path)

    def test_data_file(self, tmp_path):
        yaml_path = tmp_path / "data.yaml"
        yaml_path.write_text("title: Hello\ntags: [a, b]\n")
        assert load_data_file(yaml_path) == {"title": "Hello", "tags": ["a", "b"]}

        json_path = tmp_path / "data.json"
        json_path.write_text('{"title": "Hello"}')
        assert load_data_file(json_path) == {"title": "Hello"}

    def test_invalid_data_file(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("foo: [unclosed\n")
        with pytest.raises(ValueError, match="Cannot parse data file"):
            load_data_file(path)

        json_path = tmp_path / "data.json"
        json_path.write_text("{")
        with pytest.raises(ValueError, match="Cannot parse data file"):
            load_data_file(json_path)
