"""Build constraints from plain data and rule files.

A rule is written as a variant name, or as a single-key mapping from the
variant name to its options::

    - NotBlank
    - Length: {min: 3}
    - Choice: [draft, published]
    - Collection:
        fields:
          title: [NotBlank, {Length: {max: 80}}]
          tags: {Optional: {All: [NotBlank]}}
        allowExtraFields: true

Nested rules inside ``Collection``, ``All``, ``Required`` and ``Optional``
are parsed the same way.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from tenet.constraints.base import Composite, Constraint, constraint_type
from tenet.core.errors import InvalidRuleConfigurationError

logger = logging.getLogger(__name__)


def load_constraints(data: Any) -> list[Constraint]:
    """Build a list of constraints from a rule or a list of rules."""
    if data is None:
        return []
    if isinstance(data, list):
        return [load_constraint(item) for item in data]
    return [load_constraint(data)]


def load_constraint(data: Any) -> Constraint:
    """Build a single constraint from its plain-data form."""
    if isinstance(data, Constraint):
        return data
    if isinstance(data, str):
        return constraint_type(data)()
    if isinstance(data, Mapping) and len(data) == 1:
        ((name, options),) = data.items()
        cls = constraint_type(name)
        if issubclass(cls, Composite):
            options = _load_composite_options(cls, options)
        if options is None:
            return cls()
        return cls(options)
    raise InvalidRuleConfigurationError(
        f"Cannot build a constraint from {data!r}: expected a name or a single-key mapping"
    )


def _load_composite_options(cls: type[Composite], options: Any) -> Any:
    if cls.is_option_mapping(options):
        loaded = dict(options)
        for key, value in options.items():
            if _matches(key, cls.composite_option):
                loaded[key] = _load_nested(value)
        return loaded
    return _load_nested(options)


def _load_nested(value: Any) -> Any:
    """Nested rules: a rule list, or a mapping of field names to rule lists."""
    if value is None:
        return []
    if isinstance(value, Mapping) and not _is_rule_mapping(value):
        return {field: _load_field(entry) for field, entry in value.items()}
    return load_constraints(value)


def _load_field(entry: Any) -> Any:
    if isinstance(entry, Mapping) and len(entry) == 1 and next(iter(entry)) in ("Required", "Optional"):
        return load_constraint(entry)
    return load_constraints(entry)


def _is_rule_mapping(value: Mapping) -> bool:
    if len(value) != 1:
        return False
    (name,) = value
    try:
        constraint_type(name)
    except InvalidRuleConfigurationError:
        return False
    return True


def _matches(key: str, option: str) -> bool:
    return key == option or key.replace("_", "").lower() == option.replace("_", "").lower()


def load_rules_file(path: str | Path) -> list[Constraint]:
    """Read rules from a YAML or JSON file.

    The file holds either a list of rules or a mapping with a
    ``constraints`` key.
    """
    path = Path(path)
    text = path.read_text()
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidRuleConfigurationError(f"Cannot parse rules file {path}: {e}") from e

    if isinstance(data, Mapping) and "constraints" in data:
        data = data["constraints"]
    constraints = load_constraints(data)
    logger.debug("Loaded %d rule(s) from %s", len(constraints), path)
    return constraints


def load_data_file(path: str | Path) -> Any:
    """Read the data to validate from a YAML or JSON file.

    Raises ``ValueError`` when the file cannot be parsed.
    """
    path = Path(path)
    text = path.read_text()
    try:
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot parse data file {path}: {e}") from e
