"""Tenet - declarative constraint validation for Python values and objects.

Usage:
    from tenet import Validator
    from tenet.constraints import Collection, Length, NotBlank, Optional

    rules = Collection({
        "title": [NotBlank(), Length(max=80)],
        "summary": Optional(Length(min=10)),
    })
    violations = Validator().validate({"title": ""}, rules)
    for violation in violations:
        print(violation.property_path, violation.message)
"""

from tenet.context import ExecutionContext
from tenet.groups import DEFAULT_GROUP, GroupSequence
from tenet.mapping import ClassMetadata, MetadataFactory
from tenet.validator import Validator, validate
from tenet.violations import Violation, ViolationList

__all__ = [
    "DEFAULT_GROUP",
    "ClassMetadata",
    "ExecutionContext",
    "GroupSequence",
    "MetadataFactory",
    "Validator",
    "Violation",
    "ViolationList",
    "validate",
]

__version__ = "0.1.0"
