"""Built-in constraints and their checkers.

Importing this package registers every built-in checker.
"""

from tenet.constraints.base import Composite, Constraint, constraint_type, constraint_types
from tenet.constraints.basic import Blank, Callback, Choice, NotBlank, NotNull, Regex, Type
from tenet.constraints.cascade import Traverse, Valid
from tenet.constraints.collection import All, Collection, Optional, Required
from tenet.constraints.comparison import EqualTo, NotEqualTo, Range
from tenet.constraints.registry import CheckerRegistry, ConstraintChecker, default_registry, register_checker
from tenet.constraints.size import Count, Length

__all__ = [
    "All",
    "Blank",
    "Callback",
    "CheckerRegistry",
    "Choice",
    "Collection",
    "Composite",
    "Constraint",
    "ConstraintChecker",
    "Count",
    "EqualTo",
    "Length",
    "NotBlank",
    "NotEqualTo",
    "NotNull",
    "Optional",
    "Range",
    "Regex",
    "Required",
    "Traverse",
    "Type",
    "Valid",
    "constraint_type",
    "constraint_types",
    "default_registry",
    "register_checker",
]
