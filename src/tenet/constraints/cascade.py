"""Cascade directives.

``Valid`` and ``Traverse`` are never dispatched to a checker. Adding one of
them to metadata sets that metadata's cascade directive instead.
"""

from __future__ import annotations

from tenet.constraints.base import Constraint


class Valid(Constraint):
    """Cascade into the value: validate an object against its own metadata,
    or each object inside a collection."""

    options = {"deep": False}


class Traverse(Constraint):
    """Treat the value as a collection and cascade into its entries."""

    options = {"deep": False}
    default_option = "deep"
