"""Tenet error types."""

from __future__ import annotations

from typing import Any


class TenetError(Exception):
    """Base exception for Tenet.

    Errors derived from this class abort a validation run. They are never
    recorded as violations.
    """

    pass


class TypeMismatchError(TenetError, TypeError):
    """A value does not have the shape a rule or cascade directive requires."""

    def __init__(self, value: Any, expected_type: str):
        self.value = value
        self.expected_type = expected_type
        super().__init__(f'Expected argument of type "{expected_type}", "{_type_name(value)}" given')


class InvalidRuleConfigurationError(TenetError, ValueError):
    """A rule's own options are malformed."""

    pass


class UnsupportedOperationError(TenetError):
    """A retired entry point was called."""

    pass


class NoSuchMetadataError(TenetError):
    """Metadata was requested for a value that cannot carry any."""

    pass


class MaxDepthExceededError(TenetError):
    """The traversal went deeper than the configured maximum."""

    def __init__(self, depth: int, property_path: str):
        self.depth = depth
        self.property_path = property_path
        super().__init__(f"Maximum validation depth {depth} exceeded at '{property_path or '<root>'}'")


def _type_name(value: Any) -> str:
    if value is None:
        return "None"
    return type(value).__name__
