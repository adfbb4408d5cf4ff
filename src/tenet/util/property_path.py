"""Property path helpers."""

from __future__ import annotations


def append(base_path: str, sub_path: str) -> str:
    """Append a sub-path to a property path.

    ``append("address", "street")`` gives ``"address.street"``,
    ``append("tags", "[0]")`` gives ``"tags[0]"`` and an empty base yields the
    sub-path unchanged.
    """
    if not sub_path:
        return base_path
    if sub_path.startswith("["):
        return f"{base_path}{sub_path}"
    if not base_path:
        return sub_path
    return f"{base_path}.{sub_path}"


def index(key: object) -> str:
    """Path segment for a collection entry."""
    return f"[{key}]"
