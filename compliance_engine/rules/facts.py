"""
Dotted-path access into a semi-structured fact bag.

Absence is a value (:data:`MISSING`), never an exception.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class _Missing:
    """Sentinel type for a fact path that resolved to nothing."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def get_in(facts: Mapping[str, Any], path: str, default: Any = MISSING) -> Any:
    """Get a nested value using dot-path notation.

    List elements are addressed by decimal index segments.

    Example:
        get_in({"a": {"b": 1}}, "a.b")      # => 1
        get_in({"a": [1, 2, 3]}, "a.1")     # => 2
        get_in({"a": "text"}, "a.0")        # => MISSING

    Args:
        facts: The fact bag
        path: Dotted path
        default: Returned when any segment cannot be resolved

    Returns:
        The value at the path, or ``default``
    """
    current: Any = facts

    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not (key.isascii() and key.isdigit()) or (len(key) > 1 and key[0] == "0"):
                return default
            index = int(key)
            if index >= len(current):
                return default
            current = current[index]
        else:
            return default

    return current


def is_absent(value: Any) -> bool:
    """True for a missing fact or an explicit null."""
    return value is MISSING or value is None
