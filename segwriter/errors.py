from __future__ import annotations

"""Typed error taxonomy (public).

Only `segwriter` and `segwriter.errors` are public import roots. Everything else is internal.
This module exposes the operator-facing error classes and a small helper `format_error`.
"""

from typing import Any, Iterable, Tuple

__all__ = [
    "SegwriterError",
    "ConfigError",
    "MissingPropertyError",
    "InvalidPropertyValueError",
    "ConstraintViolationError",
    "CLIError",
    "format_error",
]


class SegwriterError(Exception):
    """Base class for all typed, operator-facing errors in segwriter."""
    pass


class ConfigError(SegwriterError):
    """Configuration unreadable or invalid. Fatal to startup of the owning component."""
    pass


class MissingPropertyError(ConfigError):
    """A property required without a default is absent from the source."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Property '{key}' is required but was not found.")


class InvalidPropertyValueError(ConfigError):
    """A present property value cannot be parsed as its required type."""

    def __init__(self, key: str, value: Any, expected: str = ""):
        self.key = key
        self.value = value
        detail = f" (expected {expected})" if expected else ""
        super().__init__(f"Property '{key}' has an invalid value {value!r}{detail}.")


class ConstraintViolationError(ConfigError):
    """A resolved value, or a relation between two of them, breaks an invariant.

    `properties` holds the full keys of the offending properties, in the order they
    appear in the message.
    """

    def __init__(self, message: str, properties: Iterable[str] = ()):
        self.properties: Tuple[str, ...] = tuple(properties)
        super().__init__(message)


class CLIError(SegwriterError):
    """Generic CLI failure wrapper for unexpected errors in CLI code paths."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform operator-facing message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
