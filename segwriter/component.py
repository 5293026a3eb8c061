"""
Typed, namespace-scoped property extraction.

A configuration source is a flat mapping of full dotted keys
("<namespace>.<property>") to raw values. Values read from `.properties` files or
the environment are strings; values read from YAML/JSON may already be ints.
`ComponentProperties` reads one component's slice of such a source and parses each
value to the type the caller asks for.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, List, Mapping

from .errors import InvalidPropertyValueError, MissingPropertyError

__all__ = [
    "SEPARATOR",
    "INT32_MIN",
    "INT32_MAX",
    "INT64_MIN",
    "INT64_MAX",
    "MISSING",
    "ComponentProperties",
    "full_key",
]

SEPARATOR = "."

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def full_key(namespace: str, name: str) -> str:
    return f"{namespace}{SEPARATOR}{name}"


def _parse_int(key: str, raw: Any, lo: int, hi: int, expected: str) -> int:
    # bool is an int subclass; "true" is never a valid count
    if isinstance(raw, bool):
        raise InvalidPropertyValueError(key, raw, expected)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        s = raw.strip()
        # int() would also accept "1_000" and non-ASCII digits
        digits = s[1:] if s[:1] in ("+", "-") else s
        if not digits or not (digits.isascii() and digits.isdigit()):
            raise InvalidPropertyValueError(key, raw, expected)
        value = int(s)
    else:
        raise InvalidPropertyValueError(key, raw, expected)
    if not (lo <= value <= hi):
        raise InvalidPropertyValueError(key, raw, expected)
    return value


class ComponentProperties:
    """Read-only view over the properties of one component namespace."""

    def __init__(self, source: Mapping[str, Any], namespace: str):
        if source is None:
            raise TypeError("source must be a mapping, not None")
        if not isinstance(namespace, str) or not namespace.strip():
            raise ValueError("namespace must be a non-empty string")
        self._source = source
        self.namespace = namespace
        self._prefix = namespace + SEPARATOR

    def full_key(self, name: str) -> str:
        return full_key(self.namespace, name)

    def keys(self) -> List[str]:
        """Property names (without the namespace prefix) present in the source, sorted."""
        out = []
        for k in self._source:
            if isinstance(k, str) and k.startswith(self._prefix) and len(k) > len(self._prefix):
                out.append(k[len(self._prefix):])
        return sorted(out)

    def raw(self, name: str) -> Any:
        """Raw value for `name`, or MISSING. A None value (YAML null) counts as absent."""
        v = self._source.get(self.full_key(name), None)
        return MISSING if v is None else v

    def has(self, name: str) -> bool:
        return self.raw(name) is not MISSING

    def get(self, name: str, default: Any = MISSING) -> str:
        v = self.raw(name)
        if v is MISSING:
            if default is MISSING:
                raise MissingPropertyError(self.full_key(name))
            return default
        return str(v)

    def get_int32(self, name: str, default: Any = MISSING) -> int:
        v = self.raw(name)
        if v is MISSING:
            if default is MISSING:
                raise MissingPropertyError(self.full_key(name))
            return default
        return _parse_int(self.full_key(name), v, INT32_MIN, INT32_MAX, "a 32-bit integer")

    def get_int64(self, name: str, default: Any = MISSING) -> int:
        v = self.raw(name)
        if v is MISSING:
            if default is MISSING:
                raise MissingPropertyError(self.full_key(name))
            return default
        return _parse_int(self.full_key(name), v, INT64_MIN, INT64_MAX, "a 64-bit integer")

    def get_bool(self, name: str, default: Any = MISSING) -> bool:
        v = self.raw(name)
        if v is MISSING:
            if default is MISSING:
                raise MissingPropertyError(self.full_key(name))
            return default
        if isinstance(v, bool):
            return v
        s = str(v).strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
        raise InvalidPropertyValueError(self.full_key(name), v, "a boolean")

    def get_millis(self, name: str, default: Any = MISSING) -> timedelta:
        """Read a 64-bit millisecond count as a timedelta.

        `default` is a millisecond count, not a timedelta.
        """
        ms = self.get_int64(name, default)
        try:
            return timedelta(milliseconds=ms)
        except OverflowError:
            raise InvalidPropertyValueError(
                self.full_key(name), self.raw(name), "a millisecond count within the duration range"
            ) from None
