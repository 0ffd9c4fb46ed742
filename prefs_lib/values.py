"""Value kinds stored in a preferences store.

A store holds five kinds of values. They are kept as native Python values
in the cache and classified with :meth:`ValueKind.of`; writes go through
:func:`coerce_value` which validates (and where sensible normalizes) the
value for the requested kind.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Optional

from prefs_lib.exceptions import InvalidArgument

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ValueKind(str, Enum):
    """Closed set of value kinds. The values double as wire tags."""

    BOOL = "Bool"
    INT = "Int"
    DOUBLE = "Double"
    STRING = "String"
    STRING_LIST = "StringList"

    @classmethod
    def of(cls, value: Any) -> Optional["ValueKind"]:
        """Return the kind of ``value`` or None if it is not storable."""
        # bool first: bool is a subclass of int
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, float):
            return cls.DOUBLE
        if isinstance(value, str):
            return cls.STRING
        if is_string_sequence(value):
            return cls.STRING_LIST
        return None

    @classmethod
    def parse(cls, name: str) -> "ValueKind":
        """Resolve a wire tag (``"Bool"``) or a lowercase alias (``"bool"``)."""
        for kind in cls:
            if name == kind.value or name.lower() == kind.value.lower():
                return kind
        aliases = {"list": cls.STRING_LIST, "float": cls.DOUBLE, "str": cls.STRING}
        try:
            return aliases[name.lower()]
        except KeyError:
            raise ValueError(f"Unknown value kind: {name!r}") from None


def is_string_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def coerce_value(kind: ValueKind, value: Any) -> Any:
    """Validate ``value`` for ``kind`` and return the form to store.

    Integral numbers are accepted for ``Double`` and stored as float; string
    sequences are copied into a new list. Anything else that does not match
    raises :class:`~prefs_lib.exceptions.InvalidArgument`.
    """
    if value is None:
        raise InvalidArgument("value must not be None")
    if kind is ValueKind.BOOL:
        if isinstance(value, bool):
            return value
    elif kind is ValueKind.INT:
        if isinstance(value, int) and not isinstance(value, bool):
            if not INT64_MIN <= value <= INT64_MAX:
                raise InvalidArgument(f"integer {value} does not fit in 64 bits")
            return value
    elif kind is ValueKind.DOUBLE:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif kind is ValueKind.STRING:
        if isinstance(value, str):
            return value
    elif kind is ValueKind.STRING_LIST:
        if is_string_sequence(value):
            return list(value)
    raise InvalidArgument(f"{type(value).__name__} value is not a valid {kind.value}")


def copy_value(value: Any) -> Any:
    """Copy mutable values so callers never share state with a store."""
    if isinstance(value, list):
        return list(value)
    return value
