"""Named-field access on generic records.

Records may be mappings (looked up by key) or plain objects, dataclasses
and named tuples (looked up by attribute).
"""

from collections.abc import Mapping
from typing import Any


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def read_field(record: Any, name: str, default: Any = MISSING) -> Any:
    """Read a named field from a record.

    Args:
        record: Mapping or object
        name: Key or attribute name
        default: Returned when the field is absent; if not given the
            lookup error propagates

    Returns:
        The field value

    Raises:
        KeyError: Field absent from a mapping and no default
        AttributeError: Field absent from an object and no default
    """
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        if default is MISSING:
            raise KeyError(name)
        return default

    if default is MISSING:
        return getattr(record, name)
    return getattr(record, name, default)


def has_field(record: Any, name: str) -> bool:
    """True if the record carries the named field."""
    sentinel = object()
    return read_field(record, name, sentinel) is not sentinel
