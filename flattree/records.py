"""Loading generic keyed records by field name.

For records that are plain dicts (rows from a database driver, parsed
JSON) or simple objects, naming the fields is shorter than writing
extractor functions::

    index = load_records(rows, id_field="id", parent_field="pid",
                         sort_field="name")

Field lookup works on mappings (by key) and objects (by attribute).
"""

from typing import Any, Callable, Iterable, Optional, Tuple

from .core.fields import MISSING, read_field
from .core.index import TreeIndex


def field_getter(name: str, default: Any = MISSING) -> Callable[[Any], Any]:
    """Build an accessor that reads a named field.

    Args:
        name: Key or attribute name
        default: Returned for records lacking the field; if not given the
            lookup error propagates (and is reported by the loader)

    Returns:
        Function of one record
    """
    def getter(record: Any) -> Any:
        return read_field(record, name, default)

    getter.__name__ = f"field_{name}"
    return getter


def field_sort_key(name: str) -> Callable[[Any], Tuple[bool, Any]]:
    """Sort key over a named field that tolerates missing fields.

    Records without the field sort before records that have it.
    """
    absent = object()

    def key(record: Any) -> Tuple[bool, Any]:
        value = read_field(record, name, absent)
        if value is absent:
            return (False, 0)
        return (True, value)

    key.__name__ = f"sort_by_{name}"
    return key


def load_records(
    records: Iterable[Any],
    id_field: str = "id",
    parent_field: str = "parent_id",
    sort_field: Optional[str] = None,
    index: Optional[TreeIndex] = None,
) -> TreeIndex:
    """Load keyed records into a TreeIndex.

    Args:
        records: Mappings or objects carrying the named fields
        id_field: Field holding the record's identity
        parent_field: Field holding the parent identity (0 for roots)
        sort_field: Optional field to order siblings by (ascending id
            otherwise)
        index: Existing index to reload; a new TreeIndex if None

    Returns:
        The loaded index

    Raises:
        FormatError: A record lacks id_field or parent_field, or holds
            invalid values there
        IntegrityError: Duplicate id, dangling parent or cycle
    """
    if index is None:
        index = TreeIndex()

    index.load(
        records,
        id_func=field_getter(id_field),
        parent_id_func=field_getter(parent_field),
        sort_key=field_sort_key(sort_field) if sort_field else None,
    )
    return index
