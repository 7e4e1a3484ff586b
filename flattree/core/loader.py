"""Loading and validation of flat record collections.

The loader turns caller records into an immutable IndexState. Every
check runs before the state exists, so a rejected collection can never
be observed by readers of a TreeIndex.

Checks, in order:
    1. required extractors are present
    2. the collection is not empty
    3. per record: integer, positive, unique id; integer, non-negative parent id
    4. every non-zero parent id resolves to a record
    5. no parent chain revisits a node
"""

import functools
import logging
from dataclasses import dataclass
from numbers import Integral
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Set, Tuple

from ..config import LoadOptions
from ..exceptions import (
    CircularReferenceError,
    ConfigurationError,
    DanglingParentError,
    DuplicateIDError,
    FormatError,
)
from .node import Node


logger = logging.getLogger(__name__)

ROOT_ID = 0

_EXTRACTOR_ERRORS = (AttributeError, KeyError, IndexError, TypeError, ValueError)


@dataclass(frozen=True)
class IndexState:
    """Immutable snapshot swapped into a TreeIndex by a successful load.

    Attributes:
        nodes: Identity to node map
        children: Parent identity to ordered children
        ordered_ids: All identities in ascending order
        input_ids: All identities in input order
    """

    nodes: Mapping[int, Node]
    children: Mapping[int, Tuple[Node, ...]]
    ordered_ids: Tuple[int, ...]
    input_ids: Tuple[int, ...]

    @classmethod
    def empty(cls) -> 'IndexState':
        return cls(nodes={}, children={}, ordered_ids=(), input_ids=())

    def __len__(self) -> int:
        return len(self.nodes)

    def children_of(self, parent_id: int) -> Tuple[Node, ...]:
        return self.children.get(parent_id, ())


def check_options(options: LoadOptions) -> None:
    """Raise ConfigurationError if the options cannot drive a load.

    Args:
        options: Load options to check

    Raises:
        ConfigurationError: With the first validation message
    """
    errors = options.validate()
    if errors:
        raise ConfigurationError(errors[0])


def sibling_key(options: LoadOptions) -> Callable[[Node], Any]:
    """Build the key function used to order siblings.

    Args:
        options: Load options carrying sort_key or compare

    Returns:
        Key function over nodes (ascending id by default)
    """
    if options.compare is not None:
        compare = options.compare
        return functools.cmp_to_key(lambda a, b: compare(a.data, b.data))
    if options.sort_key is not None:
        sort_key = options.sort_key
        return lambda node: sort_key(node.data)
    return attrgetter('id')


def _extract(func: Callable[[Any], Any], record: Any, position: int, what: str) -> Any:
    try:
        return func(record)
    except _EXTRACTOR_ERRORS as exc:
        raise FormatError(
            f"invalid data: item {position}: cannot extract {what}: {exc}",
            position=position,
        ) from exc


def _is_integer(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def validate_records(records: List[Any], options: LoadOptions) -> List[Node]:
    """Validate records and wrap them in nodes.

    Args:
        records: Caller records in input order
        options: Load options with both extractors set

    Returns:
        Nodes in input order

    Raises:
        FormatError: Empty input, non-integer or out-of-range identities
        DuplicateIDError: An id seen twice
        DanglingParentError: A parent id with no matching record
        CircularReferenceError: A parent chain that loops
    """
    if not records:
        raise FormatError("invalid data: empty data")

    nodes: List[Node] = []
    seen: Set[int] = set()

    for position, record in enumerate(records):
        node_id = _extract(options.id_func, record, position, "ID")
        if not _is_integer(node_id):
            raise FormatError(
                f"invalid data: item {position}: ID must be an integer",
                position=position,
            )
        node_id = int(node_id)
        if node_id <= 0:
            raise FormatError(
                f"invalid data: item {position}: ID must be positive",
                position=position,
            )
        if node_id in seen:
            raise DuplicateIDError(
                f"invalid data: duplicate node ID: {node_id}", node_id=node_id
            )
        seen.add(node_id)

        parent_id = _extract(options.parent_id_func, record, position, "parent ID")
        if not _is_integer(parent_id):
            raise FormatError(
                f"invalid data: item {position}: parent ID must be an integer",
                position=position,
            )
        parent_id = int(parent_id)
        if parent_id < 0:
            raise FormatError(
                f"invalid data: item {position}: parent ID cannot be negative",
                position=position,
            )

        nodes.append(Node(id=node_id, parent_id=parent_id, data=record))

    _check_parents(nodes, seen)
    _check_cycles(nodes)
    return nodes


def _check_parents(nodes: List[Node], ids: Set[int]) -> None:
    for node in nodes:
        if node.parent_id != ROOT_ID and node.parent_id not in ids:
            raise DanglingParentError(
                f"invalid parent ID {node.parent_id} for node {node.id}",
                node_id=node.id,
                parent_id=node.parent_id,
            )


def _check_cycles(nodes: List[Node]) -> None:
    """Walk every parent chain upward, iteratively.

    Nodes already proven to reach a root are remembered, so each node
    is walked at most once across the whole check.
    """
    by_id = {node.id: node for node in nodes}
    reaches_root: Set[int] = set()

    for node in nodes:
        if node.id in reaches_root:
            continue

        chain: Set[int] = set()
        current = node
        while True:
            if current.id in chain:
                raise CircularReferenceError(
                    f"circular reference detected at node {current.id}",
                    node_id=current.id,
                )
            chain.add(current.id)
            if current.parent_id == ROOT_ID or current.parent_id in reaches_root:
                break
            current = by_id[current.parent_id]

        reaches_root.update(chain)


def group_children(nodes: Iterable[Node]) -> Dict[int, List[Node]]:
    """Group nodes by parent id, keeping input order within each group."""
    groups: Dict[int, List[Node]] = {}
    for node in nodes:
        groups.setdefault(node.parent_id, []).append(node)
    return groups


def sort_siblings(
    parent_id: int,
    siblings: Iterable[Node],
    key: Callable[[Node], Any],
) -> Tuple[Node, ...]:
    """Sort one sibling group.

    Sorting is stable, so siblings comparing equal keep input order.

    Raises:
        ConfigurationError: The sort key or comparator failed on a payload
    """
    try:
        return tuple(sorted(siblings, key=key))
    except _EXTRACTOR_ERRORS as exc:
        raise ConfigurationError(
            f"cannot order children of node {parent_id}: {exc}"
        ) from exc


def order_children(
    groups: Mapping[int, List[Node]],
    key: Callable[[Node], Any],
) -> Dict[int, Tuple[Node, ...]]:
    """Sort every sibling group with the same key."""
    return {
        parent_id: sort_siblings(parent_id, siblings, key)
        for parent_id, siblings in groups.items()
    }


def build_state(
    records: Iterable[Any],
    options: LoadOptions,
    sort: bool = True,
) -> IndexState:
    """Validate records and build a complete index state.

    Args:
        records: Caller records (any iterable; consumed once)
        options: Load options
        sort: If False, children keep input order (used by lazy indexes
            that sort per parent on first access)

    Returns:
        IndexState ready to be swapped in

    Raises:
        ConfigurationError: Missing or conflicting options
        FormatError, IntegrityError: Invalid records
    """
    check_options(options)
    nodes = validate_records(list(records), options)

    groups = group_children(nodes)
    if sort:
        children = order_children(groups, sibling_key(options))
    else:
        children = {pid: tuple(siblings) for pid, siblings in groups.items()}

    by_id = {node.id: node for node in nodes}
    return IndexState(
        nodes=by_id,
        children=children,
        ordered_ids=tuple(sorted(by_id)),
        input_ids=tuple(node.id for node in nodes),
    )


def reorder_state(state: IndexState, options: LoadOptions) -> IndexState:
    """Return a copy of state with every children list re-sorted.

    Args:
        state: Current index state
        options: Options carrying the new sort_key or compare

    Returns:
        New IndexState sharing the node objects of state
    """
    nodes_in_input_order = [state.nodes[node_id] for node_id in state.input_ids]
    groups = group_children(nodes_in_input_order)
    return IndexState(
        nodes=state.nodes,
        children=order_children(groups, sibling_key(options)),
        ordered_ids=state.ordered_ids,
        input_ids=state.input_ids,
    )


def describe_state(state: IndexState) -> Dict[str, int]:
    """Summary counts used in log records."""
    return {
        'nodes': len(state.nodes),
        'roots': len(state.children.get(ROOT_ID, ())),
        'parents': sum(1 for pid in state.children if pid != ROOT_ID),
    }
