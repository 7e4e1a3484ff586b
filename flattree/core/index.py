"""The TreeIndex: a validated, concurrently readable hierarchy.

A TreeIndex owns one immutable IndexState at a time. Loading builds and
validates a complete new state first and only then swaps it in under
the write lock, so readers see either the whole old tree or the whole
new one, and a rejected load leaves the previous tree untouched.

Example:
    >>> index = TreeIndex()
    >>> index.load(categories,
    ...            id_func=lambda c: c['id'],
    ...            parent_id_func=lambda c: c['parent_id'])
    >>> index.get_children_ids(1)
    [2, 3]
    >>> print(index.render_tree(1))
    Root
     ├ Child 1
     └ Child 2
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..config import FormatOptions, LoadOptions, TraversalStrategy
from ..exceptions import ConfigurationError, TreeIndexError
from . import formatter, materializer, traversal
from .adapter import IndexAdapter
from .formatter import FormattedNode
from .loader import ROOT_ID, IndexState, build_state, check_options, describe_state, reorder_state
from .lock import ReadWriteLock
from .node import Node
from .traverser import create_traverser


logger = logging.getLogger(__name__)


class TreeIndex:
    """In-memory index over records with integer identity and parent identity.

    Lookups for unknown ids never raise; they return None, 0 or an empty
    sequence as documented per method. All methods are thread-safe.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        # Serializes load/resort/clear; readers never wait on it
        self._load_mutex = threading.Lock()
        self._state = IndexState.empty()
        self._options = LoadOptions()

    @classmethod
    def from_records(cls, records: Iterable[Any], **load_kwargs: Any) -> 'TreeIndex':
        """Create an index and load records into it.

        Args:
            records: Caller records
            **load_kwargs: Arguments accepted by load()

        Returns:
            Loaded index
        """
        index = cls()
        index.load(records, **load_kwargs)
        return index

    # ==================== Loading ====================

    def load(
        self,
        records: Iterable[Any],
        id_func: Optional[Callable[[Any], int]] = None,
        parent_id_func: Optional[Callable[[Any], int]] = None,
        sort_key: Optional[Callable[[Any], Any]] = None,
        compare: Optional[Callable[[Any, Any], int]] = None,
        options: Optional[LoadOptions] = None,
    ) -> None:
        """Replace the whole index with records.

        Args:
            records: Caller records, in input order
            id_func: Extracts the positive identity of a record
            parent_id_func: Extracts the parent identity (0 for roots)
            sort_key: Optional key over payloads for ordering siblings
            compare: Optional cmp-style function over two payloads
            options: LoadOptions instead of the keyword arguments

        Raises:
            ConfigurationError: Missing extractor or conflicting options, or a
                sort key or comparator that fails on a payload
            FormatError: Empty input or invalid identities
            IntegrityError: Duplicate id, dangling parent or cycle
        """
        options = self._resolve_options(options, id_func, parent_id_func, sort_key, compare)

        with self._load_mutex:
            try:
                state = self._build(records, options)
            except TreeIndexError as exc:
                logger.debug("Load rejected, keeping %d nodes: %s", len(self._state), exc)
                raise

            with self._lock.write_locked():
                self._install(state, options)

        logger.debug("Loaded %(nodes)d nodes under %(roots)d roots", describe_state(state))

    def resort(
        self,
        sort_key: Optional[Callable[[Any], Any]] = None,
        compare: Optional[Callable[[Any, Any], int]] = None,
    ) -> None:
        """Reorder every children list with a new comparator.

        With neither argument, siblings go back to ascending id order.

        Raises:
            ConfigurationError: Both sort_key and compare given, or the
                new ordering fails on a payload
        """
        if sort_key is not None and compare is not None:
            raise ConfigurationError("sort_key and compare are mutually exclusive")

        with self._load_mutex:
            options = replace(self._options, sort_key=sort_key, compare=compare)
            try:
                state = self._reorder(self._state, options)
            except TreeIndexError as exc:
                logger.debug("Resort rejected, keeping previous order: %s", exc)
                raise
            with self._lock.write_locked():
                self._install(state, options)

        logger.debug("Resorted %d nodes", len(state))

    def clear(self) -> None:
        """Drop every node, returning the index to its unloaded state."""
        with self._load_mutex:
            with self._lock.write_locked():
                self._install(IndexState.empty(), LoadOptions())

    def _resolve_options(self, options, id_func, parent_id_func, sort_key, compare) -> LoadOptions:
        keywords = (id_func, parent_id_func, sort_key, compare)
        if options is not None:
            if any(value is not None for value in keywords):
                raise ConfigurationError("pass either options or extractor keywords, not both")
        else:
            options = LoadOptions(id_func=id_func, parent_id_func=parent_id_func,
                                  sort_key=sort_key, compare=compare)
        check_options(options)
        return options

    def _build(self, records: Iterable[Any], options: LoadOptions) -> IndexState:
        return build_state(records, options)

    def _reorder(self, state: IndexState, options: LoadOptions) -> IndexState:
        return reorder_state(state, options)

    def _install(self, state: IndexState, options: LoadOptions) -> None:
        """Swap in a new state. Caller holds the write lock."""
        self._state = state
        self._options = options

    # ==================== Lock helpers ====================

    @contextmanager
    def _lookup(self) -> Iterator[IndexState]:
        """Shared access for lookups that never touch children lists."""
        with self._lock.read_locked():
            yield self._state

    @contextmanager
    def _reading(self) -> Iterator[Any]:
        """Access for operations that read children lists.

        Shared here; subclasses that fill caches while reading take
        exclusive access instead.
        """
        with self._lock.read_locked():
            yield self._state

    # ==================== Special Methods ====================

    def __len__(self) -> int:
        with self._lookup() as state:
            return len(state.nodes)

    def __contains__(self, node_id: object) -> bool:
        with self._lookup() as state:
            return node_id in state.nodes

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nodes={len(self)})"

    @property
    def is_loaded(self) -> bool:
        """True once a load has succeeded (and clear() was not called since)."""
        return len(self) > 0

    def node_ids(self) -> List[int]:
        """All identities in ascending order."""
        with self._lookup() as state:
            return list(state.ordered_ids)

    # ==================== Lookups ====================

    def find_node(self, node_id: int) -> Optional[Node]:
        """Return the node with this id, or None."""
        with self._lookup() as state:
            return traversal.find_node(state, node_id)

    def get_parent(self, node_id: int) -> Optional[Node]:
        """Return the parent node; None for roots and unknown ids."""
        with self._lookup() as state:
            return traversal.parent_of(state, node_id)

    def get_parent_id(self, node_id: int) -> Optional[int]:
        """Return the parent id (0 for roots), or None if node_id is unknown."""
        with self._lookup() as state:
            node = state.nodes.get(node_id)
            return None if node is None else node.parent_id

    def get_children(self, node_id: int) -> Sequence[Node]:
        """Return the ordered children of node_id.

        The result is the index's own immutable tuple; it is empty for
        leaves and unknown ids. get_children(0) returns the roots.
        """
        with self._reading() as view:
            return view.children_of(node_id)

    def get_children_ids(self, node_id: int) -> List[int]:
        return traversal.ids(self.get_children(node_id))

    def roots(self) -> Sequence[Node]:
        """Return every root node in children order."""
        return self.get_children(ROOT_ID)

    # ==================== Ancestors ====================

    def get_ancestors(self, node_id: int, include_self: bool = False) -> List[Node]:
        """Return ancestors nearest first, ending at a root.

        Args:
            node_id: Starting node
            include_self: Put the node itself first

        Returns:
            Ancestor nodes; empty for roots (without self) and unknown ids
        """
        with self._lookup() as state:
            return traversal.ancestors(state, node_id, include_self)

    def get_ancestor_ids(self, node_id: int, include_self: bool = False) -> List[int]:
        return traversal.ids(self.get_ancestors(node_id, include_self))

    def get_node_path(self, node_id: int, include_self: bool = False) -> List[int]:
        """Return ancestor ids from the root down, optionally ending at node_id."""
        with self._lookup() as state:
            return traversal.node_path(state, node_id, include_self)

    def get_ancestor_id_at_depth(self, node_id: int, depth: int, from_root: bool = False) -> int:
        """Return one ancestor id, or 0 if there is none at that depth.

        Args:
            node_id: Node whose ancestor chain is indexed
            depth: 1-based position in the chain
            from_root: Count from the root (1 = root) instead of from the
                node upward (1 = parent)
        """
        with self._lookup() as state:
            return traversal.ancestor_id_at_depth(state, node_id, depth, from_root)

    def get_depth(self, node_id: int) -> Optional[int]:
        """Return how many ancestors node_id has, or None if unknown."""
        with self._lookup() as state:
            return traversal.depth_of(state, node_id)

    # ==================== Descendants and siblings ====================

    def get_descendants(self, node_id: int, max_depth: int = 0) -> List[Node]:
        """Return descendants: all children first, then each child's descendants.

        Args:
            node_id: Subtree root (excluded from the result)
            max_depth: Levels to include; 0 = unlimited, negative = none
        """
        with self._reading() as view:
            return traversal.descendants(view, node_id, max_depth)

    def get_descendant_ids(self, node_id: int, max_depth: int = 0) -> List[int]:
        return traversal.ids(self.get_descendants(node_id, max_depth))

    def get_siblings(self, node_id: int, include_self: bool = False) -> Sequence[Node]:
        """Return nodes sharing node_id's parent; empty if node_id is unknown."""
        with self._reading() as view:
            return traversal.siblings(view, node_id, include_self)

    def get_sibling_ids(self, node_id: int, include_self: bool = False) -> List[int]:
        return traversal.ids(self.get_siblings(node_id, include_self))

    # ==================== Predicate search ====================

    def get_one(self, predicate: Callable[[Any], bool]) -> Optional[Node]:
        """Return the lowest-id node whose payload satisfies predicate."""
        with self._lookup() as state:
            return traversal.find_one(state, predicate)

    def get_all(self, predicate: Callable[[Any], bool]) -> List[Node]:
        """Return every node whose payload satisfies predicate, by ascending id."""
        with self._lookup() as state:
            return traversal.find_all(state, predicate)

    # ==================== Walking ====================

    def walk(
        self,
        root_id: int,
        strategy: Union[TraversalStrategy, str] = TraversalStrategy.DEPTH_FIRST_PRE,
        max_depth: Optional[int] = None,
        min_depth: int = 0,
    ) -> Iterator[Tuple[Node, int]]:
        """Walk the subtree at root_id with a traversal strategy.

        The walk is taken from one consistent state; the returned
        iterator does not hold the lock.

        Args:
            root_id: Starting node (depth 0)
            strategy: bfs, dfs_pre, dfs_post or level
            max_depth: Deepest level to visit (None = unlimited)
            min_depth: Shallowest level to yield

        Returns:
            Iterator of (node, depth) pairs; empty if root_id is unknown

        Raises:
            ValueError: Unknown strategy name
        """
        with self._reading() as view:
            traverser = create_traverser(strategy, IndexAdapter(view))
            root = view.nodes.get(root_id)
            if root is None:
                return iter(())
            visited = list(traverser.traverse(root, max_depth, min_depth))
        return iter(visited)

    def walk_leaves(
        self,
        root_id: int,
        strategy: Union[TraversalStrategy, str] = TraversalStrategy.DEPTH_FIRST_PRE,
        max_depth: Optional[int] = None,
        min_depth: int = 0,
    ) -> Iterator[Tuple[Node, int, bool]]:
        """Like walk(), but also report whether each node is a leaf.

        Leaf status comes from the same state as the walk and ignores
        max_depth: a node cut off by the depth limit is still internal.

        Returns:
            Iterator of (node, depth, is_leaf) triples
        """
        with self._reading() as view:
            adapter = IndexAdapter(view)
            traverser = create_traverser(strategy, adapter)
            root = view.nodes.get(root_id)
            if root is None:
                return iter(())
            visited = [
                (node, depth, adapter.is_leaf(node))
                for node, depth in traverser.traverse(root, max_depth, min_depth)
            ]
        return iter(visited)

    # ==================== Materialization and display ====================

    def to_tree(self, root_id: int, copy_data: bool = True) -> Optional[Node]:
        """Return a detached nested copy of the subtree, or None."""
        with self._reading() as view:
            return materializer.to_tree(view, root_id, copy_data)

    def format_tree(self, root_id: int, options: Optional[FormatOptions] = None) -> List[FormattedNode]:
        """Return (node, label) pairs rendering the subtree as an ASCII tree."""
        with self._reading() as view:
            return formatter.format_tree(view, root_id, options)

    def render_tree(self, root_id: int, options: Optional[FormatOptions] = None) -> str:
        """Return the rendered subtree as one newline-joined string."""
        return formatter.render(self.format_tree(root_id, options))
