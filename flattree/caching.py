"""Caching index variant for FlatTree.

CachingTreeIndex defers sibling ordering: a load only groups children
by parent, and each parent's ordered list is computed the first time it
is asked for and memoized. This pays off when a large tree is loaded
often but only a few branches are ever navigated.

Cache population takes the exclusive lock, and so does every compound
query (descendants, siblings, walks, materialization, formatting),
because any of them may populate entries. A load or a comparator change
invalidates the whole cache; partial invalidation is not supported since
a comparator change affects every parent at once.

Example:
    index = CachingTreeIndex(max_size=50000)
    index.load(rows, id_func=..., parent_id_func=...)
    index.get_children(1)          # miss: sorted and cached
    index.get_children(1)          # hit
    index.set_comparator(sort_key=lambda row: row['name'])   # cache dropped
"""

import logging
import threading
from contextlib import contextmanager
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from cachetools import FIFOCache

from .config import LoadOptions
from .core.index import TreeIndex
from .core.loader import IndexState, build_state, sibling_key, sort_siblings
from .core.node import Node
from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class _LazyView:
    """Index view whose children lists are sorted on demand.

    Only handed out while the owning index holds its write lock.
    """

    def __init__(self, owner: 'CachingTreeIndex', state: IndexState):
        self._owner = owner
        self._state = state

    @property
    def nodes(self) -> Mapping[int, Node]:
        return self._state.nodes

    @property
    def ordered_ids(self) -> Tuple[int, ...]:
        return self._state.ordered_ids

    def children_of(self, parent_id: int) -> Tuple[Node, ...]:
        return self._owner._populate(self._state, parent_id)


class CachingTreeIndex(TreeIndex):
    """TreeIndex that sorts each parent's children lazily.

    Uses a FIFOCache: lookups do not reorder entries, so cache hits are
    served under the shared lock.

    Since sorting is deferred, a sort key or comparator that fails on a
    payload is not caught by load() or set_comparator(); the first query
    that orders the affected parent raises ConfigurationError instead.
    """

    def __init__(self, max_size: int = 10000):
        """Initialize an empty caching index.

        Args:
            max_size: Maximum number of parents whose ordered children
                are kept; evicted parents are re-sorted on next access

        Raises:
            ConfigurationError: max_size is less than 1
        """
        if max_size < 1:
            raise ConfigurationError(f"cache max_size must be at least 1, got {max_size}")
        super().__init__()
        self._cache = FIFOCache(maxsize=max_size)
        self._key: Callable[[Node], Any] = attrgetter('id')
        self._stats_lock = threading.Lock()

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0

    # ==================== Loading hooks ====================

    def _build(self, records: Iterable[Any], options: LoadOptions) -> IndexState:
        return build_state(records, options, sort=False)

    def _reorder(self, state: IndexState, options: LoadOptions) -> IndexState:
        # Groups stay in input order; _install swaps the key and drops the cache
        return state

    def _install(self, state: IndexState, options: LoadOptions) -> None:
        super()._install(state, options)
        self._key = sibling_key(options)
        dropped = len(self._cache)
        self._cache.clear()
        logger.debug("Children cache invalidated (%d entries dropped)", dropped)

    def set_comparator(
        self,
        sort_key: Optional[Callable[[Any], Any]] = None,
        compare: Optional[Callable[[Any, Any], int]] = None,
    ) -> None:
        """Change sibling ordering and invalidate the whole cache.

        With neither argument, siblings go back to ascending id order.
        """
        self.resort(sort_key=sort_key, compare=compare)

    # ==================== Cache access ====================

    def _populate(self, state: IndexState, parent_id: int) -> Tuple[Node, ...]:
        """Return ordered children, sorting and caching on a miss.

        Caller holds the write lock.
        """
        group = state.children.get(parent_id)
        if not group:
            return ()

        cached = self._cache.get(parent_id)
        if cached is not None:
            self._count(hit=True)
            return cached

        self._count(hit=False)
        ordered = sort_siblings(parent_id, group, self._key)
        self._cache[parent_id] = ordered
        return ordered

    def _count(self, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self.cache_hits += 1
            else:
                self.cache_misses += 1

    @contextmanager
    def _reading(self) -> Iterator[_LazyView]:
        with self._lock.write_locked():
            yield _LazyView(self, self._state)

    def get_children(self, node_id: int) -> Sequence[Node]:
        """Return ordered children, served under the shared lock on a hit."""
        with self._lock.read_locked():
            has_children = bool(self._state.children.get(node_id))
            cached = self._cache.get(node_id) if has_children else None

        if not has_children:
            return ()
        if cached is not None:
            self._count(hit=True)
            return cached

        with self._lock.write_locked():
            return self._populate(self._state, node_id)

    # ==================== Statistics ====================

    def get_cache_stats(self) -> Dict[str, Any]:
        """Get cache statistics for monitoring and debugging."""
        with self._stats_lock:
            hits, misses = self.cache_hits, self.cache_misses
        total_requests = hits + misses
        hit_rate = hits / total_requests if total_requests > 0 else 0

        with self._lock.read_locked():
            size = len(self._cache)

        return {
            'cache_hits': hits,
            'cache_misses': misses,
            'hit_rate': hit_rate,
            'cache_size': size,
            'max_size': self._cache.maxsize,
        }

    def clear_cache(self) -> None:
        """Clear all cached entries and reset statistics."""
        with self._lock.write_locked():
            self._cache.clear()
        with self._stats_lock:
            self.cache_hits = 0
            self.cache_misses = 0
