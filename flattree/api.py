"""High-level API for FlatTree.

This module provides simple, functional interfaces for common operations.
These functions wrap the TreeIndex methods for ease of use in simple cases.
"""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from .caching import CachingTreeIndex
from .config import TraversalStrategy
from .core.index import TreeIndex
from .core.node import Node


def build_index(
    records: Iterable[Any],
    id_func: Callable[[Any], int],
    parent_id_func: Callable[[Any], int],
    cached: bool = False,
    **kwargs
) -> TreeIndex:
    """Create and load an index in one call.

    Args:
        records: Caller records
        id_func: Extracts the identity of a record
        parent_id_func: Extracts the parent identity of a record
        cached: Build a CachingTreeIndex instead of a TreeIndex
        **kwargs: sort_key or compare, passed to load()

    Returns:
        Loaded index

    Example:
        >>> index = build_index(rows, lambda r: r['id'], lambda r: r['pid'])
        >>> index.get_children_ids(1)
        [2, 3]
    """
    index = CachingTreeIndex() if cached else TreeIndex()
    index.load(records, id_func=id_func, parent_id_func=parent_id_func, **kwargs)
    return index


def traverse_tree(
    index: TreeIndex,
    root_id: int,
    strategy: Union[TraversalStrategy, str] = TraversalStrategy.BREADTH_FIRST,
    max_depth: Optional[int] = None,
    min_depth: int = 0,
    include_filter: Optional[Callable[[Node], bool]] = None,
    exclude_filter: Optional[Callable[[Node], bool]] = None,
) -> Iterator[Node]:
    """Simple interface for subtree traversal.

    Exclusion takes precedence over inclusion; filtered nodes are skipped
    but their children are still visited.

    Args:
        index: Loaded index
        root_id: Starting node
        strategy: Traversal strategy (bfs, dfs_pre, dfs_post, level)
        max_depth: Maximum depth to traverse
        min_depth: Minimum depth before yielding nodes
        include_filter: Function to determine if node should be included
        exclude_filter: Function to determine if node should be excluded

    Yields:
        Node instances that match the criteria

    Example:
        >>> for node in traverse_tree(index, 1, max_depth=2):
        ...     print(node.id)
    """
    entries = index.walk(root_id, strategy, max_depth, min_depth)
    for node, _ in _select(entries, include_filter, exclude_filter):
        yield node


def _select(entries, include_filter, exclude_filter):
    """Filter walk entries by their node; exclusion wins over inclusion."""
    for entry in entries:
        node = entry[0]
        if exclude_filter is not None and exclude_filter(node):
            continue
        if include_filter is not None and not include_filter(node):
            continue
        yield entry


def count_nodes(index: TreeIndex, root_id: int, **kwargs) -> int:
    """Count nodes in a subtree that match criteria.

    Args:
        index: Loaded index
        root_id: Starting node
        **kwargs: Traversal options (see traverse_tree)

    Returns:
        Number of nodes that match criteria
    """
    count = 0
    for _ in traverse_tree(index, root_id, **kwargs):
        count += 1
    return count


def find_nodes(
    index: TreeIndex,
    root_id: int,
    predicate: Callable[[Any], bool],
    **kwargs
) -> Iterator[Node]:
    """Find nodes in a subtree whose payload matches a predicate.

    Unlike TreeIndex.get_all, which scans the whole index, this only
    looks below root_id and yields in traversal order.

    Args:
        index: Loaded index
        root_id: Starting node
        predicate: Function over the payload
        **kwargs: Traversal options (see traverse_tree)

    Yields:
        Nodes whose payload matches the predicate
    """
    kwargs['include_filter'] = lambda node: predicate(node.data)
    yield from traverse_tree(index, root_id, **kwargs)


def get_tree_paths(index: TreeIndex, root_id: int, **kwargs) -> Iterator[List[int]]:
    """Get id paths from the top of the tree to each node of a subtree.

    Args:
        index: Loaded index
        root_id: Starting node
        **kwargs: Traversal options (see traverse_tree)

    Yields:
        Lists of ids, root first, ending with the node itself
    """
    for node in traverse_tree(index, root_id, **kwargs):
        yield index.get_node_path(node.id, include_self=True)


def get_leaf_nodes(
    index: TreeIndex,
    root_id: int,
    strategy: Union[TraversalStrategy, str] = TraversalStrategy.BREADTH_FIRST,
    max_depth: Optional[int] = None,
    min_depth: int = 0,
    include_filter: Optional[Callable[[Node], bool]] = None,
    exclude_filter: Optional[Callable[[Node], bool]] = None,
) -> Iterator[Node]:
    """Get all leaf nodes in a subtree.

    Takes the same traversal options as traverse_tree. Leaf status is
    read from the snapshot the traversal walked.

    Yields:
        Leaf nodes (nodes with no children)
    """
    entries = index.walk_leaves(root_id, strategy, max_depth, min_depth)
    for node, _, is_leaf in _select(entries, include_filter, exclude_filter):
        if is_leaf:
            yield node


def get_tree_stats(index: TreeIndex, root_id: int, **kwargs) -> Dict[str, Any]:
    """Get statistics about a subtree.

    Args:
        index: Loaded index
        root_id: Starting node
        **kwargs: Traversal options accepted by TreeIndex.walk_leaves

    Returns:
        Dictionary with total_nodes, leaf_nodes, internal_nodes,
        max_depth, depths (histogram) and average_branching

    Example:
        >>> stats = get_tree_stats(index, 1)
        >>> print(f"Total nodes: {stats['total_nodes']}")
    """
    stats = {
        'total_nodes': 0,
        'leaf_nodes': 0,
        'max_depth': 0,
        'depths': {}
    }

    for _, depth, is_leaf in index.walk_leaves(root_id, **kwargs):
        stats['total_nodes'] += 1

        if is_leaf:
            stats['leaf_nodes'] += 1

        stats['max_depth'] = max(stats['max_depth'], depth)

        if depth not in stats['depths']:
            stats['depths'][depth] = 0
        stats['depths'][depth] += 1

    stats['internal_nodes'] = stats['total_nodes'] - stats['leaf_nodes']
    # Edges divided by internal nodes
    stats['average_branching'] = (
        (stats['total_nodes'] - 1) / stats['internal_nodes']
        if stats['internal_nodes'] > 0 else 0
    )

    return stats
