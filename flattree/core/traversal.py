"""Stateless query algorithms over an index view.

A view is anything exposing ``nodes`` (id to Node mapping),
``ordered_ids`` (ascending ids) and ``children_of(parent_id)``. The
loader's IndexState is one; the caching index supplies another whose
``children_of`` sorts and memoizes on first use.

Callers hold the index lock while these run. All walks use explicit
stacks, so very deep, narrow trees do not hit the recursion limit.
"""

from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from .node import Node


ROOT_ID = 0


def find_node(view, node_id: int) -> Optional[Node]:
    return view.nodes.get(node_id)


def parent_of(view, node_id: int) -> Optional[Node]:
    """Return the parent node, or None for roots and unknown ids."""
    node = view.nodes.get(node_id)
    if node is None:
        return None
    return view.nodes.get(node.parent_id)


def iter_ancestors(view, node_id: int, include_self: bool = False) -> Iterator[Node]:
    """Yield ancestors nearest first, ending at a root.

    Args:
        view: Index view
        node_id: Starting node
        include_self: Yield the starting node first

    Yields:
        The node itself (if requested), then each successive parent
    """
    node = view.nodes.get(node_id)
    if node is None:
        return
    if include_self:
        yield node

    current = node
    while current.parent_id != ROOT_ID:
        parent = view.nodes.get(current.parent_id)
        if parent is None:
            break
        yield parent
        current = parent


def ancestors(view, node_id: int, include_self: bool = False) -> List[Node]:
    return list(iter_ancestors(view, node_id, include_self))


def node_path(view, node_id: int, include_self: bool = False) -> List[int]:
    """Return ancestor ids root first, optionally ending with node_id."""
    ids = [node.id for node in iter_ancestors(view, node_id, include_self)]
    ids.reverse()
    return ids


def ancestor_id_at_depth(view, node_id: int, depth: int, from_root: bool = False) -> int:
    """Pick one ancestor id out of the chain above node_id.

    Args:
        view: Index view
        node_id: Node whose ancestors to index into
        depth: 1-based position in the chain
        from_root: Count from the root end (1 = the root) instead of
            from the node upward (1 = the parent)

    Returns:
        The ancestor id, or 0 if depth is out of range or there are
        no ancestors
    """
    parent_ids = [node.id for node in iter_ancestors(view, node_id, False)]
    if depth <= 0 or depth > len(parent_ids):
        return ROOT_ID
    if from_root:
        return parent_ids[len(parent_ids) - depth]
    return parent_ids[depth - 1]


def depth_of(view, node_id: int) -> Optional[int]:
    """Number of ancestors above node_id (roots are at depth 0)."""
    if node_id not in view.nodes:
        return None
    return sum(1 for _ in iter_ancestors(view, node_id, False))


def descendants(view, node_id: int, max_depth: int = 0) -> List[Node]:
    """Collect descendants in block order.

    All direct children of node_id come first, then for each child in
    order its own descendants, recursively. For the tree 1 -> (2, 3),
    2 -> (4, 5), 3 -> (6) this gives 2, 3, 4, 5, 6.

    Args:
        view: Index view
        node_id: Subtree root (not included in the result)
        max_depth: Levels below node_id to include; 0 means unlimited,
            negative means none

    Returns:
        Descendant nodes
    """
    if max_depth < 0:
        return []

    children = view.children_of(node_id)
    if not children:
        return []

    result: List[Node] = list(children)
    # Each frame: iterator over one sibling block and the depth of its members
    stack: List[Tuple[Iterator[Node], int]] = [(iter(children), 1)]

    while stack:
        siblings, depth = stack[-1]
        child = next(siblings, None)
        if child is None:
            stack.pop()
            continue
        if max_depth > 0 and depth >= max_depth:
            continue
        grandchildren = view.children_of(child.id)
        if grandchildren:
            result.extend(grandchildren)
            stack.append((iter(grandchildren), depth + 1))

    return result


def siblings(view, node_id: int, include_self: bool = False) -> Sequence[Node]:
    """Return nodes sharing node_id's parent, in children order.

    Roots are siblings of the other roots. Unknown ids give ().
    """
    node = view.nodes.get(node_id)
    if node is None:
        return ()

    group = view.children_of(node.parent_id)
    if include_self:
        return group
    return tuple(sibling for sibling in group if sibling.id != node_id)


def find_one(view, predicate: Callable[[Any], bool]) -> Optional[Node]:
    """First node (ascending id) whose payload satisfies predicate."""
    for node_id in view.ordered_ids:
        node = view.nodes[node_id]
        if predicate(node.data):
            return node
    return None


def find_all(view, predicate: Callable[[Any], bool]) -> List[Node]:
    """All nodes (ascending id) whose payload satisfies predicate."""
    matches = []
    for node_id in view.ordered_ids:
        node = view.nodes[node_id]
        if predicate(node.data):
            matches.append(node)
    return matches


def ids(nodes: Sequence[Node]) -> List[int]:
    return [node.id for node in nodes]
