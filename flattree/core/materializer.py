"""Detached nested copies of a subtree.

Unlike the flat lists returned by children or descendant queries, a
materialized tree is self-contained: every node is a new Node whose
``children`` list holds further new Nodes. Nothing in it aliases the
index, so later reloads cannot change an already returned tree.

Useful for:
- Passing to UI components that render trees
- Recursive processing of the tree structure
- Extracting a complete subtree for separate handling
"""

import copy
from typing import Any, Callable, Iterator, List, Optional, Tuple

from .node import Node


def _detach(node: Node, copy_data: Callable[[Any], Any]) -> Node:
    return Node(id=node.id, parent_id=node.parent_id,
                data=copy_data(node.data), children=[])


def _keep(data: Any) -> Any:
    return data


def to_tree(view, root_id: int, copy_data: bool = True) -> Optional[Node]:
    """Build a nested copy of the subtree rooted at root_id.

    Args:
        view: Index view (must be held under the index lock)
        root_id: Subtree root
        copy_data: Deep-copy payloads with copy.deepcopy; if False the
            copies share payload objects with the index

    Returns:
        Detached root Node, or None if root_id is unknown. Leaves carry
        an empty children list.
    """
    root = view.nodes.get(root_id)
    if root is None:
        return None

    copier = copy.deepcopy if copy_data else _keep
    tree = _detach(root, copier)

    # Children are appended in index order regardless of stack order
    stack: List[Tuple[Node, Node]] = [(root, tree)]
    while stack:
        source, target = stack.pop()
        for child in view.children_of(source.id):
            child_copy = _detach(child, copier)
            target.children.append(child_copy)
            stack.append((child, child_copy))

    return tree


def flatten(tree: Optional[Node]) -> Iterator[Node]:
    """Yield the nodes of a materialized tree in pre-order."""
    if tree is None:
        return
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def count(tree: Optional[Node]) -> int:
    """Number of nodes in a materialized tree."""
    return sum(1 for _ in flatten(tree))
