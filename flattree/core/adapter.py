"""TreeAdapter abstraction for FlatTree.

The adapter provides the navigation logic the strategy traversers use,
decoupling them from how the tree is stored. IndexAdapter navigates an
index view through its lookup maps.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from .node import Node


class TreeAdapter(ABC):
    """Abstract adapter for navigating a tree of Nodes.

    This separation allows:
    - The same traverser to walk different storage layouts
    - Storage-specific optimizations without changing the traversers
    """

    @abstractmethod
    def get_children(self, node: Node) -> Iterator[Node]:
        """Get an iterator of child nodes for the given node.

        Args:
            node: The parent node

        Returns:
            Iterator yielding children in their stored order
        """
        pass

    @abstractmethod
    def get_parent(self, node: Node) -> Optional[Node]:
        """Get the parent node of the given node.

        Args:
            node: The child node

        Returns:
            Parent Node or None if node is a root
        """
        pass

    def get_depth(self, node: Node) -> int:
        """Calculate the depth of a node in the tree.

        Default implementation walks up to the root.

        Args:
            node: The node to get depth for

        Returns:
            Depth where root = 0
        """
        depth = 0
        current = node
        while True:
            parent = self.get_parent(current)
            if parent is None:
                break
            depth += 1
            current = parent
        return depth


class IndexAdapter(TreeAdapter):
    """Navigates an index view through its lookup maps.

    The view must stay valid for the lifetime of the adapter; TreeIndex
    only hands one out while it holds its lock.
    """

    def __init__(self, view):
        """Initialize adapter with an index view.

        Args:
            view: Object with ``nodes`` and ``children_of(parent_id)``
        """
        self.view = view

    def get_children(self, node: Node) -> Iterator[Node]:
        return iter(self.view.children_of(node.id))

    def get_parent(self, node: Node) -> Optional[Node]:
        if node.parent_id == 0:
            return None
        return self.view.nodes.get(node.parent_id)

    def is_leaf(self, node: Node) -> bool:
        return not self.view.children_of(node.id)
