"""Node model for FlatTree.

A Node is intentionally kept simple - it's primarily a data container.
The index owns every node and exposes relations through lookup maps,
so nodes held by the index never point at each other. Only detached
copies produced by the materializer fill in ``children``.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class Node:
    """An indexed record.

    Attributes:
        id: Positive identity, unique within the index
        parent_id: Identity of the parent, 0 for a root
        data: The caller's record, never inspected by the index
        children: Materialized children (None for nodes held by the index)
    """

    id: int
    parent_id: int
    # Identity is (id, parent_id); payloads may be unhashable
    data: Any = field(compare=False)
    children: Optional[List['Node']] = field(default=None, compare=False)

    def identifier(self) -> int:
        """Return the identity used as a key by adapters and traversers."""
        return self.id

    @property
    def is_root(self) -> bool:
        """True if this node has no parent."""
        return self.parent_id == 0

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        if self.children is None:
            return f"Node(id={self.id}, parent_id={self.parent_id})"
        return (
            f"Node(id={self.id}, parent_id={self.parent_id}, "
            f"children={len(self.children)})"
        )
