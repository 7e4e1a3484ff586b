"""Exception hierarchy for FlatTree.

Every error is raised while loading, before any state becomes visible.
Lookup operations never raise for unknown ids; they return None or an
empty sequence instead.
"""

from typing import Optional


class TreeIndexError(Exception):
    """Base exception for FlatTree errors."""
    pass


class ConfigurationError(TreeIndexError):
    """Raised when a required extractor is missing or options conflict."""
    pass


class FormatError(TreeIndexError, ValueError):
    """Raised for empty input, bad ids or negative parent ids.

    Attributes:
        position: Index of the offending record in the input, if known
    """

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class IntegrityError(TreeIndexError, ValueError):
    """Raised when the records do not form a valid forest.

    Attributes:
        node_id: Identity of the node the problem was detected at
    """

    def __init__(self, message: str, node_id: Optional[int] = None):
        super().__init__(message)
        self.node_id = node_id


class DuplicateIDError(IntegrityError):
    """Raised when two records share the same identity."""
    pass


class DanglingParentError(IntegrityError):
    """Raised when a parent id does not resolve to any record."""

    def __init__(self, message: str, node_id: Optional[int] = None,
                 parent_id: Optional[int] = None):
        super().__init__(message, node_id)
        self.parent_id = parent_id


class CircularReferenceError(IntegrityError):
    """Raised when a parent chain revisits a node before reaching a root."""
    pass
