"""Configuration objects for FlatTree.

This module defines how callers describe their records at load time
(how to extract identities and order siblings) and how a subtree should
be rendered at format time.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union


DEFAULT_LABEL = "title"
DEFAULT_INDENT = " "
DEFAULT_ICONS: Tuple[str, str, str] = ("│", "├ ", "└ ")


class TraversalStrategy(Enum):
    """How to walk a subtree.

    Different strategies are optimal for different use cases.
    """
    BREADTH_FIRST = "bfs"           # Level by level
    DEPTH_FIRST_PRE = "dfs_pre"     # Parent before children
    DEPTH_FIRST_POST = "dfs_post"   # Children before parent
    LEVEL_ORDER = "level"           # Grouped by level


@dataclass
class LoadOptions:
    """Describes how to turn caller records into nodes.

    id_func and parent_id_func are required. Siblings are ordered by
    ascending id unless sort_key (a key function over the payload) or
    compare (a cmp-style function over two payloads) is given.
    """

    id_func: Optional[Callable[[Any], int]] = None
    parent_id_func: Optional[Callable[[Any], int]] = None
    sort_key: Optional[Callable[[Any], Any]] = None
    compare: Optional[Callable[[Any, Any], int]] = None

    def validate(self) -> List[str]:
        """Validate options for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.id_func is None:
            errors.append("id function is required")
        if self.parent_id_func is None:
            errors.append("parent id function is required")

        if self.sort_key is not None and self.compare is not None:
            errors.append("sort_key and compare are mutually exclusive")

        return errors


LabelSpec = Union[str, Callable[[Any], Any], Any]


@dataclass
class FormatOptions:
    """Configuration for ASCII tree rendering.

    Attributes:
        label: Field name, callable over the payload, or LabelSelector
        indent: Indent unit appended once per level
        icons: (continuation, branch, last_branch)
    """

    label: LabelSpec = DEFAULT_LABEL
    indent: str = DEFAULT_INDENT
    icons: Sequence[str] = field(default_factory=lambda: DEFAULT_ICONS)

    @property
    def continuation(self) -> str:
        return self.icons[0]

    @property
    def branch(self) -> str:
        return self.icons[1]

    @property
    def last_branch(self) -> str:
        return self.icons[2]

    def normalized(self) -> 'FormatOptions':
        """Return a copy with unusable values replaced by the defaults.

        An empty label or indent, or an icon sequence that does not hold
        exactly three strings, falls back to the default value.
        """
        label = self.label if self.label not in (None, "") else DEFAULT_LABEL
        indent = self.indent if self.indent else DEFAULT_INDENT
        icons = tuple(self.icons) if self.icons is not None else ()
        if len(icons) != 3 or not all(isinstance(i, str) for i in icons):
            icons = DEFAULT_ICONS
        return replace(self, label=label, indent=indent, icons=icons)

    @classmethod
    def ascii(cls, label: LabelSpec = DEFAULT_LABEL) -> 'FormatOptions':
        """Options using plain ASCII icons for terminals without box drawing.

        Args:
            label: Label strategy to use

        Returns:
            FormatOptions with ("|", "|-- ", "`-- ") icons
        """
        return cls(label=label, indent="   ", icons=("|", "|-- ", "`-- "))
