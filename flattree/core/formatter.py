"""ASCII tree rendering.

The formatter walks a subtree in pre-order and pairs every node with a
display string made of an indentation prefix and the node's label::

    Root
     ├ Child 1
     │ ├ Child 1.1
     │ └ Child 1.2
     └ Child 2
      └ Child 2.1

Prefix rules:
- the root has no prefix
- the first level below the root starts with the indent unit
- each child but the last is drawn with the branch icon, the last one
  with the last-branch icon
- a child passes ``prefix + continuation + indent`` down to its own
  children when it has later siblings, ``prefix + indent`` otherwise,
  so vertical bars only appear under ancestors that still have
  siblings below them
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from ..config import FormatOptions
from .fields import read_field
from .node import Node


logger = logging.getLogger(__name__)

_LABEL_ERRORS = (AttributeError, KeyError, IndexError, TypeError, ValueError)


class FormattedNode(NamedTuple):
    """A node paired with its rendered display string."""
    node: Node
    label: str


class LabelSelector(ABC):
    """Strategy for turning a payload into display text.

    Selection failures never escape: a missing field, an error raised
    by the selector or a non-string value all render as "".
    """

    @abstractmethod
    def select(self, data: Any) -> Any:
        """Return the raw label value for a payload."""
        pass

    def text(self, data: Any) -> str:
        """Return the label text, or "" if it cannot be produced."""
        try:
            value = self.select(data)
        except _LABEL_ERRORS as exc:
            logger.debug("Label unavailable via %r: %s", self, exc)
            return ""
        if isinstance(value, str):
            return value
        logger.debug("Label via %r is %s, not str", self, type(value).__name__)
        return ""


class FieldLabel(LabelSelector):
    """Reads the label from a named key or attribute of the payload."""

    def __init__(self, name: str):
        self.name = name

    def select(self, data: Any) -> Any:
        return read_field(data, self.name)

    def __repr__(self) -> str:
        return f"FieldLabel({self.name!r})"


class CallableLabel(LabelSelector):
    """Computes the label with a caller-supplied function."""

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def select(self, data: Any) -> Any:
        return self.func(data)

    def __repr__(self) -> str:
        name = getattr(self.func, '__name__', type(self.func).__name__)
        return f"CallableLabel({name})"


def make_selector(label: Any) -> LabelSelector:
    """Turn a label spec into a LabelSelector.

    Args:
        label: LabelSelector, field name or callable

    Returns:
        LabelSelector instance

    Raises:
        TypeError: If label is none of the accepted kinds
    """
    if isinstance(label, LabelSelector):
        return label
    if isinstance(label, str):
        return FieldLabel(label)
    if callable(label):
        return CallableLabel(label)
    raise TypeError(
        f"label must be a field name, callable or LabelSelector, "
        f"not {type(label).__name__}"
    )


def format_tree(view, root_id: int, options: Optional[FormatOptions] = None) -> List[FormattedNode]:
    """Render the subtree rooted at root_id.

    Args:
        view: Index view (must be held under the index lock)
        root_id: Subtree root
        options: Label, indent and icon settings (defaults if None)

    Returns:
        FormattedNode pairs in pre-order; empty if root_id is unknown
    """
    options = (options or FormatOptions()).normalized()
    selector = make_selector(options.label)

    root = view.nodes.get(root_id)
    if root is None:
        return []

    result = [FormattedNode(root, selector.text(root.data))]

    children = view.children_of(root.id)
    if not children:
        return result

    # Each frame: sibling block, position of the next sibling, prefix for the block
    stack: List[Tuple[Sequence[Node], int, str]] = [(children, 0, options.indent)]
    while stack:
        group, index, prefix = stack.pop()
        if index + 1 < len(group):
            stack.append((group, index + 1, prefix))

        child = group[index]
        is_last = index == len(group) - 1
        icon = options.last_branch if is_last else options.branch
        result.append(FormattedNode(child, prefix + icon + selector.text(child.data)))

        grandchildren = view.children_of(child.id)
        if grandchildren:
            pad = "" if is_last else options.continuation
            stack.append((grandchildren, 0, prefix + pad + options.indent))

    return result


def render(formatted: Sequence[FormattedNode]) -> str:
    """Join formatted labels into one printable block."""
    return "\n".join(item.label for item in formatted)
