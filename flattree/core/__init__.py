"""Core components of FlatTree.

The index, its loader and lock, and the algorithms that read index
views. Everything here is synchronous and performs no I/O.
"""

from .node import Node
from .lock import ReadWriteLock
from .loader import ROOT_ID, IndexState, build_state
from .index import TreeIndex
from .adapter import TreeAdapter, IndexAdapter
from .traverser import (
    TreeTraverser,
    BreadthFirstTraverser,
    DepthFirstPreOrderTraverser,
    DepthFirstPostOrderTraverser,
    LevelOrderTraverser,
    create_traverser,
)
from .formatter import FormattedNode, LabelSelector, FieldLabel, CallableLabel
from .materializer import flatten

__all__ = [
    'Node',
    'ReadWriteLock',
    'ROOT_ID',
    'IndexState',
    'build_state',
    'TreeIndex',
    'TreeAdapter',
    'IndexAdapter',
    'TreeTraverser',
    'BreadthFirstTraverser',
    'DepthFirstPreOrderTraverser',
    'DepthFirstPostOrderTraverser',
    'LevelOrderTraverser',
    'create_traverser',
    'FormattedNode',
    'LabelSelector',
    'FieldLabel',
    'CallableLabel',
    'flatten',
]
