"""FlatTree - hierarchical index over flat parent-linked records.

FlatTree turns a flat collection of records, each carrying an integer
id and a parent id (0 for roots), into a validated, thread-safe index
that answers structural queries: parent, children, ancestors,
descendants, siblings, paths, nested copies and ASCII rendering.

Quick start:
━━━━━━━━━━━━
    from flattree import TreeIndex

    index = TreeIndex()
    index.load(rows,
               id_func=lambda r: r['id'],
               parent_id_func=lambda r: r['parent_id'])
    print(index.render_tree(1))
━━━━━━━━━━━━

Use CachingTreeIndex when large trees are reloaded often but only a few
branches are read; use load_records for dict or object records with
named fields.
"""

__version__ = "0.1.0"

# Core components
from .core.node import Node
from .core.index import TreeIndex
from .core.lock import ReadWriteLock
from .core.formatter import FormattedNode, LabelSelector, FieldLabel, CallableLabel
from .core.materializer import flatten
from .caching import CachingTreeIndex

# Configuration
from .config import (
    LoadOptions,
    FormatOptions,
    TraversalStrategy,
    DEFAULT_ICONS,
    DEFAULT_INDENT,
    DEFAULT_LABEL,
)

# Errors
from .exceptions import (
    TreeIndexError,
    ConfigurationError,
    FormatError,
    IntegrityError,
    DuplicateIDError,
    DanglingParentError,
    CircularReferenceError,
)

# Keyed records
from .records import field_getter, load_records

# High-level API
from .api import (
    build_index,
    traverse_tree,
    count_nodes,
    find_nodes,
    get_tree_paths,
    get_leaf_nodes,
    get_tree_stats,
)

__all__ = [
    "__version__",
    # Core
    'Node',
    'TreeIndex',
    'CachingTreeIndex',
    'ReadWriteLock',
    'FormattedNode',
    'LabelSelector',
    'FieldLabel',
    'CallableLabel',
    'flatten',
    # Configuration
    'LoadOptions',
    'FormatOptions',
    'TraversalStrategy',
    'DEFAULT_ICONS',
    'DEFAULT_INDENT',
    'DEFAULT_LABEL',
    # Errors
    'TreeIndexError',
    'ConfigurationError',
    'FormatError',
    'IntegrityError',
    'DuplicateIDError',
    'DanglingParentError',
    'CircularReferenceError',
    # Keyed records
    'field_getter',
    'load_records',
    # High-level API
    'build_index',
    'traverse_tree',
    'count_nodes',
    'find_nodes',
    'get_tree_paths',
    'get_leaf_nodes',
    'get_tree_stats',
]
