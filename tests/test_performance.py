"""
Test suite for FlatTree scalability.
Tests deep chains that would overflow recursion, memory usage and
load/query speed on large trees.
"""

import gc
import sys
import time
import unittest
from pathlib import Path

import psutil
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flattree import CachingTreeIndex, CircularReferenceError, TreeIndex, flatten, get_tree_stats


def chain(length):
    """Records forming a single path 1 -> 2 -> ... -> length."""
    return [(node_id, node_id - 1) for node_id in range(1, length + 1)]


def balanced(count):
    """Records forming a binary tree: parent of n is n // 2."""
    return [(node_id, node_id // 2) for node_id in range(1, count + 1)]


def load(records, index=None):
    if index is None:
        index = TreeIndex()
    index.load(records, id_func=lambda r: r[0], parent_id_func=lambda r: r[1])
    return index


class PerformanceMetrics:
    """Helper class to track performance metrics."""

    def __init__(self):
        self.start_time = None
        self.end_time = None
        self.start_memory = None
        self.end_memory = None
        self.process = psutil.Process()

    def start(self):
        """Start tracking metrics."""
        gc.collect()
        self.start_time = time.time()
        self.start_memory = self.process.memory_info().rss / 1024 / 1024  # MB

    def end(self):
        """End tracking and calculate results."""
        self.end_time = time.time()
        gc.collect()
        self.end_memory = self.process.memory_info().rss / 1024 / 1024  # MB

    @property
    def elapsed_time(self):
        return self.end_time - self.start_time

    @property
    def memory_delta(self):
        return self.end_memory - self.start_memory


class TestDeepChains(unittest.TestCase):
    """Every algorithm must survive depths far beyond the recursion limit."""

    DEPTH = 20000

    @classmethod
    def setUpClass(cls):
        # Reversed input makes the cycle check start at the deepest node
        cls.tree = load(list(reversed(chain(cls.DEPTH))))

    def test_depth_exceeds_recursion_limit(self):
        self.assertGreater(self.DEPTH, sys.getrecursionlimit())

    def test_ancestors(self):
        self.assertEqual(self.tree.get_depth(self.DEPTH), self.DEPTH - 1)
        self.assertEqual(self.tree.get_node_path(self.DEPTH)[:3], [1, 2, 3])
        self.assertEqual(self.tree.get_ancestor_id_at_depth(self.DEPTH, 1, from_root=True), 1)

    def test_descendants(self):
        descendants = self.tree.get_descendant_ids(1)
        self.assertEqual(len(descendants), self.DEPTH - 1)
        self.assertEqual(descendants[:3], [2, 3, 4])
        self.assertEqual(len(self.tree.get_descendants(1, 100)), 100)

    def test_materialize(self):
        root = self.tree.to_tree(1)
        self.assertEqual(sum(1 for _ in flatten(root)), self.DEPTH)

    def test_walks(self):
        for strategy in ("bfs", "dfs_pre", "dfs_post", "level"):
            visited = list(self.tree.walk(1, strategy))
            self.assertEqual(len(visited), self.DEPTH)

    def test_caching_index(self):
        index = load(chain(self.DEPTH), CachingTreeIndex())
        self.assertEqual(len(index.get_descendants(1)), self.DEPTH - 1)

    def test_format(self):
        # Prefixes grow with depth, so a shorter chain keeps output small
        depth = 3000
        formatted = load(chain(depth)).format_tree(1)
        self.assertEqual(len(formatted), depth)
        self.assertTrue(formatted[-1].label.endswith("└ "))

    def test_deep_cycle_detected(self):
        records = chain(self.DEPTH)
        records[0] = (1, self.DEPTH)
        with self.assertRaises(CircularReferenceError):
            load(records)


@pytest.mark.slow
class TestScalability(unittest.TestCase):
    """Large balanced trees stay within loose time and memory bounds."""

    COUNT = 200000

    def test_load_time_and_memory(self):
        records = balanced(self.COUNT)
        metrics = PerformanceMetrics()

        metrics.start()
        index = load(records)
        metrics.end()

        self.assertEqual(len(index), self.COUNT)
        self.assertLess(metrics.elapsed_time, 30)
        self.assertLess(metrics.memory_delta, 1024)

    def test_query_speed(self):
        index = load(balanced(self.COUNT))

        start = time.time()
        for node_id in range(1, self.COUNT + 1, 97):
            index.get_ancestors(node_id)
            index.get_children(node_id)
        self.assertLess(time.time() - start, 10)

        stats = get_tree_stats(index, 1)
        self.assertEqual(stats['total_nodes'], self.COUNT)

    def test_lazy_loading_defers_sorting(self):
        lazy = load(balanced(self.COUNT), CachingTreeIndex())
        self.assertEqual(lazy.get_cache_stats()['cache_size'], 0)
        self.assertEqual([n.id for n in lazy.get_children(1)], [2, 3])
        self.assertEqual(lazy.get_cache_stats()['cache_size'], 1)
