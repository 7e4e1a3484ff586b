"""Unit tests for ASCII tree rendering."""

import unittest
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flattree import (
    TreeIndex,
    FormatOptions,
    FormattedNode,
    FieldLabel,
    CallableLabel,
    LabelSelector,
    DEFAULT_ICONS,
)
from flattree.core.formatter import make_selector

from sample_data import Category, by_id, by_parent, load_sample


EXPECTED_SAMPLE = [
    (1, "Root"),
    (2, " ├ Child 1"),
    (4, " │ ├ Child 1.1"),
    (5, " │ ├ Child 1.2"),
    (7, " │ │ ├ Child 1.2.1"),
    (8, " │ │ └ Child 1.2.2"),
    (9, " │ │  ├ Child 1.2.2.1"),
    (10, " │ │  └ Child 1.2.2.2"),
    (11, " │ │   ├ Child 1.2.2.2.1"),
    (12, " │ │   └ Child 1.2.2.2.2"),
    (13, " │ │    ├ Child 1.2.2.2.2.1"),
    (14, " │ │    └ Child 1.2.2.2.2.2"),
    (15, " │ │     ├ Child 1.2.2.2.2.2.1"),
    (16, " │ │     └ Child 1.2.2.2.2.2.2"),
    (17, " │ └ Child 1.3"),
    (3, " └ Child 2"),
    (6, "  └ Child 2.1"),
]


def small_tree():
    """Six-node tree labelled with angle-bracketed ids."""
    rows = [(1, 0), (2, 1), (3, 1), (4, 2), (5, 2), (6, 3)]
    records = [
        {'id': node_id, 'pid': parent_id,
         'name': "Root" if node_id == 1 else f"<{node_id}>"}
        for node_id, parent_id in rows
    ]
    return TreeIndex.from_records(records,
                                  id_func=lambda r: r['id'],
                                  parent_id_func=lambda r: r['pid'])


class TestFormatTree(unittest.TestCase):
    """Prefix composition over the sample tree."""

    def setUp(self):
        self.tree = load_sample()

    def test_sample_tree(self):
        formatted = self.tree.format_tree(1, FormatOptions(label="title"))
        self.assertEqual([(item.node.id, item.label) for item in formatted],
                         EXPECTED_SAMPLE)

    def test_default_label_is_title(self):
        self.assertEqual([item.label for item in self.tree.format_tree(1)],
                         [label for _, label in EXPECTED_SAMPLE])

    def test_formatted_nodes_are_index_nodes(self):
        formatted = self.tree.format_tree(1)
        self.assertIsInstance(formatted[0], FormattedNode)
        self.assertIs(formatted[0].node, self.tree.find_node(1))

    def test_subtree(self):
        self.assertEqual(self.tree.render_tree(3), "Child 2\n └ Child 2.1")

    def test_single_node(self):
        self.assertEqual(self.tree.render_tree(15), "Child 1.2.2.2.2.2.1")

    def test_unknown_root(self):
        self.assertEqual(self.tree.format_tree(999), [])
        self.assertEqual(self.tree.render_tree(999), "")

    def test_render_joins_lines(self):
        lines = self.tree.render_tree(1).split("\n")
        self.assertEqual(lines, [label for _, label in EXPECTED_SAMPLE])

    def test_three_node_example(self):
        index = TreeIndex.from_records(
            [Category(1, 0, "Root"), Category(2, 1, "Child 1"), Category(3, 1, "Child 2")],
            id_func=by_id, parent_id_func=by_parent,
        )
        self.assertEqual(index.render_tree(1), "Root\n ├ Child 1\n └ Child 2")


def test_small_tree_with_callable_label():
    formatted = small_tree().format_tree(1, FormatOptions(label=lambda r: r['name']))
    assert [item.label for item in formatted] == [
        "Root",
        " ├ <2>",
        " │ ├ <4>",
        " │ └ <5>",
        " └ <3>",
        "  └ <6>",
    ]


def test_field_label_on_mappings():
    formatted = small_tree().format_tree(1, FormatOptions(label="name"))
    assert formatted[1].label == " ├ <2>"


def test_ascii_icons():
    index = TreeIndex.from_records(
        [Category(1, 0, "Root"), Category(2, 1, "A"), Category(3, 1, "B"), Category(4, 2, "C")],
        id_func=by_id, parent_id_func=by_parent,
    )
    assert index.render_tree(1, FormatOptions.ascii()).split("\n") == [
        "Root",
        "   |-- A",
        "   |   `-- C",
        "   `-- B",
    ]


def test_custom_indent():
    index = small_tree()
    options = FormatOptions(label="name", indent="  ")
    assert [item.label for item in index.format_tree(1, options)] == [
        "Root",
        "  ├ <2>",
        "  │  ├ <4>",
        "  │  └ <5>",
        "  └ <3>",
        "    └ <6>",
    ]


class TestLabelDegradation(unittest.TestCase):
    """Label failures render as empty text; formatting never fails."""

    def setUp(self):
        self.tree = load_sample()

    def test_missing_field(self):
        labels = [item.label for item in self.tree.format_tree(3, FormatOptions(label="missing"))]
        self.assertEqual(labels, ["", " └ "])

    def test_non_string_field(self):
        labels = [item.label for item in self.tree.format_tree(3, FormatOptions(label="id"))]
        self.assertEqual(labels, ["", " └ "])

    def test_callable_raising(self):
        def explode(category):
            raise KeyError("no label")

        labels = [item.label for item in self.tree.format_tree(3, FormatOptions(label=explode))]
        self.assertEqual(labels, ["", " └ "])

    def test_partial_failure(self):
        def odd_only(category):
            if category.id % 2 == 0:
                return None
            return category.title

        labels = [item.label for item in self.tree.format_tree(3, FormatOptions(label=odd_only))]
        self.assertEqual(labels, ["Child 2", " └ "])

    def test_label_failures_are_logged(self):
        with self.assertLogs("flattree.core.formatter", level="DEBUG") as logs:
            self.tree.format_tree(3, FormatOptions(label="missing"))
        self.assertTrue(any("Label unavailable" in line for line in logs.output))


class TestFormatOptions(unittest.TestCase):
    """Option defaults and normalization."""

    def test_defaults(self):
        options = FormatOptions()
        self.assertEqual(options.label, "title")
        self.assertEqual(options.indent, " ")
        self.assertEqual(tuple(options.icons), DEFAULT_ICONS)
        self.assertEqual(options.continuation, "│")
        self.assertEqual(options.branch, "├ ")
        self.assertEqual(options.last_branch, "└ ")

    def test_unusable_values_fall_back(self):
        options = FormatOptions(label="", indent="", icons=("x",)).normalized()
        self.assertEqual(options.label, "title")
        self.assertEqual(options.indent, " ")
        self.assertEqual(options.icons, DEFAULT_ICONS)

    def test_fallback_renders_like_defaults(self):
        tree = load_sample()
        broken = FormatOptions(label=None, indent="", icons=["a", "b"])
        self.assertEqual(tree.render_tree(1, broken), tree.render_tree(1))

    def test_ascii_preset(self):
        options = FormatOptions.ascii(label="name")
        self.assertEqual(options.label, "name")
        self.assertEqual(options.icons, ("|", "|-- ", "`-- "))

    def test_bad_label_type(self):
        with self.assertRaises(TypeError):
            load_sample().format_tree(1, FormatOptions(label=42))


def test_make_selector():
    assert isinstance(make_selector("title"), FieldLabel)
    assert isinstance(make_selector(str.upper), CallableLabel)

    class Upper(LabelSelector):
        def select(self, data):
            return data.title.upper()

    selector = Upper()
    assert make_selector(selector) is selector
    assert selector.text(Category(1, 0, "root")) == "ROOT"
    assert repr(FieldLabel("title")) == "FieldLabel('title')"


@pytest.mark.parametrize("record", [
    {'title': "from dict"},
    Category(1, 0, "from dict"),
])
def test_field_label_reads_keys_and_attributes(record):
    assert FieldLabel("title").text(record) == "from dict"
