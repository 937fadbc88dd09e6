"""Tests for the navigable tree model."""

import json

import pytest

from jvt.tree import build, format_path
from jvt.values import ValueKind, decode

DOC = '{"name": "jvt", "tags": ["a", "b"], "meta": {"deep": {"x": 1}}, "empty": {}}'


def _tree(text=DOC, collapse_depth=None):
    return build(decode(text), collapse_depth)


def _rebuild(node):
    """Reassemble plain data from a node's subtree."""
    kind = node.value.kind
    if kind == ValueKind.OBJECT:
        return {child.path[-1]: _rebuild(child) for child in node.children}
    if kind == ValueKind.ARRAY:
        return [_rebuild(child) for child in node.children]
    return node.value.to_python()


class TestBuild:
    """Tree construction."""

    def test_paths_are_unique(self):
        tree = _tree()
        paths = [node.path for node in tree.walk()]
        assert len(paths) == len(set(paths)) == len(tree)

    def test_preorder_paths(self):
        tree = _tree()
        assert [node.path for node in tree.walk()] == [
            (),
            ("name",),
            ("tags",),
            ("tags", 0),
            ("tags", 1),
            ("meta",),
            ("meta", "deep"),
            ("meta", "deep", "x"),
            ("empty",),
        ]

    def test_labels_and_depths(self):
        tree = _tree()
        assert tree.root.label == ""
        assert tree.root.depth == 0
        assert tree.node(("tags", 1)).label == "1"
        assert tree.node(("meta", "deep", "x")).depth == 3

    def test_key_and_index_steps_differ(self):
        tree = _tree('{"0": "key", "list": ["index"]}')
        assert tree.node(("0",)).value.data == "key"
        assert tree.get((0,)) is None
        assert tree.node(("list", 0)).is_index
        assert not tree.node(("0",)).is_index

    def test_deterministic(self):
        first = [n.path for n in _tree().walk()]
        second = [n.path for n in _tree().walk()]
        assert first == second

    def test_structure_round_trip(self):
        for text in [DOC, "[]", "1", '[[], {}, [[1]], {"a": {"b": [null]}}]']:
            assert _rebuild(_tree(text).root) == json.loads(text)

    def test_default_all_expanded(self):
        tree = _tree()
        assert not any(node.collapsed for node in tree.walk())

    def test_collapse_depth(self):
        tree = _tree('{"x": {"y": {"z": 1}}}', collapse_depth=1)
        assert not tree.root.collapsed
        assert not tree.node(("x",)).collapsed
        assert tree.node(("x", "y")).collapsed
        assert [n.path for n in tree.visible_nodes()] == [(), ("x",), ("x", "y")]

    def test_collapse_depth_zero(self):
        tree = _tree(collapse_depth=0)
        assert not tree.root.collapsed
        assert tree.node(("tags",)).collapsed

    def test_scalars_never_collapsed(self):
        tree = _tree(collapse_depth=0)
        assert not tree.node(("name",)).collapsed

    def test_summary(self):
        tree = _tree()
        assert tree.root.summary() == "4 keys"
        assert tree.node(("tags",)).summary() == "2 items"
        assert tree.node(("meta", "deep")).summary() == "1 key"
        assert tree.node(("name",)).summary() == ""


class TestCollapseState:
    """Toggling and bulk collapse."""

    def test_double_toggle_restores(self):
        tree = _tree()
        for node in tree.walk():
            before = node.collapsed
            tree.toggle(node.path)
            tree.toggle(node.path)
            assert node.collapsed == before

    def test_toggle_hides_children(self):
        tree = _tree()
        assert tree.toggle(("tags",))
        paths = [n.path for n in tree.visible_nodes()]
        assert ("tags",) in paths
        assert ("tags", 0) not in paths

    def test_toggle_keeps_children(self):
        tree = _tree()
        tree.toggle(("tags",))
        assert tree.node(("tags", 0)).value.data == "a"

    def test_toggle_scalar_is_noop(self):
        tree = _tree()
        assert tree.toggle(("name",)) is False
        assert not tree.node(("name",)).collapsed

    def test_toggle_unknown_path(self):
        with pytest.raises(KeyError):
            _tree().toggle(("missing",))

    def test_set_collapsed_all(self):
        tree = _tree()
        tree.set_collapsed_all(True)
        assert all(n.collapsed for n in tree.walk() if n.is_container)
        assert [n.path for n in tree.visible_nodes()] == [()]
        tree.set_collapsed_all(False)
        assert len(tree.visible_nodes()) == len(tree)

    def test_set_collapsed(self):
        tree = _tree()
        tree.set_collapsed(("meta",), True)
        assert tree.node(("meta",)).collapsed
        tree.set_collapsed(("name",), True)
        assert not tree.node(("name",)).collapsed

    def test_expand_to(self):
        tree = _tree(collapse_depth=0)
        tree.set_collapsed(("meta", "deep"), True)
        tree.expand_to(("meta", "deep", "x"))
        assert tree.is_visible(("meta", "deep", "x"))

    def test_expand_to_leaves_target_alone(self):
        tree = _tree()
        tree.set_collapsed(("meta",), True)
        tree.expand_to(("meta",))
        assert tree.node(("meta",)).collapsed

    def test_is_visible(self):
        tree = _tree()
        tree.toggle(("meta",))
        assert tree.is_visible(("meta",))
        assert not tree.is_visible(("meta", "deep"))
        assert not tree.is_visible(("nope",))

    def test_visible_ancestor(self):
        tree = _tree()
        tree.toggle(("meta", "deep"))
        assert tree.visible_ancestor(("meta", "deep", "x")) == ("meta", "deep")
        tree.toggle(("meta",))
        assert tree.visible_ancestor(("meta", "deep", "x")) == ("meta",)
        assert tree.visible_ancestor(("name",)) == ("name",)


class TestFormatPath:
    def test_root(self):
        assert format_path(()) == "$"

    def test_mixed(self):
        assert format_path(("a", 0, "b c")) == '$.a[0]["b c"]'


class TestStepping:
    """Visible neighbours computed without flattening."""

    def _assert_matches_flat_order(self, tree):
        order = [node.path for node in tree.visible_nodes()]
        for before, after in zip(order, order[1:]):
            assert tree.next_visible(before) == after
            assert tree.previous_visible(after) == before
        assert tree.next_visible(order[-1]) is None
        assert tree.previous_visible(order[0]) is None
        assert tree.last_visible() == order[-1]

    def test_fully_expanded(self):
        self._assert_matches_flat_order(_tree())

    def test_with_collapsed_subtrees(self):
        tree = _tree()
        tree.toggle(("tags",))
        tree.toggle(("meta", "deep"))
        self._assert_matches_flat_order(tree)

    def test_collapsed_root(self):
        tree = _tree()
        tree.toggle(())
        assert tree.next_visible(()) is None
        assert tree.last_visible() == ()

    def test_positions(self):
        tree = _tree()
        assert [child.position for child in tree.root.children] == [0, 1, 2, 3]


class TestDeepNesting:
    def test_builds_beyond_recursion_limit(self):
        depth = 500
        tree = _tree("[" * depth + "]" * depth)
        deepest = (0,) * (depth - 1)
        assert tree.node(deepest).depth == depth - 1
        assert tree.last_visible() == deepest
        assert len(tree.visible_nodes()) == depth
        assert format_path(deepest).startswith("$[0][0]")
