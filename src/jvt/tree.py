"""Navigable tree over a JSON value."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterator, Union

from jvt.values import Value, ValueKind

Step = Union[str, int]
Path = tuple  # tuple[Step, ...]

ROOT: Path = ()


@dataclass(eq=False)
class Node:
    """One element of the tree.

    Children are built once and kept whether or not the node is collapsed;
    collapsing only changes visibility.
    """

    path: Path
    depth: int
    label: str
    value: Value
    children: list[Node] = field(default_factory=list)
    collapsed: bool = False
    position: int = 0  # index among the parent's children

    @property
    def is_container(self) -> bool:
        return self.value.is_container

    @property
    def parent_path(self) -> Path | None:
        return self.path[:-1] if self.path else None

    @property
    def child_count(self) -> int:
        return len(self.children)

    @property
    def is_index(self) -> bool:
        """True when this node is an array element."""
        return bool(self.path) and isinstance(self.path[-1], int)

    def summary(self) -> str:
        """Count text for a container: ``3 keys`` or ``1 item``."""
        n = self.child_count
        kind = self.value.kind
        if kind == ValueKind.OBJECT:
            return f"{n} key" if n == 1 else f"{n} keys"
        if kind == ValueKind.ARRAY:
            return f"{n} item" if n == 1 else f"{n} items"
        return ""


class Tree:
    """Nodes of one record, indexed by path."""

    def __init__(self, root: Node) -> None:
        self.root = root
        self._nodes: dict[Path, Node] = {}
        for node in self.walk():
            self._nodes[node.path] = node

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: Path) -> bool:
        return path in self._nodes

    def node(self, path: Path) -> Node:
        return self._nodes[path]

    def get(self, path: Path) -> Node | None:
        return self._nodes.get(path)

    # -- Collapse state ----------------------------------------------------

    def toggle(self, path: Path) -> bool:
        """Flip one container's collapse flag. Returns False for scalars."""
        node = self._nodes[path]
        if not node.is_container:
            return False
        node.collapsed = not node.collapsed
        return True

    def set_collapsed(self, path: Path, collapsed: bool) -> None:
        node = self._nodes[path]
        if node.is_container:
            node.collapsed = collapsed

    def set_collapsed_all(self, collapsed: bool) -> None:
        for node in self._nodes.values():
            if node.is_container:
                node.collapsed = collapsed

    def expand_to(self, path: Path) -> None:
        """Expand every ancestor of *path* so that it becomes visible."""
        for i in range(len(path)):
            self._nodes[path[:i]].collapsed = False

    def is_visible(self, path: Path) -> bool:
        if path not in self._nodes:
            return False
        return not any(self._nodes[path[:i]].collapsed for i in range(len(path)))

    def visible_ancestor(self, path: Path) -> Path:
        """Deepest node on *path* (itself included) that is visible."""
        for i in range(len(path)):
            if self._nodes[path[:i]].collapsed:
                return path[:i]
        return path

    # -- Traversal ---------------------------------------------------------

    def walk(self) -> Iterator[Node]:
        """All nodes in pre-order, regardless of collapse state."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def visible_nodes(self) -> list[Node]:
        """Flattened pre-order traversal, skipping collapsed subtrees.

        Rendering and cursor movement both follow this order.
        """
        result: list[Node] = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            result.append(node)
            if not node.collapsed:
                stack.extend(reversed(node.children))
        return result

    # -- Stepping ----------------------------------------------------------
    #
    # Neighbours in visible_nodes() order, found from parents and siblings
    # in O(depth) without flattening the tree.

    def _last_visible_under(self, node: Node) -> Node:
        while not node.collapsed and node.children:
            node = node.children[-1]
        return node

    def next_visible(self, path: Path) -> Path | None:
        """Path after *path* in visible order, or None at the end."""
        node = self._nodes[path]
        if not node.collapsed and node.children:
            return node.children[0].path
        while node.path:
            parent = self._nodes[node.path[:-1]]
            if node.position + 1 < len(parent.children):
                return parent.children[node.position + 1].path
            node = parent
        return None

    def previous_visible(self, path: Path) -> Path | None:
        """Path before *path* in visible order, or None at the root."""
        if not path:
            return None
        node = self._nodes[path]
        parent = self._nodes[path[:-1]]
        if node.position == 0:
            return parent.path
        return self._last_visible_under(parent.children[node.position - 1]).path

    def last_visible(self) -> Path:
        return self._last_visible_under(self.root).path


def build(value: Value, collapse_depth: int | None = None) -> Tree:
    """Build the tree for *value*.

    Containers deeper than *collapse_depth* start collapsed; ``None``
    leaves everything expanded.
    """
    root = Node(path=ROOT, depth=0, label="", value=value)
    stack = [root]
    while stack:
        node = stack.pop()
        if not node.is_container:
            continue
        node.collapsed = collapse_depth is not None and node.depth > collapse_depth
        for position, (step, child) in enumerate(node.value.children()):
            child_node = Node(
                path=node.path + (step,),
                depth=node.depth + 1,
                label=str(step),
                value=child,
                position=position,
            )
            node.children.append(child_node)
            stack.append(child_node)
    return Tree(root)


def format_path(path: Path) -> str:
    """Render *path* as ``$.key[0].other``."""
    parts = ["$"]
    for step in path:
        if isinstance(step, int):
            parts.append(f"[{step}]")
        elif step.isidentifier():
            parts.append(f".{step}")
        else:
            parts.append(f"[{json.dumps(step, ensure_ascii=False)}]")
    return "".join(parts)
