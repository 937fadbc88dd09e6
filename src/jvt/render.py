"""Project a tree onto a bounded viewport.

Nothing here mutates the tree, the cursor or the search state; callers keep
the returned ``Viewport.top`` and pass it back as ``scroll_top`` next time.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import Enum, auto

from jvt.session import SearchState
from jvt.tree import Node, Path, Tree
from jvt.values import ValueKind

# Lines kept between the cursor and the window edges while scrolling.
SCROLL_MARGIN = 2
INDENT = "  "
MARKER_COLLAPSED = "▸ "
MARKER_EXPANDED = "▾ "
MARKER_LEAF = "  "
ELLIPSIS = "…"

_SCALAR_ROLES = {
    ValueKind.NULL: "null",
    ValueKind.BOOL: "bool",
    ValueKind.NUMBER: "number",
    ValueKind.STRING: "string",
}


class MatchMark(Enum):
    NONE = auto()
    MATCH = auto()
    CURRENT = auto()


@dataclass
class DisplayLine:
    path: Path
    depth: int
    segments: list[tuple[str, str]] = field(default_factory=list)
    is_cursor: bool = False
    match: MatchMark = MatchMark.NONE

    @property
    def text(self) -> str:
        return "".join(text for text, _role in self.segments)


@dataclass
class Viewport:
    lines: list[DisplayLine]
    top: int
    total: int
    cursor_index: int


# -- Display width -------------------------------------------------------------

_char_width_cache: dict[str, int] = {}


def char_width(ch: str) -> int:
    """Display width of a character (2 for fullwidth/wide)."""
    if ch < "\u0100":
        return 1
    w = _char_width_cache.get(ch)
    if w is None:
        w = 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
        _char_width_cache[ch] = w
    return w


def text_width(text: str) -> int:
    if text.isascii():
        return len(text)
    return sum(char_width(ch) for ch in text)


def truncate_segments(
    segments: list[tuple[str, str]], width: int
) -> list[tuple[str, str]]:
    """Cut *segments* to *width* display columns, ending with an ellipsis."""
    if width <= 0:
        return []
    if sum(text_width(text) for text, _ in segments) <= width:
        return segments
    budget = width - 1
    result: list[tuple[str, str]] = []
    last_role = segments[0][1] if segments else ""
    for text, role in segments:
        if budget <= 0:
            break
        kept = []
        for ch in text:
            cw = char_width(ch)
            if cw > budget:
                budget = 0
                break
            kept.append(ch)
            budget -= cw
        if kept:
            result.append(("".join(kept), role))
            last_role = role
    result.append((ELLIPSIS, last_role))
    return result


# -- Line synthesis ------------------------------------------------------------


def line_segments(node: Node) -> list[tuple[str, str]]:
    """Segments for one node, before width truncation."""
    segments = [(INDENT * node.depth, "indent")]
    kind = node.value.kind
    if node.is_container:
        marker = MARKER_COLLAPSED if node.collapsed else MARKER_EXPANDED
    else:
        marker = MARKER_LEAF
    segments.append((marker, "marker"))
    if node.path:
        segments.append((node.label, "index" if node.is_index else "key"))
        segments.append((": ", "punct"))

    if kind == ValueKind.OBJECT:
        opener = "{…}" if node.collapsed else "{"
    elif kind == ValueKind.ARRAY:
        opener = "[…]" if node.collapsed else "["
    elif kind in _SCALAR_ROLES:
        segments.append((node.value.to_text(), _SCALAR_ROLES[kind]))
        return segments
    else:
        raise TypeError(f"unknown value kind: {kind!r}")
    segments.append((opener, "punct"))
    segments.append((f" {node.summary()}", "summary"))
    return segments


# -- Windowing -----------------------------------------------------------------


def scroll_window(cursor_index: int, total: int, height: int, top: int = 0) -> int:
    """First visible index keeping *cursor_index* inside a *height* window.

    Scrolls only as far as needed to keep the cursor ``SCROLL_MARGIN``
    lines away from either edge.
    """
    if height <= 0 or total <= 0:
        return 0
    margin = min(SCROLL_MARGIN, (height - 1) // 2)
    if cursor_index < top + margin:
        top = cursor_index - margin
    elif cursor_index > top + height - 1 - margin:
        top = cursor_index - (height - 1 - margin)
    top = min(top, total - height)
    return max(0, top)


def render(
    tree: Tree,
    cursor: Path,
    search: SearchState | None,
    height: int,
    width: int,
    scroll_top: int = 0,
) -> Viewport:
    nodes = tree.visible_nodes()
    cursor_index = 0
    for i, node in enumerate(nodes):
        if node.path == cursor:
            cursor_index = i
            break

    top = scroll_window(cursor_index, len(nodes), height, scroll_top)
    window = nodes[top : top + max(0, height)]

    matches: set[Path] = set()
    current: Path | None = None
    if search is not None:
        matches = set(search.matches)
        current = search.current_path

    lines = []
    for node in window:
        if node.path == current:
            mark = MatchMark.CURRENT
        elif node.path in matches:
            mark = MatchMark.MATCH
        else:
            mark = MatchMark.NONE
        lines.append(
            DisplayLine(
                path=node.path,
                depth=node.depth,
                segments=truncate_segments(line_segments(node), width),
                is_cursor=node.path == cursor,
                match=mark,
            )
        )
    return Viewport(lines=lines, top=top, total=len(nodes), cursor_index=cursor_index)
