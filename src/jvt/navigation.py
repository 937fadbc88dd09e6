"""Key handling: maps key presses onto cursor, collapse and search changes."""

from __future__ import annotations

from enum import Enum, auto

from jvt.session import RecordView, SearchState, Session
from jvt.tree import Node, Path


class Mode(Enum):
    BROWSE = auto()
    SEARCH = auto()


class Action(Enum):
    MOVE_DOWN = auto()
    MOVE_UP = auto()
    EXPAND = auto()
    COLLAPSE = auto()
    TOGGLE = auto()
    TOP = auto()
    BOTTOM = auto()
    PAGE_DOWN = auto()
    PAGE_UP = auto()
    EXPAND_ALL = auto()
    COLLAPSE_ALL = auto()
    NEXT_RECORD = auto()
    PREV_RECORD = auto()
    ENTER_SEARCH = auto()
    NEXT_MATCH = auto()
    PREV_MATCH = auto()
    HELP = auto()
    QUIT = auto()


# Named keys take precedence over the typed character.
KEY_ACTIONS = {
    "down": Action.MOVE_DOWN,
    "up": Action.MOVE_UP,
    "right": Action.EXPAND,
    "left": Action.COLLAPSE,
    "enter": Action.TOGGLE,
    "space": Action.TOGGLE,
    "home": Action.TOP,
    "end": Action.BOTTOM,
    "pagedown": Action.PAGE_DOWN,
    "ctrl+f": Action.PAGE_DOWN,
    "pageup": Action.PAGE_UP,
    "ctrl+b": Action.PAGE_UP,
}

CHAR_ACTIONS = {
    "j": Action.MOVE_DOWN,
    "k": Action.MOVE_UP,
    "l": Action.EXPAND,
    "h": Action.COLLAPSE,
    " ": Action.TOGGLE,
    "g": Action.TOP,
    "G": Action.BOTTOM,
    "E": Action.EXPAND_ALL,
    "C": Action.COLLAPSE_ALL,
    "]": Action.NEXT_RECORD,
    "[": Action.PREV_RECORD,
    "/": Action.ENTER_SEARCH,
    "n": Action.NEXT_MATCH,
    "N": Action.PREV_MATCH,
    "?": Action.HELP,
    "q": Action.QUIT,
}


def node_matches(node: Node, term: str) -> bool:
    """Case-insensitive substring match on the label or scalar text."""
    needle = term.casefold()
    if needle in node.label.casefold():
        return True
    if node.is_container:
        return False
    return needle in node.value.search_text().casefold()


def find_matches(view: RecordView, term: str) -> list[Path]:
    """Paths of all matching nodes in pre-order, ignoring collapse state."""
    return [node.path for node in view.tree.walk() if node_matches(node, term)]


class Navigator:
    """Browse/search state machine over a :class:`Session`.

    Every transition leaves the active record's cursor on a visible node.
    """

    def __init__(self, session: Session, *, page_size: int = 10) -> None:
        self.session = session
        self.page_size = page_size
        self.mode: Mode = Mode.BROWSE
        self.search_buffer: str = ""
        self.status_msg: str = ""
        self.done: bool = False
        self._history_idx: int = -1

    @property
    def view(self) -> RecordView | None:
        return self.session.view

    # =====================================================================
    # Key dispatch
    # =====================================================================

    def handle_key(self, key: str, character: str | None = None) -> Action | None:
        """Apply one key press. Returns the browse action it triggered, if any."""
        if self.mode == Mode.SEARCH:
            self._handle_search(key, character or "")
            return None
        action = KEY_ACTIONS.get(key)
        if action is None and character:
            action = CHAR_ACTIONS.get(character)
        if action is not None:
            self.apply(action)
        return action

    def _handle_search(self, key: str, char: str) -> None:
        history = self.session.search_history
        if key == "escape":
            self.cancel_search()
        elif key == "enter":
            self.commit_search()
        elif key == "backspace":
            if self.search_buffer:
                self.search_buffer = self.search_buffer[:-1]
                self._history_idx = -1
            else:
                self.cancel_search()
        elif key == "up":
            if self._history_idx < len(history) - 1:
                self._history_idx += 1
                self.search_buffer = history[self._history_idx]
        elif key == "down":
            if self._history_idx > 0:
                self._history_idx -= 1
                self.search_buffer = history[self._history_idx]
            elif self._history_idx == 0:
                self._history_idx = -1
                self.search_buffer = ""
        elif char and char.isprintable():
            self.search_buffer += char
            self._history_idx = -1

    def apply(self, action: Action) -> None:
        if action == Action.QUIT:
            self.done = True
            return
        if action == Action.HELP:
            return
        view = self.view
        if view is None:
            self.status_msg = "(no records)"
            return
        self.status_msg = ""

        if action == Action.MOVE_DOWN:
            self._move(view, 1)
        elif action == Action.MOVE_UP:
            self._move(view, -1)
        elif action == Action.PAGE_DOWN:
            self._move(view, max(1, self.page_size))
        elif action == Action.PAGE_UP:
            self._move(view, -max(1, self.page_size))
        elif action == Action.EXPAND:
            self._expand(view)
        elif action == Action.COLLAPSE:
            self._collapse(view)
        elif action == Action.TOGGLE:
            view.tree.toggle(view.cursor)
        elif action == Action.TOP:
            view.cursor = view.tree.root.path
        elif action == Action.BOTTOM:
            view.cursor = view.tree.last_visible()
        elif action == Action.EXPAND_ALL:
            view.tree.set_collapsed_all(False)
        elif action == Action.COLLAPSE_ALL:
            view.tree.set_collapsed_all(True)
        elif action == Action.NEXT_RECORD:
            if not self.session.next_record():
                self.status_msg = "last record"
        elif action == Action.PREV_RECORD:
            if not self.session.previous_record():
                self.status_msg = "first record"
        elif action == Action.ENTER_SEARCH:
            self.mode = Mode.SEARCH
            self.search_buffer = ""
            self._history_idx = -1
        elif action == Action.NEXT_MATCH:
            self._step_match(view, 1)
        elif action == Action.PREV_MATCH:
            self._step_match(view, -1)

        self._resolve_cursor()

    def _resolve_cursor(self) -> None:
        view = self.view
        if view is not None:
            view.cursor = view.tree.visible_ancestor(view.cursor)

    # =====================================================================
    # Browse transitions
    # =====================================================================

    def _move(self, view: RecordView, step: int) -> None:
        tree = view.tree
        advance = tree.next_visible if step > 0 else tree.previous_visible
        path = view.cursor
        for _ in range(abs(step)):
            following = advance(path)
            if following is None:
                break
            path = following
        view.cursor = path

    def _expand(self, view: RecordView) -> None:
        node = view.tree.node(view.cursor)
        if not node.is_container:
            return
        if node.collapsed:
            node.collapsed = False
        elif node.children:
            view.cursor = node.children[0].path

    def _collapse(self, view: RecordView) -> None:
        node = view.tree.node(view.cursor)
        if node.is_container and not node.collapsed and node.children:
            node.collapsed = True
        elif node.parent_path is not None:
            view.cursor = node.parent_path

    # =====================================================================
    # Search
    # =====================================================================

    def cancel_search(self) -> None:
        """Drop the pending term; the last committed search stays."""
        self.mode = Mode.BROWSE
        self.search_buffer = ""
        self._history_idx = -1
        self.status_msg = ""

    def commit_search(self) -> None:
        term = self.search_buffer
        if not term:
            self.cancel_search()
            return
        self.mode = Mode.BROWSE
        self.search_buffer = ""
        self._history_idx = -1
        self.session.add_search_history(term)
        view = self.view
        if view is None:
            self.status_msg = "(no records)"
            return
        view.search = SearchState(term=term, matches=find_matches(view, term))
        if not view.search.matches:
            self.status_msg = f"Pattern not found: {term}"
            return
        self._goto_match(view)

    def _step_match(self, view: RecordView, step: int) -> None:
        search = view.search
        if search is None:
            self.status_msg = "no previous search"
            return
        if not search.matches:
            self.status_msg = f"Pattern not found: {search.term}"
            return
        before = search.current
        search.advance(step)
        self._goto_match(view)
        if step > 0 and search.current <= before:
            self.status_msg = "search hit BOTTOM, continuing at TOP"
        elif step < 0 and search.current >= before:
            self.status_msg = "search hit TOP, continuing at BOTTOM"

    def _goto_match(self, view: RecordView) -> None:
        """Reveal the current match and put the cursor on it."""
        search = view.search
        path = search.current_path
        view.tree.expand_to(path)
        view.cursor = path
        self.status_msg = f"match {search.current + 1}/{len(search.matches)}"

