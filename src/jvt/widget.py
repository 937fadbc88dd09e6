"""Tree view widget for browsing JSON records."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from jvt.navigation import Action, Mode, Navigator
from jvt.render import MatchMark, render, text_width, truncate_segments
from jvt.session import Session
from jvt.tree import format_path


def _fit(text: str, width: int) -> str:
    """Cut plain *text* to *width* display columns."""
    return "".join(part for part, _ in truncate_segments([(text, "")], width))


class JsonTreeView(Widget, can_focus=True):
    """A read-only, collapsible JSON tree Textual widget.

    Supported keys:
      BROWSE: j k h l / arrows  g G Home End  PgUp PgDn  Enter Space
              E C  [ ]  / n N  ?  q
      SEARCH: typing / Backspace / Up Down (history) / Enter / Escape
    """

    DEFAULT_CSS = """
    JsonTreeView {
        height: 1fr;
        background: $surface;
        padding: 0 1;
    }
    """

    # -- Messages ----------------------------------------------------------

    @dataclass
    class Quit(Message):
        pass

    @dataclass
    class HelpToggleRequested(Message):
        pass

    @dataclass
    class RecordChanged(Message):
        index: int  # 0-based
        count: int

    # -- Init --------------------------------------------------------------

    def __init__(
        self,
        session: Session,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.session = session
        self.navigator = Navigator(session)

    # =====================================================================
    # Rendering
    # =====================================================================

    _MODE_STYLE = {
        Mode.BROWSE: "bold white on dark_green",
        Mode.SEARCH: "bold white on dark_magenta",
    }
    _ROLE_STYLE = {
        "indent": "",
        "marker": "dim",
        "key": "cyan",
        "index": "dim cyan",
        "punct": "white",
        "string": "green",
        "number": "yellow",
        "bool": "magenta",
        "null": "magenta",
        "summary": "dim italic",
    }
    _MATCH_STYLE = {
        MatchMark.MATCH: "black on dark_goldenrod",
        MatchMark.CURRENT: "black on yellow",
    }

    def render(self) -> Text:
        region = self.content_region
        return self.render_lines(region.width, region.height)

    def render_lines(self, width: int, height: int) -> Text:
        """Build the widget's text for a *width* x *height* content area."""
        if height < 3 or width < 10:
            return Text("(too small)")

        content_height = height - 2
        self.navigator.page_size = content_height
        result = Text()
        append = result.append
        rows_used = 0

        view = self.session.view
        if view is None:
            append("(no records)\n", style="dim italic")
            rows_used += 1
        else:
            viewport = render(
                view.tree,
                view.cursor,
                view.search,
                content_height,
                width,
                view.scroll_top,
            )
            view.scroll_top = viewport.top
            role_style = self._ROLE_STYLE
            for line in viewport.lines:
                extra = self._MATCH_STYLE.get(line.match, "")
                if line.is_cursor:
                    extra = f"reverse {extra}".strip()
                for text, role in line.segments:
                    style = role_style.get(role, "")
                    if extra and role != "indent":
                        style = f"{style} {extra}".strip()
                    append(text, style=style)
                append("\n")
                rows_used += 1

        # Fill remaining rows with ~
        while rows_used < content_height:
            append("~\n", style="dim blue")
            rows_used += 1

        # status bar: mode, message, then path and record position on the right
        nav = self.navigator
        mode_label = f" {nav.mode.name} "
        append(mode_label, style=self._MODE_STYLE[nav.mode])
        budget = width - len(mode_label) - 2
        if view is None:
            pos = " 0/0 "
        else:
            total = str(self.session.record_count)
            if not self.session.is_complete:
                total += "+"
            record_pos = f"  {self.session.active_index + 1}/{total} "
            path_room = budget - text_width(record_pos) - 1
            path_text = _fit(format_path(view.cursor), path_room)
            pos = f" {path_text}{record_pos}" if path_text else record_pos
        pos = _fit(pos, budget)
        status_msg = _fit(nav.status_msg, budget - text_width(pos))
        spacer_len = budget - text_width(pos) - text_width(status_msg)
        append(f"  {status_msg}")
        if spacer_len > 0:
            append(" " * spacer_len)
        append(pos, style="bold")

        if nav.mode == Mode.SEARCH:
            append(f"\n/{nav.search_buffer}", style="bold magenta")
            append(" ", style="reverse")
        else:
            append("\n")

        return result

    # =====================================================================
    # Key handling
    # =====================================================================

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self._handle_key(event)
        self.refresh()

    def _handle_key(self, event) -> None:
        before = self.session.active_index
        action = self.navigator.handle_key(event.key, event.character)
        if action == Action.QUIT:
            self.post_message(self.Quit())
        elif action == Action.HELP:
            self.post_message(self.HelpToggleRequested())
        elif self.session.active_index != before:
            self.log(f"record {before + 1} -> {self.session.active_index + 1}")
            self.post_message(
                self.RecordChanged(self.session.active_index, self.session.record_count)
            )

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.navigator.apply(Action.MOVE_DOWN)
        self.refresh()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.navigator.apply(Action.MOVE_UP)
        self.refresh()
