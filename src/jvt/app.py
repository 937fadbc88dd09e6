"""Terminal viewer application for JSON records."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Header, Static

from .session import Session
from .splitter import ParseError, load_records
from .widget import JsonTreeView

# Data directory path
_DATA_DIR = Path(__file__).parent / "data"


def _load_data(filename: str) -> str:
    """Load content from data directory."""
    return (_DATA_DIR / filename).read_text(encoding="utf-8")


class JsonViewerApp(App):
    """TUI app that wraps the JsonTreeView widget."""

    CSS_PATH = "app.tcss"
    TITLE = "JSON Viewer"
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(self, session: Session, source: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.source = source

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield JsonTreeView(self.session, id="viewer")
        with Vertical(id="help-panel"):
            with Horizontal(id="help-header"):
                yield Static("[b]Help[/b]", id="help-title")
                yield Button("\u2715", id="help-close", variant="error")
            yield JsonTreeView(
                Session(load_records(_load_data("help.json"))), id="help-viewer"
            )

    def on_mount(self) -> None:
        self._update_title()
        self.query_one("#viewer").focus()
        if self.session.is_empty:
            self.notify("No JSON records in input", severity="warning")

    def _update_title(self) -> None:
        name = self.source or "<stdin>"
        if self.session.is_empty:
            self.sub_title = f"{name} [empty]"
            return
        total = str(self.session.record_count)
        if not self.session.is_complete:
            total += "+"
        self.sub_title = f"{name} [{self.session.active_index + 1}/{total}]"

    # -- Event handlers ----------------------------------------------------

    def _is_help_viewer_focused(self) -> bool:
        focused = self.focused
        return focused is not None and focused.id == "help-viewer"

    def _close_help(self) -> None:
        self.query_one("#help-panel").remove_class("visible")
        self.query_one("#viewer").focus()

    def on_json_tree_view_quit(self, event: JsonTreeView.Quit) -> None:
        if self._is_help_viewer_focused():
            self._close_help()
        else:
            self.exit(return_code=0)

    def on_json_tree_view_help_toggle_requested(self) -> None:
        help_panel = self.query_one("#help-panel")
        help_panel.toggle_class("visible")
        self.log(f"help panel visible={help_panel.has_class('visible')}")
        if help_panel.has_class("visible"):
            self.query_one("#help-viewer").focus()
        else:
            self.query_one("#viewer").focus()

    def on_json_tree_view_record_changed(
        self, event: JsonTreeView.RecordChanged
    ) -> None:
        if not self._is_help_viewer_focused():
            self._update_title()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close":
            self._close_help()


# -- Command line ------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jvt",
        description="Browse concatenated JSON records in the terminal",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="",
        help="JSON file to view (default: standard input)",
    )
    parser.add_argument(
        "-r", "--record",
        type=int,
        default=1,
        metavar="N",
        help="record to show first, 1-based (default: 1)",
    )
    parser.add_argument(
        "-d", "--collapse-depth",
        type=int,
        default=None,
        metavar="DEPTH",
        help="start with containers deeper than DEPTH collapsed",
    )
    return parser


def read_input(file_path: str) -> str:
    """Read the whole input: *file_path*, or standard input when empty."""
    if file_path and file_path != "-":
        return Path(file_path).read_text(encoding="utf-8")
    return sys.stdin.read()


def reattach_terminal() -> None:
    """Point file descriptor 0 at the controlling terminal.

    Needed after consuming piped input so that key events can be read.
    """
    fd = os.open("/dev/tty", os.O_RDONLY)
    try:
        os.dup2(fd, 0)
    finally:
        os.close(fd)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.record < 1:
        parser.error("--record must be 1 or greater")
    if args.collapse_depth is not None and args.collapse_depth < 0:
        parser.error("--collapse-depth must be 0 or greater")

    file_path: str = args.file
    from_stdin = not file_path or file_path == "-"
    if from_stdin and sys.stdin.isatty():
        parser.error("no input: pass FILE or pipe JSON on standard input")

    source = "<stdin>" if from_stdin else file_path
    try:
        text = read_input(file_path)
    except UnicodeDecodeError as exc:
        print(f"jvt: {source}: not UTF-8 text: {exc.reason}", file=sys.stderr)
        sys.exit(1)
    except OSError as exc:
        print(f"jvt: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        records = load_records(text)
    except ParseError as exc:
        print(f"jvt: {source}: {exc}", file=sys.stderr)
        sys.exit(1)

    if from_stdin:
        try:
            reattach_terminal()
        except OSError as exc:
            print(f"jvt: cannot open terminal: {exc}", file=sys.stderr)
            sys.exit(1)

    session = Session(
        records,
        collapse_depth=args.collapse_depth,
        start_index=args.record - 1,
    )
    app = JsonViewerApp(session, source=source)
    app.run()
    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
