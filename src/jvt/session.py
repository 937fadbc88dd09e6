"""Per-run viewer state: records, the active record and per-record views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Sequence

from jvt.splitter import Record
from jvt.tree import ROOT, Path, Tree, build


@dataclass
class SearchState:
    """A committed search over one record's tree."""

    term: str
    matches: list[Path]
    current: int = 0

    @property
    def current_path(self) -> Path | None:
        if not self.matches:
            return None
        return self.matches[self.current]

    def advance(self, step: int) -> Path | None:
        """Move the current match by *step*, wrapping around."""
        if not self.matches:
            return None
        self.current = (self.current + step) % len(self.matches)
        return self.matches[self.current]


@dataclass
class RecordView:
    record: Record
    tree: Tree
    cursor: Path = ROOT
    search: SearchState | None = None
    scroll_top: int = 0


class Cursor(NamedTuple):
    record: int
    path: Path


class Session:
    """Records of one run plus the navigation state kept for each of them.

    A sequence of records is taken whole; any other iterable is pulled only
    as far as navigation needs. Trees are built on the first visit to a
    record and cached, so switching back restores its cursor, collapse
    state and search.
    """

    def __init__(
        self,
        records: Iterable[Record],
        *,
        collapse_depth: int | None = None,
        start_index: int = 0,
    ) -> None:
        if isinstance(records, Sequence):
            self._source = iter(())
            self._records: list[Record] = list(records)
            self._exhausted = True
        else:
            self._source = iter(records)
            self._records = []
            self._exhausted = False
        self._views: dict[int, RecordView] = {}
        self.collapse_depth = collapse_depth
        self.search_history: list[str] = []
        self.active_index = 0
        self.select(max(0, start_index))

    # -- Records -----------------------------------------------------------

    def _realize(self, index: int) -> bool:
        """Pull records from the source until *index* exists."""
        while not self._exhausted and len(self._records) <= index:
            try:
                self._records.append(next(self._source))
            except StopIteration:
                self._exhausted = True
        return index < len(self._records)

    @property
    def record_count(self) -> int:
        """Records realized so far."""
        return len(self._records)

    @property
    def is_complete(self) -> bool:
        return self._exhausted

    @property
    def is_empty(self) -> bool:
        return not self._realize(0)

    def record(self, index: int) -> Record:
        if not self._realize(index):
            raise IndexError(index)
        return self._records[index]

    # -- Views -------------------------------------------------------------

    @property
    def view(self) -> RecordView | None:
        """The active record's view; None for an empty session."""
        if self.is_empty:
            return None
        view = self._views.get(self.active_index)
        if view is None:
            record = self._records[self.active_index]
            view = RecordView(
                record=record, tree=build(record.value, self.collapse_depth)
            )
            self._views[self.active_index] = view
        return view

    @property
    def cursor(self) -> Cursor | None:
        view = self.view
        if view is None:
            return None
        return Cursor(self.active_index, view.cursor)

    def select(self, index: int) -> bool:
        """Make *index* active, clamped to the available records.

        Returns True when the active record changed.
        """
        index = max(0, index)
        if not self._realize(index):
            index = max(0, len(self._records) - 1)
        changed = index != self.active_index
        self.active_index = index
        return changed

    def next_record(self) -> bool:
        return self.select(self.active_index + 1)

    def previous_record(self) -> bool:
        return self.select(self.active_index - 1)

    def add_search_history(self, term: str, limit: int = 50) -> None:
        if term in self.search_history:
            self.search_history.remove(term)
        self.search_history.insert(0, term)
        del self.search_history[limit:]
