"""Interactive view state for the standup dashboard.

``ViewState`` is a passive record mutated by the input router. The helpers
here restore its invariants after transitions that could invalidate a
selection or a scroll offset. ``SummaryPopup`` is the one piece shared with
the background summary thread and guards every field with a lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum

from .timeframe import DateRange


class FocusArea(Enum):
    SIDEBAR = "sidebar"
    COMMIT_LIST = "commit_list"
    DETAIL = "detail"


class CommitTab(Enum):
    TIMEFRAME = "timeframe"
    SELECTION = "selection"
    STATS = "stats"


@dataclass(frozen=True)
class RepoScope:
    """Either every repository (``index is None``) or one repository index."""

    index: int | None = None

    @classmethod
    def repo(cls, index: int) -> RepoScope:
        if index < 0:
            raise ValueError("repository index must be non-negative")
        return cls(index)

    @property
    def is_all(self) -> bool:
        return self.index is None

    def __str__(self) -> str:
        return "ALL" if self.index is None else f"repo[{self.index}]"


RepoScope.ALL = RepoScope()


@dataclass(frozen=True)
class PopupSnapshot:
    visible: bool
    loading: bool
    text: str
    scroll: int
    frame: int


class SummaryPopup:
    """AI-summary modal state behind one mutex.

    Foreground code uses every method; the background request thread only
    calls ``complete``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._visible = False
        self._loading = False
        self._text = ""
        self._scroll = 0
        self._frame = 0

    def snapshot(self) -> PopupSnapshot:
        with self._lock:
            return PopupSnapshot(self._visible, self._loading, self._text, self._scroll, self._frame)

    @property
    def visible(self) -> bool:
        with self._lock:
            return self._visible

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._loading

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    def show_loading(self, text: str) -> None:
        with self._lock:
            self._visible = True
            self._loading = True
            self._text = text
            self._scroll = 0

    def show_message(self, text: str) -> None:
        with self._lock:
            self._visible = True
            self._loading = False
            self._text = text
            self._scroll = 0

    def complete(self, text: str) -> None:
        """Deliver a request result; visibility is left to the foreground."""
        with self._lock:
            self._text = text
            self._loading = False

    def hide(self) -> None:
        with self._lock:
            self._visible = False
            self._scroll = 0

    def scroll_by(self, delta: int, max_scroll: int) -> bool:
        with self._lock:
            prev = self._scroll
            self._scroll = max(0, min(self._scroll + delta, max(0, max_scroll)))
            return self._scroll != prev

    def clamp_scroll(self, max_scroll: int) -> None:
        with self._lock:
            self._scroll = max(0, min(self._scroll, max(0, max_scroll)))

    def tick(self) -> bool:
        """Advance the spinner frame while loading; returns whether it moved."""
        with self._lock:
            if not (self._visible and self._loading):
                return False
            self._frame += 1
            return True


@dataclass
class MarkedPopup:
    visible: bool = False
    scroll: int = 0


@dataclass
class ViewState:
    focus: FocusArea = FocusArea.SIDEBAR
    tab: CommitTab = CommitTab.TIMEFRAME
    scope: RepoScope = RepoScope.ALL
    selected_commit: int | None = None
    show_details: bool = False
    filter_by_user: bool = True
    detailed_commit_view: bool = False
    sidebar_scroll: int = 0
    commit_list_scroll: int = 0
    detail_scroll: int = 0
    interval_index: int = 0
    date_range: DateRange | None = None
    marked: set[str] = field(default_factory=set)
    popup: SummaryPopup = field(default_factory=SummaryPopup)
    marked_popup: MarkedPopup = field(default_factory=MarkedPopup)
    status_message: str = ""
    dirty: bool = True

    @property
    def modal_visible(self) -> bool:
        return self.marked_popup.visible or self.popup.visible

    def is_marked(self, commit_hash: str) -> bool:
        return commit_hash in self.marked

    def toggle_mark(self, commit_hash: str) -> bool:
        """Flip mark membership of ``commit_hash``; returns the new state."""
        if commit_hash in self.marked:
            self.marked.discard(commit_hash)
            return False
        self.marked.add(commit_hash)
        return True

    def close_details(self) -> None:
        self.show_details = False
        self.detail_scroll = 0
        if self.focus == FocusArea.DETAIL:
            self.focus = FocusArea.COMMIT_LIST

    def clear_selection(self) -> None:
        self.selected_commit = None
        self.commit_list_scroll = 0
        self.close_details()

    def select_commit(self, index: int | None) -> None:
        """Move the selection; the detail pane follows with its scroll reset."""
        if index != self.selected_commit:
            self.detail_scroll = 0
        self.selected_commit = index
        if index is None:
            self.close_details()

    def revalidate_selection(self, active_count: int) -> None:
        """Re-clamp the selection after the active commit set changed size."""
        if self.selected_commit is None:
            return
        if active_count <= 0:
            self.clear_selection()
            return
        if self.selected_commit >= active_count:
            self.select_commit(active_count - 1)

    def revalidate_scope(self, repo_count: int) -> None:
        """Reset to ALL when the scoped repository no longer exists."""
        if self.scope.index is not None and self.scope.index >= repo_count:
            self.scope = RepoScope.ALL
            self.sidebar_scroll = 0
            self.clear_selection()

    def after_reload(self, repo_count: int) -> None:
        """Restore invariants after CommitData was replaced wholesale."""
        self.revalidate_scope(repo_count)
        self.clear_selection()
        self.detail_scroll = 0
        self.dirty = True
