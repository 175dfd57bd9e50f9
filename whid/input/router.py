"""Keyboard routing for the dashboard.

``InputRouter.handle_key`` is the state-transition function: it reads and
mutates ``ViewState`` and performs the few modeled side effects (reload,
summary dispatch, clipboard write). Reload failures propagate to the caller
with ``ViewState`` untouched; summary and clipboard failures become popup
text or nothing at all.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..clipboard import copy_text_to_clipboard
from ..commit_index import (
    CommitEntry,
    active_entries,
    build_commit_rows,
    clamp_scroll,
    ensure_visible,
    marked_entries,
    max_scroll,
    row_span,
    selected_entry,
    state_count,
    total_lines,
)
from ..commits import CommitData, LoadRequest
from ..config import Settings, missing_key_message
from ..prompts import build_prompt, commits_text, load_template
from ..render.planner import (
    DetailsProvider,
    Layout,
    RenderPlan,
    detail_lines,
    detail_text,
    layout_for_state,
    marked_popup_lines,
    plan_frame,
    popup_lines,
    project_label,
    sidebar_position,
)
from ..state import CommitTab, FocusArea, RepoScope, ViewState
from ..summary import LOADING_TEXT, SummaryDispatcher
from ..timeframe import DateRange, cycle_preset, window_for
from .key_registry import KeyComboBinding, KeyComboRegistry
from .mouse import handle_mouse

logger = logging.getLogger(__name__)

NO_MARKED_TEXT = "No commits marked."
NO_COMMITS_TEXT = "No commits in the current view."

_KEEP = object()


def _terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size((100, 30))
    return size.columns, size.lines


@dataclass(frozen=True)
class RouterContext:
    """Collaborators the router calls out to."""

    load_commits: Callable[[LoadRequest], CommitData]
    dispatcher: SummaryDispatcher
    settings: Settings
    fetch_details: DetailsProvider
    copy_text: Callable[[str], bool] = copy_text_to_clipboard
    terminal_size: Callable[[], tuple[int, int]] = _terminal_size
    now: Callable[[], datetime] = datetime.now
    config_path: Path | None = None


class InputRouter:
    """Owns the loaded ``CommitData`` and routes events into ``ViewState``."""

    def __init__(self, state: ViewState, data: CommitData, context: RouterContext) -> None:
        self.state = state
        self.data = data
        self.context = context
        self.plan: RenderPlan | None = None
        self._bindings = KeyComboRegistry().register_bindings(
            KeyComboBinding(("1",), lambda: self.focus(FocusArea.SIDEBAR)),
            KeyComboBinding(("2",), lambda: self.select_tab(CommitTab.TIMEFRAME)),
            KeyComboBinding(("3",), lambda: self.select_tab(CommitTab.SELECTION)),
            KeyComboBinding(("4",), lambda: self.select_tab(CommitTab.STATS)),
            KeyComboBinding(("TAB",), lambda: self.cycle_timeframe(1)),
            KeyComboBinding(("SHIFT_TAB",), lambda: self.cycle_timeframe(-1)),
            KeyComboBinding(("r",), self.refresh),
            KeyComboBinding(("UP", "k"), lambda: self.move(-1)),
            KeyComboBinding(("DOWN", "j"), lambda: self.move(1)),
            KeyComboBinding(("PAGE_UP",), lambda: self.page(-1)),
            KeyComboBinding(("PAGE_DOWN",), lambda: self.page(1)),
            KeyComboBinding(("LEFT", "h"), lambda: self.cycle_focus(-1)),
            KeyComboBinding(("RIGHT", "l"), lambda: self.cycle_focus(1)),
            KeyComboBinding(("SPACE", "ENTER"), self.toggle_detail),
            KeyComboBinding(("m",), self.toggle_mark_selected),
            KeyComboBinding(("s",), self.open_marked_popup),
            KeyComboBinding(("u",), self.toggle_user_filter),
            KeyComboBinding(("d",), self.toggle_detailed_view),
            KeyComboBinding(("a",), self.summarize_active),
            KeyComboBinding(("A",), self.summarize_marked),
        )
        self._modal_bindings = KeyComboRegistry().register_bindings(
            KeyComboBinding(("UP", "k"), lambda: self.scroll_modal(-1)),
            KeyComboBinding(("DOWN", "j"), lambda: self.scroll_modal(1)),
            KeyComboBinding(("PAGE_UP",), lambda: self.scroll_modal(-self._modal_viewport())),
            KeyComboBinding(("PAGE_DOWN",), lambda: self.scroll_modal(self._modal_viewport())),
            KeyComboBinding(("c",), self.copy_popup_text),
            KeyComboBinding(("ESC",), self.close_modal),
        )

    # -- entry points -----------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Handle one key token and return ``True`` when the app should quit."""
        if not key:
            return False
        if key in {"q", "CTRL_C"}:
            return True
        if self.state.status_message:
            self.state.status_message = ""
            self.state.dirty = True
        if key.startswith("MOUSE"):
            return handle_mouse(self, key)
        if self.state.modal_visible:
            self._modal_bindings.dispatch(key)
            return False
        return bool(self._bindings.dispatch(key))

    def layout(self) -> Layout:
        width, height = self.context.terminal_size()
        return layout_for_state(self.state, width, height)

    def current_plan(self) -> RenderPlan:
        width, height = self.context.terminal_size()
        return plan_frame(self.state, self.data, width, height, self.context.fetch_details)

    # -- reload -------------------------------------------------------------

    def reload(
        self,
        *,
        interval_index: int | None = None,
        date_range: DateRange | None | object = _KEEP,
        filter_by_user: bool | None = None,
        detailed: bool | None = None,
    ) -> None:
        """Load commits for new parameters and commit them only on success."""
        state = self.state
        next_interval = state.interval_index if interval_index is None else interval_index
        next_range = state.date_range if date_range is _KEEP else date_range
        next_filter = state.filter_by_user if filter_by_user is None else filter_by_user
        next_detailed = state.detailed_commit_view if detailed is None else detailed

        window = window_for(next_interval, next_range, self.context.now())
        request = LoadRequest(window=window, filter_by_user=next_filter, detailed=next_detailed)
        logger.info("reloading commits for %s", window.label)
        data = self.context.load_commits(request)

        state.interval_index = next_interval
        state.date_range = next_range
        state.filter_by_user = next_filter
        state.detailed_commit_view = next_detailed
        self.data = data
        state.after_reload(len(data))
        state.sidebar_scroll = clamp_scroll(state.sidebar_scroll, len(data) + 1, self.layout().sidebar_rows)

    def refresh(self) -> None:
        self.reload()

    def cycle_timeframe(self, step: int) -> None:
        self.reload(interval_index=cycle_preset(self.state.interval_index, step), date_range=None)

    def toggle_user_filter(self) -> None:
        self.reload(filter_by_user=not self.state.filter_by_user)

    def toggle_detailed_view(self) -> None:
        self.reload(detailed=not self.state.detailed_commit_view)

    # -- focus and tabs -----------------------------------------------------

    def focus(self, area: FocusArea) -> None:
        if area == FocusArea.DETAIL and not self.state.show_details:
            return
        if self.state.focus != area:
            self.state.focus = area
            self.state.dirty = True

    def focus_order(self) -> list[FocusArea]:
        order = [FocusArea.SIDEBAR, FocusArea.COMMIT_LIST]
        if self.state.show_details:
            order.append(FocusArea.DETAIL)
        return order

    def cycle_focus(self, step: int) -> None:
        order = self.focus_order()
        current = order.index(self.state.focus) if self.state.focus in order else 0
        self.focus(order[(current + step) % len(order)])

    def select_tab(self, tab: CommitTab) -> None:
        state = self.state
        if state.tab != tab:
            state.tab = tab
            state.clear_selection()
        if tab != CommitTab.STATS:
            state.focus = FocusArea.COMMIT_LIST
        state.dirty = True

    # -- navigation ---------------------------------------------------------

    def move(self, delta: int, area: FocusArea | None = None) -> None:
        target = self.state.focus if area is None else area
        if target == FocusArea.SIDEBAR:
            self.move_sidebar(delta)
        elif target == FocusArea.COMMIT_LIST:
            self.move_commit(delta)
        elif target == FocusArea.DETAIL:
            self.scroll_detail(delta)

    def page(self, direction: int) -> None:
        layout = self.layout()
        if self.state.focus == FocusArea.SIDEBAR:
            self.move_sidebar(direction * layout.sidebar_rows)
        elif self.state.focus == FocusArea.COMMIT_LIST:
            self.move_commit(direction * layout.commit_rows)
        else:
            self.scroll_detail(direction * layout.detail_rows)

    def select_scope_position(self, position: int) -> None:
        """Scope the view to sidebar row ``position`` (0 is ALL)."""
        state = self.state
        position = max(0, min(position, len(self.data)))
        scope = RepoScope.ALL if position == 0 else RepoScope.repo(position - 1)
        if scope != state.scope:
            state.scope = scope
            state.clear_selection()
        state.sidebar_scroll = ensure_visible(
            state.sidebar_scroll,
            position,
            position + 1,
            self.layout().sidebar_rows,
            len(self.data) + 1,
        )
        state.dirty = True

    def move_sidebar(self, delta: int) -> None:
        # clamps at ALL and at the last repository
        position = sidebar_position(self.state)
        target = max(0, min(position + delta, len(self.data)))
        if target != position:
            self.select_scope_position(target)

    def move_commit(self, delta: int) -> None:
        state = self.state
        count = state_count(state, self.data)
        if count <= 0:
            return
        if state.selected_commit is None:
            target = 0
        else:
            target = max(0, min(state.selected_commit + delta, count - 1))
        if target != state.selected_commit:
            self.select_commit(target)

    def select_commit(self, index: int) -> None:
        state = self.state
        state.select_commit(index)
        self.ensure_selection_visible()
        state.dirty = True

    def ensure_selection_visible(self) -> None:
        state = self.state
        rows = build_commit_rows(state, self.data)
        total = total_lines(rows)
        viewport = self.layout().commit_rows
        span = row_span(rows, state.selected_commit)
        if span is None:
            state.commit_list_scroll = clamp_scroll(state.commit_list_scroll, total, viewport)
            return
        top, bottom = span
        state.commit_list_scroll = ensure_visible(state.commit_list_scroll, top, bottom, viewport, total)

    def detail_max_scroll(self) -> int:
        entry = selected_entry(self.state, self.data)
        if entry is None:
            return 0
        lines = detail_lines(detail_text(self.state, entry, self.context.fetch_details))
        return max_scroll(len(lines), self.layout().detail_rows)

    def scroll_detail(self, delta: int) -> None:
        state = self.state
        if not state.show_details:
            return
        previous = state.detail_scroll
        state.detail_scroll = max(0, min(state.detail_scroll + delta, self.detail_max_scroll()))
        if state.detail_scroll != previous:
            state.dirty = True

    # -- details and marks --------------------------------------------------

    def toggle_detail(self) -> None:
        state = self.state
        if state.show_details:
            state.close_details()
            state.dirty = True
            return
        if state_count(state, self.data) <= 0:
            return
        if state.selected_commit is None:
            self.select_commit(0)
        state.show_details = True
        state.detail_scroll = 0
        state.dirty = True

    def toggle_mark(self, entry: CommitEntry) -> None:
        state = self.state
        state.toggle_mark(entry.record.hash)
        if state.tab == CommitTab.SELECTION:
            state.detail_scroll = 0
            state.revalidate_selection(state_count(state, self.data))
            self.ensure_selection_visible()
        state.dirty = True

    def toggle_mark_selected(self) -> None:
        entry = selected_entry(self.state, self.data)
        if entry is not None:
            self.toggle_mark(entry)

    # -- modals -------------------------------------------------------------

    def open_marked_popup(self) -> None:
        self.state.popup.hide()
        self.state.marked_popup.visible = True
        self.state.marked_popup.scroll = 0
        self.state.dirty = True

    def close_modal(self) -> None:
        self.state.popup.hide()
        self.state.marked_popup.visible = False
        self.state.marked_popup.scroll = 0
        self.state.dirty = True

    def _modal_viewport(self) -> int:
        layout = self.layout()
        if self.state.marked_popup.visible:
            return layout.marked_text_rows
        return layout.summary_text_rows(self.state.popup.loading)

    def scroll_modal(self, delta: int) -> None:
        state = self.state
        layout = self.layout()
        if state.marked_popup.visible:
            lines = marked_popup_lines(state, self.data)
            limit = max_scroll(len(lines), layout.marked_text_rows)
            state.marked_popup.scroll = max(0, min(state.marked_popup.scroll + delta, limit))
            state.dirty = True
            return
        snap = state.popup.snapshot()
        if not snap.visible:
            return
        limit = max_scroll(len(popup_lines(snap.text)), layout.summary_text_rows(snap.loading))
        if state.popup.scroll_by(delta, limit):
            state.dirty = True

    def copy_popup_text(self) -> None:
        snap = self.state.popup.snapshot()
        if not snap.visible or snap.loading:
            return
        if self.context.copy_text(snap.text):
            self.state.status_message = "Copied summary to clipboard."
            self.state.dirty = True

    # -- AI summary ---------------------------------------------------------

    def summarize_active(self) -> None:
        state = self.state
        if state.tab == CommitTab.SELECTION:
            self.request_summary(marked_entries(self.data, state.marked), "Selected commits", NO_MARKED_TEXT)
            return
        entries = active_entries(self.data, state.scope, CommitTab.TIMEFRAME, state.marked)
        self.request_summary(entries, project_label(state, self.data), NO_COMMITS_TEXT)

    def summarize_marked(self) -> None:
        self.request_summary(marked_entries(self.data, self.state.marked), "Selected commits", NO_MARKED_TEXT)

    def request_summary(self, entries: list[CommitEntry], project: str, empty_text: str) -> None:
        """Open the summary popup and dispatch a request without waiting for it."""
        state = self.state
        settings = self.context.settings
        state.marked_popup.visible = False
        state.dirty = True
        if not settings.has_api_key:
            state.popup.show_message(missing_key_message(self.context.config_path))
            return
        if not entries:
            state.popup.show_message(empty_text)
            return

        now = self.context.now()
        window = window_for(state.interval_index, state.date_range, now)
        date_from, date_to = window.bounds_text(now)
        repos = {entry.repository for entry in entries}
        prompt = build_prompt(
            load_template(settings.custom_prompt_path, settings.lang),
            date_from=date_from,
            date_to=date_to,
            project=project,
            lang=settings.lang,
            commits=commits_text(entries, show_author=not state.filter_by_user, with_repo=len(repos) > 1),
        )
        state.popup.show_loading(LOADING_TEXT)
        self.context.dispatcher.dispatch(state.popup, prompt)
