"""Render-state derivation for the dashboard.

``plan_frame`` turns ``ViewState`` plus the loaded commits into named
rectangular regions and the rows visible inside each one, with selection,
mark, and focus flags already resolved. Nothing here writes to the terminal;
``whid.render.screen`` draws the plan and the input router hit-tests against
its layout.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..commit_index import (
    CommitEntry,
    build_commit_rows,
    clamp_scroll,
    marked_entries,
    selected_entry,
    total_lines,
)
from ..commits import CommitData
from ..errors import WhidError
from ..repos import repo_display_name
from ..state import CommitTab, FocusArea, PopupSnapshot, ViewState
from ..timeframe import window_label

SIDEBAR_WIDTH = 30
TABS_HEIGHT = 3
FOOTER_HEIGHT = 1
COMMIT_LIST_PERCENT = 60
SUMMARY_POPUP_PERCENT = (60, 80)
MARKED_POPUP_PERCENT = (60, 40)
SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
TAB_TITLES: tuple[tuple[CommitTab, str], ...] = (
    (CommitTab.TIMEFRAME, "Timeframe [2]"),
    (CommitTab.SELECTION, "Selection [3]"),
    (CommitTab.STATS, "Stats [4]"),
)
TAB_DIVIDER = " · "
SUMMARY_HINT = "c copy | ↑/↓ scroll | Esc close"
MARKED_HINT = "↑/↓ scroll | Esc close"
LOADING_HINT = "Esc close"

DetailsProvider = Callable[[Path, str], str]


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, col: int, row: int) -> bool:
        return self.x <= col < self.right and self.y <= row < self.bottom

    def inner(self) -> Rect:
        """Area inside a one-cell border."""
        return Rect(self.x + 1, self.y + 1, max(0, self.width - 2), max(0, self.height - 2))


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    sidebar: Rect
    tabs: Rect
    commits: Rect
    detail: Rect | None
    footer: Rect
    summary_popup: Rect
    marked_popup: Rect

    @property
    def sidebar_rows(self) -> int:
        return max(1, self.sidebar.height - 2)

    @property
    def commit_rows(self) -> int:
        return max(1, self.commits.height - 2)

    @property
    def detail_rows(self) -> int:
        if self.detail is None:
            return 1
        return max(1, self.detail.height - 2)

    def summary_text_rows(self, loading: bool) -> int:
        reserved = 2 if loading else 0
        return max(1, self.summary_popup.height - 2 - reserved)

    @property
    def marked_text_rows(self) -> int:
        return max(1, self.marked_popup.height - 2)


@dataclass(frozen=True)
class PlanRow:
    text: str
    kind: str = "text"
    index: int | None = None
    selected: bool = False
    marked: bool = False
    focused: bool = False


@dataclass(frozen=True)
class RegionPlan:
    name: str
    rect: Rect
    title: str
    rows: tuple[PlanRow, ...]
    focused: bool = False
    scroll: int = 0
    total: int = 0


@dataclass(frozen=True)
class TabSpan:
    tab: CommitTab
    start: int
    end: int


@dataclass(frozen=True)
class FooterButton:
    key: str
    label: str
    start: int
    end: int


@dataclass(frozen=True)
class PopupPlan:
    kind: str
    rect: Rect
    title: str
    rows: tuple[PlanRow, ...]
    hint: str
    close_rect: Rect
    loading: bool = False
    scroll: int = 0
    total: int = 0


@dataclass(frozen=True)
class RenderPlan:
    layout: Layout
    active_tab: CommitTab
    sidebar: RegionPlan
    tabs: RegionPlan
    tab_spans: tuple[TabSpan, ...]
    commits: RegionPlan
    detail: RegionPlan | None
    footer_text: str
    footer_buttons: tuple[FooterButton, ...]
    popup: PopupPlan | None

    @property
    def dimmed(self) -> bool:
        return self.popup is not None


def centered_rect(percent_x: int, percent_y: int, width: int, height: int) -> Rect:
    rect_width = max(1, width * percent_x // 100)
    rect_height = max(3, height * percent_y // 100)
    rect_height = min(rect_height, max(1, height))
    return Rect((width - rect_width) // 2, (height - rect_height) // 2, rect_width, rect_height)


def compute_layout(width: int, height: int, three_columns: bool) -> Layout:
    """Split the screen into panes.

    The sidebar has a fixed width (at most a third of the screen), the footer
    takes the last row, and in the three-column layout the commit list and
    the detail pane share the remainder 60/40.
    """
    width = max(1, width)
    height = max(FOOTER_HEIGHT + 1, height)
    main_height = height - FOOTER_HEIGHT
    sidebar_width = max(1, min(SIDEBAR_WIDTH, width // 3))
    rest = max(1, width - sidebar_width)
    if three_columns:
        commit_width = max(1, rest * COMMIT_LIST_PERCENT // 100)
        detail = Rect(sidebar_width + commit_width, 0, max(1, rest - commit_width), main_height)
    else:
        commit_width = rest
        detail = None
    tabs_height = min(TABS_HEIGHT, max(0, main_height - 1))
    return Layout(
        width=width,
        height=height,
        sidebar=Rect(0, 0, sidebar_width, main_height),
        tabs=Rect(sidebar_width, 0, commit_width, tabs_height),
        commits=Rect(sidebar_width, tabs_height, commit_width, max(1, main_height - tabs_height)),
        detail=detail,
        footer=Rect(0, main_height, width, FOOTER_HEIGHT),
        summary_popup=centered_rect(*SUMMARY_POPUP_PERCENT, width, height),
        marked_popup=centered_rect(*MARKED_POPUP_PERCENT, width, height),
    )


def uses_three_columns(state: ViewState) -> bool:
    return state.show_details and state.selected_commit is not None


def layout_for_state(state: ViewState, width: int, height: int) -> Layout:
    return compute_layout(width, height, uses_three_columns(state))


def project_label(state: ViewState, data: CommitData) -> str:
    if state.scope.index is None or state.scope.index >= len(data):
        return "All projects"
    return repo_display_name(data[state.scope.index].repository)


def detail_text(state: ViewState, entry: CommitEntry, fetch_details: DetailsProvider) -> str:
    """Detail-pane text: the commit body in detailed view, else ``git show`` output."""
    if state.detailed_commit_view:
        return entry.record.full_text(show_author=True)
    try:
        return fetch_details(entry.repository, entry.record.hash)
    except WhidError as exc:
        return str(exc)


def detail_lines(text: str) -> list[str]:
    return text.expandtabs(4).splitlines() or [""]


def popup_lines(text: str) -> list[str]:
    return text.splitlines() or [""]


def sidebar_position(state: ViewState) -> int:
    """Row of the scoped item in the sidebar list; row 0 is the ALL entry."""
    return 0 if state.scope.index is None else state.scope.index + 1


def _window(rows: list[PlanRow], scroll: int, visible: int) -> tuple[PlanRow, ...]:
    return tuple(rows[scroll : scroll + visible])


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _plan_sidebar(state: ViewState, data: CommitData, layout: Layout, focused: bool) -> RegionPlan:
    label = window_label(state.interval_index, state.date_range)
    total = sum(len(repo.commits) for repo in data)
    rows = [
        PlanRow(
            f"All Projects ({len(data)}) · {_plural(total, 'commit')} in {label}",
            kind="all",
            selected=state.scope.index is None,
            focused=focused,
        )
    ]
    if not data:
        rows.append(PlanRow("No projects found. Try another timeframe with <Tab>", kind="empty"))
    for idx, (repository, commits) in enumerate(data):
        rows.append(
            PlanRow(
                f"{repo_display_name(repository)} ({len(commits)})",
                kind="repo",
                index=idx,
                selected=state.scope.index == idx,
                focused=focused,
            )
        )
    visible = layout.sidebar_rows
    scroll = clamp_scroll(state.sidebar_scroll, len(rows), visible)
    return RegionPlan(
        "sidebar",
        layout.sidebar,
        "Repositories [1]",
        _window(rows, scroll, visible),
        focused=focused,
        scroll=scroll,
        total=len(rows),
    )


def _plan_tabs(state: ViewState, layout: Layout) -> tuple[RegionPlan, tuple[TabSpan, ...]]:
    inner = layout.tabs.inner()
    parts: list[str] = []
    spans: list[TabSpan] = []
    col = inner.x + 1
    for idx, (tab, title) in enumerate(TAB_TITLES):
        if idx:
            parts.append(TAB_DIVIDER)
            col += len(TAB_DIVIDER)
        parts.append(title)
        spans.append(TabSpan(tab, col, col + len(title)))
        col += len(title)
    row = PlanRow(" " + "".join(parts), kind="tabs")
    region = RegionPlan("tabs", layout.tabs, "Select View", (row,))
    return region, tuple(spans)


def _commits_title(state: ViewState, data: CommitData) -> str:
    label = window_label(state.interval_index, state.date_range)
    if state.tab == CommitTab.SELECTION:
        return f"Selected Commits ({len(marked_entries(data, state.marked))})"
    if state.tab == CommitTab.STATS:
        return f"Stats – {project_label(state, data)} – {label}"
    if state.scope.index is None or state.scope.index >= len(data):
        name = "Standup Commits"
    else:
        name = repo_display_name(data[state.scope.index].repository)
    mine = " (only mine)" if state.filter_by_user else ""
    return f"{name}{mine} – {label}"


def _stats_rows(state: ViewState, data: CommitData) -> list[PlanRow]:
    if state.scope.index is None:
        scoped = list(data)
    else:
        scoped = [data[state.scope.index]] if state.scope.index < len(data) else []
    records = [record for _repo, commits in scoped for record in commits]
    authors = Counter(record.author or record.author_email for record in records)
    days = Counter(record.date[:10] for record in records if record.date)
    rows = [
        PlanRow(f"Commits: {len(records)}", kind="stat"),
        PlanRow(f"Repositories: {len(scoped)}", kind="stat"),
        PlanRow(f"Authors: {len(authors)}", kind="stat"),
        PlanRow(f"Active days: {len(days)}", kind="stat"),
    ]
    if authors:
        rows.append(PlanRow("", kind="stat"))
        rows.append(PlanRow("Authors", kind="stat_heading"))
        for name, count in authors.most_common():
            rows.append(PlanRow(f"  {name}  {count}", kind="stat"))
    if days:
        rows.append(PlanRow("", kind="stat"))
        rows.append(PlanRow("Days", kind="stat_heading"))
        for day in sorted(days, reverse=True):
            rows.append(PlanRow(f"  {day}  {days[day]}", kind="stat"))
    if len(scoped) > 1:
        rows.append(PlanRow("", kind="stat"))
        rows.append(PlanRow("Repositories", kind="stat_heading"))
        for repository, commits in scoped:
            rows.append(PlanRow(f"  {repo_display_name(repository)}  {len(commits)}", kind="stat"))
    return rows


def _plan_commits(state: ViewState, data: CommitData, layout: Layout, focused: bool) -> RegionPlan:
    title = _commits_title(state, data)
    visible = layout.commit_rows
    if state.tab == CommitTab.STATS:
        rows = _stats_rows(state, data)
        return RegionPlan("commits", layout.commits, title, _window(rows, 0, visible), focused=focused, total=len(rows))

    commit_rows = build_commit_rows(state, data)
    if not commit_rows:
        if state.tab == CommitTab.SELECTION:
            message = "No commits marked. Press 'm' to add commits to your selection."
        else:
            message = "No commits found."
        return RegionPlan("commits", layout.commits, title, (PlanRow(message, kind="empty"),), focused=focused)

    lines: list[PlanRow] = []
    for row in commit_rows:
        if row.entry is None:
            lines.append(PlanRow(f"■ {row.lines[0]}", kind="header"))
            continue
        index = row.entry.index
        selected = index == state.selected_commit
        marked = state.is_marked(row.entry.record.hash)
        indicator = ("*" if marked else " ") + ("→" if selected else " ")
        for line_no, text in enumerate(row.lines):
            prefix = f"{indicator} " if line_no == 0 else "   "
            lines.append(
                PlanRow(
                    prefix + text,
                    kind="commit" if line_no == 0 else "commit_body",
                    index=index,
                    selected=selected,
                    marked=marked,
                    focused=focused,
                )
            )
    total = total_lines(commit_rows)
    scroll = clamp_scroll(state.commit_list_scroll, total, visible)
    return RegionPlan(
        "commits",
        layout.commits,
        title,
        _window(lines, scroll, visible),
        focused=focused,
        scroll=scroll,
        total=total,
    )


def _plan_detail(
    state: ViewState,
    data: CommitData,
    layout: Layout,
    fetch_details: DetailsProvider,
    focused: bool,
) -> RegionPlan | None:
    if layout.detail is None:
        return None
    entry = selected_entry(state, data)
    if entry is None:
        return None
    lines = detail_lines(detail_text(state, entry, fetch_details))
    visible = layout.detail_rows
    scroll = clamp_scroll(state.detail_scroll, len(lines), visible)
    rows = [PlanRow(line, kind="detail", focused=focused) for line in lines]
    return RegionPlan(
        "detail",
        layout.detail,
        "Details",
        _window(rows, scroll, visible),
        focused=focused,
        scroll=scroll,
        total=len(lines),
    )


def footer_buttons(state: ViewState) -> tuple[FooterButton, ...]:
    labels = (
        ("a", "[a] AI summary"),
        ("A", "[A] AI marked"),
        ("s", "[s] Marked"),
        ("u", "[u] Only mine" if state.filter_by_user else "[u] All authors"),
        ("d", "[d] Details on" if state.detailed_commit_view else "[d] Details off"),
        ("q", "[q] Quit"),
    )
    buttons: list[FooterButton] = []
    col = 0
    for key, label in labels:
        buttons.append(FooterButton(key, label, col, col + len(label)))
        col += len(label) + 1
    return tuple(buttons)


def footer_hint(state: ViewState) -> str:
    if state.status_message:
        return state.status_message
    return "Tab/Shift+Tab timeframe | ↑/↓ h/j/k/l move | Space details | m mark | r refresh"


def _plan_summary_popup(state: ViewState, data: CommitData, layout: Layout, snap: PopupSnapshot) -> PopupPlan:
    rect = layout.summary_popup
    label = window_label(state.interval_index, state.date_range)
    text_lines = popup_lines(snap.text)
    visible = layout.summary_text_rows(snap.loading)
    scroll = clamp_scroll(snap.scroll, len(text_lines), visible)
    rows: list[PlanRow] = []
    if snap.loading:
        spinner = SPINNER_FRAMES[snap.frame % len(SPINNER_FRAMES)]
        rows.append(PlanRow(f"{spinner} Loading...", kind="spinner"))
        rows.append(PlanRow("", kind="spinner"))
    rows.extend(PlanRow(line, kind="popup") for line in text_lines[scroll : scroll + visible])
    return PopupPlan(
        kind="summary",
        rect=rect,
        title=f"AI Summary for {project_label(state, data)} · Interval: {label}",
        rows=tuple(rows),
        hint=LOADING_HINT if snap.loading else SUMMARY_HINT,
        close_rect=Rect(max(rect.x, rect.right - 4), rect.y, 3, 1),
        loading=snap.loading,
        scroll=scroll,
        total=len(text_lines),
    )


def marked_popup_lines(state: ViewState, data: CommitData) -> list[str]:
    """Resolved marked commits in data order, then hashes outside the loaded window."""
    show_author = not state.filter_by_user
    entries = marked_entries(data, state.marked)
    lines = [f"[{repo_display_name(entry.repository)}] {entry.record.summary_line(show_author)}" for entry in entries]
    resolved = {entry.record.hash for entry in entries}
    lines.extend(sorted(state.marked - resolved))
    return lines or ["No commits marked."]


def _plan_marked_popup(state: ViewState, data: CommitData, layout: Layout) -> PopupPlan:
    rect = layout.marked_popup
    lines = marked_popup_lines(state, data)
    visible = layout.marked_text_rows
    scroll = clamp_scroll(state.marked_popup.scroll, len(lines), visible)
    return PopupPlan(
        kind="marked",
        rect=rect,
        title=f"Marked Commits ({len(state.marked)})",
        rows=tuple(PlanRow(line, kind="popup") for line in lines[scroll : scroll + visible]),
        hint=MARKED_HINT,
        close_rect=Rect(max(rect.x, rect.right - 4), rect.y, 3, 1),
        scroll=scroll,
        total=len(lines),
    )


def plan_frame(
    state: ViewState,
    data: CommitData,
    width: int,
    height: int,
    fetch_details: DetailsProvider,
) -> RenderPlan:
    """Derive the full render plan for one frame."""
    layout = layout_for_state(state, width, height)
    snap = state.popup.snapshot()
    modal = snap.visible or state.marked_popup.visible
    sidebar = _plan_sidebar(state, data, layout, focused=not modal and state.focus == FocusArea.SIDEBAR)
    tabs, spans = _plan_tabs(state, layout)
    commits = _plan_commits(state, data, layout, focused=not modal and state.focus == FocusArea.COMMIT_LIST)
    detail = _plan_detail(state, data, layout, fetch_details, focused=not modal and state.focus == FocusArea.DETAIL)

    popup: PopupPlan | None = None
    if snap.visible:
        popup = _plan_summary_popup(state, data, layout, snap)
    elif state.marked_popup.visible:
        popup = _plan_marked_popup(state, data, layout)

    return RenderPlan(
        layout=layout,
        active_tab=state.tab,
        sidebar=sidebar,
        tabs=tabs,
        tab_spans=spans,
        commits=commits,
        detail=detail,
        footer_text=footer_hint(state),
        footer_buttons=footer_buttons(state),
        popup=popup,
    )
