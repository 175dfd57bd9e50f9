"""Commit addressing shared by the input router and the render planner.

In ALL scope commit indices are global: repositories are flattened in data
order and indices run continuously across repository boundaries. In a
single-repository scope indices are local to that repository. The Selection
tab addresses only marked commits that are present in the loaded data.
Everything that turns an index into a commit goes through this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .commits import CommitData, CommitRecord
from .repos import repo_display_name
from .state import CommitTab, RepoScope, ViewState


@dataclass(frozen=True)
class CommitEntry:
    index: int
    repository: Path
    record: CommitRecord


@dataclass(frozen=True)
class CommitRow:
    """One logical commit-list row; ``lines`` may span several display lines."""

    kind: str
    repository: Path
    entry: CommitEntry | None
    lines: tuple[str, ...]

    @property
    def height(self) -> int:
        return len(self.lines)


def total_commits(data: CommitData) -> int:
    return sum(len(repo.commits) for repo in data)


def resolve_global(data: CommitData, index: int) -> CommitEntry | None:
    """Resolve a global index by walking cumulative repository offsets."""
    if index < 0:
        return None
    offset = 0
    for repository, commits in data:
        if index < offset + len(commits):
            return CommitEntry(index, repository, commits[index - offset])
        offset += len(commits)
    return None


def flatten(data: CommitData) -> list[CommitEntry]:
    entries: list[CommitEntry] = []
    for repository, commits in data:
        for record in commits:
            entries.append(CommitEntry(len(entries), repository, record))
    return entries


def marked_entries(data: CommitData, marked: set[str]) -> list[CommitEntry]:
    """Marked commits found in ``data``; hashes outside the loaded window are skipped."""
    entries: list[CommitEntry] = []
    if not marked:
        return entries
    seen: set[str] = set()
    for repository, commits in data:
        for record in commits:
            if record.hash in marked and record.hash not in seen:
                seen.add(record.hash)
                entries.append(CommitEntry(len(entries), repository, record))
    return entries


def active_entries(data: CommitData, scope: RepoScope, tab: CommitTab, marked: set[str]) -> list[CommitEntry]:
    """Commit sequence addressed by ``selected_commit`` for the given scope and tab."""
    if tab == CommitTab.SELECTION:
        return marked_entries(data, marked)
    if tab == CommitTab.STATS:
        return []
    if scope.index is None:
        return flatten(data)
    if scope.index >= len(data):
        return []
    repository, commits = data[scope.index]
    return [CommitEntry(idx, repository, record) for idx, record in enumerate(commits)]


def active_count(data: CommitData, scope: RepoScope, tab: CommitTab, marked: set[str]) -> int:
    if tab == CommitTab.TIMEFRAME:
        if scope.index is None:
            return total_commits(data)
        return len(data[scope.index].commits) if scope.index < len(data) else 0
    return len(active_entries(data, scope, tab, marked))


def entry_at(
    data: CommitData,
    scope: RepoScope,
    tab: CommitTab,
    marked: set[str],
    index: int | None,
) -> CommitEntry | None:
    """Resolve ``index`` under the active indexing scheme, or ``None`` if out of range."""
    if index is None or index < 0:
        return None
    if tab == CommitTab.TIMEFRAME:
        if scope.index is None:
            return resolve_global(data, index)
        if scope.index >= len(data):
            return None
        repository, commits = data[scope.index]
        if index >= len(commits):
            return None
        return CommitEntry(index, repository, commits[index])
    entries = active_entries(data, scope, tab, marked)
    return entries[index] if index < len(entries) else None


def state_count(state: ViewState, data: CommitData) -> int:
    return active_count(data, state.scope, state.tab, state.marked)


def selected_entry(state: ViewState, data: CommitData) -> CommitEntry | None:
    return entry_at(data, state.scope, state.tab, state.marked, state.selected_commit)


def build_commit_rows(state: ViewState, data: CommitData) -> list[CommitRow]:
    """Row model of the commit list for the current scope and tab.

    The Timeframe tab in ALL scope interleaves one header row per repository;
    Selection rows carry the repository name and the full commit text.
    """
    show_author = not state.filter_by_user
    detailed = state.detailed_commit_view
    rows: list[CommitRow] = []
    if state.tab == CommitTab.SELECTION:
        for entry in marked_entries(data, state.marked):
            lines = entry.record.display_lines(show_author, detailed=True)
            lines[0] = f"[{repo_display_name(entry.repository)}] {lines[0]}"
            rows.append(CommitRow("commit", entry.repository, entry, tuple(lines)))
        return rows
    if state.tab == CommitTab.STATS:
        return rows

    if state.scope.index is None:
        offset = 0
        for repository, commits in data:
            rows.append(CommitRow("header", repository, None, (repo_display_name(repository),)))
            for local_idx, record in enumerate(commits):
                entry = CommitEntry(offset + local_idx, repository, record)
                rows.append(CommitRow("commit", repository, entry, tuple(record.display_lines(show_author, detailed))))
            offset += len(commits)
        return rows

    for entry in active_entries(data, state.scope, state.tab, state.marked):
        rows.append(
            CommitRow("commit", entry.repository, entry, tuple(entry.record.display_lines(show_author, detailed)))
        )
    return rows


def total_lines(rows: list[CommitRow]) -> int:
    return sum(row.height for row in rows)


def row_span(rows: list[CommitRow], index: int | None) -> tuple[int, int] | None:
    """Return ``(top, bottom)`` display-line span of commit ``index``; bottom is exclusive.

    The span of the first commit of a repository includes its header row so
    scrolling up reveals the header too.
    """
    if index is None:
        return None
    line = 0
    pending_header: int | None = None
    for row in rows:
        if row.kind == "header":
            pending_header = line
        elif row.entry is not None and row.entry.index == index:
            top = pending_header if pending_header is not None else line
            return top, line + row.height
        else:
            pending_header = None
        line += row.height
    return None


def row_at_line(rows: list[CommitRow], line: int) -> CommitRow | None:
    """Return the row covering display line ``line``."""
    if line < 0:
        return None
    cursor = 0
    for row in rows:
        if cursor <= line < cursor + row.height:
            return row
        cursor += row.height
    return None


def max_scroll(total: int, viewport: int) -> int:
    return max(0, total - max(0, viewport))


def clamp_scroll(scroll: int, total: int, viewport: int) -> int:
    return max(0, min(scroll, max_scroll(total, viewport)))


def ensure_visible(scroll: int, top: int, bottom: int, viewport: int, total: int) -> int:
    """Smallest scroll change that shows ``[top, bottom)`` inside the viewport."""
    viewport = max(1, viewport)
    if top < scroll:
        scroll = top
    elif bottom > scroll + viewport:
        scroll = top if bottom - top > viewport else bottom - viewport
    return clamp_scroll(scroll, total, viewport)
