"""Tests for global/local commit addressing and the commit-list row model."""

from __future__ import annotations

import unittest
from pathlib import Path

from whid.commit_index import (
    active_count,
    build_commit_rows,
    clamp_scroll,
    ensure_visible,
    entry_at,
    flatten,
    marked_entries,
    resolve_global,
    row_at_line,
    row_span,
    total_lines,
)
from whid.commits import CommitRecord, RepoCommits
from whid.state import CommitTab, RepoScope, ViewState

REPO_A = Path("/work/alpha")
REPO_B = Path("/work/beta")
REPO_C = Path("/work/gamma")


def _record(commit_hash: str, subject: str = "change", body: str = "") -> CommitRecord:
    return CommitRecord(
        hash=commit_hash,
        author="Ada",
        author_email="ada@example.com",
        relative_date="2 hours ago",
        date="2025-01-02T10:00:00+01:00",
        subject=subject,
        body=body,
    )


def _data():
    return [
        RepoCommits(REPO_A, [_record("h1"), _record("h2")]),
        RepoCommits(REPO_B, [_record("h3")]),
    ]


class ResolveGlobalTests(unittest.TestCase):
    def test_index_past_first_repo_boundary_resolves_into_second_repo(self) -> None:
        entry = resolve_global(_data(), 2)

        self.assertIsNotNone(entry)
        self.assertEqual(entry.repository, REPO_B)
        self.assertEqual(entry.record.hash, "h3")

    def test_resolution_is_left_inverse_of_flattening(self) -> None:
        data = [
            RepoCommits(REPO_A, [_record(f"a{i}") for i in range(4)]),
            RepoCommits(REPO_B, [_record("b0")]),
            RepoCommits(REPO_C, [_record(f"c{i}") for i in range(3)]),
        ]
        flat = [(repo, record) for repo, commits in data for record in commits]

        for k, (repo, record) in enumerate(flat):
            entry = resolve_global(data, k)
            self.assertEqual((entry.repository, entry.record), (repo, record))
            self.assertEqual(flatten(data)[k], entry)

    def test_out_of_range_indices_resolve_to_none(self) -> None:
        self.assertIsNone(resolve_global(_data(), 3))
        self.assertIsNone(resolve_global(_data(), -1))
        self.assertIsNone(resolve_global([], 0))


class ActiveSetTests(unittest.TestCase):
    def test_counts_follow_scope_and_tab(self) -> None:
        data = _data()

        self.assertEqual(active_count(data, RepoScope.ALL, CommitTab.TIMEFRAME, set()), 3)
        self.assertEqual(active_count(data, RepoScope.repo(0), CommitTab.TIMEFRAME, set()), 2)
        self.assertEqual(active_count(data, RepoScope.repo(1), CommitTab.TIMEFRAME, set()), 1)
        self.assertEqual(active_count(data, RepoScope.repo(5), CommitTab.TIMEFRAME, set()), 0)
        self.assertEqual(active_count(data, RepoScope.ALL, CommitTab.STATS, {"h1"}), 0)

    def test_local_indices_in_repo_scope(self) -> None:
        entry = entry_at(_data(), RepoScope.repo(1), CommitTab.TIMEFRAME, set(), 0)

        self.assertEqual(entry.record.hash, "h3")
        self.assertIsNone(entry_at(_data(), RepoScope.repo(1), CommitTab.TIMEFRAME, set(), 1))

    def test_selection_tab_ignores_scope_and_skips_missing_hashes(self) -> None:
        data = _data()
        marked = {"h3", "h1", "gone"}

        entries = marked_entries(data, marked)

        self.assertEqual([entry.record.hash for entry in entries], ["h1", "h3"])
        self.assertEqual(active_count(data, RepoScope.repo(0), CommitTab.SELECTION, marked), 2)
        self.assertEqual(entry_at(data, RepoScope.repo(0), CommitTab.SELECTION, marked, 1).record.hash, "h3")


class CommitRowTests(unittest.TestCase):
    def test_all_scope_interleaves_repo_headers(self) -> None:
        rows = build_commit_rows(ViewState(), _data())

        self.assertEqual([row.kind for row in rows], ["header", "commit", "commit", "header", "commit"])
        self.assertEqual([row.entry.index for row in rows if row.entry is not None], [0, 1, 2])

    def test_repo_scope_has_no_headers(self) -> None:
        rows = build_commit_rows(ViewState(scope=RepoScope.repo(0)), _data())

        self.assertEqual([row.kind for row in rows], ["commit", "commit"])

    def test_detailed_rows_span_body_lines(self) -> None:
        data = [RepoCommits(REPO_A, [_record("h1", body="first\nsecond\n"), _record("h2")])]
        state = ViewState(scope=RepoScope.repo(0), detailed_commit_view=True)

        rows = build_commit_rows(state, data)

        self.assertEqual([row.height for row in rows], [3, 1])
        self.assertEqual(total_lines(rows), 4)
        self.assertEqual(row_span(rows, 1), (3, 4))
        self.assertIs(row_at_line(rows, 2), rows[0])

    def test_first_commit_span_includes_its_header(self) -> None:
        rows = build_commit_rows(ViewState(), _data())

        self.assertEqual(row_span(rows, 0), (0, 2))
        self.assertEqual(row_span(rows, 1), (2, 3))
        self.assertEqual(row_span(rows, 2), (3, 5))
        self.assertIsNone(row_span(rows, 9))

    def test_selection_rows_carry_repo_and_full_text(self) -> None:
        data = [RepoCommits(REPO_A, [_record("h1", body="why\n")])]
        state = ViewState(tab=CommitTab.SELECTION, marked={"h1"})

        rows = build_commit_rows(state, data)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].lines[0], "[alpha] h1 2 hours ago change")
        self.assertEqual(rows[0].lines[1], "    why")


class ScrollArithmeticTests(unittest.TestCase):
    def test_clamp_scroll_bounds(self) -> None:
        self.assertEqual(clamp_scroll(10, 12, 5), 7)
        self.assertEqual(clamp_scroll(-3, 12, 5), 0)
        self.assertEqual(clamp_scroll(4, 3, 5), 0)

    def test_ensure_visible_scrolls_minimally(self) -> None:
        self.assertEqual(ensure_visible(0, 6, 7, 5, 20), 2)
        self.assertEqual(ensure_visible(8, 3, 4, 5, 20), 3)
        self.assertEqual(ensure_visible(2, 3, 4, 5, 20), 2)

    def test_tall_item_aligns_to_its_top(self) -> None:
        self.assertEqual(ensure_visible(0, 4, 12, 5, 20), 4)


if __name__ == "__main__":
    unittest.main()
