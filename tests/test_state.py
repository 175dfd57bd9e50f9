"""Tests for ViewState transition helpers and the shared summary popup."""

from __future__ import annotations

import threading
import unittest

from whid.state import CommitTab, FocusArea, RepoScope, SummaryPopup, ViewState


class ViewStateTransitionTests(unittest.TestCase):
    def test_defaults(self) -> None:
        state = ViewState()

        self.assertEqual(state.focus, FocusArea.SIDEBAR)
        self.assertEqual(state.tab, CommitTab.TIMEFRAME)
        self.assertTrue(state.scope.is_all)
        self.assertIsNone(state.selected_commit)
        self.assertTrue(state.filter_by_user)
        self.assertFalse(state.modal_visible)

    def test_toggle_mark_is_idempotent_pairwise(self) -> None:
        state = ViewState()

        self.assertTrue(state.toggle_mark("h1"))
        self.assertFalse(state.toggle_mark("h1"))
        self.assertTrue(state.toggle_mark("h1"))
        self.assertEqual(state.marked, {"h1"})

    def test_close_details_returns_focus_to_commit_list(self) -> None:
        state = ViewState(focus=FocusArea.DETAIL, selected_commit=0, show_details=True, detail_scroll=4)

        state.close_details()

        self.assertFalse(state.show_details)
        self.assertEqual(state.focus, FocusArea.COMMIT_LIST)
        self.assertEqual(state.detail_scroll, 0)

    def test_clearing_selection_also_closes_details(self) -> None:
        state = ViewState(selected_commit=2, show_details=True, commit_list_scroll=3)

        state.clear_selection()

        self.assertIsNone(state.selected_commit)
        self.assertFalse(state.show_details)
        self.assertEqual(state.commit_list_scroll, 0)

    def test_revalidate_selection_clamps_or_clears(self) -> None:
        state = ViewState(selected_commit=5, show_details=True)
        state.revalidate_selection(3)
        self.assertEqual(state.selected_commit, 2)
        self.assertTrue(state.show_details)

        state.revalidate_selection(0)
        self.assertIsNone(state.selected_commit)
        self.assertFalse(state.show_details)

    def test_after_reload_resets_out_of_range_scope(self) -> None:
        state = ViewState(scope=RepoScope.repo(3), selected_commit=1, sidebar_scroll=2)

        state.after_reload(2)

        self.assertEqual(state.scope, RepoScope.ALL)
        self.assertIsNone(state.selected_commit)
        self.assertEqual(state.sidebar_scroll, 0)

    def test_after_reload_keeps_valid_scope_and_marks(self) -> None:
        state = ViewState(scope=RepoScope.repo(1), selected_commit=0, marked={"gone"})

        state.after_reload(2)

        self.assertEqual(state.scope, RepoScope.repo(1))
        self.assertIsNone(state.selected_commit)
        self.assertEqual(state.marked, {"gone"})

    def test_repo_scope_rejects_negative_index(self) -> None:
        with self.assertRaises(ValueError):
            RepoScope.repo(-1)


class SummaryPopupTests(unittest.TestCase):
    def test_complete_clears_loading_without_touching_visibility(self) -> None:
        popup = SummaryPopup()
        popup.show_loading("Loading")
        popup.hide()

        popup.complete("done")

        snap = popup.snapshot()
        self.assertFalse(snap.visible)
        self.assertFalse(snap.loading)
        self.assertEqual(snap.text, "done")

    def test_tick_only_advances_while_loading(self) -> None:
        popup = SummaryPopup()
        self.assertFalse(popup.tick())

        popup.show_loading("Loading")
        self.assertTrue(popup.tick())
        self.assertEqual(popup.snapshot().frame, 1)

        popup.complete("done")
        self.assertFalse(popup.tick())

    def test_scroll_by_is_clamped(self) -> None:
        popup = SummaryPopup()
        popup.show_message("a\nb\nc")

        self.assertFalse(popup.scroll_by(-1, 5))
        self.assertTrue(popup.scroll_by(10, 5))
        self.assertEqual(popup.snapshot().scroll, 5)

        popup.hide()
        self.assertEqual(popup.snapshot().scroll, 0)

    def test_concurrent_completion_is_not_torn(self) -> None:
        popup = SummaryPopup()
        popup.show_loading("Loading")
        texts = [f"result {idx}" for idx in range(20)]
        threads = [threading.Thread(target=popup.complete, args=(text,)) for text in texts]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snap = popup.snapshot()
        self.assertIn(snap.text, texts)
        self.assertFalse(snap.loading)
        self.assertTrue(snap.visible)


if __name__ == "__main__":
    unittest.main()
