"""Tests for the interactive runtime loop."""

from __future__ import annotations

import contextlib
import os
import unittest
from unittest import mock

from whid.errors import ExternalToolError
from whid.runtime.loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from whid.state import ViewState


class _FakeTerminal:
    def __init__(self) -> None:
        self.entered = 0
        self.exited = 0
        self.mouse_calls: list[bool] = []

    def set_mouse_reporting(self, enabled: bool) -> None:
        self.mouse_calls.append(enabled)

    @contextlib.contextmanager
    def raw_mode(self):
        self.entered += 1
        try:
            yield
        finally:
            self.exited += 1


def _run(state: ViewState, keys: list[str], handle_key, monotonic=None):
    terminal = _FakeTerminal()
    plans: list[tuple[int, int]] = []
    drawn: list[object] = []

    def plan_frame(width: int, height: int):
        plans.append((width, height))
        return ("plan", width, height)

    callbacks = RuntimeLoopCallbacks(plan_frame=plan_frame, draw_frame=drawn.append, handle_key=handle_key)
    patches = [
        mock.patch("whid.runtime.loop.read_key", side_effect=keys),
        mock.patch("whid.runtime.loop.shutil.get_terminal_size", return_value=os.terminal_size((100, 30))),
    ]
    if monotonic is not None:
        patches.append(mock.patch("whid.runtime.loop.time", monotonic=mock.Mock(side_effect=monotonic)))
    with contextlib.ExitStack() as stack:
        for patch in patches:
            stack.enter_context(patch)
        run_main_loop(state, terminal, 0, RuntimeLoopTiming(), callbacks)
    return terminal, plans, drawn


class RuntimeLoopTests(unittest.TestCase):
    def test_quit_leaves_raw_mode(self) -> None:
        state = ViewState()

        terminal, plans, drawn = _run(state, ["", "j", "q"], lambda key: key == "q")

        self.assertEqual((terminal.entered, terminal.exited), (1, 1))
        self.assertEqual(plans[0], (100, 30))
        self.assertEqual(len(drawn), 1)
        self.assertFalse(state.dirty)

    def test_redraws_after_handler_marks_dirty(self) -> None:
        state = ViewState()

        def handle_key(key: str) -> bool:
            state.dirty = True
            return key == "q"

        _terminal, _plans, drawn = _run(state, ["j", "k", "q"], handle_key)

        self.assertEqual(len(drawn), 3)

    def test_load_errors_become_status_message(self) -> None:
        state = ViewState()

        def handle_key(key: str) -> bool:
            if key == "TAB":
                raise ExternalToolError(["git", "log"], "fatal: broken")
            return key == "q"

        terminal, _plans, drawn = _run(state, ["TAB", "q"], handle_key)

        self.assertEqual(state.status_message, "Error: git log: fatal: broken")
        self.assertEqual(len(drawn), 2)
        self.assertEqual(terminal.exited, 1)

    def test_unexpected_errors_propagate_after_restoring_terminal(self) -> None:
        state = ViewState()

        def handle_key(key: str) -> bool:
            raise RuntimeError("bug")

        with self.assertRaises(RuntimeError):
            _run(state, ["j"], handle_key)

    def test_spinner_ticks_while_loading(self) -> None:
        state = ViewState()
        state.popup.show_loading("Loading commit summary...")

        _terminal, _plans, drawn = _run(
            state,
            ["", "", "q"],
            lambda key: key == "q",
            monotonic=[1.0, 1.05, 1.25],
        )

        self.assertEqual(state.popup.snapshot().frame, 2)
        self.assertEqual(len(drawn), 2)

    def test_background_completion_triggers_redraw(self) -> None:
        state = ViewState()
        state.popup.show_message("first")
        keys = iter(["", "", "q"])

        def read_key(fd: int, timeout_ms: int | None = None) -> str:
            key = next(keys)
            if key == "":
                state.popup.complete("second")
            return key

        terminal = _FakeTerminal()
        drawn: list[object] = []
        callbacks = RuntimeLoopCallbacks(
            plan_frame=lambda width, height: state.popup.text,
            draw_frame=drawn.append,
            handle_key=lambda key: key == "q",
        )
        with mock.patch("whid.runtime.loop.read_key", side_effect=read_key), mock.patch(
            "whid.runtime.loop.shutil.get_terminal_size", return_value=os.terminal_size((100, 30))
        ):
            run_main_loop(state, terminal, 0, RuntimeLoopTiming(), callbacks)

        self.assertEqual(drawn, ["first", "second"])


if __name__ == "__main__":
    unittest.main()
