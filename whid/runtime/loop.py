"""Main interactive event loop for the terminal UI.

Coordinates resize detection, spinner animation, rendering, and input
dispatch. Feature logic lives in the router; the loop only wires it up.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import WhidError
from ..input import read_key
from ..render.planner import RenderPlan
from ..state import ViewState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    poll_timeout_ms: int = 100
    spinner_frame_seconds: float = 0.1


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    plan_frame: Callable[[int, int], RenderPlan]
    draw_frame: Callable[[RenderPlan], None]
    handle_key: Callable[[str], bool]


def run_main_loop(
    state: ViewState,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the TUI loop until a quit action occurs.

    Input polling waits at most ``timing.poll_timeout_ms`` so the spinner
    keeps moving and a summary delivered by the background thread shows up
    without a keypress. Reload failures raised by the router are shown in
    the footer and the previous commits stay on screen.
    """
    last_size: tuple[int, int] | None = None
    last_popup: tuple[bool, bool, str] | None = None
    spinner_frame = 0

    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((100, 30))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                state.dirty = True
            terminal.set_mouse_reporting(True)

            snap = state.popup.snapshot()
            popup_key = (snap.visible, snap.loading, snap.text)
            if popup_key != last_popup:
                last_popup = popup_key
                state.dirty = True
            if snap.visible and snap.loading:
                next_frame = int(time.monotonic() / timing.spinner_frame_seconds)
                if next_frame != spinner_frame:
                    spinner_frame = next_frame
                    state.popup.tick()
                    state.dirty = True

            if state.dirty:
                callbacks.draw_frame(callbacks.plan_frame(term.columns, term.lines))
                state.dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=timing.poll_timeout_ms)
            except KeyboardInterrupt:
                continue
            if key == "":
                continue
            try:
                if callbacks.handle_key(key):
                    return
            except WhidError as exc:
                logger.warning("action for key %r failed: %s", key, exc)
                state.status_message = f"Error: {exc}"
                state.dirty = True
