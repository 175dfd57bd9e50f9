"""Runtime orchestration exports.

Re-exports the interactive loop primitives and the ``run_dashboard``
entrypoint used by the CLI.
"""

from .app import format_plain_listing, initial_state, run_dashboard
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController

__all__ = [
    "RuntimeLoopCallbacks",
    "RuntimeLoopTiming",
    "TerminalController",
    "format_plain_listing",
    "initial_state",
    "run_dashboard",
    "run_main_loop",
]
