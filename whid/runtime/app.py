"""Session bootstrap: discover, load, wire collaborators, run the loop."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from ..commits import CommitData, LoadRequest, commit_details, load_commits
from ..config import Settings
from ..input import InputRouter, RouterContext
from ..render.planner import RenderPlan, plan_frame
from ..render.screen import draw_frame
from ..repos import discover, repo_display_name
from ..state import ViewState
from ..summary import SummaryClient, SummaryDispatcher
from ..timeframe import DateRange, preset_index_for_keyword, window_for
from ..ui_theme import resolve_theme
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def initial_state(settings: Settings, date_range: DateRange | None = None) -> ViewState:
    return ViewState(
        filter_by_user=settings.filter_by_user,
        detailed_commit_view=settings.detailed_commit_view,
        interval_index=preset_index_for_keyword(settings.timeframe),
        date_range=date_range,
    )


def format_plain_listing(data: CommitData, state: ViewState, label: str) -> str:
    """Non-interactive listing printed with ``--nopager`` or without a TTY."""
    show_author = not state.filter_by_user
    if not data:
        return f"No commits found in {label}.\n"
    out: list[str] = []
    for repository, commits in data:
        out.append(f"{repo_display_name(repository)} ({len(commits)})")
        for record in commits:
            for line in record.display_lines(show_author, state.detailed_commit_view):
                out.append(f"  {line}")
        out.append("")
    return "\n".join(out)


def run_dashboard(
    root: Path,
    settings: Settings,
    *,
    date_range: DateRange | None = None,
    nopager: bool = False,
    no_color: bool = False,
    config_path: Path | None = None,
) -> None:
    """Load commits under ``root`` and run the interactive dashboard.

    Discovery and the initial load raise on failure; the caller decides how
    to report that.
    """
    repositories = discover(root)
    logger.info("discovered %d repositories under %s", len(repositories), root)
    state = initial_state(settings, date_range)

    def load(request: LoadRequest) -> CommitData:
        return load_commits(repositories, request)

    window = window_for(state.interval_index, state.date_range, datetime.now())
    data = load(LoadRequest(window, state.filter_by_user, state.detailed_commit_view))

    if nopager or not os.isatty(sys.stdin.fileno()):
        sys.stdout.write(format_plain_listing(data, state, window.label))
        return

    dispatcher = SummaryDispatcher(
        lambda: SummaryClient(settings.gemini_api_key or "", settings.gemini_model),
        config_path=config_path,
    )
    router = InputRouter(
        state,
        data,
        RouterContext(
            load_commits=load,
            dispatcher=dispatcher,
            settings=settings,
            fetch_details=commit_details,
            config_path=config_path,
        ),
    )
    theme = resolve_theme(no_color=no_color)
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()

    def plan(width: int, height: int) -> RenderPlan:
        router.plan = plan_frame(state, router.data, width, height, commit_details)
        return router.plan

    def draw(frame: RenderPlan) -> None:
        draw_frame(frame, theme, stdout_fd)

    run_main_loop(
        state,
        TerminalController(stdin_fd, stdout_fd),
        stdin_fd,
        RuntimeLoopTiming(),
        RuntimeLoopCallbacks(plan_frame=plan, draw_frame=draw, handle_key=router.handle_key),
    )
