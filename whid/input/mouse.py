"""Mouse routing: hit-tests SGR mouse tokens against the last render plan."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state import FocusArea

if TYPE_CHECKING:
    from ..render.planner import RenderPlan
    from .router import InputRouter

MARK_COLUMNS = 2
POPUP_WHEEL_STEP = 3


def _parse_mouse_col_row(mouse_key: str) -> tuple[int | None, int | None]:
    parts = mouse_key.split(":")
    if len(parts) < 3:
        return None, None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None, None


def _area_at(plan: RenderPlan, x: int, y: int) -> FocusArea | None:
    if plan.sidebar.rect.contains(x, y):
        return FocusArea.SIDEBAR
    if plan.commits.rect.contains(x, y):
        return FocusArea.COMMIT_LIST
    if plan.detail is not None and plan.detail.rect.contains(x, y):
        return FocusArea.DETAIL
    return None


def _handle_wheel(router: InputRouter, plan: RenderPlan, mouse_key: str, x: int, y: int) -> bool:
    direction = -1 if mouse_key.startswith("MOUSE_WHEEL_UP:") else 1
    if plan.popup is not None:
        if plan.popup.rect.contains(x, y):
            router.scroll_modal(direction * POPUP_WHEEL_STEP)
        return False
    area = _area_at(plan, x, y)
    if area is not None:
        router.move(direction, area)
    return False


def _handle_click(router: InputRouter, plan: RenderPlan, x: int, y: int) -> bool:
    if plan.popup is not None:
        if plan.popup.close_rect.contains(x, y):
            router.close_modal()
        return False

    if plan.layout.footer.contains(x, y):
        for button in plan.footer_buttons:
            if button.start <= x < button.end:
                return router.handle_key(button.key)
        return False

    tabs_inner = plan.tabs.rect.inner()
    if y == tabs_inner.y and plan.tabs.rect.contains(x, y):
        for span in plan.tab_spans:
            if span.start <= x < span.end:
                router.select_tab(span.tab)
                break
        return False

    sidebar_inner = plan.sidebar.rect.inner()
    if sidebar_inner.contains(x, y):
        router.focus(FocusArea.SIDEBAR)
        offset = y - sidebar_inner.y
        if offset < len(plan.sidebar.rows):
            row = plan.sidebar.rows[offset]
            if row.kind == "all":
                router.select_scope_position(0)
            elif row.kind == "repo" and row.index is not None:
                router.select_scope_position(row.index + 1)
        return False

    commits_inner = plan.commits.rect.inner()
    if commits_inner.contains(x, y):
        router.focus(FocusArea.COMMIT_LIST)
        offset = y - commits_inner.y
        if offset < len(plan.commits.rows):
            row = plan.commits.rows[offset]
            if row.index is not None:
                router.select_commit(row.index)
                if row.kind == "commit" and x - commits_inner.x < MARK_COLUMNS:
                    router.toggle_mark_selected()
        return False

    if plan.detail is not None and plan.detail.rect.contains(x, y):
        router.focus(FocusArea.DETAIL)
    return False


def handle_mouse(router: InputRouter, mouse_key: str) -> bool:
    """Route one mouse token; returns ``True`` only when a footer quit fired."""
    col, row = _parse_mouse_col_row(mouse_key)
    if col is None or row is None:
        return False
    # SGR coordinates are 1-based
    x, y = col - 1, row - 1
    plan = router.plan if router.plan is not None else router.current_plan()
    if mouse_key.startswith("MOUSE_WHEEL_UP:") or mouse_key.startswith("MOUSE_WHEEL_DOWN:"):
        return _handle_wheel(router, plan, mouse_key, x, y)
    if mouse_key.startswith("MOUSE_LEFT_DOWN:"):
        return _handle_click(router, plan, x, y)
    return False
