"""Render planning and ANSI frame output."""

from .planner import (
    Layout,
    PlanRow,
    PopupPlan,
    Rect,
    RegionPlan,
    RenderPlan,
    compute_layout,
    layout_for_state,
    plan_frame,
)
from .screen import draw_frame, render_frame

__all__ = [
    "Layout",
    "PlanRow",
    "PopupPlan",
    "Rect",
    "RegionPlan",
    "RenderPlan",
    "compute_layout",
    "draw_frame",
    "layout_for_state",
    "plan_frame",
    "render_frame",
]
