"""ANSI frame writer for a ``RenderPlan``.

Presentation only: every decision about what is visible was already made by
the planner. Boxes are drawn with absolute cursor positioning so each frame
repaints every cell.
"""

from __future__ import annotations

import os
import sys

from ..ansi import display_width, drop_columns, fit_ansi_line, strip_ansi
from ..highlight import DETAIL_LEXER, MARKDOWN_LEXER, highlight_lines, sanitize_terminal_text
from ..ui_theme import UITheme
from .planner import PlanRow, PopupPlan, Rect, RegionPlan, RenderPlan

BOX_TOP_LEFT = "┌"
BOX_TOP_RIGHT = "┐"
BOX_BOTTOM_LEFT = "└"
BOX_BOTTOM_RIGHT = "┘"
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"
CLOSE_LABEL = "[x]"


def _goto(row: int, col: int) -> str:
    return f"\033[{row + 1};{col + 1}H"


def _border_line(left: str, right: str, width: int, label: str, label_style: str, style: str, reset: str) -> str:
    if width < 2:
        return style + left[:width] + reset
    inner = width - 2
    label = fit_ansi_line(f" {label} ", min(inner, display_width(label) + 2)) if label else ""
    fill = BOX_HORIZONTAL * max(0, inner - display_width(label))
    return f"{style}{left}{reset}{label_style}{label}{reset}{style}{fill}{right}{reset}"


def draw_box(
    rect: Rect,
    title: str,
    body: list[str],
    theme: UITheme,
    *,
    border_style: str,
    hint: str = "",
) -> list[str]:
    """Return ``rect.height`` lines, each exactly ``rect.width`` columns wide."""
    if rect.height <= 0 or rect.width <= 0:
        return []
    reset = theme.reset
    inner_width = max(0, rect.width - 2)
    lines = [_border_line(BOX_TOP_LEFT, BOX_TOP_RIGHT, rect.width, title, theme.title, border_style, reset)]
    for idx in range(max(0, rect.height - 2)):
        text = body[idx] if idx < len(body) else ""
        lines.append(
            f"{border_style}{BOX_VERTICAL}{reset}{fit_ansi_line(text, inner_width, reset)}"
            f"{border_style}{BOX_VERTICAL}{reset}"
        )
    if rect.height >= 2:
        lines.append(
            _border_line(BOX_BOTTOM_LEFT, BOX_BOTTOM_RIGHT, rect.width, hint, theme.popup_hint, border_style, reset)
        )
    return lines[: rect.height]


def style_row(row: PlanRow, theme: UITheme) -> str:
    text = sanitize_terminal_text(row.text)
    reset = theme.reset
    if row.kind == "header":
        return f"{theme.repo_header}{text}{reset}"
    if row.kind in {"empty", "spinner"}:
        return f"{theme.empty if row.kind == 'empty' else theme.spinner}{text}{reset}"
    if row.kind == "stat_heading":
        return f"{theme.stat_heading}{text}{reset}"
    if row.kind in {"all", "repo"}:
        if row.selected:
            return f"{theme.selection if row.focused else theme.reverse}{text}{reset}"
        return text
    if row.kind in {"commit", "commit_body"}:
        if row.selected:
            return f"{theme.selection if row.focused else theme.reverse}{text}{reset}"
        if row.kind == "commit_body":
            return text
        prefix, rest = text[:3], text[3:]
        commit_hash, sep, tail = rest.partition(" ")
        mark = f"{theme.marked}{prefix}{reset}" if row.marked else prefix
        return f"{mark}{theme.commit_hash}{commit_hash}{reset}{sep}{tail}"
    return text


def _dimmed(lines: list[str], theme: UITheme) -> list[str]:
    return [f"{theme.backdrop}{strip_ansi(line)}{theme.reset}" for line in lines]


def _region_lines(region: RegionPlan, theme: UITheme, body: list[str] | None = None) -> list[str]:
    if body is None:
        body = [style_row(row, theme) for row in region.rows]
    border = theme.border_focus if region.focused else theme.border_blur
    return draw_box(region.rect, region.title, body, theme, border_style=border)


def _tab_lines(plan: RenderPlan, theme: UITheme) -> list[str]:
    inner_x = plan.tabs.rect.inner().x
    text = plan.tabs.rows[0].text if plan.tabs.rows else ""
    out: list[str] = []
    cursor = 0
    for span in plan.tab_spans:
        start = span.start - inner_x
        end = span.end - inner_x
        out.append(text[cursor:start])
        style = theme.tab_active if span.tab == plan.active_tab else theme.tab_inactive
        out.append(f"{style}{text[start:end]}{theme.reset}")
        cursor = end
    out.append(text[cursor:])
    return draw_box(plan.tabs.rect, plan.tabs.title, ["".join(out)], theme, border_style=theme.border_blur)


def _detail_body(region: RegionPlan) -> list[str]:
    return highlight_lines([row.text for row in region.rows], DETAIL_LEXER)


def _popup_lines(popup: PopupPlan, theme: UITheme) -> list[str]:
    body: list[str] = []
    text_rows = [row for row in popup.rows if row.kind == "popup"]
    if popup.kind == "summary" and not popup.loading:
        highlighted = iter(highlight_lines([row.text for row in text_rows], MARKDOWN_LEXER))
        body = [next(highlighted) if row.kind == "popup" else style_row(row, theme) for row in popup.rows]
    else:
        body = [style_row(row, theme) for row in popup.rows]
    lines = draw_box(
        popup.rect,
        popup.title,
        body,
        theme,
        border_style=theme.popup_border,
        hint=popup.hint,
    )
    if lines and popup.rect.width > len(CLOSE_LABEL) + 2:
        top = strip_ansi(lines[0])
        cut = popup.close_rect.x - popup.rect.x
        lines[0] = (
            f"{theme.popup_border}{fit_ansi_line(top, cut)}{theme.reset}"
            f"{theme.popup_title}{CLOSE_LABEL}{theme.reset}"
            f"{theme.popup_border}{drop_columns(top, cut + len(CLOSE_LABEL))}{theme.reset}"
        )
    return lines


def _footer_line(plan: RenderPlan, theme: UITheme) -> str:
    parts: list[str] = []
    for button in plan.footer_buttons:
        parts.append(f"{theme.footer_key}{button.label}{theme.reset}")
    buttons = " ".join(parts)
    line = f"{buttons}  {theme.footer_text}{sanitize_terminal_text(plan.footer_text)}{theme.reset}"
    return fit_ansi_line(line, plan.layout.footer.width, theme.reset)


def render_frame(plan: RenderPlan, theme: UITheme) -> str:
    """Compose the full ANSI payload for one frame."""
    placed: list[tuple[Rect, list[str]]] = [
        (plan.sidebar.rect, _region_lines(plan.sidebar, theme)),
        (plan.tabs.rect, _tab_lines(plan, theme)),
        (plan.commits.rect, _region_lines(plan.commits, theme)),
    ]
    if plan.detail is not None:
        placed.append((plan.detail.rect, _region_lines(plan.detail, theme, _detail_body(plan.detail))))
    placed.append((plan.layout.footer, [_footer_line(plan, theme)]))

    out: list[str] = ["\033[H"]
    for rect, lines in placed:
        if plan.dimmed:
            lines = _dimmed(lines, theme)
        for offset, line in enumerate(lines):
            out.append(_goto(rect.y + offset, rect.x) + line)
    if plan.popup is not None:
        rect = plan.popup.rect
        for offset, line in enumerate(_popup_lines(plan.popup, theme)):
            out.append(_goto(rect.y + offset, rect.x) + line)
    out.append(theme.reset)
    return "".join(out)


def draw_frame(plan: RenderPlan, theme: UITheme, fd: int | None = None) -> None:
    payload = render_frame(plan, theme)
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, payload.encode("utf-8", errors="replace"))
