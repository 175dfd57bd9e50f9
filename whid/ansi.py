"""ANSI-aware width measurement and line fitting for pane cells.

Styled text is clipped and padded to exact column counts so box borders line
up when rows contain color codes or wide characters.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 4


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for ``ch`` printed at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Escape sequences are kept and do not count toward width; tabs become
    spaces so the result matches the cells the terminal would paint.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1
    return "".join(out)


def drop_columns(text: str, cols: int) -> str:
    """Plain-text remainder of ``text`` after its first ``cols`` display columns.

    A wide character straddling the boundary is replaced by padding spaces.
    """
    plain = strip_ansi(text)
    col = 0
    for i, ch in enumerate(plain):
        if col >= cols:
            return " " * (col - cols) + plain[i:]
        col += char_display_width(ch, col)
    return " " * max(0, col - cols)


def fit_ansi_line(text: str, width: int, reset: str = "") -> str:
    """Clip ``text`` to ``width`` columns and pad the rest with spaces."""
    clipped = clip_ansi_line(text, width)
    padding = max(0, width - display_width(clipped))
    return f"{clipped}{reset}{' ' * padding}"
