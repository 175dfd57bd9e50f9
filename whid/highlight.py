"""Pygments highlighting for popup markdown and commit details.

Also neutralizes terminal control bytes so commit text cannot move the
cursor or ring the bell.
"""

from __future__ import annotations

import re
from functools import lru_cache

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

MARKDOWN_LEXER = "markdown"
DETAIL_LEXER = "diff"


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


@lru_cache(maxsize=8)
def _lexer(name: str):
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


@lru_cache(maxsize=1)
def _formatter() -> TerminalFormatter:
    return TerminalFormatter()


def highlight_lines(lines: list[str], lexer_name: str) -> list[str]:
    """Highlight a block of lines, returning the same number of styled lines."""
    if not lines:
        return []
    clean = [sanitize_terminal_text(line) for line in lines]
    lexer = _lexer(lexer_name)
    if lexer is None:
        return clean
    rendered = pygments_highlight("\n".join(clean), lexer, _formatter())
    out = rendered.split("\n")
    if len(out) > len(clean) and out[-1] == "":
        out.pop()
    if len(out) != len(clean):
        return clean
    return out
