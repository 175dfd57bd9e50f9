"""UI theme definitions.

Themes are ANSI palettes for pane chrome and commit rows. Markdown and
``git show`` highlighting inside panes uses pygments separately.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the screen writer."""

    name: str
    reset: str
    reverse: str
    border_focus: str
    border_blur: str
    title: str
    repo_header: str
    commit_hash: str
    marked: str
    selection: str
    empty: str
    tab_active: str
    tab_inactive: str
    stat_heading: str
    footer_key: str
    footer_text: str
    popup_border: str
    popup_title: str
    popup_hint: str
    spinner: str
    backdrop: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    border_focus="\033[38;5;45m",
    border_blur="\033[2;38;5;250m",
    title="\033[1m",
    repo_header="\033[1;38;5;81m",
    commit_hash="\033[38;5;214m",
    marked="\033[1;38;5;42m",
    selection="\033[30;48;5;81m",
    empty="\033[2;38;5;250m",
    tab_active="\033[1;4;38;5;229m",
    tab_inactive="\033[38;5;250m",
    stat_heading="\033[1;38;5;81m",
    footer_key="\033[38;5;229m",
    footer_text="\033[2;38;5;250m",
    popup_border="\033[38;5;45m",
    popup_title="\033[1;38;5;45m",
    popup_hint="\033[2;38;5;250m",
    spinner="\033[38;5;214m",
    backdrop="\033[2m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    border_focus="",
    border_blur="",
    title="",
    repo_header="",
    commit_hash="",
    marked="",
    selection="",
    empty="",
    tab_active="",
    tab_inactive="",
    stat_heading="",
    footer_key="",
    footer_text="",
    popup_border="",
    popup_title="",
    popup_hint="",
    spinner="",
    backdrop="",
)


def resolve_theme(*, no_color: bool = False) -> UITheme:
    """Return the concrete theme for the requested color mode."""
    return PLAIN_THEME if no_color else DEFAULT_THEME


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "resolve_theme",
]
