"""Prompt templates and token substitution for AI summaries.

Templates use ``{name}`` tokens. Substitution is purely textual: tokens
without a value stay in the output unchanged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from .commit_index import CommitEntry
from .repos import repo_display_name

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

PROMPT_EN = """\
Overall summary: Summarize all changes in the Git history from {from} to {to} in short, concise bullet points by grouping similar changes and highlighting their main topics and functions. Answer in {lang}.

- Breakdown by day: Provide a summary of the changes for each day in a single line, highlighting the most important changes and features.
- If ticket numbers (format: [letter code]-[number sequence]) appear in the commit, add them to the daily overview at the end. e.g. "[...] relates to CPT-2345 and DSG-23212"
- If the commits are from multiple projects, repeat the output for each project, separated by --- and two line breaks before and after
- If there are no commits, this does not need to be mentioned.
- Use markdown, preserve it in the output, including spaces

Example:

## {project} - Timeframe: {from} - {to}

*Overall summary*:
- [Summary of changes. Sorted by topic]
- *[Topic / Topic Headline]*
    - [Details, up to 4, depending on complexity, can also be further nested]

Daily breakdown:
- [*Date 1*]: [Changes on this day summarized]
- [*Date 2*]: [Changes on this day summarized]

Project: {project}
Commits:
{commits}
"""

PROMPT_DE = """\
Gesamtübersicht: Fasse alle Änderungen in der Git-Historie von {from} bis {to} in kurzen, prägnanten Stichpunkten zusammen, indem ähnliche Änderungen gruppiert und deren Hauptthemen und Funktionen hervorgehoben werden. Antworte auf {lang}.

- Aufschlüsselung nach Tag: Gib für jeden Tag eine Zusammenfassung der Änderungen in einer einzigen Zeile an und hebe die wichtigsten Änderungen und Features hervor.
- Falls Ticketnummern (Format: [Buchstabencode]-[Zahlenfolge]) im Commit erscheinen, füge sie am Ende der Tagesübersicht hinzu, z. B. "[...] bezieht sich auf CPT-2345 und DSG-23212"
- Wenn die Commits aus mehreren Projekten stammen, wiederhole die Ausgabe für jedes Projekt, getrennt durch --- und jeweils zwei Zeilenumbrüche davor und danach
- Wenn es keine Commits gibt, muss dies nicht erwähnt werden.
- Verwende Markdown und erhalte es im Output, inklusive Leerzeichen

Beispiel:

## {project} - Zeitraum: {from} - {to}

*Gesamtübersicht*:
- [Zusammenfassung der Änderungen. Nach Themen sortiert]
- *[Thema / Themenüberschrift]*
    - [Details, bis zu 4, je nach Komplexität, ggf. weiter verschachtelt]

Tagesübersicht:
- [*Datum 1*]: [Änderungen an diesem Tag zusammengefasst]
- [*Datum 2*]: [Änderungen an diesem Tag zusammengefasst]

Projekt: {project}
Commits:
{commits}
"""

BUILTIN_TEMPLATES: dict[str, str] = {"en": PROMPT_EN, "de": PROMPT_DE}
LANGUAGE_NAMES: dict[str, str] = {"en": "English", "de": "Deutsch"}


def render(template: str, variables: Mapping[str, str]) -> str:
    """Replace ``{name}`` tokens with ``variables[name]``; unknown tokens stay verbatim."""

    def substitute(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return _TOKEN_RE.sub(substitute, template)


def load_template(custom_prompt_path: str | None, lang: str) -> str:
    """Return the custom template when readable, else the built-in one for ``lang``."""
    if custom_prompt_path:
        path = Path(custom_prompt_path).expanduser()
        try:
            template = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("custom prompt %s unreadable, using built-in: %s", path, exc)
        else:
            if "{commits}" not in template:
                template = template.rstrip("\n") + "\n\nProject: {project}\nCommits:\n{commits}\n"
            return template
    return BUILTIN_TEMPLATES.get(lang, PROMPT_EN)


def commits_text(entries: Iterable[CommitEntry], show_author: bool, with_repo: bool) -> str:
    """One line per commit (body lines indented), optionally prefixed by repo name."""
    lines: list[str] = []
    for entry in entries:
        text = entry.record.full_text(show_author)
        if with_repo:
            text = f"[{repo_display_name(entry.repository)}] {text}"
        lines.append(text)
    return "\n".join(lines)


def build_prompt(
    template: str,
    *,
    date_from: str,
    date_to: str,
    project: str,
    lang: str,
    commits: str,
) -> str:
    return render(
        template,
        {
            "from": date_from,
            "to": date_to,
            "project": project,
            "lang": LANGUAGE_NAMES.get(lang, lang),
            "commits": commits,
        },
    )
