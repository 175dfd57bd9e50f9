"""Commit loading through the ``git`` binary.

Parses ``git log`` output into immutable commit records grouped per
repository, and fetches ``git show`` details for the detail pane with a
small LRU cache.
"""

from __future__ import annotations

import functools
import logging
import subprocess
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from .errors import ExternalToolError
from .timeframe import TimeWindow

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
GIT_TIMEOUT_SECONDS = 30.0
COMMIT_DETAILS_CACHE_MAX = 128
_NO_COMMITS_MARKERS = ("does not have any commits yet", "bad default revision")

_DETAILS_CACHE: OrderedDict[tuple[str, str], str] = OrderedDict()


@dataclass(frozen=True)
class CommitRecord:
    hash: str
    author: str
    author_email: str
    relative_date: str
    date: str
    subject: str
    body: str = ""

    def summary_line(self, show_author: bool = True) -> str:
        parts = [self.hash, self.relative_date]
        if show_author:
            parts.append(self.author)
        parts.append(self.subject)
        return " ".join(part for part in parts if part)

    def body_lines(self) -> list[str]:
        return [line.rstrip() for line in self.body.strip("\n").splitlines()]

    def display_lines(self, show_author: bool = True, detailed: bool = False) -> list[str]:
        """Lines used by the commit list: one line, plus indented body when detailed."""
        lines = [self.summary_line(show_author)]
        if detailed:
            lines.extend(f"    {line}" for line in self.body_lines() if line.strip())
        return lines

    def full_text(self, show_author: bool = True) -> str:
        return "\n".join(self.display_lines(show_author, detailed=True))


class RepoCommits(NamedTuple):
    repository: Path
    commits: list[CommitRecord]


CommitData = list[RepoCommits]


@dataclass(frozen=True)
class LoadRequest:
    window: TimeWindow
    filter_by_user: bool = True
    detailed: bool = False


def _run_git(args: list[str], repo: Path | None = None) -> subprocess.CompletedProcess[str]:
    command = ["git"] if repo is None else ["git", "-C", str(repo)]
    command.extend(args)
    try:
        return subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise ExternalToolError(command, str(exc)) from exc


@functools.lru_cache(maxsize=1)
def current_user_email() -> str | None:
    """Return ``git config user.email``, resolved once per process."""
    try:
        proc = _run_git(["config", "--get", "user.email"])
    except ExternalToolError:
        return None
    email = proc.stdout.strip()
    if proc.returncode != 0 or not email:
        logger.info("git user.email is not configured; user filter disabled")
        return None
    return email


def log_format(detailed: bool) -> str:
    fields = ["%h", "%an", "%ae", "%ar", "%aI", "%s"]
    if detailed:
        fields.append("%b")
    return "--pretty=format:" + "%x1f".join(fields) + "%x1e"


def parse_log_output(output: str, detailed: bool = False) -> list[CommitRecord]:
    """Parse ``git log`` output produced with ``log_format``.

    Raises ``ValueError`` for records with missing fields.
    """
    records: list[CommitRecord] = []
    expected = 7 if detailed else 6
    for chunk in output.split(RECORD_SEP):
        chunk = chunk.lstrip("\r\n")
        if not chunk.strip():
            continue
        parts = chunk.split(FIELD_SEP)
        if len(parts) < expected or not parts[0].strip():
            raise ValueError(f"unparseable log record: {chunk[:80]!r}")
        records.append(
            CommitRecord(
                hash=parts[0].strip(),
                author=parts[1],
                author_email=parts[2],
                relative_date=parts[3],
                date=parts[4],
                subject=parts[5],
                body=FIELD_SEP.join(parts[6:]) if detailed else "",
            )
        )
    return records


def recent_commits(repo: Path, request: LoadRequest) -> list[CommitRecord]:
    """Run ``git log`` for one repository and parse the result."""
    args = ["log", "--since", request.window.since.strftime("%Y-%m-%d %H:%M:%S")]
    if request.window.until is not None:
        args.extend(["--until", request.window.until.strftime("%Y-%m-%d %H:%M:%S")])
    if request.filter_by_user:
        email = current_user_email()
        if email:
            args.extend(["--author", email])
    args.append(log_format(request.detailed))

    proc = _run_git(args, repo)
    if proc.returncode != 0:
        if any(marker in proc.stderr for marker in _NO_COMMITS_MARKERS):
            return []
        logger.warning("git log failed in %s: %s", repo, proc.stderr.strip())
        raise ExternalToolError(["git", "-C", str(repo), *args], proc.stderr)
    try:
        return parse_log_output(proc.stdout, request.detailed)
    except ValueError as exc:
        raise ExternalToolError(["git", "-C", str(repo), *args], str(exc)) from exc


def load_commits(repositories: list[Path], request: LoadRequest) -> CommitData:
    """Load commits for every repository, omitting those without matches."""
    data: CommitData = []
    for repo in repositories:
        commits = recent_commits(repo, request)
        if commits:
            data.append(RepoCommits(repo, commits))
    logger.debug(
        "loaded %d commits from %d repositories (%s)",
        sum(len(entry.commits) for entry in data),
        len(data),
        request.window.label,
    )
    return data


def commit_details(repo: Path, commit_hash: str) -> str:
    """Return ``git show --pretty=fuller --name-status`` output, cached."""
    key = (str(repo), commit_hash)
    cached = _DETAILS_CACHE.get(key)
    if cached is not None:
        _DETAILS_CACHE.move_to_end(key)
        return cached
    args = ["show", "--pretty=fuller", "--name-status", commit_hash]
    proc = _run_git(args, repo)
    if proc.returncode != 0:
        raise ExternalToolError(["git", "-C", str(repo), *args], proc.stderr)
    _DETAILS_CACHE[key] = proc.stdout
    while len(_DETAILS_CACHE) > COMMIT_DETAILS_CACHE_MAX:
        _DETAILS_CACHE.popitem(last=False)
    return proc.stdout


def clear_commit_details_cache() -> None:
    _DETAILS_CACHE.clear()
