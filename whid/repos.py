"""Git repository discovery below a root directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def is_git_repository(path: Path) -> bool:
    """Return whether ``path`` holds a ``.git`` directory or gitdir file."""
    return (path / ".git").exists()


def discover(root: Path) -> list[Path]:
    """Return git working trees under ``root`` in deterministic walk order.

    A directory that is itself a repository is not descended into. Entries
    are visited sorted by name; symlinked directories are not followed.
    An unreadable ``root`` raises ``OSError``; unreadable subdirectories are
    skipped.
    """
    root = Path(root)
    if is_git_repository(root):
        return [root]
    repos: list[Path] = []
    _walk(root, repos, is_root=True)
    return repos


def _walk(directory: Path, repos: list[Path], is_root: bool = False) -> None:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError:
        if is_root:
            raise
        logger.info("skipping unreadable directory %s", directory)
        return

    for entry in entries:
        if entry.name == ".git":
            continue
        try:
            if not entry.is_dir(follow_symlinks=False):
                continue
        except OSError:
            continue
        child = Path(entry.path)
        if is_git_repository(child):
            repos.append(child)
        else:
            _walk(child, repos)


def repo_display_name(path: Path) -> str:
    """Short label for a repository path."""
    if path.name:
        return path.name
    if path.parent.name:
        return path.parent.name
    return str(path)
