"""Tests for repository discovery."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from whid.repos import discover, repo_display_name


class DiscoverTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _repo(self, relative: str, gitfile: bool = False) -> Path:
        path = self.root / relative
        path.mkdir(parents=True)
        if gitfile:
            (path / ".git").write_text("gitdir: /elsewhere\n", encoding="utf-8")
        else:
            (path / ".git").mkdir()
        return path

    def test_finds_nested_repositories_sorted(self) -> None:
        beta = self._repo("beta")
        alpha = self._repo("group/alpha")
        worktree = self._repo("group/zeta", gitfile=True)
        (self.root / "plain").mkdir()

        self.assertEqual(discover(self.root), [beta, alpha, worktree])

    def test_does_not_descend_into_repositories(self) -> None:
        outer = self._repo("outer")
        self._repo("outer/vendor/inner")

        self.assertEqual(discover(self.root), [outer])

    def test_root_repository_is_returned_alone(self) -> None:
        (self.root / ".git").mkdir()
        self._repo("child")

        self.assertEqual(discover(self.root), [self.root])

    @unittest.skipIf(not hasattr(os, "symlink"), "symlinks unsupported")
    def test_symlinked_directories_are_not_followed(self) -> None:
        target = self._repo("real")
        os.symlink(target, self.root / "link")

        self.assertEqual(discover(self.root), [target])

    def test_missing_root_raises(self) -> None:
        with self.assertRaises(OSError):
            discover(self.root / "missing")

    def test_empty_root_has_no_repositories(self) -> None:
        self.assertEqual(discover(self.root), [])


class DisplayNameTests(unittest.TestCase):
    def test_uses_last_path_component(self) -> None:
        self.assertEqual(repo_display_name(Path("/work/alpha")), "alpha")
        self.assertEqual(repo_display_name(Path("/")), "/")


if __name__ == "__main__":
    unittest.main()
