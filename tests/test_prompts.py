"""Tests for prompt templates and substitution."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from whid.commit_index import CommitEntry
from whid.commits import CommitRecord
from whid.prompts import PROMPT_DE, PROMPT_EN, build_prompt, commits_text, load_template, render


def _entry(index: int, repo: str, commit_hash: str, body: str = "") -> CommitEntry:
    record = CommitRecord(commit_hash, "Ada", "a@x", "2 hours ago", "2025-01-02", "fix", body)
    return CommitEntry(index, Path(f"/work/{repo}"), record)


class RenderTests(unittest.TestCase):
    def test_known_tokens_are_replaced_and_unknown_kept(self) -> None:
        self.assertEqual(render("{a} and {b} and {a}", {"a": "x"}), "x and {b} and x")

    def test_build_prompt_fills_every_builtin_token(self) -> None:
        prompt = build_prompt(
            PROMPT_EN,
            date_from="2025-01-01",
            date_to="2025-01-02",
            project="alpha",
            lang="en",
            commits="abc fix",
        )

        self.assertNotIn("{from}", prompt)
        self.assertNotIn("{commits}", prompt)
        self.assertIn("Answer in English.", prompt)
        self.assertTrue(prompt.rstrip().endswith("abc fix"))

    def test_values_are_not_rescanned(self) -> None:
        self.assertEqual(render("{commits}", {"commits": "{project}", "project": "x"}), "{project}")


class TemplateLoadingTests(unittest.TestCase):
    def test_builtin_by_language(self) -> None:
        self.assertIs(load_template(None, "de"), PROMPT_DE)
        self.assertIs(load_template(None, "xx"), PROMPT_EN)

    def test_custom_template_gets_commits_appended_when_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "prompt.txt"
            path.write_text("Summarize {from}..{to}\n", encoding="utf-8")

            template = load_template(str(path), "en")

        self.assertTrue(template.startswith("Summarize {from}..{to}"))
        self.assertIn("{commits}", template)

    def test_unreadable_custom_template_falls_back(self) -> None:
        self.assertIs(load_template("/nonexistent/prompt.txt", "en"), PROMPT_EN)


class CommitsTextTests(unittest.TestCase):
    def test_repo_prefix_and_body_lines(self) -> None:
        entries = [_entry(0, "alpha", "h1", body="why\n"), _entry(1, "beta", "h2")]

        text = commits_text(entries, show_author=True, with_repo=True)

        self.assertEqual(text, "[alpha] h1 2 hours ago Ada fix\n    why\n[beta] h2 2 hours ago Ada fix")

    def test_without_repo_prefix(self) -> None:
        self.assertEqual(commits_text([_entry(0, "alpha", "h1")], show_author=False, with_repo=False), "h1 2 hours ago fix")


if __name__ == "__main__":
    unittest.main()
