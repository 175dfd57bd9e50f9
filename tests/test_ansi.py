"""Tests for ANSI width handling and pygments highlighting."""

from __future__ import annotations

import unittest

from whid.ansi import clip_ansi_line, display_width, drop_columns, fit_ansi_line, strip_ansi
from whid.highlight import DETAIL_LEXER, MARKDOWN_LEXER, highlight_lines, sanitize_terminal_text


class AnsiWidthTests(unittest.TestCase):
    def test_escape_codes_have_no_width(self) -> None:
        self.assertEqual(display_width("\033[31mred\033[0m"), 3)
        self.assertEqual(strip_ansi("\033[1;4mx\033[0m"), "x")

    def test_wide_characters_count_double(self) -> None:
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(clip_ansi_line("日本語", 5), "日本")

    def test_fit_pads_and_clips(self) -> None:
        self.assertEqual(fit_ansi_line("abc", 5), "abc  ")
        self.assertEqual(fit_ansi_line("abcdef", 4), "abcd")
        self.assertEqual(fit_ansi_line("\ta", 6), "    a ")

    def test_drop_columns_counts_display_width(self) -> None:
        self.assertEqual(drop_columns("\033[1m日本語\033[0m-x", 4), "語-x")
        self.assertEqual(drop_columns("日本語", 3), " 語")
        self.assertEqual(drop_columns("abc", 5), "")


class HighlightTests(unittest.TestCase):
    def test_line_count_is_preserved(self) -> None:
        lines = ["## Title", "", "- item", "*bold*"]

        highlighted = highlight_lines(lines, MARKDOWN_LEXER)

        self.assertEqual(len(highlighted), len(lines))
        self.assertEqual([strip_ansi(line) for line in highlighted], lines)

    def test_diff_lexer_keeps_text(self) -> None:
        lines = ["commit abc", "M\tfile.py", "+added"]

        self.assertEqual([strip_ansi(line) for line in highlight_lines(lines, DETAIL_LEXER)], lines)

    def test_unknown_lexer_returns_clean_lines(self) -> None:
        self.assertEqual(highlight_lines(["a\x1bb"], "no-such-lexer"), ["a\\x1bb"])

    def test_sanitize_keeps_whitespace(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\tb\nc\x00"), "a\tb\nc\\x00")


if __name__ == "__main__":
    unittest.main()
