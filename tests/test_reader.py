"""Tests for raw key decoding."""

from __future__ import annotations

import os
import unittest

from whid.input import reader
from whid.input.reader import read_key


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        reader._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def _keys(self, payload: bytes, count: int) -> list[str]:
        os.write(self.write_fd, payload)
        return [read_key(self.read_fd, timeout_ms=50) for _ in range(count)]

    def test_plain_and_control_keys(self) -> None:
        self.assertEqual(
            self._keys(b"q\t \r\n\x03A", 7),
            ["q", "TAB", "SPACE", "ENTER", "ENTER", "CTRL_C", "A"],
        )

    def test_arrow_and_shift_tab_sequences(self) -> None:
        self.assertEqual(
            self._keys(b"\x1b[A\x1b[B\x1b[C\x1b[D\x1b[Z", 5),
            ["UP", "DOWN", "RIGHT", "LEFT", "SHIFT_TAB"],
        )

    def test_paging_and_home_end(self) -> None:
        self.assertEqual(
            self._keys(b"\x1b[5~\x1b[6~\x1b[H\x1b[4~", 4),
            ["PAGE_UP", "PAGE_DOWN", "HOME", "END"],
        )

    def test_lone_escape_times_out(self) -> None:
        self.assertEqual(self._keys(b"\x1b", 1), ["ESC"])

    def test_escape_followed_by_key_keeps_the_key(self) -> None:
        self.assertEqual(self._keys(b"\x1bj", 2), ["ESC", "j"])

    def test_sgr_mouse_events(self) -> None:
        self.assertEqual(
            self._keys(b"\x1b[<0;12;5M\x1b[<0;12;5m\x1b[<64;3;4M\x1b[<65;3;4M\x1b[<2;1;1M", 5),
            [
                "MOUSE_LEFT_DOWN:12:5",
                "MOUSE_LEFT_UP:12:5",
                "MOUSE_WHEEL_UP:3:4",
                "MOUSE_WHEEL_DOWN:3:4",
                "MOUSE",
            ],
        )

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(read_key(self.read_fd, timeout_ms=10), "")


if __name__ == "__main__":
    unittest.main()
