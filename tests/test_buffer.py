"""Tests for ptyshell.pty.buffer.RollingBuffer."""

from __future__ import annotations

from ptyshell.pty.buffer import RollingBuffer


class TestRollingBufferBasics:
    def test_empty(self) -> None:
        buf = RollingBuffer()
        assert buf.line_count == 0
        assert buf.read_all() == ""

    def test_append_text(self) -> None:
        buf = RollingBuffer()
        buf.append_text("line1\nline2\nline3")
        assert buf.line_count == 3
        assert buf.read_all() == "line1\nline2\nline3"

    def test_trailing_newline_closes_line(self) -> None:
        buf = RollingBuffer()
        buf.append_text("line1\nline2\n")
        assert buf.line_count == 2
        assert buf.read_all() == "line1\nline2\n"

    def test_open_line_continues_across_chunks(self) -> None:
        buf = RollingBuffer()
        buf.append_text("user@ptyshell:~$ ")
        buf.append_text("ls\nfile.txt\n")
        assert buf.read_all() == "user@ptyshell:~$ ls\nfile.txt\n"
        assert buf.line_count == 2

    def test_closed_line_is_not_continued(self) -> None:
        buf = RollingBuffer()
        buf.append_text("a\n")
        buf.append_text("b")
        assert buf.read_all() == "a\nb"

    def test_carriage_returns_dropped(self) -> None:
        buf = RollingBuffer()
        buf.append_text("one\r\ntwo\r\n")
        assert buf.read_all() == "one\ntwo\n"

    def test_empty_chunk_is_ignored(self) -> None:
        buf = RollingBuffer()
        buf.append_text("")
        assert buf.line_count == 0

    def test_blank_lines_kept(self) -> None:
        buf = RollingBuffer()
        buf.append_text("a\n\nb\n")
        assert buf.read_all() == "a\n\nb\n"
        assert buf.line_count == 3


class TestRollingBufferOverflow:
    def test_maxlen_enforced(self) -> None:
        buf = RollingBuffer(max_lines=5)
        for i in range(10):
            buf.append_text(f"line {i}\n")
        assert buf.line_count == 5
        assert buf.read_all() == "".join(f"line {i}\n" for i in range(5, 10))


class TestRollingBufferClear:
    def test_clear(self) -> None:
        buf = RollingBuffer()
        buf.append_text("a\nb\nopen")
        buf.clear()
        assert buf.line_count == 0
        assert buf.read_all() == ""

    def test_open_line_not_continued_after_clear(self) -> None:
        buf = RollingBuffer()
        buf.append_text("open")
        buf.clear()
        buf.append_text("fresh")
        assert buf.read_all() == "fresh"
