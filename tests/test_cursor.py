"""
Line cursor tests

Tests LineCursor reading, pushback and the scan combinators the block
routines are built on.
"""

import re

from hikidown.lib.cursor import LineCursor


LIST_RE = re.compile(r"[*#]+")
CLOSE_RE = re.compile(r">>>")


class TestReading:
    """Test gets/ungets/peek"""

    def test_lines_keep_newlines(self):
        """Lines are returned with their newline, last line as written"""
        cursor = LineCursor.from_text("a\nb")
        assert cursor.gets() == "a\n"
        assert cursor.gets() == "b"
        assert cursor.gets() is None

    def test_trailing_newline_adds_no_empty_line(self):
        """Text ending in a newline does not produce an extra empty line"""
        cursor = LineCursor.from_text("a\nb\n")
        assert list(cursor) == ["a\n", "b\n"]

    def test_crlf_normalised(self):
        """CRLF line endings become plain newlines"""
        cursor = LineCursor.from_text("a\r\nb\r\n")
        assert list(cursor) == ["a\n", "b\n"]

    def test_empty_text(self):
        """Empty input is at end immediately"""
        cursor = LineCursor.from_text("")
        assert cursor.gets() is None
        assert cursor.eof()

    def test_eof_is_repeatable(self):
        """gets() keeps returning None at end of input"""
        cursor = LineCursor.from_text("x")
        cursor.gets()
        assert cursor.gets() is None
        assert cursor.gets() is None
        assert cursor.lineno == 1

    def test_ungets_then_gets_returns_same_line(self):
        """A pushed back line is read again"""
        cursor = LineCursor.from_text("one\ntwo\n")
        line = cursor.gets()
        cursor.ungets(line)
        assert cursor.gets() == "one\n"
        assert cursor.gets() == "two\n"

    def test_pushback_is_lifo(self):
        """Most recent pushback is read first"""
        cursor = LineCursor(["x\n"])
        cursor.ungets("b\n")
        cursor.ungets("a\n")
        assert [cursor.gets(), cursor.gets(), cursor.gets()] == ["a\n", "b\n", "x\n"]

    def test_ungets_none_is_noop(self):
        """Pushing back the end-of-input marker changes nothing"""
        cursor = LineCursor.from_text("a")
        assert cursor.ungets(None) is None
        assert cursor.lineno == 0
        assert cursor.gets() == "a"

    def test_lineno_tracks_gets_and_ungets(self):
        """lineno counts handed out lines, pushback decrements it"""
        cursor = LineCursor.from_text("a\nb\nc\n")
        cursor.gets()
        cursor.gets()
        assert cursor.lineno == 2
        cursor.ungets("b\n")
        assert cursor.lineno == 1

    def test_peek_does_not_consume(self):
        """peek() leaves position and lineno unchanged"""
        cursor = LineCursor.from_text("a\nb\n")
        assert cursor.peek() == "a\n"
        assert cursor.peek() == "a\n"
        assert cursor.lineno == 0
        assert cursor.has_next()


class TestScanning:
    """Test conditional reads and scan combinators"""

    def test_lines_while_pushes_back_first_mismatch(self):
        """lines_while stops before the first non-matching line"""
        cursor = LineCursor.from_text("* a\n** b\ntext\n")
        assert cursor.lines_while(LIST_RE) == ["* a\n", "** b\n"]
        assert cursor.gets() == "text\n"

    def test_lines_while_no_match(self):
        """No matching line yields an empty list and consumes nothing"""
        cursor = LineCursor.from_text("text\n")
        assert cursor.lines_while(LIST_RE) == []
        assert cursor.peek() == "text\n"

    def test_lines_until_keeps_terminator(self):
        """lines_until leaves the matching line for the next reader"""
        cursor = LineCursor.from_text("code\nmore\n>>>\nafter\n")
        assert cursor.lines_until(CLOSE_RE) == ["code\n", "more\n"]
        assert cursor.gets() == ">>>\n"

    def test_lines_until_terminator_drops_terminator(self):
        """lines_untilTerminator consumes and discards the match"""
        cursor = LineCursor.from_text("code\n>>>\nafter\n")
        assert cursor.lines_untilTerminator(CLOSE_RE) == ["code\n"]
        assert cursor.gets() == "after\n"

    def test_lines_until_runs_to_end(self):
        """A missing terminator reads to the end of input"""
        cursor = LineCursor.from_text("a\nb")
        assert cursor.lines_until(CLOSE_RE) == ["a\n", "b"]
        assert cursor.gets() is None

    def test_gets_if_and_unless(self):
        """Conditional reads consume only on the right outcome"""
        cursor = LineCursor.from_text("* item\ntext\n")
        assert cursor.gets_unless(LIST_RE) is None
        assert cursor.gets_if(LIST_RE) == "* item\n"
        assert cursor.gets_if(LIST_RE) is None
        assert cursor.gets_unless(LIST_RE) == "text\n"

    def test_blank_lines_skip(self):
        """Whitespace-only lines are consumed and counted"""
        cursor = LineCursor.from_text("\n  \n\ntext\n")
        assert cursor.blankLines_skip() == 3
        assert cursor.gets() == "text\n"

    def test_each_while_allows_reads_between_yields(self):
        """The caller may consume lines while iterating"""
        cursor = LineCursor.from_text("* a\n// note\n* b\nend\n")
        comment_re = re.compile(r"//")
        seen = []
        for line in cursor.each_while(LIST_RE):
            seen.append(line)
            cursor.lines_while(comment_re)
        assert seen == ["* a\n", "* b\n"]
        assert cursor.gets() == "end\n"
