"""
Line cursor over a fully buffered document

Pull-based reader offering peek, unlimited pushback and the three scan
combinators every block routine is written against:

    lines_while(pattern)          consume lines while they match
    lines_until(pattern)          consume lines up to (not including) a match
    lines_untilTerminator(pattern) consume up to a match and discard it

Lines keep their trailing newline, as read from the source.
"""

from typing import Iterator, List, Optional, Pattern


class LineCursor:
    """
    Reader over a list of lines with a pushback stack

    Attributes:
        lineno: Number of lines handed out so far; ungets() decrements it
    """

    def __init__(self, lines: List[str]) -> None:
        self._lines = lines
        self._position = 0
        self._pushback: List[str] = []
        self._eof = False
        self.lineno = 0

    @classmethod
    def from_text(cls, text: str) -> "LineCursor":
        """
        Split text into newline-terminated lines, normalising CRLF

        The final line keeps no newline if the text does not end with one.

        Example:
            >>> LineCursor.from_text("a\\r\\nb")._lines
            ['a\\n', 'b']
        """
        lines = [line + "\n" for line in text.split("\n")]
        lines[-1] = lines[-1][:-1]
        if not lines[-1]:
            lines.pop()
        return cls([line.replace("\r\n", "\n") for line in lines])

    def __repr__(self) -> str:
        return f"<LineCursor line={self.lineno}>"

    def eof(self) -> bool:
        return self._eof

    def gets(self) -> Optional[str]:
        """
        Read the next line

        Returns:
            The next line, or None once input is exhausted (repeatable)
        """
        if self._pushback:
            self.lineno += 1
            return self._pushback.pop()
        if self._eof:
            return None
        if self._position >= len(self._lines):
            self._eof = True
            return None
        line = self._lines[self._position]
        self._position += 1
        self.lineno += 1
        return line

    def ungets(self, line: Optional[str]) -> Optional[str]:
        """Push a line back; the most recent pushback is read first"""
        if line is None:
            return None
        self.lineno -= 1
        self._pushback.append(line)
        return line

    def peek(self) -> Optional[str]:
        line = self.gets()
        self.ungets(line)
        return line

    def has_next(self) -> bool:
        return self.peek() is not None

    def blankLines_skip(self) -> int:
        """Consume blank (whitespace-only) lines, returning how many"""
        count = 0
        while True:
            line = self.gets()
            if line is None:
                return count
            if line.strip():
                self.ungets(line)
                return count
            count += 1

    def gets_if(self, pattern: Pattern[str]) -> Optional[str]:
        """Read the next line only if it matches pattern"""
        line = self.gets()
        if line is None or not pattern.match(line):
            self.ungets(line)
            return None
        return line

    def gets_unless(self, pattern: Pattern[str]) -> Optional[str]:
        """Read the next line only if it does not match pattern"""
        line = self.gets()
        if line is None or pattern.match(line):
            self.ungets(line)
            return None
        return line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.gets()
            if line is None:
                return
            yield line

    def each_while(self, pattern: Pattern[str]) -> Iterator[str]:
        """
        Yield consecutive lines matching pattern

        The first non-matching line is pushed back. Between yields the
        caller may use the cursor itself (e.g. to skip comment lines).
        """
        while True:
            line = self.gets()
            if line is None:
                return
            if not pattern.match(line):
                self.ungets(line)
                return
            yield line

    def each_until(self, pattern: Pattern[str]) -> Iterator[str]:
        """Yield lines up to the first match, which is pushed back"""
        while True:
            line = self.gets()
            if line is None:
                return
            if pattern.match(line):
                self.ungets(line)
                return
            yield line

    def each_untilTerminator(self, pattern: Pattern[str]) -> Iterator[str]:
        """Yield lines up to the first match, which is consumed and dropped"""
        while True:
            line = self.gets()
            if line is None or pattern.match(line):
                return
            yield line

    def lines_while(self, pattern: Pattern[str]) -> List[str]:
        return list(self.each_while(pattern))

    def lines_until(self, pattern: Pattern[str]) -> List[str]:
        return list(self.each_until(pattern))

    def lines_untilTerminator(self, pattern: Pattern[str]) -> List[str]:
        return list(self.each_untilTerminator(pattern))

