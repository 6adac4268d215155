"""
Cursor-based source scanner.

The scanner does not produce tokens. It slices delimiter-bounded substrings
out of the source while moving a single cursor forward; every later stage
(block parser, operand reader) is built on these primitives.
"""

from typing import Optional

WHITESPACE = " \t\r\n"


class Scanner:
    """
    Forward-only cursor over an immutable source string.

    Reaching the end of input is never an error: scans stop there and
    return whatever was accumulated.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self._lines = source.split("\n")

    @property
    def at_end(self) -> bool:
        """True once the cursor has consumed the whole source."""
        return self.pos >= len(self.source)

    def peek(self) -> Optional[str]:
        """Return the character under the cursor, or None at end of input."""
        if self.at_end:
            return None
        return self.source[self.pos]

    def advance(self) -> Optional[str]:
        """Consume and return one character (None at end of input)."""
        c = self.peek()
        if c is not None:
            self.pos += 1
        return c

    def scan_until(self, stop_char: str) -> str:
        """
        Consume characters up to, but not including, the next stop_char.

        Args:
            stop_char: Delimiter character

        Returns:
            The consumed substring. If stop_char never occurs, everything
            up to the end of input.
        """
        end = self.source.find(stop_char, self.pos)
        if end < 0:
            end = len(self.source)
        result = self.source[self.pos:end]
        self.pos = end
        return result

    def scan_until_whitespace(self) -> str:
        """Consume characters up to the next space/tab/newline or end of input."""
        start = self.pos
        while not self.at_end and self.source[self.pos] not in WHITESPACE:
            self.pos += 1
        return self.source[start:self.pos]

    def skip_whitespace(self) -> None:
        """Skip a run of whitespace; no-op at end of input."""
        while not self.at_end and self.source[self.pos] in WHITESPACE:
            self.pos += 1

    def skip_blanks(self) -> None:
        """Skip spaces and tabs without leaving the current line."""
        while not self.at_end and self.source[self.pos] in " \t":
            self.pos += 1

    @property
    def line_num(self) -> int:
        """1-based line number of the cursor."""
        return self.source.count("\n", 0, self.pos) + 1

    def line_text(self, line_num: int) -> str:
        """Original text of a 1-based source line ('' when out of range)."""
        if 1 <= line_num <= len(self._lines):
            return self._lines[line_num - 1]
        return ""
