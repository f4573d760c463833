"""
Offset to line number index.

Built once per scanned text so every fragment's start offset can be resolved
to the line it starts on.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class CharacterRange:
    """Half-open span ``[offset, offset + length)`` of a text buffer."""

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    def contains(self, offset: int) -> bool:
        return self.offset <= offset < self.end


class LineIndex:
    """
    Ordered map from 1-based line number to the character range of the line.

    Ranges include the ``\\n`` terminator of every line but the last, so they
    are contiguous and cover the whole buffer.
    """

    def __init__(self, text: str):
        self._ranges: List[CharacterRange] = []
        self._starts: List[int] = []
        self._length = len(text)

        offset = 0
        lines = text.split("\n")
        for i, line in enumerate(lines):
            length = len(line) + (1 if i < len(lines) - 1 else 0)
            self._ranges.append(CharacterRange(offset, length))
            self._starts.append(offset)
            offset += length

    def __len__(self) -> int:
        return len(self._ranges)

    def range_of(self, line: int) -> CharacterRange:
        """Return the character range of a 1-based line number."""
        if not 1 <= line <= len(self._ranges):
            raise IndexError(f"line {line} out of range 1..{len(self._ranges)}")
        return self._ranges[line - 1]

    def line_of(self, offset: int) -> int:
        """
        Return the 1-based line containing ``offset``.

        ``offset == len(text)`` resolves to the last line.

        Raises:
            IndexError: If the offset lies outside the text
        """
        if offset < 0 or offset > self._length:
            raise IndexError(f"offset {offset} out of range 0..{self._length}")
        if offset == self._length:
            return len(self._ranges)
        return bisect_right(self._starts, offset)

    def line_start(self, offset: int) -> int:
        """Return the offset at which the line containing ``offset`` begins."""
        return self._ranges[self.line_of(offset) - 1].offset
