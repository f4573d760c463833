"""
Unit tests for the offset to line index.
"""

import pytest

from loom.parsing.line_index import CharacterRange, LineIndex


class TestCharacterRange:
    """Test character range arithmetic."""

    def test_end_and_contains(self):
        char_range = CharacterRange(offset=3, length=4)
        assert char_range.end == 7
        assert char_range.contains(3)
        assert char_range.contains(6)
        assert not char_range.contains(7)
        assert not char_range.contains(2)


class TestLineIndex:
    """Test line lookups."""

    def test_ranges_include_terminators(self):
        """Every line but the last includes its newline."""
        index = LineIndex("ab\ncd\n")
        assert len(index) == 3
        assert index.range_of(1) == CharacterRange(0, 3)
        assert index.range_of(2) == CharacterRange(3, 3)
        assert index.range_of(3) == CharacterRange(6, 0)

    def test_ranges_cover_buffer(self):
        """Ranges are contiguous and cover the whole text."""
        text = "first\n\nthird line\nlast"
        index = LineIndex(text)

        offset = 0
        for line in range(1, len(index) + 1):
            char_range = index.range_of(line)
            assert char_range.offset == offset
            offset = char_range.end
        assert offset == len(text)

    def test_line_of(self):
        index = LineIndex("ab\ncd\n")
        assert index.line_of(0) == 1
        assert index.line_of(2) == 1
        assert index.line_of(3) == 2
        assert index.line_of(5) == 2

    def test_line_of_end_of_text(self):
        """The offset one past the end resolves to the last line."""
        assert LineIndex("ab\ncd").line_of(5) == 2
        assert LineIndex("ab\n").line_of(3) == 2

    def test_every_offset_has_one_line(self):
        text = "x\nyy\n\nzzz"
        index = LineIndex(text)
        for offset in range(len(text)):
            line = index.line_of(offset)
            assert index.range_of(line).contains(offset)

    def test_empty_text(self):
        index = LineIndex("")
        assert len(index) == 1
        assert index.line_of(0) == 1

    def test_line_start(self):
        index = LineIndex("ab\ncd")
        assert index.line_start(4) == 3
        assert index.line_start(1) == 0

    @pytest.mark.parametrize("offset", [-1, 6])
    def test_offset_out_of_range(self, offset):
        with pytest.raises(IndexError):
            LineIndex("ab\ncd").line_of(offset)

    @pytest.mark.parametrize("line", [0, 3])
    def test_line_out_of_range(self, line):
        with pytest.raises(IndexError):
            LineIndex("ab\ncd").range_of(line)
