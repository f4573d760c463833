"""
Remark suppression.

Remarks (``<#-- ... --#>``) are blanked out before scanning. The content of
each remark is overwritten in place, so every character offset and every
newline of the original text survives and line numbers computed afterwards
remain those of the original file.
"""

import re

from ..utils.constants import REMARK_MARKER, REMARK_PLACEHOLDER, SCRIPT_END_MARKER, SCRIPT_START_MARKER


class RemarkSuppressor:
    """Blanks out commented-out script regions while preserving offsets."""

    _pattern = re.compile(
        re.escape(SCRIPT_START_MARKER + REMARK_MARKER)
        + r".*?"
        + re.escape(REMARK_MARKER + SCRIPT_END_MARKER),
        re.DOTALL,
    )

    def __init__(self, placeholder: str = REMARK_PLACEHOLDER):
        if len(placeholder) != 1 or placeholder == "\n":
            raise ValueError("placeholder must be a single non-newline character")
        self.placeholder = placeholder

    def suppress(self, text: str) -> str:
        """
        Return ``text`` with every remark span blanked out.

        Characters strictly between the ``<#`` and ``#>`` delimiters of a
        remark are replaced by the placeholder unless they are control
        characters. An unterminated remark is not a match and is left as is.
        """
        chars = None
        start_len = len(SCRIPT_START_MARKER)
        end_len = len(SCRIPT_END_MARKER)

        for match in self._pattern.finditer(text):
            if chars is None:
                chars = list(text)
            for i in range(match.start() + start_len, match.end() - end_len):
                if not _is_control(chars[i]):
                    chars[i] = self.placeholder

        return text if chars is None else "".join(chars)


def _is_control(char: str) -> bool:
    code = ord(char)
    return code < 0x20 or 0x7F <= code <= 0x9F
