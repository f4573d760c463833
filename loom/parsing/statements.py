"""
Statement inspection for Python script fragments.

Script fragments are incomplete programs: a block header may be left open
and closed by a later fragment. The helpers here read the token stream of
such a fragment to find whether it ends by opening a block.
"""

import io
import tokenize
from typing import Optional

_INSIGNIFICANT_TOKENS = frozenset(
    {
        tokenize.COMMENT,
        tokenize.NL,
        tokenize.NEWLINE,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.ENDMARKER,
    }
)


def block_header_line(code: str) -> Optional[int]:
    """
    Locate the statement that leaves a block open at the end of ``code``.

    Args:
        code: Script code, possibly ending in comments or blank lines

    Returns:
        Zero-based index of the line where the block-opening statement
        starts, or None if the last significant token is not ``:``. Code
        ending inside an unclosed bracket or string never opens a block.
    """
    last = None
    statement_row = None
    header_row = None
    readline = io.StringIO(code).readline
    try:
        for token in tokenize.generate_tokens(readline):
            if token.type in _INSIGNIFICANT_TOKENS:
                if token.type == tokenize.NEWLINE:
                    statement_row = None
                continue
            if statement_row is None:
                statement_row = token.start[0]
            last = token
            header_row = statement_row
    except (tokenize.TokenError, SyntaxError):
        return None

    if last is None or last.type != tokenize.OP or last.string != ":":
        return None
    return header_row - 1


def opens_block(code: str) -> bool:
    """Return whether the last significant token of ``code`` is ``:``."""
    return block_header_line(code) is not None
