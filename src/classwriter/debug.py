"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from classwriter.tokens import Token, TokenType

_HIDDEN = frozenset({TokenType.WS})


def dump_tokens(tokens: tuple[Token, ...] | list[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one token per line as ``line:offset TYPE 'text'`` to *file*.

    Horizontal whitespace is omitted to keep the dump readable.
    """
    for tok in tokens:
        if tok.type in _HIDDEN:
            continue
        file.write(f"{tok.line:>4}:{tok.offset:<6} {tok.type.name:<24} {tok.text!r}\n")
