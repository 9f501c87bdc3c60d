# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared contracts for the encoding engine.

The engine never cares which tokenizer it is driving, only that it obeys
the cursor contract:

    token = tokenizer(cursor)   # next token, consuming from the cursor
    token is None               # the line is exhausted

Tokens come in two kinds. String tokens are substrings of the line and go
into the general token map. Byte tokens are integers in 0..255 and go into
the fixed 256-slot map. A tokenizer advertises its kind through a
`token_kind` attribute; plain callables without one are string tokenizers.
"""

import enum
from typing import Optional, Protocol, Union

Token = Union[str, int]


class TokenKind(str, enum.Enum):
    """Which dictionary implementation a token stream needs."""

    STRING = "string"
    BYTE = "byte"


class LineCursor:
    """
    Mutable view over the unconsumed part of one input line.

    Tokenizers read from `remaining` and call `advance` for whatever they
    consume. Advancing only moves the offset over the original line;
    `remaining` slices out a fresh copy of the unread part on every access.
    """

    __slots__ = ("_text", "_offset")

    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> str:
        return self._text[self._offset :]

    @property
    def exhausted(self) -> bool:
        return self._offset >= len(self._text)

    def advance(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"Cannot advance a cursor by a negative amount ({count})")
        self._offset = min(self._offset + count, len(self._text))

    def advance_to_end(self) -> None:
        self._offset = len(self._text)


class Tokenizer(Protocol):
    """Anything callable on a LineCursor that returns a token or None."""

    def __call__(self, cursor: LineCursor) -> Optional[Token]: ...


def token_kind_of(tokenizer: Tokenizer) -> TokenKind:
    """Read the tokenizer's declared kind, defaulting to string tokens."""
    return TokenKind(getattr(tokenizer, "token_kind", TokenKind.STRING))
