# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Built-in tokenizers for the string encoder.

Three shapes ship with StrEnc:

  - SplitByAnyOf: cut the line on any character from a delimiter set
  - CharExtract: one byte-valued token per character
  - PreTokenizerSplit: delegate splitting to a HuggingFace `tokenizers`
    pre-tokenizer (Whitespace, WhitespaceSplit, ...)

All of them follow the cursor contract from `strenc.encoding.interfaces`:
each call consumes from the cursor and returns the next token, or None once
the line is used up. The encoder keeps calling until it sees None.
"""

from typing import Optional

from tokenizers import normalizers, pre_tokenizers

from strenc.config.schema import TokenizerConfig
from strenc.encoding.interfaces import LineCursor, TokenKind, Tokenizer

BYTE_ALPHABET_SIZE = 256


class SplitByAnyOf:
    """
    Split a line on any character from `delimiters`.

    Leading delimiters are skipped before every token, so runs of
    delimiters never produce empty tokens:

        >>> tokenizer = SplitByAnyOf(" ,.")
        >>> cursor = LineCursor("fast, and flexible.")
        >>> tokenizer(cursor), tokenizer(cursor), tokenizer(cursor), tokenizer(cursor)
        ('fast', 'and', 'flexible', None)
    """

    token_kind = TokenKind.STRING

    def __init__(self, delimiters: str) -> None:
        if not delimiters:
            raise ValueError("SplitByAnyOf needs at least one delimiter character")
        self._delimiters = frozenset(delimiters)
        self.delimiters = delimiters

    def __call__(self, cursor: LineCursor) -> Optional[str]:
        text = cursor.text
        start = cursor.offset
        end = len(text)

        while start < end and text[start] in self._delimiters:
            start += 1

        if start == end:
            cursor.advance_to_end()
            return None

        stop = start
        while stop < end and text[stop] not in self._delimiters:
            stop += 1

        cursor.advance(stop - cursor.offset)
        return text[start:stop]

    def __repr__(self) -> str:
        return f"SplitByAnyOf({self.delimiters!r})"


class CharExtract:
    """
    Emit every character of the line as its byte value.

    Tokens are ints in 0..255 so they can index the fixed-size byte
    dictionary directly. Text is treated as a sequence of single-byte
    characters; anything outside the Latin-1 range is rejected rather than
    silently split into UTF-8 fragments.
    """

    token_kind = TokenKind.BYTE

    def __call__(self, cursor: LineCursor) -> Optional[int]:
        if cursor.exhausted:
            return None

        char = cursor.text[cursor.offset]
        value = ord(char)
        if value >= BYTE_ALPHABET_SIZE:
            raise ValueError(
                f"CharExtract only handles single-byte characters, got {char!r} "
                f"(code point {value}) at offset {cursor.offset}"
            )
        cursor.advance(1)
        return value

    def __repr__(self) -> str:
        return "CharExtract()"


class PreTokenizerSplit:
    """
    Adapter that drives a HuggingFace pre-tokenizer through the cursor contract.

    The pre-tokenizer runs once per line (on the first call for a new cursor)
    and the resulting pieces are handed out one call at a time. Offsets
    reported by the pre-tokenizer are used to move the cursor, so the cursor
    ends up exhausted exactly when the pieces run out.
    """

    token_kind = TokenKind.STRING

    def __init__(
        self,
        pre_tokenizer: pre_tokenizers.PreTokenizer,
        lowercase: bool = False,
    ) -> None:
        self.pre_tokenizer = pre_tokenizer
        self.lowercase = lowercase
        self._normalizer = normalizers.Lowercase() if lowercase else None
        self._cursor: Optional[LineCursor] = None
        self._pieces: list[tuple[str, tuple[int, int]]] = []
        self._position = 0

    def _split(self, cursor: LineCursor) -> None:
        text = cursor.remaining
        if self._normalizer is not None:
            text = self._normalizer.normalize_str(text)
        base = cursor.offset
        self._pieces = [
            (piece, (base + start, base + stop))
            for piece, (start, stop) in self.pre_tokenizer.pre_tokenize_str(text)
            if piece
        ]
        self._cursor = cursor
        self._position = 0

    def __call__(self, cursor: LineCursor) -> Optional[str]:
        if cursor is not self._cursor:
            self._split(cursor)

        if self._position >= len(self._pieces):
            cursor.advance_to_end()
            self._cursor = None
            self._pieces = []
            return None

        piece, (_, stop) = self._pieces[self._position]
        self._position += 1
        cursor.advance(max(stop - cursor.offset, 0))
        return piece

    def __repr__(self) -> str:
        return (
            f"PreTokenizerSplit({type(self.pre_tokenizer).__name__}, "
            f"lowercase={self.lowercase})"
        )


def build_tokenizer(config: TokenizerConfig) -> Tokenizer:
    """Pick the tokenizer described by the `tokenizer:` config section."""
    if config.kind == "char":
        return CharExtract()
    if config.kind == "whitespace":
        return PreTokenizerSplit(pre_tokenizers.Whitespace(), lowercase=config.lowercase)
    if config.kind == "whitespace_split":
        return PreTokenizerSplit(pre_tokenizers.WhitespaceSplit(), lowercase=config.lowercase)
    return SplitByAnyOf(config.delimiters)


def tokenize_line(tokenizer: Tokenizer, line: str) -> list:
    """Run a tokenizer over one line and collect every token it produces."""
    cursor = LineCursor(line)
    tokens = []
    token = tokenizer(cursor)
    while token is not None:
        tokens.append(token)
        token = tokenizer(cursor)
    return tokens
