# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Token dictionaries: the token <-> integer id mapping behind every encoder.

Ids are handed out in first-seen order starting at 1. Id 0 never belongs to
a token; it is the padding value in dense output. Once assigned, an id is
never reused or reassigned, no matter how many encode calls follow, so a
vocabulary built incrementally stays stable.

Two concrete mappings share one interface:

  - StringDictionary: general hash map plus an ordered token list
  - ByteDictionary: a fixed 256-slot array indexed by byte value, for
    character-level tokenizers where the alphabet is bounded

Neither is safe for concurrent mutation. Each encoder owns exactly one.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Optional

from strenc.encoding.exceptions import DictionaryFormatError, TokenNotFoundError
from strenc.encoding.interfaces import Token, TokenKind

BYTE_SLOTS = 256


class TokenDictionary(ABC):
    """Common interface for the string and byte dictionaries."""

    token_kind: TokenKind

    @abstractmethod
    def lookup(self, token: Token) -> Optional[int]:
        """Return the token's id, or None if it has never been seen."""

    @abstractmethod
    def insert(self, token: Token) -> int:
        """Return the token's id, assigning the next free id if it is new."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of distinct tokens."""

    @abstractmethod
    def tokens(self) -> tuple:
        """Known tokens in id order (tokens()[i] has id i + 1)."""

    @abstractmethod
    def mapping(self) -> Any:
        """Snapshot of the raw token -> id mapping."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every token."""

    @abstractmethod
    def truncate(self, size: int) -> None:
        """Forget every token whose id is greater than `size`."""

    @abstractmethod
    def to_record(self) -> dict[str, Any]:
        """Structured form for persistence."""

    def has_token(self, token: Token) -> bool:
        return self.lookup(token) is not None

    def value(self, token: Token) -> int:
        """
        Return the id for a known token.

        Raises:
            TokenNotFoundError: If the token isn't in the dictionary. Check
                with has_token() first when the token may be new.
        """
        token_id = self.lookup(token)
        if token_id is None:
            raise TokenNotFoundError(f"Token {token!r} is not in the dictionary")
        return token_id

    def token(self, token_id: int) -> Token:
        """Inverse lookup: the token that owns `token_id`."""
        if not 1 <= token_id <= self.size:
            raise TokenNotFoundError(
                f"Id {token_id} is not assigned (dictionary holds ids 1..{self.size})"
            )
        return self.tokens()[token_id - 1]

    def copy(self) -> "TokenDictionary":
        return copy.deepcopy(self)

    def take(self) -> "TokenDictionary":
        """Move the contents into a new dictionary and leave this one empty."""
        moved = self.copy()
        self.clear()
        return moved

    def __len__(self) -> int:
        return self.size

    def __contains__(self, token: object) -> bool:
        try:
            return self.has_token(token)  # type: ignore[arg-type]
        except ValueError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TokenDictionary):
            return NotImplemented
        return (
            self.token_kind == other.token_kind
            and self.tokens() == other.tokens()
            and self.mapping() == other.mapping()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self.size})"


class StringDictionary(TokenDictionary):
    """General token map for string tokens."""

    token_kind = TokenKind.STRING

    def __init__(self) -> None:
        self._mapping: dict[str, int] = {}
        self._tokens: list[str] = []

    @staticmethod
    def _check_string(token: Token) -> str:
        if not isinstance(token, str):
            raise ValueError(f"String dictionary tokens must be str, got {token!r}")
        return token

    def lookup(self, token: Token) -> Optional[int]:
        return self._mapping.get(self._check_string(token))

    def insert(self, token: Token) -> int:
        token = self._check_string(token)
        token_id = self._mapping.get(token)
        if token_id is not None:
            return token_id

        token_id = len(self._tokens) + 1
        self._tokens.append(token)
        self._mapping[token] = token_id
        return token_id

    @property
    def size(self) -> int:
        return len(self._tokens)

    def tokens(self) -> tuple[str, ...]:
        return tuple(self._tokens)

    def mapping(self) -> dict[str, int]:
        return dict(self._mapping)

    def clear(self) -> None:
        self._mapping = {}
        self._tokens = []

    def truncate(self, size: int) -> None:
        for token in self._tokens[size:]:
            del self._mapping[token]
        del self._tokens[size:]

    def to_record(self) -> dict[str, Any]:
        return {
            "token_kind": self.token_kind.value,
            "tokens": list(self._tokens),
            "mapping": dict(self._mapping),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "StringDictionary":
        """
        Rebuild a dictionary from its structured form.

        The token list is authoritative for order; the mapping must agree
        with it exactly (same tokens, ids 1..n in list order).

        Raises:
            DictionaryFormatError: On duplicates, gaps, or disagreement
                between tokens and mapping.
        """
        tokens = record.get("tokens")
        mapping = record.get("mapping")
        if not isinstance(tokens, list) or not isinstance(mapping, dict):
            raise DictionaryFormatError(
                "String dictionary record needs a 'tokens' list and a 'mapping' object"
            )
        if len(tokens) != len(mapping):
            raise DictionaryFormatError(
                f"Dictionary has {len(tokens)} tokens but {len(mapping)} mapping entries"
            )
        for token in tokens:
            if not isinstance(token, str):
                raise DictionaryFormatError(f"String dictionary holds a non-string token {token!r}")
        ids = list(mapping.values())
        if any(isinstance(token_id, bool) or not isinstance(token_id, int) for token_id in ids):
            raise DictionaryFormatError("String dictionary mapping ids must be ints")

        if len(set(tokens)) != len(tokens):
            raise DictionaryFormatError("Dictionary token list contains duplicates")

        if len(set(ids)) != len(ids):
            raise DictionaryFormatError("Dictionary mapping assigns the same id twice")

        dictionary = cls()
        for expected_id, token in enumerate(tokens, start=1):
            if mapping.get(token) != expected_id:
                raise DictionaryFormatError(
                    f"Token {token!r} is at position {expected_id} but maps to {mapping.get(token)!r}"
                )
            dictionary._tokens.append(token)
            dictionary._mapping[token] = expected_id

        return dictionary


class ByteDictionary(TokenDictionary):
    """
    Fixed 256-slot dictionary for byte-valued tokens.

    Slot b holds the id of byte b, or 0 if that byte hasn't been seen.
    Lookups are a single index into the array.
    """

    token_kind = TokenKind.BYTE

    def __init__(self) -> None:
        self._slots: list[int] = [0] * BYTE_SLOTS
        self._size = 0

    @staticmethod
    def _check_byte(token: Token) -> int:
        if isinstance(token, bool) or not isinstance(token, int) or not 0 <= token < BYTE_SLOTS:
            raise ValueError(f"Byte dictionary tokens must be ints in 0..255, got {token!r}")
        return token

    def lookup(self, token: Token) -> Optional[int]:
        token_id = self._slots[self._check_byte(token)]
        return token_id or None

    def insert(self, token: Token) -> int:
        index = self._check_byte(token)
        token_id = self._slots[index]
        if token_id:
            return token_id

        self._size += 1
        self._slots[index] = self._size
        return self._size

    @property
    def size(self) -> int:
        return self._size

    def tokens(self) -> tuple[int, ...]:
        ordered = sorted(
            (token_id, byte) for byte, token_id in enumerate(self._slots) if token_id
        )
        return tuple(byte for _, byte in ordered)

    def mapping(self) -> tuple[int, ...]:
        return tuple(self._slots)

    def clear(self) -> None:
        self._slots = [0] * BYTE_SLOTS
        self._size = 0

    def truncate(self, size: int) -> None:
        if size >= self._size:
            return
        self._slots = [token_id if token_id <= size else 0 for token_id in self._slots]
        self._size = max(size, 0)

    def to_record(self) -> dict[str, Any]:
        return {
            "token_kind": self.token_kind.value,
            "size": self._size,
            "mapping": list(self._slots),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "ByteDictionary":
        """
        Rebuild a byte dictionary from its 256-slot array.

        Raises:
            DictionaryFormatError: If the array has the wrong length, the
                non-zero ids aren't exactly 1..size, or size disagrees.
        """
        slots = record.get("mapping")
        size = record.get("size")
        if not isinstance(slots, list) or len(slots) != BYTE_SLOTS:
            raise DictionaryFormatError(
                f"Byte dictionary record needs a {BYTE_SLOTS}-slot 'mapping' list"
            )
        if any(isinstance(slot, bool) or not isinstance(slot, int) or slot < 0 for slot in slots):
            raise DictionaryFormatError("Byte dictionary slots must be non-negative ints")

        assigned = sorted(slot for slot in slots if slot)
        if assigned != list(range(1, len(assigned) + 1)):
            raise DictionaryFormatError(
                "Byte dictionary ids must be unique and contiguous starting at 1"
            )
        if size != len(assigned):
            raise DictionaryFormatError(
                f"Byte dictionary claims size {size!r} but assigns {len(assigned)} ids"
            )

        dictionary = cls()
        dictionary._slots = list(slots)
        dictionary._size = len(assigned)
        return dictionary


def make_dictionary(token_kind: TokenKind) -> TokenDictionary:
    """Pick the dictionary implementation for a token kind."""
    if TokenKind(token_kind) is TokenKind.BYTE:
        return ByteDictionary()
    return StringDictionary()


def dictionary_from_record(record: dict[str, Any]) -> TokenDictionary:
    """Rebuild whichever dictionary type the record describes."""
    if not isinstance(record, dict):
        raise DictionaryFormatError(
            f"Dictionary record must be a mapping, got {type(record).__name__}"
        )
    try:
        token_kind = TokenKind(record.get("token_kind"))
    except ValueError as err:
        raise DictionaryFormatError(
            f"Unknown dictionary token kind {record.get('token_kind')!r}"
        ) from err

    if token_kind is TokenKind.BYTE:
        return ByteDictionary.from_record(record)
    return StringDictionary.from_record(record)
