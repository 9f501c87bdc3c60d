# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the encoding engine.

Everything in the encoder is a deterministic computation over in-memory
data, so none of these are transient: each one means the caller broke an
input contract (unknown token, wrong tokenizer, corrupted persisted state).
"""


class EncodingError(Exception):
    """Base for all encoding errors."""


class TokenNotFoundError(EncodingError, KeyError):
    """
    Raised by the lookup-or-fail accessors (`value`, `token`) when the token
    or id isn't in the dictionary. Use `has_token` / `lookup` to probe first.
    """

    def __str__(self) -> str:
        # KeyError.__str__ wraps the message in quotes; we want it verbatim.
        return str(self.args[0]) if self.args else ""


class TokenKindMismatchError(EncodingError, TypeError):
    """Raised when a tokenizer's token kind doesn't match the encoder's dictionary."""


class DeserializationError(EncodingError):
    """Base for failures while rebuilding state from a persisted record."""


class DictionaryFormatError(DeserializationError):
    """
    Raised when a persisted dictionary is inconsistent: duplicate tokens or
    ids, gaps in the id range, or token/id counts that don't agree.
    """


class EncoderFormatError(DeserializationError):
    """
    Raised when a persisted encoder record is unusable: unknown format
    version, checksum mismatch, unknown policy, or an unsupported file type.
    """
