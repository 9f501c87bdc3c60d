# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
String encoding engine. Turns lines of text into numbers.

A StringEncoder owns one token dictionary and one encoding policy. Every
encode call runs the same two stages:

  1. Tokenize all lines. Each token goes through `dictionary.insert`, and
     the resulting id sequence is handed to `policy.consume`.
  2. Finalize all rows. The policy turns the buffered sequences into a
     dense tensor, a sparse tensor, or a list of unpadded rows.

The dictionary lives as long as the encoder. Encoding another batch extends
it: known tokens keep their ids and new tokens get the next ones. A batch is
all-or-nothing: if tokenizing or finalizing fails, the dictionary and policy
are rolled back to where they were before the call.
"""

import logging
from typing import Any, Callable, Iterable, Optional

import torch

from strenc.config.schema import EncoderConfig
from strenc.encoding.dictionary.core import TokenDictionary, make_dictionary
from strenc.encoding.exceptions import TokenKindMismatchError
from strenc.encoding.interfaces import LineCursor, TokenKind, Tokenizer, token_kind_of
from strenc.encoding.policies.bag_of_words import BagOfWordsPolicy
from strenc.encoding.policies.base import EncodingPolicy
from strenc.encoding.policies.dictionary import DictionaryPolicy
from strenc.encoding.policies.registry import get_policy
from strenc.encoding.policies.tf_idf import TfIdfPolicy
from strenc.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class StringEncoder:
    """
    Encode text lines with a shared dictionary and a pluggable policy.

    Args:
        policy: The encoding policy. Defaults to DictionaryPolicy().
        token_kind: Which dictionary to keep. STRING for word-like tokens,
            BYTE for CharExtract-style single-byte tokens.
    """

    def __init__(
        self,
        policy: Optional[EncodingPolicy] = None,
        token_kind: TokenKind = TokenKind.STRING,
    ) -> None:
        self._policy = policy if policy is not None else DictionaryPolicy()
        self._dictionary = make_dictionary(token_kind)

    @classmethod
    def from_parts(cls, policy: EncodingPolicy, dictionary: TokenDictionary) -> "StringEncoder":
        """Assemble an encoder around an existing dictionary (used when loading)."""
        encoder = cls.__new__(cls)
        encoder._policy = policy
        encoder._dictionary = dictionary
        return encoder

    @property
    def dictionary(self) -> TokenDictionary:
        return self._dictionary

    @property
    def policy(self) -> EncodingPolicy:
        return self._policy

    @property
    def token_kind(self) -> TokenKind:
        return self._dictionary.token_kind

    def encode(self, lines: Iterable[str], tokenizer: Tokenizer) -> torch.Tensor:
        """
        Encode lines into a dense (num_lines, width) tensor.

        Width is the longest line for the dictionary policy and the
        vocabulary size for bag-of-words and TF-IDF. Short rows are padded
        with zeros on the right.
        """
        return self._run(lines, tokenizer, self._policy.finalize_matrix, "matrix")

    def encode_sequences(self, lines: Iterable[str], tokenizer: Tokenizer) -> list[list]:
        """
        Encode lines into unpadded per-line rows (one-pass mode).

        Dictionary policy rows are the exact id sequences. Bag-of-words and
        TF-IDF rows are as wide as the vocabulary after this batch.
        """
        return self._run(lines, tokenizer, self._policy.finalize_sequences, "sequences")

    def encode_sparse(self, lines: Iterable[str], tokenizer: Tokenizer) -> torch.Tensor:
        """Encode lines into a coalesced sparse COO tensor shaped like encode()."""
        return self._run(lines, tokenizer, self._policy.finalize_sparse, "sparse")

    def _run(
        self,
        lines: Iterable[str],
        tokenizer: Tokenizer,
        finalize: Callable[[list[list[int]], int], Any],
        mode: str,
    ) -> Any:
        kind = token_kind_of(tokenizer)
        if kind is not self.token_kind:
            raise TokenKindMismatchError(
                f"Tokenizer {tokenizer!r} produces {kind.value} tokens but this encoder "
                f"keeps a {self.token_kind.value} dictionary"
            )

        size_before = self._dictionary.size
        policy_snapshot = self._policy.state_dict()

        try:
            sequences = self._tokenize_all(lines, tokenizer)
            output = finalize(sequences, self._dictionary.size)
        except BaseException:
            self._dictionary.truncate(size_before)
            self._policy.load_state_dict(policy_snapshot)
            raise

        logger.debug(
            "Batch encoded",
            extra={
                "mode": mode,
                "policy": self._policy.name,
                "lines": len(sequences),
                "new_tokens": self._dictionary.size - size_before,
                "dictionary_size": self._dictionary.size,
            },
        )
        return output

    def _tokenize_all(self, lines: Iterable[str], tokenizer: Tokenizer) -> list[list[int]]:
        self._policy.begin_batch()
        sequences: list[list[int]] = []

        for index, line in enumerate(lines):
            cursor = LineCursor(line)
            token_ids: list[int] = []
            token = tokenizer(cursor)
            while token is not None and token != "":
                token_ids.append(self._dictionary.insert(token))
                token = tokenizer(cursor)

            self._policy.consume(index, token_ids)
            sequences.append(token_ids)

        return sequences

    def copy(self) -> "StringEncoder":
        """Independent copy: later encode calls on either side don't leak."""
        return StringEncoder.from_parts(self._policy.copy(), self._dictionary.copy())

    def take(self) -> "StringEncoder":
        """
        Move this encoder's state into a new one.

        The source keeps working afterwards but starts over with an empty
        dictionary and a reset policy.
        """
        moved = StringEncoder.from_parts(self._policy.copy(), self._dictionary.take())
        self._policy.reset()
        return moved

    def __copy__(self) -> "StringEncoder":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "StringEncoder":
        return self.copy()

    def __repr__(self) -> str:
        return f"StringEncoder(policy={self._policy!r}, dictionary={self._dictionary!r})"


def dictionary_encoder(token_kind: TokenKind = TokenKind.STRING) -> StringEncoder:
    """Encoder that outputs raw token-id sequences."""
    return StringEncoder(DictionaryPolicy(), token_kind=token_kind)


def bow_encoder(token_kind: TokenKind = TokenKind.STRING, binary: bool = False) -> StringEncoder:
    """Encoder that outputs per-line token counts (or presence with binary=True)."""
    return StringEncoder(BagOfWordsPolicy(binary=binary), token_kind=token_kind)


def tfidf_encoder(token_kind: TokenKind = TokenKind.STRING, **options: Any) -> StringEncoder:
    """Encoder that outputs TF-IDF weights. `options` go to TfIdfPolicy."""
    return StringEncoder(TfIdfPolicy(**options), token_kind=token_kind)


def build_encoder(config: EncoderConfig) -> StringEncoder:
    """
    Build an encoder from the `encoder:` config section.

    The dictionary kind follows the tokenizer: the char tokenizer gets the
    256-slot byte dictionary, everything else the general string map.
    """
    token_kind = TokenKind.BYTE if config.tokenizer.kind == "char" else TokenKind.STRING
    policy_cls = get_policy(config.policy)

    if policy_cls is BagOfWordsPolicy:
        policy: EncodingPolicy = BagOfWordsPolicy(binary=config.binary)
    elif policy_cls is TfIdfPolicy:
        policy = TfIdfPolicy(
            tf_type=config.tf_idf.tf_type,
            smooth_idf=config.tf_idf.smooth_idf,
            accumulate=config.tf_idf.accumulate,
        )
    else:
        policy = policy_cls()

    return StringEncoder(policy, token_kind=token_kind)
