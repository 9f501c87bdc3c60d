# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
TF-IDF encoding.

For token t and line d:

    tf(t, d)  = occurrences of t in d           (RAW_COUNT, the default)
    df(t)     = number of lines containing t at least once
    idf(t)    = ln(N / df(t))                   (N = number of lines)
    w(t, d)   = tf(t, d) * idf(t)

Output rows have one float per vocabulary id and are zero wherever the token
doesn't occur in the line. A token that occurs in every line gets weight 0.

Other term-frequency flavours:

    BINARY          1 if t occurs in d
    TERM_FREQUENCY  count / number of tokens in d
    SUBLINEAR_TF    1 + ln(count)

and `smooth_idf=True` switches to ln((1 + N) / (1 + df)) + 1, which keeps
tokens present in every line from vanishing.

Document statistics are gathered in stage 1 (consume) and only read in
stage 2, so idf is only ever evaluated for ids with df >= 1. By default they
restart from the seeded values on every encode call. With `accumulate=True`
they carry over between calls, so a corpus can be fed in several batches and
the idf reflects everything seen so far.
"""

import enum
import math
from collections import Counter
from typing import Any, Optional, Sequence

import torch

from strenc.encoding.exceptions import DeserializationError
from strenc.encoding.policies.base import EncodingPolicy, Row, TokenIds
from strenc.encoding.policies.registry import register_policy


class TfType(str, enum.Enum):
    BINARY = "binary"
    RAW_COUNT = "raw_count"
    TERM_FREQUENCY = "term_frequency"
    SUBLINEAR_TF = "sublinear_tf"


def _check_statistics(document_count: int, document_frequency: dict[int, int], label: str) -> None:
    """Raise ValueError unless every frequency lies in 1..document_count."""
    if document_count < 0:
        raise ValueError(f"{label} document count must be >= 0, got {document_count}")
    for token_id, frequency in document_frequency.items():
        if not 0 < frequency <= document_count:
            raise ValueError(
                f"{label} document frequency {frequency} for id {token_id} is outside "
                f"1..{document_count}"
            )


class TfIdfPolicy(EncodingPolicy):
    name = "tf_idf"
    dtype = torch.float64

    def __init__(
        self,
        tf_type: TfType = TfType.RAW_COUNT,
        smooth_idf: bool = False,
        accumulate: bool = False,
        document_count: int = 0,
        document_frequency: Optional[dict[int, int]] = None,
    ) -> None:
        document_frequency = dict(document_frequency or {})
        _check_statistics(document_count, document_frequency, "Seed")
        self.tf_type = TfType(tf_type)
        self.smooth_idf = smooth_idf
        self.accumulate = accumulate

        self._seed_document_count = document_count
        self._seed_document_frequency: dict[int, int] = document_frequency

        self.document_count = document_count
        self.document_frequency: Counter = Counter(self._seed_document_frequency)
        self._term_counts: list[Counter] = []
        self._line_lengths: list[int] = []

    def begin_batch(self) -> None:
        self._term_counts = []
        self._line_lengths = []
        if not self.accumulate:
            self.document_count = self._seed_document_count
            self.document_frequency = Counter(self._seed_document_frequency)

    def consume(self, line_index: int, token_ids: TokenIds) -> None:
        counts = Counter(token_ids)
        self._term_counts.append(counts)
        self._line_lengths.append(len(token_ids))
        self.document_count += 1
        self.document_frequency.update(counts.keys())

    def width(self, sequences: Sequence[TokenIds], dictionary_size: int) -> int:
        return dictionary_size

    def term_frequency(self, count: int, line_length: int) -> float:
        if self.tf_type is TfType.BINARY:
            return 1.0
        if self.tf_type is TfType.TERM_FREQUENCY:
            return count / line_length
        if self.tf_type is TfType.SUBLINEAR_TF:
            return 1.0 + math.log(count)
        return float(count)

    def inverse_document_frequency(self, token_id: int) -> float:
        frequency = self.document_frequency[token_id]
        if self.smooth_idf:
            return math.log((1 + self.document_count) / (1 + frequency)) + 1.0
        return math.log(self.document_count / frequency)

    def row(self, line_index: int, token_ids: TokenIds, dictionary_size: int) -> Row:
        weights = [0.0] * dictionary_size
        line_length = self._line_lengths[line_index]
        for token_id, count in self._term_counts[line_index].items():
            weights[token_id - 1] = self.term_frequency(
                count, line_length
            ) * self.inverse_document_frequency(token_id)
        return weights

    def options(self) -> dict[str, Any]:
        return {
            "tf_type": self.tf_type.value,
            "smooth_idf": self.smooth_idf,
            "accumulate": self.accumulate,
        }

    def state_dict(self) -> dict[str, Any]:
        # Frequency tables are stored as sorted [id, count] pairs so the record
        # survives JSON/YAML, where mapping keys would turn into strings.
        return {
            "seed_document_count": self._seed_document_count,
            "seed_document_frequency": sorted(
                [token_id, count] for token_id, count in self._seed_document_frequency.items()
            ),
            "document_count": self.document_count,
            "document_frequency": sorted(
                [token_id, count] for token_id, count in self.document_frequency.items()
            ),
        }

    def load_state_dict(self, state: dict[str, Any]) -> None:
        try:
            seed_count = int(state["seed_document_count"])
            seed_frequency = {int(k): int(v) for k, v in state["seed_document_frequency"]}
            document_count = int(state["document_count"])
            document_frequency = Counter(
                {int(k): int(v) for k, v in state["document_frequency"]}
            )
        except (KeyError, TypeError, ValueError) as err:
            raise DeserializationError(f"Malformed TF-IDF policy state: {err}") from err

        try:
            _check_statistics(seed_count, seed_frequency, "Seed")
            _check_statistics(document_count, document_frequency, "Current")
        except ValueError as err:
            raise DeserializationError(f"Inconsistent TF-IDF policy state: {err}") from err

        self._seed_document_count = seed_count
        self._seed_document_frequency = seed_frequency
        self.document_count = document_count
        self.document_frequency = document_frequency
        self._term_counts = []
        self._line_lengths = []


register_policy(TfIdfPolicy.name, TfIdfPolicy)
