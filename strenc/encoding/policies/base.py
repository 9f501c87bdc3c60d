# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract base class for encoding policies.

A policy decides how one line's token-id sequence becomes an output row.
The encoder drives every policy through the same two-stage pipeline:

    policy.begin_batch()
    for index, ids in enumerate(sequences):     # stage 1: tokenize-all
        policy.consume(index, ids)
    policy.finalize_matrix(sequences, size)     # stage 2: finalize-all

Stage 2 only starts once every line has been tokenized, because the
bag-of-words and TF-IDF rows are as wide as the final vocabulary and TF-IDF
needs document frequencies from the whole batch.

Contract for subclasses:
  - `width()` is the column count of the dense output
  - `row()` returns the unpadded row for one line (len(row) <= width)
  - `dtype` is the torch dtype of dense and sparse output
  - policies never own or mutate the dictionary; they only see ids and the
    dictionary size the encoder passes in
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Sequence

import torch

Row = list
TokenIds = Sequence[int]


class EncodingPolicy(ABC):
    """Base class for Dictionary, BagOfWords and TF-IDF encoding."""

    name: str = ""
    dtype: torch.dtype = torch.int64

    def begin_batch(self) -> None:
        """Called once before the first line of every encode call."""

    def consume(self, line_index: int, token_ids: TokenIds) -> None:
        """Stage 1: observe one line's ids. Stateless policies ignore it."""

    @abstractmethod
    def width(self, sequences: Sequence[TokenIds], dictionary_size: int) -> int:
        """Number of columns in the dense output for this batch."""
        ...

    @abstractmethod
    def row(self, line_index: int, token_ids: TokenIds, dictionary_size: int) -> Row:
        """Stage 2: the unpadded output row for one line."""
        ...

    def finalize_sequences(
        self,
        sequences: Sequence[TokenIds],
        dictionary_size: int,
    ) -> list[Row]:
        """One unpadded row per line (the one-pass output mode)."""
        return [
            self.row(index, token_ids, dictionary_size)
            for index, token_ids in enumerate(sequences)
        ]

    def finalize_matrix(
        self,
        sequences: Sequence[TokenIds],
        dictionary_size: int,
    ) -> torch.Tensor:
        """Dense (num_lines, width) tensor, zero-padded on the right."""
        width = self.width(sequences, dictionary_size)
        output = torch.zeros((len(sequences), width), dtype=self.dtype)

        for index, token_ids in enumerate(sequences):
            values = self.row(index, token_ids, dictionary_size)
            if values:
                output[index, : len(values)] = torch.tensor(values, dtype=self.dtype)

        return output

    def finalize_sparse(
        self,
        sequences: Sequence[TokenIds],
        dictionary_size: int,
    ) -> torch.Tensor:
        """Sparse COO tensor with the same shape and values as the dense form."""
        width = self.width(sequences, dictionary_size)
        row_indices: list[int] = []
        col_indices: list[int] = []
        values: list = []

        for index, token_ids in enumerate(sequences):
            for column, value in enumerate(self.row(index, token_ids, dictionary_size)):
                if value:
                    row_indices.append(index)
                    col_indices.append(column)
                    values.append(value)

        indices = torch.tensor([row_indices, col_indices], dtype=torch.int64)
        return torch.sparse_coo_tensor(
            indices,
            torch.tensor(values, dtype=self.dtype),
            size=(len(sequences), width),
            dtype=self.dtype,
        ).coalesce()

    def options(self) -> dict[str, Any]:
        """Constructor arguments, enough to rebuild an equivalent fresh policy."""
        return {}

    def state_dict(self) -> dict[str, Any]:
        """Accumulated state that must survive persistence."""
        return {}

    def load_state_dict(self, state: dict[str, Any]) -> None:
        """Restore what state_dict() produced."""

    def reset(self) -> None:
        """Drop all accumulated state, back to a freshly constructed policy."""
        self.load_state_dict(type(self)(**self.options()).state_dict())

    def copy(self) -> "EncodingPolicy":
        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EncodingPolicy):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.options() == other.options()
            and self.state_dict() == other.state_dict()
        )

    def __repr__(self) -> str:
        args = ", ".join(f"{key}={value!r}" for key, value in self.options().items())
        return f"{type(self).__name__}({args})"
