# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Bag-of-words encoding: one column per vocabulary id, one count per line.

Column `id - 1` of a row holds how often that id occurs in the line. The row
width is the dictionary size after the whole batch has been tokenized, so
every row (including rows for lines that came before a new token showed up)
has the same width in both matrix and sequence mode.

With `binary=True` the counts collapse to presence flags (1 if the token
occurs at all, else 0).
"""

from typing import Any, Sequence

import torch

from strenc.encoding.policies.base import EncodingPolicy, Row, TokenIds
from strenc.encoding.policies.registry import register_policy


class BagOfWordsPolicy(EncodingPolicy):
    name = "bag_of_words"
    dtype = torch.int64

    def __init__(self, binary: bool = False) -> None:
        self.binary = binary

    def width(self, sequences: Sequence[TokenIds], dictionary_size: int) -> int:
        return dictionary_size

    def row(self, line_index: int, token_ids: TokenIds, dictionary_size: int) -> Row:
        counts = [0] * dictionary_size
        for token_id in token_ids:
            if self.binary:
                counts[token_id - 1] = 1
            else:
                counts[token_id - 1] += 1
        return counts

    def options(self) -> dict[str, Any]:
        return {"binary": self.binary}


register_policy(BagOfWordsPolicy.name, BagOfWordsPolicy)
