# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Dictionary encoding: each line becomes its raw token-id sequence.

No aggregation at all. In matrix mode the rows are right-padded with 0 up to
the longest line in the batch; in sequence mode every line keeps its exact
length.
"""

from typing import Sequence

import torch

from strenc.encoding.policies.base import EncodingPolicy, Row, TokenIds
from strenc.encoding.policies.registry import register_policy


class DictionaryPolicy(EncodingPolicy):
    name = "dictionary"
    dtype = torch.int64

    def width(self, sequences: Sequence[TokenIds], dictionary_size: int) -> int:
        return max((len(token_ids) for token_ids in sequences), default=0)

    def row(self, line_index: int, token_ids: TokenIds, dictionary_size: int) -> Row:
        return list(token_ids)


register_policy(DictionaryPolicy.name, DictionaryPolicy)
