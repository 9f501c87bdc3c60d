# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for StringEncoder end to end: tokenizer -> dictionary -> policy.

Covers:
  - known-output corpora for every policy in matrix, sequence and sparse mode
  - vocabulary growth across encode calls
  - all-or-nothing batches when the tokenizer fails
  - copy / take semantics
  - the factory functions and build_encoder()
"""

import copy
import math

import pytest
import torch

from strenc.config.schema import EncoderConfig
from strenc.encoding.dictionary.core import ByteDictionary, StringDictionary
from strenc.encoding.engine.core import (
    StringEncoder,
    bow_encoder,
    build_encoder,
    dictionary_encoder,
    tfidf_encoder,
)
from strenc.encoding.exceptions import TokenKindMismatchError
from strenc.encoding.interfaces import LineCursor, TokenKind
from strenc.encoding.policies.bag_of_words import BagOfWordsPolicy
from strenc.encoding.policies.dictionary import DictionaryPolicy
from strenc.encoding.policies.tf_idf import TfIdfPolicy, TfType
from strenc.encoding.tokenizers.core import CharExtract, SplitByAnyOf

PARAGRAPH_ROWS = [
    [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16],
    [
        17, 2, 18, 14, 19, 20, 9, 10, 21, 14, 22, 6, 23, 14, 24, 20, 25,
        26, 27, 9, 10, 28, 6, 29, 30, 20, 31, 32, 33, 34, 9, 10, 35,
    ],
    [36, 37, 14, 38, 39, 8, 40, 1, 41, 42, 43, 44, 6, 45, 13],
]

SMALL_BOW_ROWS = [
    [1, 1, 1, 1, 0, 0, 0, 0],
    [0, 0, 0, 0, 1, 1, 1, 0],
    [0, 1, 1, 1, 0, 0, 0, 1],
]


def _padded(rows: list[list[int]], width: int) -> list[list[int]]:
    return [row + [0] * (width - len(row)) for row in rows]


class _FailingTokenizer:
    """Splits on spaces but raises when it meets the word 'boom'."""

    def __init__(self) -> None:
        self._inner = SplitByAnyOf(" ")

    def __call__(self, cursor: LineCursor):  # type: ignore[no-untyped-def]
        token = self._inner(cursor)
        if token == "boom":
            raise RuntimeError("tokenizer exploded")
        return token


class _ExplodingRowPolicy(BagOfWordsPolicy):
    def row(self, line_index, token_ids, dictionary_size):  # type: ignore[no-untyped-def]
        raise RuntimeError("row failed")


class _ExplodingTfIdfPolicy(TfIdfPolicy):
    def row(self, line_index, token_ids, dictionary_size):  # type: ignore[no-untyped-def]
        raise RuntimeError("row failed")


class TestDictionaryEncoding:
    def test_paragraph_matrix(self, paragraph_lines: list[str]) -> None:
        encoder = dictionary_encoder()
        output = encoder.encode(paragraph_lines, SplitByAnyOf(' .,"'))

        assert output.dtype == torch.int64
        assert tuple(output.shape) == (3, 33)
        assert output.tolist() == _padded(PARAGRAPH_ROWS, 33)
        assert encoder.dictionary.size == 45

    def test_paragraph_sequences(self, paragraph_lines: list[str]) -> None:
        encoder = dictionary_encoder()
        assert encoder.encode_sequences(paragraph_lines, SplitByAnyOf(' .,"')) == PARAGRAPH_ROWS

    def test_every_token_has_a_unique_id(self, paragraph_lines: list[str]) -> None:
        encoder = dictionary_encoder()
        encoder.encode(paragraph_lines, SplitByAnyOf(' .,"'))
        ids = list(encoder.dictionary.mapping().values())
        assert sorted(ids) == list(range(1, 46))

    def test_first_tokens_in_order(self, paragraph_lines: list[str]) -> None:
        encoder = dictionary_encoder()
        encoder.encode(paragraph_lines, SplitByAnyOf(' .,"'))
        assert encoder.dictionary.tokens()[:8] == (
            "mlpack", "is", "an", "intuitive", "fast", "and", "flexible", "C++",
        )

    def test_characters(self, char_lines: list[str]) -> None:
        encoder = dictionary_encoder(TokenKind.BYTE)
        output = encoder.encode(char_lines, CharExtract())
        assert output.tolist() == [
            [1, 2, 3, 3, 2, 0, 0],
            [2, 4, 3, 2, 4, 3, 5],
            [1, 2, 4, 0, 0, 0, 0],
        ]
        assert isinstance(encoder.dictionary, ByteDictionary)

    def test_character_sequences(self, char_lines: list[str]) -> None:
        encoder = dictionary_encoder(TokenKind.BYTE)
        assert encoder.encode_sequences(char_lines, CharExtract()) == [
            [1, 2, 3, 3, 2],
            [2, 4, 3, 2, 4, 3, 5],
            [1, 2, 4],
        ]

    def test_empty_input(self) -> None:
        encoder = dictionary_encoder()
        output = encoder.encode([], SplitByAnyOf(" "))
        assert tuple(output.shape) == (0, 0)
        assert encoder.encode_sequences([], SplitByAnyOf(" ")) == []

    def test_blank_lines_become_empty_rows(self) -> None:
        encoder = dictionary_encoder()
        assert encoder.encode_sequences(["", "a b", "   "], SplitByAnyOf(" ")) == [[], [1, 2], []]


class TestBagOfWordsEncoding:
    def test_small_matrix(self, small_lines: list[str]) -> None:
        output = bow_encoder().encode(small_lines, SplitByAnyOf(" "))
        assert output.dtype == torch.int64
        assert output.tolist() == SMALL_BOW_ROWS

    def test_small_sequences(self, small_lines: list[str]) -> None:
        assert bow_encoder().encode_sequences(small_lines, SplitByAnyOf(" ")) == SMALL_BOW_ROWS

    def test_character_counts(self, char_lines: list[str]) -> None:
        output = bow_encoder(TokenKind.BYTE).encode(char_lines, CharExtract())
        assert output.tolist() == [[1, 2, 2, 0, 0], [0, 2, 2, 2, 1], [1, 1, 0, 1, 0]]

    def test_character_presence(self, char_lines: list[str]) -> None:
        output = bow_encoder(TokenKind.BYTE, binary=True).encode(char_lines, CharExtract())
        assert output.tolist() == [[1, 1, 1, 0, 0], [0, 1, 1, 1, 1], [1, 1, 0, 1, 0]]

    def test_sparse_matches_dense(self, small_lines: list[str]) -> None:
        sparse = bow_encoder().encode_sparse(small_lines, SplitByAnyOf(" "))
        assert sparse.is_sparse
        assert tuple(sparse.shape) == (3, 8)
        assert sparse.to_dense().tolist() == SMALL_BOW_ROWS
        assert sparse.values().tolist() == [1] * 11


class TestTfIdfEncoding:
    def test_small_matrix(self, small_lines: list[str]) -> None:
        output = tfidf_encoder().encode(small_lines, SplitByAnyOf(" "))
        ln3, ln15 = math.log(3), math.log(1.5)
        expected = torch.tensor(
            [
                [ln3, ln15, ln15, ln15, 0, 0, 0, 0],
                [0, 0, 0, 0, ln3, ln3, ln3, 0],
                [0, ln15, ln15, ln15, 0, 0, 0, ln3],
            ],
            dtype=torch.float64,
        )
        assert output.dtype == torch.float64
        assert torch.allclose(output, expected)

    def test_term_frequency_in_log10_matches_reference_values(
        self, small_lines: list[str]
    ) -> None:
        output = tfidf_encoder(tf_type=TfType.TERM_FREQUENCY).encode(
            small_lines, SplitByAnyOf(" ")
        )
        output = output / math.log(10)
        assert output[0, 0].item() == pytest.approx(0.1193, abs=1e-4)
        assert output[0, 1].item() == pytest.approx(0.0440, abs=1e-4)
        assert output[1, 4].item() == pytest.approx(0.1590, abs=1e-4)

    def test_characters_term_frequency(self, char_lines: list[str]) -> None:
        output = tfidf_encoder(TokenKind.BYTE, tf_type="term_frequency").encode(
            char_lines, CharExtract()
        )
        output = output / math.log(10)
        expected = torch.tensor(
            [
                [0.0352, 0, 0.0704, 0, 0],
                [0, 0, 0.0503, 0.0503, 0.0682],
                [0.0587, 0, 0, 0.0587, 0],
            ],
            dtype=torch.float64,
        )
        assert torch.allclose(output, expected, atol=1e-4)

    def test_batches_are_independent_by_default(self) -> None:
        encoder = tfidf_encoder()
        encoder.encode(["a b", "a c"], SplitByAnyOf(" "))
        output = encoder.encode(["b"], SplitByAnyOf(" "))
        assert output.tolist() == [[0.0, 0.0, 0.0]]

    def test_accumulate_across_batches(self) -> None:
        encoder = tfidf_encoder(accumulate=True)
        encoder.encode(["a b", "a c"], SplitByAnyOf(" "))
        output = encoder.encode(["b"], SplitByAnyOf(" "))
        assert output[0, 1].item() == pytest.approx(math.log(3 / 2))

    def test_seeded_statistics_repeat_every_call(self) -> None:
        encoder = tfidf_encoder(document_count=9, document_frequency={1: 2})
        for _ in range(2):
            output = encoder.encode(["x"], SplitByAnyOf(" "))
            assert output[0, 0].item() == pytest.approx(math.log(10 / 3))

    def test_sequences_match_matrix(self, small_lines: list[str]) -> None:
        encoder = tfidf_encoder()
        rows = encoder.encode_sequences(small_lines, SplitByAnyOf(" "))
        matrix = tfidf_encoder().encode(small_lines, SplitByAnyOf(" "))
        assert torch.allclose(torch.tensor(rows, dtype=torch.float64), matrix)


    def test_invalid_seed_is_rejected_before_encoding(self) -> None:
        with pytest.raises(ValueError, match="outside"):
            tfidf_encoder(document_frequency={1: -1})


class TestVocabularyGrowth:
    def test_known_tokens_keep_ids(self) -> None:
        encoder = dictionary_encoder()
        encoder.encode(["a b"], SplitByAnyOf(" "))
        assert encoder.encode_sequences(["c a"], SplitByAnyOf(" ")) == [[3, 1]]
        assert encoder.dictionary.tokens() == ("a", "b", "c")

    def test_bow_width_grows_with_vocabulary(self) -> None:
        encoder = bow_encoder()
        first = encoder.encode(["a b"], SplitByAnyOf(" "))
        second = encoder.encode(["c"], SplitByAnyOf(" "))
        assert tuple(first.shape) == (1, 2)
        assert second.tolist() == [[0, 0, 1]]

    def test_rows_seen_before_a_new_token_are_full_width(self) -> None:
        rows = bow_encoder().encode_sequences(["a", "a b c"], SplitByAnyOf(" "))
        assert rows == [[1, 0, 0], [1, 1, 1]]


class TestAtomicBatches:
    def test_failed_batch_rolls_back_dictionary(self) -> None:
        encoder = dictionary_encoder()
        encoder.encode(["a b"], SplitByAnyOf(" "))

        with pytest.raises(RuntimeError, match="exploded"):
            encoder.encode(["c d", "e boom"], _FailingTokenizer())

        assert encoder.dictionary.tokens() == ("a", "b")
        assert encoder.encode_sequences(["d"], SplitByAnyOf(" ")) == [[3]]

    def test_failed_batch_restores_tf_idf_statistics(self) -> None:
        encoder = tfidf_encoder(accumulate=True)
        encoder.encode(["a b"], SplitByAnyOf(" "))
        before = encoder.policy.state_dict()

        with pytest.raises(RuntimeError):
            encoder.encode(["a", "boom"], _FailingTokenizer())

        assert encoder.policy.state_dict() == before

    def test_character_outside_byte_range_rolls_back(self) -> None:
        encoder = dictionary_encoder(TokenKind.BYTE)
        with pytest.raises(ValueError):
            encoder.encode(["abc", "x€"], CharExtract())
        assert encoder.dictionary.size == 0


    def test_failed_finalize_rolls_back_dictionary(self) -> None:
        encoder = StringEncoder(_ExplodingRowPolicy())
        with pytest.raises(RuntimeError, match="row failed"):
            encoder.encode(["a b"], SplitByAnyOf(" "))
        assert encoder.dictionary.size == 0

    def test_failed_finalize_restores_tf_idf_statistics(self) -> None:
        encoder = StringEncoder(_ExplodingTfIdfPolicy(accumulate=True))
        before = encoder.policy.state_dict()

        with pytest.raises(RuntimeError):
            encoder.encode_sequences(["a b", "a"], SplitByAnyOf(" "))

        assert encoder.policy.state_dict() == before
        assert encoder.dictionary.size == 0


class TestTokenKindChecks:
    def test_byte_tokenizer_on_string_encoder_raises(self) -> None:
        with pytest.raises(TokenKindMismatchError):
            dictionary_encoder().encode(["abc"], CharExtract())

    def test_string_tokenizer_on_byte_encoder_raises(self) -> None:
        with pytest.raises(TokenKindMismatchError):
            dictionary_encoder(TokenKind.BYTE).encode(["abc"], SplitByAnyOf(" "))

    def test_plain_callable_counts_as_string_tokenizer(self) -> None:
        def whole_line(cursor: LineCursor):  # type: ignore[no-untyped-def]
            if cursor.exhausted:
                return None
            text = cursor.remaining
            cursor.advance_to_end()
            return text

        assert dictionary_encoder().encode_sequences(["x y", "x y"], whole_line) == [[1], [1]]

    def test_non_string_token_from_plain_callable_rolls_back(self) -> None:
        def lengths(cursor: LineCursor):  # type: ignore[no-untyped-def]
            if cursor.exhausted:
                return None
            size = len(cursor.remaining)
            cursor.advance_to_end()
            return size

        encoder = dictionary_encoder()
        with pytest.raises(ValueError, match="must be str"):
            encoder.encode(["abc"], lengths)
        assert encoder.dictionary.size == 0

    def test_empty_string_token_ends_the_line(self) -> None:
        def empty_then_more(cursor: LineCursor):  # type: ignore[no-untyped-def]
            cursor.advance_to_end()
            return ""

        assert dictionary_encoder().encode_sequences(["abc"], empty_then_more) == [[]]


class TestCopyAndTake:
    def test_copy_is_independent(self) -> None:
        encoder = dictionary_encoder()
        encoder.encode(["a b"], SplitByAnyOf(" "))
        clone = encoder.copy()
        clone.encode(["c"], SplitByAnyOf(" "))

        assert encoder.dictionary.size == 2
        assert clone.dictionary.size == 3

    def test_copy_module_uses_copy(self) -> None:
        encoder = dictionary_encoder()
        encoder.encode(["a"], SplitByAnyOf(" "))
        for clone in (copy.copy(encoder), copy.deepcopy(encoder)):
            assert clone.dictionary == encoder.dictionary
            assert clone.dictionary is not encoder.dictionary

    def test_take_empties_the_source(self) -> None:
        encoder = tfidf_encoder(accumulate=True)
        encoder.encode(["a b"], SplitByAnyOf(" "))
        moved = encoder.take()

        assert moved.dictionary.tokens() == ("a", "b")
        assert moved.policy.document_count == 1  # type: ignore[attr-defined]
        assert encoder.dictionary.size == 0
        assert encoder.policy.document_count == 0  # type: ignore[attr-defined]

    def test_source_still_works_after_take(self) -> None:
        encoder = dictionary_encoder()
        encoder.encode(["a b"], SplitByAnyOf(" "))
        encoder.take()
        assert encoder.encode_sequences(["z"], SplitByAnyOf(" ")) == [[1]]


class TestFactories:
    def test_default_encoder_is_dictionary_over_strings(self) -> None:
        encoder = StringEncoder()
        assert isinstance(encoder.policy, DictionaryPolicy)
        assert isinstance(encoder.dictionary, StringDictionary)
        assert encoder.token_kind is TokenKind.STRING

    def test_build_encoder_defaults(self) -> None:
        encoder = build_encoder(EncoderConfig(config_version="1.0.0"))
        assert isinstance(encoder.policy, DictionaryPolicy)
        assert encoder.token_kind is TokenKind.STRING

    def test_build_encoder_char_bow(self) -> None:
        config = EncoderConfig(
            config_version="1.0.0",
            policy="bag_of_words",
            binary=True,
            tokenizer={"kind": "char"},
        )
        encoder = build_encoder(config)
        assert isinstance(encoder.policy, BagOfWordsPolicy)
        assert encoder.policy.binary is True
        assert encoder.token_kind is TokenKind.BYTE

    def test_build_encoder_tf_idf_options(self) -> None:
        config = EncoderConfig(
            config_version="1.0.0",
            policy="tf_idf",
            tf_idf={"tf_type": "sublinear_tf", "smooth_idf": True, "accumulate": True},
        )
        policy = build_encoder(config).policy
        assert isinstance(policy, TfIdfPolicy)
        assert policy.tf_type is TfType.SUBLINEAR_TF
        assert policy.smooth_idf is True
        assert policy.accumulate is True
