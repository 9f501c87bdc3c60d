# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the pydantic config models.

These exercise the models directly, without YAML, to pin down defaults and
the choice constraints on policy, output mode, tokenizer kind and tf type.
"""

import pytest
from pydantic import ValidationError

from strenc.config.schema import (
    OUTPUT_MODES,
    POLICY_NAMES,
    TF_TYPES,
    TOKENIZER_KINDS,
    EncoderConfig,
    GlobalConfig,
    StrEncConfig,
    TfIdfConfig,
    TokenizerConfig,
)


class TestGlobalConfig:
    def test_defaults(self) -> None:
        config = GlobalConfig(config_version="1.0.0")
        assert config.project_name == "strenc"
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_version_is_required(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig()  # type: ignore[call-arg]


class TestEncoderConfig:
    def test_defaults(self) -> None:
        config = EncoderConfig(config_version="1.0.0")
        assert config.policy == "dictionary"
        assert config.output == "matrix"
        assert config.binary is False
        assert config.tokenizer == TokenizerConfig()
        assert config.tf_idf == TfIdfConfig()

    @pytest.mark.parametrize("policy", POLICY_NAMES)
    def test_every_policy_name_is_accepted(self, policy: str) -> None:
        assert EncoderConfig(config_version="1.0.0", policy=policy).policy == policy

    @pytest.mark.parametrize("output", OUTPUT_MODES)
    def test_every_output_mode_is_accepted(self, output: str) -> None:
        assert EncoderConfig(config_version="1.0.0", output=output).output == output

    def test_unknown_output_mode_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EncoderConfig(config_version="1.0.0", output="csv")

    def test_partial_policy_name_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EncoderConfig(config_version="1.0.0", policy="tf_idf_extra")

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EncoderConfig(config_version="1.0.0", vocabulary_size=10)  # type: ignore[call-arg]


class TestTokenizerConfig:
    @pytest.mark.parametrize("kind", TOKENIZER_KINDS)
    def test_every_kind_is_accepted(self, kind: str) -> None:
        assert TokenizerConfig(kind=kind).kind == kind

    def test_empty_delimiters_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TokenizerConfig(delimiters="")


class TestTfIdfConfig:
    @pytest.mark.parametrize("tf_type", TF_TYPES)
    def test_every_tf_type_is_accepted(self, tf_type: str) -> None:
        assert TfIdfConfig(tf_type=tf_type).tf_type == tf_type

    def test_unknown_tf_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TfIdfConfig(tf_type="log_count")


class TestStrEncConfig:
    def test_global_alias(self) -> None:
        config = StrEncConfig.model_validate({"global": {"config_version": "1.0.0"}})
        assert config.global_config.config_version == "1.0.0"
        assert config.encoder is None

    def test_global_section_is_required(self) -> None:
        with pytest.raises(ValidationError):
            StrEncConfig.model_validate({})
