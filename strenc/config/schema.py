# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for StrEnc.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it, so an encoder built from a config keeps matching
that config for its whole life.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Choice-valued fields (policy, output mode, tokenizer kind, tf type) are plain
strings constrained by a regex pattern, so the YAML stays readable and a typo
fails at load time instead of deep inside the encoder.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

POLICY_NAMES = ("dictionary", "bag_of_words", "tf_idf")
OUTPUT_MODES = ("matrix", "sequences", "sparse")
TOKENIZER_KINDS = ("split", "char", "whitespace", "whitespace_split")
TF_TYPES = ("binary", "raw_count", "term_frequency", "sublinear_tf")


def _choice_pattern(choices: tuple[str, ...]) -> str:
    return "^(" + "|".join(choices) + ")$"


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to the entire system.

    Controls observability (log_level, log_file) and project identity.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="strenc", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class TokenizerConfig(BaseModel):
    """How each input line gets cut into tokens before dictionary lookup."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    kind: str = Field(
        default="split",
        pattern=_choice_pattern(TOKENIZER_KINDS),
        description=(
            "'split' cuts on any of `delimiters`, 'char' emits one byte per token, "
            "'whitespace' and 'whitespace_split' use the HuggingFace pre-tokenizers"
        ),
    )
    delimiters: str = Field(
        default=" ",
        min_length=1,
        description="Characters that separate tokens for the 'split' tokenizer",
    )
    lowercase: bool = Field(
        default=False,
        description="Lowercase each line before splitting (pre-tokenizer kinds only)",
    )


class TfIdfConfig(BaseModel):
    """Weighting knobs for the tf_idf policy. Ignored by the other policies."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    tf_type: str = Field(
        default="raw_count",
        pattern=_choice_pattern(TF_TYPES),
        description="Term frequency flavour: binary, raw_count, term_frequency, sublinear_tf",
    )
    smooth_idf: bool = Field(
        default=False,
        description="Use ln((1 + N) / (1 + df)) + 1 instead of ln(N / df)",
    )
    accumulate: bool = Field(
        default=False,
        description="Carry document counts across encode calls instead of per batch",
    )


class EncoderConfig(BaseModel):
    """
    Everything needed to build a StringEncoder and pick its output shape.
    Maps to the `encoder:` section of a StrEnc YAML file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version for compatibility tracking")
    policy: str = Field(
        default="dictionary",
        pattern=_choice_pattern(POLICY_NAMES),
        description="Encoding policy: dictionary, bag_of_words or tf_idf",
    )
    output: str = Field(
        default="matrix",
        pattern=_choice_pattern(OUTPUT_MODES),
        description="Output representation: matrix (dense), sequences (one-pass) or sparse",
    )
    binary: bool = Field(
        default=False,
        description="bag_of_words only: emit 1/0 presence instead of counts",
    )
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    tf_idf: TfIdfConfig = Field(default_factory=TfIdfConfig)


class StrEncConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may carry just `global:` or `global:` + `encoder:`. Sections not
    present stay None; commands check they have what they need.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    encoder: Optional[EncoderConfig] = Field(default=None)
