# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for StrEnc tests.

Fixtures here are available to every test file automatically. The line
collections are the corpora most encoding tests run against.
"""

import textwrap
from pathlib import Path

import pytest


@pytest.fixture()
def paragraph_lines() -> list[str]:
    """Three sentences of prose with punctuation, quotes and hyphenated words."""
    return [
        "mlpack is an intuitive, fast, and flexible C++ machine learning library "
        "with bindings to other languages. ",
        "It is meant to be a machine learning analog to LAPACK, and aims to "
        "implement a wide array of machine learning methods and functions "
        'as a "swiss army knife" for machine learning researchers.',
        "In addition to its powerful C++ interface, mlpack also provides "
        "command-line programs and Python bindings.",
    ]


@pytest.fixture()
def small_lines() -> list[str]:
    """Short space-separated lines; 'good' and 'Good' are different tokens."""
    return [
        "hello how are you",
        "i am good",
        "Good how are you",
    ]


@pytest.fixture()
def char_lines() -> list[str]:
    """Lines for character-level encoding. First-seen order is G, A, C, B, D."""
    return ["GACCA", "ABCABCD", "GAB"]


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "strenc-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def encoder_config_file(tmp_path: Path) -> Path:
    """A config with an `encoder:` section selecting bag-of-words."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
        encoder:
          config_version: "1.0.0"
          policy: "bag_of_words"
          output: "sequences"
          tokenizer:
            kind: "split"
            delimiters: " "
    """)
    config_file = tmp_path / "encoder_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "strenc-test"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
