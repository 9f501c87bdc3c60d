# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Encoder persistence: save a trained vocabulary and load it back.

An encoder is persisted as one structured record:

    {
      "format_version": 1,
      "token_kind": "string" | "byte",
      "dictionary": {...},                  # token order + exact ids
      "policy": {"name": ..., "options": {...}, "state": {...}},
      "checksum": "<sha256 of everything above>"
    }

The same record is written as JSON (.json), YAML (.yaml / .yml) or a torch
file (.pt), picked by the path suffix. Whatever the container, loading it
and re-encoding the original lines reproduces the original output: same
token order, same ids, same policy accumulators.

Loading is strict. A record with a bad checksum, an unknown policy, or an
inconsistent dictionary raises instead of producing a partial encoder.
"""

import io
import json
import logging
import pickle
from pathlib import Path
from typing import Any

import torch
import yaml

from strenc.encoding.dictionary.core import dictionary_from_record
from strenc.encoding.engine.core import StringEncoder
from strenc.encoding.exceptions import DeserializationError, EncoderFormatError
from strenc.encoding.policies.registry import get_policy
from strenc.logging.logger import get_logger
from strenc.utils.filesystem import atomic_write, atomic_write_bytes, safe_read
from strenc.utils.hashing import compute_payload_sha256

logger: logging.Logger = get_logger(__name__)

FORMAT_VERSION = 1

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")
TORCH_SUFFIXES = (".pt",)


def encoder_to_record(encoder: StringEncoder) -> dict[str, Any]:
    """Capture an encoder's dictionary and policy state as a plain dict."""
    policy = encoder.policy
    record: dict[str, Any] = {
        "format_version": FORMAT_VERSION,
        "token_kind": encoder.token_kind.value,
        "dictionary": encoder.dictionary.to_record(),
        "policy": {
            "name": policy.name,
            "options": policy.options(),
            "state": policy.state_dict(),
        },
    }
    record["checksum"] = compute_payload_sha256(record)
    return record


def encoder_from_record(record: Any) -> StringEncoder:
    """
    Rebuild an encoder from encoder_to_record() output.

    Raises:
        EncoderFormatError: Wrong shape, unknown version, checksum mismatch,
            unknown policy or bad policy options.
        DictionaryFormatError: The dictionary part is inconsistent.
        DeserializationError: The policy state is malformed.
    """
    if not isinstance(record, dict):
        raise EncoderFormatError(
            f"Encoder record must be a mapping, got {type(record).__name__}"
        )

    body = dict(record)
    checksum = body.pop("checksum", None)
    if body.get("format_version") != FORMAT_VERSION:
        raise EncoderFormatError(
            f"Unsupported encoder format version {body.get('format_version')!r} "
            f"(expected {FORMAT_VERSION})"
        )
    if checksum != compute_payload_sha256(body):
        raise EncoderFormatError("Encoder record checksum does not match its contents")

    dictionary = dictionary_from_record(body.get("dictionary"))
    if dictionary.token_kind.value != body.get("token_kind"):
        raise EncoderFormatError(
            f"Record token kind {body.get('token_kind')!r} disagrees with its "
            f"{dictionary.token_kind.value} dictionary"
        )

    policy_record = body.get("policy")
    if not isinstance(policy_record, dict):
        raise EncoderFormatError("Encoder record has no 'policy' section")

    try:
        policy_cls = get_policy(policy_record.get("name"))
    except KeyError as err:
        raise EncoderFormatError(str(err)) from err

    try:
        policy = policy_cls(**policy_record.get("options", {}))
    except (TypeError, ValueError) as err:
        raise EncoderFormatError(
            f"Invalid options for policy '{policy_cls.name}': {err}"
        ) from err

    try:
        policy.load_state_dict(policy_record.get("state", {}))
    except DeserializationError:
        raise
    except (KeyError, TypeError, ValueError) as err:
        raise DeserializationError(f"Malformed '{policy_cls.name}' policy state: {err}") from err

    return StringEncoder.from_parts(policy, dictionary)


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES + YAML_SUFFIXES + TORCH_SUFFIXES:
        raise EncoderFormatError(
            f"Don't know how to persist an encoder as '{suffix or path.name}'. "
            f"Use one of: {', '.join(JSON_SUFFIXES + YAML_SUFFIXES + TORCH_SUFFIXES)}"
        )
    return suffix


def save_encoder(encoder: StringEncoder, path: Path) -> Path:
    """
    Write an encoder to `path`, choosing the container from the suffix.

    The write is atomic, so an interrupted save never leaves a truncated file
    where a valid one used to be.
    """
    suffix = _suffix(path)
    record = encoder_to_record(encoder)

    if suffix in JSON_SUFFIXES:
        atomic_write(path, json.dumps(record, indent=2, ensure_ascii=False) + "\n")
    elif suffix in YAML_SUFFIXES:
        atomic_write(path, yaml.safe_dump(record, sort_keys=False, allow_unicode=True))
    else:
        buffer = io.BytesIO()
        torch.save(record, buffer)
        atomic_write_bytes(path, buffer.getvalue())

    logger.debug(
        "Encoder saved",
        extra={
            "path": str(path),
            "policy": encoder.policy.name,
            "dictionary_size": encoder.dictionary.size,
        },
    )
    return path


def load_encoder(path: Path) -> StringEncoder:
    """
    Load an encoder written by save_encoder().

    Raises:
        FileNotFoundError: If the file doesn't exist.
        EncoderFormatError: If the file can't be parsed or fails validation.
        DictionaryFormatError: If the stored dictionary is inconsistent.
    """
    suffix = _suffix(path)

    if suffix in TORCH_SUFFIXES:
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            record = torch.load(io.BytesIO(path.read_bytes()), map_location="cpu", weights_only=True)
        except (pickle.UnpicklingError, RuntimeError, EOFError, ValueError) as err:
            raise EncoderFormatError(f"Cannot read torch encoder file {path}: {err}") from err
    else:
        text = safe_read(path)
        try:
            if suffix in JSON_SUFFIXES:
                record = json.loads(text)
            else:
                record = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as err:
            raise EncoderFormatError(f"Cannot parse encoder file {path}: {err}") from err

    encoder = encoder_from_record(record)

    logger.debug(
        "Encoder loaded",
        extra={
            "path": str(path),
            "policy": encoder.policy.name,
            "dictionary_size": encoder.dictionary.size,
        },
    )
    return encoder
