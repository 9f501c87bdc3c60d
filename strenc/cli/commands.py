# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the StrEnc CLI.

Each function here corresponds to one CLI subcommand and returns an exit
code. Nothing is printed; results go to files or through the structured
logger.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional

from strenc.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from strenc.config.exceptions import ConfigError
from strenc.config.loader import load_config
from strenc.config.schema import EncoderConfig, StrEncConfig
from strenc.logging.logger import get_logger
from strenc.runtime.environment import check_minimum_python

DEFAULT_CONFIG_VERSION = "1.0.0"


def _configure_library_loggers(log_level: str, log_file: Optional[Path]) -> None:
    """
    Match the library's module-level loggers to --log-level.

    The modules are imported first so their own get_logger(__name__) call at
    import time cannot reset the level afterwards.
    """
    from strenc.encoding.engine import core as engine_core
    from strenc.encoding.serialization import core as serialization_core

    for module in (engine_core, serialization_core):
        get_logger(module.__name__, log_level=log_level, log_file=log_file)


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[StrEncConfig], logging.Logger]:
    """
    The shared setup every command needs: check the interpreter, load config,
    wire up loggers.

    Returns a tuple of (exit_code, config, logger). If exit_code is not SUCCESS,
    the caller should return it immediately.
    """
    check_minimum_python()
    logger = get_logger(f"strenc.cli.{command_name}", log_level=args.log_level)

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    log_file = None
    if config is not None and config.global_config.log_file is not None:
        log_file = Path(config.global_config.log_file)
        logger = get_logger(f"strenc.cli.{command_name}", args.log_level, log_file)

    _configure_library_loggers(args.log_level, log_file)

    if config is None:
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )

    return SUCCESS, config, logger


def _resolve_encoder_config(
    args: argparse.Namespace,
    config: Optional[StrEncConfig],
) -> EncoderConfig:
    """
    Merge the config file's `encoder:` section with command-line overrides.

    Flags win over the file. The merged dict is validated again, so a bad
    flag value fails the same way a bad YAML value would.
    """
    if config is not None and config.encoder is not None:
        merged: dict[str, Any] = config.encoder.model_dump()
    else:
        merged = {"config_version": DEFAULT_CONFIG_VERSION}

    if args.policy is not None:
        merged["policy"] = args.policy
    if args.mode is not None:
        merged["output"] = args.mode
    if args.binary:
        merged["binary"] = True

    tokenizer = dict(merged.get("tokenizer") or {})
    if args.tokenizer is not None:
        tokenizer["kind"] = args.tokenizer
    if args.delimiters is not None:
        tokenizer["delimiters"] = args.delimiters
    merged["tokenizer"] = tokenizer

    return EncoderConfig.model_validate(merged)


def _result_payload(output: Any, mode: str) -> dict[str, Any]:
    """Turn encoder output into something json.dumps can write."""
    if mode == "sequences":
        return {"mode": mode, "rows": len(output), "data": output}
    if mode == "sparse":
        return {
            "mode": mode,
            "shape": list(output.shape),
            "indices": output.indices().tolist(),
            "values": output.values().tolist(),
        }
    return {"mode": mode, "shape": list(output.shape), "data": output.tolist()}


def _warn_ignored_policy_flags(
    args: argparse.Namespace,
    encoder: Any,
    logger: logging.Logger,
) -> None:
    """A loaded encoder keeps its own policy; say so when the flags ask for another."""
    loaded = encoder.policy
    if args.policy is not None and args.policy != loaded.name:
        logger.warning(
            "Ignoring --policy, the loaded encoder keeps its own policy",
            extra={"requested": args.policy, "policy": loaded.name},
        )
    if args.binary and not loaded.options().get("binary", False):
        logger.warning(
            "Ignoring --binary, the loaded encoder keeps its own options",
            extra={"policy": loaded.name, "options": loaded.options()},
        )


def handle_encode(args: argparse.Namespace) -> int:
    """
    Encode every line of an input file.

    The encoder either starts empty or continues from a saved one
    (--encoder-in), in which case known tokens keep their ids. The grown
    encoder can be saved again with --encoder-out.
    """
    exit_code, config, logger = _load_and_bootstrap(args, "encode")
    if exit_code != SUCCESS:
        return exit_code

    from pydantic import ValidationError

    from strenc.encoding.engine.core import build_encoder
    from strenc.encoding.exceptions import DeserializationError, TokenKindMismatchError
    from strenc.encoding.serialization.core import load_encoder, save_encoder
    from strenc.encoding.tokenizers.core import build_tokenizer
    from strenc.utils.filesystem import atomic_write

    try:
        encoder_config = _resolve_encoder_config(args, config)
    except ValidationError as err:
        logger.error("Invalid encoder options", extra={"error": str(err)})
        return CONFIG_ERROR

    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error("Input file not found", extra={"path": str(input_path)})
        return USER_ERROR

    try:
        if args.encoder_in is not None:
            encoder = load_encoder(Path(args.encoder_in))
        else:
            encoder = build_encoder(encoder_config)
    except FileNotFoundError as err:
        logger.error("Encoder file not found", extra={"error": str(err)})
        return USER_ERROR
    except DeserializationError as err:
        logger.error("Encoder file is invalid", extra={"error": str(err)})
        return VALIDATION_ERROR

    if args.encoder_in is not None:
        _warn_ignored_policy_flags(args, encoder, logger)

    try:
        lines = input_path.read_text(encoding="utf-8").splitlines()
        tokenizer = build_tokenizer(encoder_config.tokenizer)
        mode = encoder_config.output

        logger.info(
            "Starting encode",
            extra={
                "input": str(input_path),
                "lines": len(lines),
                "policy": encoder.policy.name,
                "mode": mode,
                "tokenizer": repr(tokenizer),
            },
        )

        if mode == "sequences":
            output = encoder.encode_sequences(lines, tokenizer)
        elif mode == "sparse":
            output = encoder.encode_sparse(lines, tokenizer)
        else:
            output = encoder.encode(lines, tokenizer)

        payload = _result_payload(output, mode)
        if args.output is not None:
            atomic_write(Path(args.output), json.dumps(payload) + "\n")

        if args.encoder_out is not None:
            save_encoder(encoder, Path(args.encoder_out))

        logger.info(
            "Encoding complete",
            extra={
                "rows": len(lines),
                "shape": payload.get("shape"),
                "dictionary_size": encoder.dictionary.size,
                "output": args.output,
                "encoder_out": args.encoder_out,
            },
        )
        return SUCCESS

    except TokenKindMismatchError as err:
        logger.error("Tokenizer does not fit the encoder", extra={"error": str(err)})
        return USER_ERROR
    except Exception as err:
        logger.error("Encoding failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_vocab(args: argparse.Namespace) -> int:
    """Show the dictionary stored in a saved encoder."""
    exit_code, _, logger = _load_and_bootstrap(args, "vocab")
    if exit_code != SUCCESS:
        return exit_code

    from strenc.encoding.exceptions import DeserializationError
    from strenc.encoding.serialization.core import load_encoder

    try:
        encoder = load_encoder(Path(args.encoder))
    except FileNotFoundError as err:
        logger.error("Encoder file not found", extra={"error": str(err)})
        return USER_ERROR
    except DeserializationError as err:
        logger.error("Encoder file is invalid", extra={"error": str(err)})
        return VALIDATION_ERROR

    dictionary = encoder.dictionary
    logger.info(
        "Vocabulary",
        extra={
            "policy": encoder.policy.name,
            "token_kind": dictionary.token_kind.value,
            "size": dictionary.size,
            "tokens": [
                {"id": token_id, "token": token}
                for token_id, token in enumerate(dictionary.tokens(), start=1)
            ],
        },
    )
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Display version and environment information."""
    logger = get_logger("strenc.cli.info", log_level=args.log_level)

    from strenc import __version__
    from strenc.encoding.policies.registry import list_policy_types
    from strenc.runtime.environment import get_system_info

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "strenc_version": __version__,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "policies": list_policy_types(),
            "config": args.config,
        },
    )
    return SUCCESS
