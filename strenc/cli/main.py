# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for StrEnc.

Single root command with subcommands. The global options (--config,
--log-level) are inherited by every subcommand through argparse's parent
parser mechanism.

Usage:
    strenc <subcommand> [options]
    strenc encode --input lines.txt --policy tf_idf --output weights.json
    strenc encode --input more.txt --encoder-in vocab.json --encoder-out vocab.json
    strenc vocab --encoder vocab.json
    strenc info
"""

import argparse
import sys

from strenc.cli.commands import handle_encode, handle_info, handle_vocab
from strenc.cli.exit_codes import USER_ERROR
from strenc.config.schema import OUTPUT_MODES, POLICY_NAMES, TOKENIZER_KINDS


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so the help text doesn't collide between the parent and
    the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register every subcommand with its handler via set_defaults(func=...)."""
    encode_parser = subparsers.add_parser(
        "encode", parents=[parent], help="Encode the lines of a text file."
    )
    encode_parser.set_defaults(func=handle_encode)
    encode_parser.add_argument(
        "--input", type=str, required=True, help="Text file, one line per row."
    )
    encode_parser.add_argument(
        "--output", type=str, default=None, help="Where to write the JSON result."
    )
    encode_parser.add_argument(
        "--policy", type=str, default=None, choices=POLICY_NAMES, help="Encoding policy."
    )
    encode_parser.add_argument(
        "--mode", type=str, default=None, choices=OUTPUT_MODES, help="Output representation."
    )
    encode_parser.add_argument(
        "--binary",
        action="store_true",
        default=False,
        help="bag_of_words only: presence flags instead of counts.",
    )
    encode_parser.add_argument(
        "--tokenizer", type=str, default=None, choices=TOKENIZER_KINDS, help="Tokenizer kind."
    )
    encode_parser.add_argument(
        "--delimiters",
        type=str,
        default=None,
        help="Delimiter characters for the 'split' tokenizer.",
    )
    encode_parser.add_argument(
        "--encoder-in",
        type=str,
        default=None,
        dest="encoder_in",
        help="Continue from a saved encoder (.json, .yaml, .pt).",
    )
    encode_parser.add_argument(
        "--encoder-out",
        type=str,
        default=None,
        dest="encoder_out",
        help="Save the encoder after encoding (.json, .yaml, .pt).",
    )

    vocab_parser = subparsers.add_parser(
        "vocab", parents=[parent], help="Show the dictionary of a saved encoder."
    )
    vocab_parser.set_defaults(func=handle_vocab)
    vocab_parser.add_argument(
        "--encoder", type=str, required=True, help="Saved encoder file."
    )

    info_parser = subparsers.add_parser(
        "info", parents=[parent], help="Display environment and version info."
    )
    info_parser.set_defaults(func=handle_info)


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="strenc",
        description="StrEnc: encode lines of text as numeric features.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
