"""Main CLI entry point for the streaming-escaper command-line tool.

Escapes files or standard input with a configurable escape character and
special character set, reports size hints, and lists the bundled presets.
"""

import argparse
import json
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import List, Optional, TextIO

from streaming_escaper import __version__
from streaming_escaper.character.stream import EscapeStreamProcessor
from streaming_escaper.character.writer import TextIOWriter
from streaming_escaper.shared.config import (
    DEFAULT_BUFFER_SIZE,
    PRESET_DEFINITIONS,
    ConfigError,
    EscaperConfig,
    StreamConfig,
)
from streaming_escaper.shared.logging import get_logger
from streaming_escaper.shared.result import EscapeMetrics

logger = get_logger(__name__, None, "cli")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="streaming-escaper",
        description="Insert an escape character before special characters in streamed text"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Escape command
    escape_parser = subparsers.add_parser("escape", help="Escape files or standard input")
    escape_parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Text files to escape (default: standard input)"
    )
    escape_parser.add_argument(
        "--escape-char", "-e",
        help="Escape character (default: backslash)"
    )
    escape_parser.add_argument(
        "--chars", "-s",
        help="Special character set definition, e.g. 'a-c$\\-'"
    )
    escape_parser.add_argument(
        "--preset", "-p",
        choices=sorted(PRESET_DEFINITIONS),
        help="Start from a bundled special character set"
    )
    escape_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    escape_parser.add_argument(
        "--buffer-size", "-b",
        type=int,
        default=DEFAULT_BUFFER_SIZE,
        help=f"Characters read per chunk (default: {DEFAULT_BUFFER_SIZE})"
    )
    escape_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    escape_parser.add_argument(
        "--stats",
        action="store_true",
        help="Print escaping statistics as JSON to stderr"
    )

    # Size hint command
    hint_parser = subparsers.add_parser(
        "size-hint", help="Print the output size estimate for an input size"
    )
    hint_parser.add_argument("bytes", type=int, help="Input size in bytes")
    hint_parser.add_argument(
        "--escape-char", "-e",
        default="\\",
        help="Escape character (default: backslash)"
    )

    # Presets command
    subparsers.add_parser("presets", help="List bundled presets")

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def build_config(args: argparse.Namespace) -> EscaperConfig:
    """Resolve the escaper configuration from file, preset and flags.

    Later sources win: configuration file, then ``--preset``, then
    ``--escape-char`` and ``--chars``.
    """
    if args.config:
        config = EscaperConfig.from_json(args.config.read_text(encoding="utf-8"))
    else:
        config = EscaperConfig()

    if args.preset:
        config = EscaperConfig.preset(args.preset).override(escape_char=config.escape_char)

    overrides = {}
    if args.escape_char is not None:
        overrides["escape_char"] = args.escape_char
    if args.chars is not None:
        overrides["special_chars"] = args.chars
    return config.override(**overrides) if overrides else config


def cmd_escape(args: argparse.Namespace) -> int:
    """Escape each input in order into a single output."""
    try:
        config = build_config(args)
        stream_config = StreamConfig(buffer_size=args.buffer_size)
    except (ConfigError, OSError) as e:
        logger.error("Invalid configuration", extra={"error": str(e)}, exc_info=False)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    processor = EscapeStreamProcessor(config.build_escaper(), stream_config)
    totals = EscapeMetrics()

    try:
        with ExitStack() as stack:
            if args.output:
                output: TextIO = stack.enter_context(args.output.open("w", encoding="utf-8"))
            else:
                output = sys.stdout
            writer = TextIOWriter(output)

            if not args.paths:
                _accumulate(totals, processor.write(sys.stdin.buffer, writer))
            for path in args.paths:
                with path.open("rb") as source:
                    _accumulate(totals, processor.write(source, writer))
            writer.flush()
    except OSError as e:
        logger.exception("Escaping failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stats:
        print(json.dumps(totals.to_dict(), indent=2), file=sys.stderr)
    return 0


def _accumulate(totals: EscapeMetrics, metrics: EscapeMetrics) -> None:
    totals.processing_time_ms += metrics.processing_time_ms
    totals.characters_processed += metrics.characters_processed
    totals.characters_escaped += metrics.characters_escaped
    totals.input_bytes += metrics.input_bytes
    totals.output_bytes += metrics.output_bytes
    totals.size_hint_bytes += metrics.size_hint_bytes
    totals.chunks_processed += metrics.chunks_processed


def cmd_size_hint(args: argparse.Namespace) -> int:
    """Print the escaper's output size estimate."""
    if args.bytes < 0:
        print("Error: bytes must be >= 0", file=sys.stderr)
        return 1
    try:
        escaper = EscaperConfig(escape_char=args.escape_char).build_escaper()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(escaper.transform_size_hint(args.bytes))
    return 0


def cmd_presets(args: argparse.Namespace) -> int:
    """Print preset names with their set definitions."""
    for name in sorted(PRESET_DEFINITIONS):
        print(f"{name}\t{PRESET_DEFINITIONS[name]}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)

    # Route to appropriate command handler
    try:
        if args.command == "escape":
            return cmd_escape(args)
        if args.command == "size-hint":
            return cmd_size_hint(args)
        if args.command == "presets":
            return cmd_presets(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
