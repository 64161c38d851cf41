#!/usr/bin/env python3
"""
Call-sheet agent command-line interface.

Reads a call sheet from a file or stdin, runs the extraction agent and
prints the accepted JSON object.
"""

import argparse
import json
import logging
import sys

from .config import config
from .errors import AgentError
from .extractor import extract_callsheet
from .schemas import BUILTIN_SCHEMAS
from .tools import default_registry

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def read_input(path: str) -> str:
    """Read call-sheet text from ``path``, or stdin when path is '-'."""
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="callsheet-agent",
        description="Extract structured logistics from a film/TV call sheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s callsheet.txt                  # Extract with the configured schema
  %(prog)s --schema company sheet.txt     # Require productionCompany
  pdftotext sheet.pdf - | %(prog)s -      # Read from stdin
  %(prog)s --list-tools                   # Show available tools
""",
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="Path to a text file, or '-' to read stdin",
    )
    parser.add_argument(
        "--schema",
        choices=sorted(BUILTIN_SCHEMAS),
        default=None,
        help=f"Target schema (default: from CALLSHEET_SCHEMA or {config.agent.schema})",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Model identifier (default: from OPENROUTER_MODEL or {config.provider.model})",
    )
    parser.add_argument(
        "--max-turns",
        type=int,
        default=None,
        help=f"Maximum provider calls (default: {config.agent.max_turns})",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="List registered tools and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.list_tools:
        print(default_registry.get_tools_summary())
        return 0
    if not args.input:
        parser.error("an input file (or '-') is required")
    if args.max_turns is not None and args.max_turns < 1:
        parser.error("--max-turns must be at least 1")

    try:
        text = read_input(args.input)
    except OSError as e:
        print(f"Error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        result = extract_callsheet(
            text,
            model=args.model,
            schema=args.schema,
            max_turns=args.max_turns,
        )
    except (AgentError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("Extraction finished in %d turn(s), tools: %s", result.turns, result.tools_used)
    print(json.dumps(result.data, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
