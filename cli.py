#!/usr/bin/env python3
"""
CLI interface for pagefetch.

Usage:
    pagefetch fetch <url>
    pagefetch fetch <url> --start-index 5000 --max-length 5000
    pagefetch fetch <url> --raw

This provides the same functionality as the MCP tool but via command line,
making it accessible to agents that don't support MCP.
"""

import argparse
import json
import sys

from config import DEFAULT_MAX_LENGTH, DEFAULT_USER_AGENT_MANUAL, LOG_LEVEL
from logging_config import configure_logging
from tools import do_fetch


def cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch a URL and print one window of it."""
    outcome = do_fetch(
        args.url,
        max_length=args.max_length,
        start_index=args.start_index,
        raw=args.raw,
        user_agent=args.user_agent,
    )
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
    elif outcome.is_error:
        print(outcome.text, file=sys.stderr)
    else:
        print(outcome.text)
    return 1 if outcome.is_error else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagefetch",
        description="Fetch web pages as readable markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    pagefetch fetch "https://simonwillison.net/2024/Dec/19/one-shot-python-tools/"
    pagefetch fetch https://example.com/long-article --start-index 5000
    pagefetch fetch https://api.github.com/repos/python/cpython --raw
""",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL,
        help=f"Log level for stderr output (default: {LOG_LEVEL})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_p = subparsers.add_parser("fetch", help="Fetch a URL")
    fetch_p.add_argument("url", help="http or https URL")
    fetch_p.add_argument(
        "--max-length",
        type=int,
        default=DEFAULT_MAX_LENGTH,
        help=f"Maximum characters to return (default: {DEFAULT_MAX_LENGTH})",
    )
    fetch_p.add_argument(
        "--start-index",
        type=int,
        default=0,
        help="Offset into the rendered text (default: 0)",
    )
    fetch_p.add_argument(
        "--raw",
        action="store_true",
        help="Return fetched text unmodified instead of simplified markdown",
    )
    fetch_p.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT_MANUAL,
        help="User-Agent header to send",
    )
    fetch_p.add_argument(
        "--json",
        action="store_true",
        help="Print the outcome with metadata as JSON",
    )
    fetch_p.set_defaults(func=cmd_fetch)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
