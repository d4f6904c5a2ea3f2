"""
cli-check command line.

Usage:
    cli-check                   # Check all configured tools
    cli-check go docker         # Check only go and docker
    cli-check --output=json     # Output in JSON format
    cli-check --init            # Write a sample .cli-check.toml
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

from . import __version__
from .checker import check_all, should_exit_with_error
from .config import load_and_merge, write_sample_config
from .errors import ConfigError, ToolNotInConfiguration
from .logging_config import setup_logging
from .render import FORMAT_PRETTY, FORMAT_QUIET, FORMATS, Renderer

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli-check",
        description="Verify that required CLI tools are installed and match version requirements.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  cli-check                    # Check all tools\n"
            "  cli-check go docker          # Check only go and docker\n"
            "  cli-check --output=json      # Output in JSON format"
        ),
    )
    parser.add_argument(
        "tools",
        nargs="*",
        help="Specific tools to check (default: all configured tools)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config file (default: .cli-check.toml in the root directory)",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Root directory to search for configuration (default: .)",
    )
    parser.add_argument(
        "--output", "-o",
        choices=FORMATS,
        default=FORMAT_PRETTY,
        help="Output format (default: pretty)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show failures (same as --output=quiet)",
    )
    parser.add_argument(
        "--jobs", "-j",
        type=int,
        default=None,
        help="Maximum number of tools checked in parallel",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for each version probe",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Generate a sample .cli-check.toml configuration file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def cmd_init(args: argparse.Namespace) -> int:
    """Write the sample configuration file."""
    try:
        path = write_sample_config(args.root)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILED
    print(f"Created {path}")
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Load configuration, check tools and render the results."""
    try:
        loaded = load_and_merge(args.config, args.root, verbose=args.verbose)
    except ConfigError as e:
        print(f"Error: failed to load configuration: {e.message}", file=sys.stderr)
        return EXIT_USAGE

    for warning in loaded.warnings:
        print(warning, file=sys.stderr)
    if loaded.warnings:
        print("", file=sys.stderr)

    if not loaded.tools:
        print("Error: no tools defined in configuration", file=sys.stderr)
        return EXIT_USAGE

    settings = loaded.settings
    outcomes = check_all(
        loaded.tools,
        args.tools,
        timeout=args.timeout or settings.timeout_seconds,
        max_workers=args.jobs or settings.max_workers,
        verbose=args.verbose,
    )

    unknown = [o for o in outcomes if isinstance(o.error, ToolNotInConfiguration)]
    if unknown:
        for outcome in unknown:
            print(f"Error: {outcome.failure_reason}", file=sys.stderr)
        print("", file=sys.stderr)
        print("Available tools:", file=sys.stderr)
        for name in sorted(loaded.tools):
            print(f"  - {name}", file=sys.stderr)
        return EXIT_USAGE

    if not args.tools:
        outcomes.sort(key=lambda o: o.tool.name.lower())

    fmt = FORMAT_QUIET if args.quiet else args.output
    Renderer().render(outcomes, fmt)

    return EXIT_FAILED if should_exit_with_error(outcomes) else EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for cli-check."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.jobs is not None and args.jobs < 1:
        parser.error("--jobs must be at least 1")
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")
    if any(not name.strip() for name in args.tools):
        parser.error("tool names must not be empty")

    args.verbose = args.verbose or os.environ.get("CLI_CHECK_DEBUG", "0") == "1"
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    if args.init:
        return cmd_init(args)
    return cmd_check(args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
