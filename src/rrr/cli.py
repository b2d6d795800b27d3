"""Command-line interface for rrr."""

from __future__ import annotations

import argparse
import sys
from typing import Iterator, TextIO

from rrr import __version__
from rrr.config.loader import load_rule_book
from rrr.config.settings import Settings, load_settings
from rrr.dispatch import DispatchOptions, Dispatcher
from rrr.exceptions import RrrError, ValidationError
from rrr.execution import ExecutionMode, ShellExecutor, parse_shell
from rrr.output import debug, error, setup_logging


def build_parser(settings: Settings | None = None) -> argparse.ArgumentParser:
    """Build argument parser. Defaults come from settings (file + environment)."""
    if settings is None:
        settings = Settings()

    parser = argparse.ArgumentParser(
        prog="rrr",
        description="Run the command configured for each input, chosen by glob/regex rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rrr report.pdf                     # open with the matching rule
  rrr -q notes.md                    # print the command instead of running it
  rrr -p work https://example.com    # match in the 'work' profile
  rrr -f -v movie.mkv                # try matching rules until one succeeds
  ls *.txt | rrr --stdin -F          # one input per line, run in background

Config (~/.config/rrr.conf):
  :include ~/.config/rrr.d
  viewer = zathura
  *.pdf -> @viewer
  ~^(\\d+)-(\\d+)$ -> seq %1 %2
""",
    )

    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase verbosity level"
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Do not execute any matching rule"
    )
    parser.add_argument(
        "-c",
        "--config",
        action="append",
        dest="config",
        default=None,
        metavar="PATH",
        help="Configuration file (repeatable, env: RRR_CONFIG)",
    )
    parser.add_argument(
        "-p",
        "--profile",
        default=settings.profile,
        help="Profile to match in (env: RRR_PROFILE)",
    )
    parser.add_argument(
        "-q", "--query", action="store_true", help="Print the action instead of executing it"
    )
    parser.add_argument(
        "-s",
        "--case-sensitive",
        action="store_true",
        default=settings.case_sensitive,
        help="Match in case sensitive mode (env: RRR_CASE_SENSITIVE)",
    )
    parser.add_argument("--stdin", action="store_true", help="Read inputs from stdin")
    parser.add_argument(
        "-F",
        "--fork",
        action="store_true",
        default=settings.fork,
        help="Run action in a child process instead of replacing this one",
    )
    parser.add_argument(
        "-f",
        "--fallback",
        action="store_true",
        default=settings.fallback,
        help="On execution failure, try the next matching rule (env: RRR_FALLBACK)",
    )
    parser.add_argument(
        "--sh",
        default=settings.shell,
        metavar="CMD",
        help="Shell used to run actions, default 'sh -c' (env: RRR_SHELL)",
    )
    parser.add_argument(
        "--no-import",
        dest="allow_import",
        action="store_false",
        default=settings.allow_import,
        help="Reject :import directives",
    )
    parser.add_argument("inputs", nargs="*", help="Inputs to match")

    return parser


def build_options(args: argparse.Namespace) -> DispatchOptions:
    """Dispatch policy from parsed arguments."""
    return DispatchOptions(
        fallback=args.fallback,
        mode=ExecutionMode.FORK if args.fork else ExecutionMode.EXEC,
        dry_run=args.dry_run,
        query=args.query,
    )


def read_inputs(stream: TextIO) -> Iterator[str]:
    """One input per line, without the line terminator."""
    for line in stream:
        yield line.rstrip("\r\n")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        return _main(argv)
    except RrrError as e:
        error(e.message)
        return e.exit_code
    except KeyboardInterrupt:
        return 130


def _main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    debug("log operational")

    if not args.stdin and not args.inputs:
        raise ValidationError("No input given (pass inputs or use --stdin)", exit_code=2)

    shell = parse_shell(args.sh) if args.sh else None
    config_paths = args.config if args.config else settings.config

    rule_book = load_rule_book(
        config_paths,
        only_profiles=[args.profile],
        case_insensitive=not args.case_sensitive,
        allow_import=args.allow_import,
    )

    dispatcher = Dispatcher(
        rule_book,
        profile=args.profile,
        executor=ShellExecutor(shell),
        options=build_options(args),
    )

    if args.stdin:
        debug("process inputs from stdin")
        dispatcher.dispatch_all(read_inputs(sys.stdin))
    else:
        debug("process inputs from arguments")
        dispatcher.dispatch_all(args.inputs)

    debug("all inputs processed")
    return 0
