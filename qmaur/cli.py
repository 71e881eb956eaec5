"""
qmaur - check foreign packages against the AUR.

Usage:
    qmaur                          # same as "qmaur checkupdates"
    qmaur checkupdates             # report foreign packages whose AUR version differs
    qmaur search QUERY             # search the AUR
    qmaur info NAME...             # show AUR details for packages
    qmaur generate-bash-completions
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from . import __version__
from .aurweb import SEARCH_FIELDS, AurClient
from .common import QmaurError, use_color
from .completion import generate_bash_completion
from .config import COLOR_MODES, Config, load_config, with_overrides
from .inventory import InventoryError, read_foreign_packages
from .logging_config import MAX_QUIET, MAX_VERBOSE, setup_logging, verbosity_to_level
from .render import format_info, format_report, format_search_results
from .report import compare

logger = logging.getLogger("qmaur")


def make_client(config: Config) -> AurClient:
    return AurClient(
        base_url=config.aur_url,
        timeout=config.timeout_seconds,
        max_args=config.max_info_args,
    )


def cmd_checkupdates(args: argparse.Namespace, config: Config) -> int:
    """Compare foreign packages with the AUR and print differences."""
    inventory = read_foreign_packages(config.pacman_command)
    if not inventory:
        logger.info("no foreign packages installed")
        return 0

    names = [name for name in inventory if name not in config.ignore]
    remote = make_client(config).info(names)
    report = compare(inventory, remote, ignore=config.ignore)

    for name in report.ignored:
        logger.info(f"skipping ignored package {name}")

    for line in format_report(report, color=use_color(config.color)):
        print(line)
    logger.info(
        f"{len(inventory)} foreign packages, {len(report.updates)} differ, "
        f"{len(report.missing)} not in AUR"
    )
    return 0


def cmd_search(args: argparse.Namespace, config: Config) -> int:
    """Search the AUR and list matches."""
    results = make_client(config).search(args.query, by=args.by)
    if not results:
        logger.info(f"no packages match {args.query!r}")
        return 0
    for line in format_search_results(results, color=use_color(config.color)):
        print(line)
    return 0


def cmd_info(args: argparse.Namespace, config: Config) -> int:
    """Print AUR details for each requested package."""
    found = {pkg.name: pkg for pkg in make_client(config).info(args.names)}
    color = use_color(config.color)
    first = True
    for name in args.names:
        pkg = found.get(name)
        if pkg is None:
            logger.warning(f"package {name} was not found in AUR")
            continue
        if not first:
            print()
        first = False
        for line in format_info(pkg, config.aur_url, color=color):
            print(line)
    return 0


def cmd_generate_bash_completions(args: argparse.Namespace, config: Config) -> int:
    """Write the bash completion script to stdout."""
    sys.stdout.write(generate_bash_completion(build_parser()))
    return 0


def _add_verbosity(parser: argparse.ArgumentParser, default) -> None:
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="count",
        default=default,
        help=f"More log output (repeat up to {MAX_VERBOSE} times)",
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="count",
        default=default,
        help=f"Less log output (repeat up to {MAX_QUIET} times)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    # -v/-q are accepted after the subcommand too; SUPPRESS keeps a value
    # given before the subcommand from being reset
    common = argparse.ArgumentParser(add_help=False)
    _add_verbosity(common, argparse.SUPPRESS)

    parser = argparse.ArgumentParser(
        prog="qmaur",
        description="Check foreign pacman packages against the AUR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    _add_verbosity(parser, 0)
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Configuration file to load before the standard locations",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=None,
        help="Colour output (default: from config, else auto)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write debug log to this file",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    checkupdates = subparsers.add_parser(
        "checkupdates", parents=[common],
        help="Report foreign packages whose AUR version differs (default)",
    )
    checkupdates.set_defaults(func=cmd_checkupdates)

    search = subparsers.add_parser("search", parents=[common], help="Search the AUR")
    search.add_argument("query", metavar="QUERY", help="Search term")
    search.add_argument(
        "--by",
        choices=SEARCH_FIELDS,
        default="name-desc",
        help="Field to search (default: name-desc)",
    )
    search.set_defaults(func=cmd_search)

    info = subparsers.add_parser("info", parents=[common], help="Show AUR details for packages")
    info.add_argument("names", metavar="NAME", nargs="+", help="Package name")
    info.set_defaults(func=cmd_info)

    completions = subparsers.add_parser(
        "generate-bash-completions", parents=[common],
        help="Print a bash completion script",
    )
    completions.set_defaults(func=cmd_generate_bash_completions)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=verbosity_to_level(args.verbose, args.quiet),
        log_file=args.log_file,
    )

    func = getattr(args, "func", cmd_checkupdates)
    try:
        config = with_overrides(load_config(args.config), color=args.color)
        return func(args, config)
    except InventoryError as e:
        logger.error(str(e))
        if e.stdout:
            logger.error(f"stdout:\n{e.stdout}")
        if e.stderr:
            logger.error(f"stderr:\n{e.stderr}")
        return 1
    except QmaurError as e:
        logger.error(str(e))
        return 1


def run() -> None:
    """Console script wrapper."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
