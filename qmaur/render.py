"""
Output rendering and formatting.
"""

from __future__ import annotations

import datetime
from typing import Iterable, Sequence

from wcwidth import wcswidth

from .aurweb import AurPackage, package_url
from .report import Update, UpdateReport

# ANSI color codes
BOLD = "\033[1m"
GREEN = "\033[32m"
BOLD_GREEN = "\033[1;32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
RED = "\033[31m"
RESET = "\033[0m"


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        enabled: Whether colours are on

    Returns:
        Colored text or plain text if colors disabled
    """
    if not enabled or not text:
        return text
    return f"{color}{text}{RESET}"


def osc8(url: str, text: str, enabled: bool = True) -> str:
    """Create OSC8 hyperlink, or return the text unchanged."""
    if not enabled or not url:
        return text
    return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"


def format_update(update: Update, color: bool = False) -> str:
    """``<name> <local> -> <remote>``"""
    return " ".join((
        colorize(update.name, BOLD, color),
        colorize(update.local_version, RED, color),
        "->",
        colorize(update.remote_version, BOLD_GREEN, color),
    ))


def format_missing(name: str, color: bool = False) -> str:
    return f"--package {colorize(name, BOLD, color)} was not found in AUR"


def format_report(report: UpdateReport, color: bool = False) -> list[str]:
    """All report lines: updates first, then packages missing from the AUR."""
    lines = [format_update(update, color) for update in report.updates]
    lines.extend(format_missing(name, color) for name in report.missing)
    return lines


def format_timestamp(ts: int | None) -> str:
    if ts is None:
        return "None"
    dt = datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_search_results(packages: Iterable[AurPackage], color: bool = False) -> list[str]:
    """Two lines per package, sorted by name.

    ``aur/<name> <version> (+<votes> <popularity>) [flags]`` followed by the
    description indented by four spaces.
    """
    lines: list[str] = []
    for pkg in sorted(packages, key=lambda p: p.name):
        head = (
            f"{colorize('aur/', MAGENTA, color)}{colorize(pkg.name, BOLD, color)} "
            f"{colorize(pkg.version, GREEN, color)} "
            f"(+{pkg.num_votes} {pkg.popularity:.2f})"
        )
        if pkg.out_of_date is not None:
            head += " " + colorize("[out of date]", RED, color)
        if not pkg.maintainer:
            head += " " + colorize("[orphan]", YELLOW, color)
        lines.append(head)
        lines.append(f"    {pkg.description}")
    return lines


def _pad(label: str, width: int) -> str:
    return label + " " * (width - wcswidth(label))


def _join(values: Sequence[str]) -> str:
    return "  ".join(values) if values else "None"


def format_info(pkg: AurPackage, base_url: str, color: bool = False) -> list[str]:
    """``pacman -Si`` style description of a single package."""
    aur_url = package_url(pkg.name, base_url)
    fields = [
        ("Repository", "aur"),
        ("Name", pkg.name),
        ("Package Base", pkg.package_base),
        ("Version", pkg.version),
        ("Description", pkg.description or "None"),
        ("URL", osc8(pkg.url, pkg.url, color) if pkg.url else "None"),
        ("AUR URL", osc8(aur_url, aur_url, color)),
        ("Licenses", _join(pkg.licenses)),
        ("Groups", _join(pkg.groups)),
        ("Keywords", _join(pkg.keywords)),
        ("Provides", _join(pkg.provides)),
        ("Depends On", _join(pkg.depends)),
        ("Make Deps", _join(pkg.make_depends)),
        ("Check Deps", _join(pkg.check_depends)),
        ("Optional Deps", _join(pkg.opt_depends)),
        ("Conflicts With", _join(pkg.conflicts)),
        ("Replaces", _join(pkg.replaces)),
        ("Maintainer", pkg.maintainer or "None"),
        ("Submitter", pkg.submitter or "None"),
        ("Votes", str(pkg.num_votes)),
        ("Popularity", f"{pkg.popularity:.6g}"),
        ("First Submitted", format_timestamp(pkg.first_submitted)),
        ("Last Modified", format_timestamp(pkg.last_modified)),
        ("Out-of-date", format_timestamp(pkg.out_of_date) if pkg.out_of_date is not None else "No"),
    ]
    width = max(wcswidth(label) for label, _ in fields)
    return [f"{colorize(_pad(label, width), BOLD, color)} : {value}" for label, value in fields]
