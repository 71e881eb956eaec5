"""
Comparison of the local inventory against AUR metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .aurweb import AurPackage
from .inventory import LocalPackage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Update:
    """A foreign package whose AUR version differs from the installed one."""
    name: str
    local_version: str
    remote_version: str


@dataclass
class UpdateReport:
    """
    Result of comparing installed foreign packages with the AUR.

    Attributes:
        updates: Packages whose versions differ, sorted by name
        missing: Names not found in the AUR, sorted
        ignored: Names skipped by configuration, sorted
    """
    updates: list[Update] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


def compare(
    inventory: dict[str, LocalPackage],
    remote: Iterable[AurPackage],
    ignore: Iterable[str] = (),
) -> UpdateReport:
    """Join the inventory with AUR results by package name.

    Versions are compared as plain strings: any difference is reported,
    whichever side is newer.

    Args:
        inventory: Installed foreign packages keyed by name
        remote: Packages returned by the AUR info lookup
        ignore: Package names to leave out of the comparison

    Returns:
        UpdateReport
    """
    by_name = {pkg.name: pkg for pkg in remote}
    skip = set(ignore)
    report = UpdateReport()

    for name in sorted(inventory):
        local = inventory[name]
        if name in skip:
            report.ignored.append(name)
            continue
        aur = by_name.get(name)
        if aur is None:
            logger.debug(f"{name} not in AUR results")
            report.missing.append(name)
        elif aur.version != local.version:
            report.updates.append(Update(name, local.version, aur.version))
        else:
            logger.debug(f"{name} {local.version} is current")

    return report
