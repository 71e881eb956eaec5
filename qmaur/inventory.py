"""
Local inventory of foreign packages.

Runs the pacman query for packages that are installed but not present in any
sync database (``pacman -Qm``) and parses its ``name version`` lines.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Sequence

from .common import QmaurError

logger = logging.getLogger(__name__)

DEFAULT_PACMAN_COMMAND = ("pacman", "-Qm")


class InventoryError(QmaurError):
    """Raised when the package manager query fails."""

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


@dataclass(frozen=True)
class LocalPackage:
    """
    A package reported by the local package manager.

    Attributes:
        name: Package name
        version: Installed version string (epoch:pkgver-pkgrel)
    """
    name: str
    version: str


def parse_inventory(text: str) -> dict[str, LocalPackage]:
    """Parse ``name version`` lines into an inventory keyed by name.

    Lines with fewer than two tokens are skipped with a warning. A name
    seen twice keeps the last version.

    Args:
        text: Decoded package manager output

    Returns:
        Mapping of package name to LocalPackage
    """
    inventory: dict[str, LocalPackage] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) < 2:
            logger.warning(f"not enough fields on line {lineno}: {line!r}")
            continue
        name, version = parts[0], parts[1]
        if name in inventory:
            logger.debug(f"{name} listed twice, keeping {version}")
        inventory[name] = LocalPackage(name=name, version=version)
    return inventory


def _decode(data: bytes) -> str:
    """Decode captured output for error reporting, never failing."""
    return data.decode("utf-8", errors="replace").strip()


def read_foreign_packages(command: Sequence[str] = DEFAULT_PACMAN_COMMAND) -> dict[str, LocalPackage]:
    """Query the package manager for foreign packages.

    Args:
        command: Command line to run (defaults to ``pacman -Qm``)

    Returns:
        Mapping of package name to LocalPackage

    Raises:
        InventoryError: If the command cannot be run, exits non-zero,
            or writes output that is not UTF-8
    """
    cmd = list(command)
    logger.debug(f"running {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as e:
        raise InventoryError(f"could not run {cmd[0]}: {e}") from e

    if result.returncode != 0:
        raise InventoryError(
            f"{cmd[0]} failed with exit status {result.returncode}",
            stdout=_decode(result.stdout),
            stderr=_decode(result.stderr),
        )

    try:
        stdout = result.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InventoryError(f"{cmd[0]} produced non-UTF-8 output: {e}") from e

    inventory = parse_inventory(stdout)
    logger.info(f"found {len(inventory)} foreign packages")
    return inventory
