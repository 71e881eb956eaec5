"""
qmaur - check foreign pacman packages against the AUR.

Core Modules:
- Inventory: foreign package listing via pacman
- AUR client: RPC v5 info and search lookups
- Reporting: update comparison and output formatting
- CLI: subcommands, verbosity tiers, completion script generation
"""

__version__ = "0.3.0"

from .common import QmaurError, ConfigError
from .inventory import (
    LocalPackage,
    InventoryError,
    parse_inventory,
    read_foreign_packages,
)
from .aurweb import (
    AurPackage,
    AurClient,
    AurError,
    NetworkError,
    ParseError,
    RpcError,
    package_url,
)
from .report import UpdateReport, compare
from .config import Config, load_config, load_config_file
from .logging_config import setup_logging, verbosity_to_level, TRACE

__all__ = [
    "__version__",
    # Errors
    "QmaurError",
    "ConfigError",
    # Inventory
    "LocalPackage",
    "InventoryError",
    "parse_inventory",
    "read_foreign_packages",
    # AUR
    "AurPackage",
    "AurClient",
    "AurError",
    "NetworkError",
    "ParseError",
    "RpcError",
    "package_url",
    # Reporting
    "UpdateReport",
    "compare",
    # Config
    "Config",
    "load_config",
    "load_config_file",
    # Logging
    "setup_logging",
    "verbosity_to_level",
    "TRACE",
]
