"""
Configuration file parsing and management.

Reads YAML configuration files and merges them by priority
(--config path -> user -> system -> defaults), then applies
environment overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any

import yaml

from .aurweb import DEFAULT_AUR_URL, DEFAULT_MAX_ARGS
from .common import ConfigError
from .inventory import DEFAULT_PACMAN_COMMAND

logger = logging.getLogger(__name__)

COLOR_MODES = ("auto", "always", "never")


def config_locations() -> list[str]:
    """Standard configuration file locations, highest priority first."""
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return [
        os.path.join(xdg, "qmaur", "config.yml"),
        os.path.join(xdg, "qmaur", "config.yaml"),
        "/etc/qmaur/config.yml",
        "/etc/qmaur/config.yaml",
    ]


@dataclass(frozen=True)
class Config:
    """
    Runtime configuration.

    Attributes:
        aur_url: AUR site root used for RPC calls and package links
        timeout_seconds: Socket timeout for each RPC request
        max_info_args: Package names per info request
        pacman_command: Command listing foreign packages as "name version" lines
        ignore: Package names left out of checkupdates
        color: Colour mode ('auto', 'always', 'never')
        source: Path of the highest-priority file that was loaded
    """
    aur_url: str = DEFAULT_AUR_URL
    timeout_seconds: int = 10
    max_info_args: int = DEFAULT_MAX_ARGS
    pacman_command: tuple[str, ...] = DEFAULT_PACMAN_COMMAND
    ignore: frozenset[str] = field(default_factory=frozenset)
    color: str = "auto"
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if not self.aur_url.startswith(("http://", "https://")):
            raise ConfigError(f"Invalid aur_url: {self.aur_url!r}. Must be an http(s) URL")

        if self.timeout_seconds < 1 or self.timeout_seconds > 120:
            raise ConfigError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 120"
            )

        if self.max_info_args < 1 or self.max_info_args > 250:
            raise ConfigError(
                f"Invalid max_info_args: {self.max_info_args}. "
                "Must be between 1 and 250"
            )

        if not self.pacman_command:
            raise ConfigError("pacman_command must not be empty")

        if self.color not in COLOR_MODES:
            raise ConfigError(
                f"Invalid color: {self.color}. "
                f"Must be one of: {', '.join(COLOR_MODES)}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        command = data.get("pacman_command", DEFAULT_PACMAN_COMMAND)
        if isinstance(command, str):
            command = command.split()
        ignore = data.get("ignore") or ()
        if isinstance(ignore, str):
            ignore = ignore.split()
        try:
            return Config(
                aur_url=str(data.get("aur_url", DEFAULT_AUR_URL)),
                timeout_seconds=int(data.get("timeout_seconds", 10)),
                max_info_args=int(data.get("max_info_args", DEFAULT_MAX_ARGS)),
                pacman_command=tuple(str(part) for part in command),
                ignore=frozenset(str(name) for name in ignore),
                color=str(data.get("color", "auto")),
                source=source,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration{f' in {source}' if source else ''}: {e}") from e


def _load_yaml(file_path: str) -> dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary (empty for an empty file)

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {file_path} must contain a mapping")
    return data


def load_config_file(file_path: str) -> Config:
    """
    Load configuration from a single file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    if not os.path.exists(file_path):
        raise ConfigError(f"Config file not found: {file_path}")
    logger.debug(f"loading config from {file_path}")
    return Config.from_dict(_load_yaml(file_path), source=file_path)


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    data = dict(data)
    if os.environ.get("QMAUR_AUR_URL"):
        data["aur_url"] = os.environ["QMAUR_AUR_URL"]
    if os.environ.get("QMAUR_TIMEOUT"):
        data["timeout_seconds"] = os.environ["QMAUR_TIMEOUT"]
    return data


def load_config(custom_path: str | None = None) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Environment variables QMAUR_AUR_URL, QMAUR_TIMEOUT
    2. Custom path (if provided)
    3. User $XDG_CONFIG_HOME/qmaur/config.yml
    4. System /etc/qmaur/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file

    Returns:
        Merged Config object

    Raises:
        ConfigError: If custom_path cannot be loaded or any found file is invalid
    """
    paths: list[str] = []
    if custom_path:
        if not os.path.exists(custom_path):
            raise ConfigError(f"Could not load config from specified path: {custom_path}")
        paths.append(custom_path)
    paths.extend(p for p in config_locations() if os.path.exists(p))

    # Lowest priority first so later updates win
    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug(f"loading config from {path}")
        merged.update(_load_yaml(path))

    if not paths:
        logger.debug("no config files found, using defaults")

    config = Config.from_dict(_apply_env(merged), source=paths[0] if paths else "")
    return config


def with_overrides(config: Config, **overrides: Any) -> Config:
    """Return a copy of config with non-None overrides applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **changes) if changes else config
