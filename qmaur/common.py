"""
Common utilities shared across qmaur modules.
"""

from __future__ import annotations

import sys
from typing import TextIO


class QmaurError(Exception):
    """Base class for errors that abort the current invocation."""
    pass


class ConfigError(QmaurError):
    """Raised when a configuration file cannot be loaded or is invalid."""
    pass


def use_color(mode: str, stream: TextIO | None = None) -> bool:
    """
    Decide whether ANSI colours should be emitted.

    Args:
        mode: One of "auto", "always", "never"
        stream: Stream checked for a TTY in auto mode (defaults to stdout)

    Returns:
        True if colour output is enabled
    """
    if mode == "always":
        return True
    if mode == "never":
        return False
    stream = stream if stream is not None else sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
