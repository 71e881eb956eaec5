"""
Centralized logging configuration for qmaur.

Report output goes to stdout; everything logged here goes to stderr so the
two never interleave in a pipe.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


# Most detailed tier, below DEBUG: raw RPC URLs and response bodies
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Level that no record reaches; used for "-qq"
OFF = logging.CRITICAL + 10

# Verbosity tiers from quietest to loudest; index 2 is the default
LEVELS = (OFF, logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG, TRACE)
DEFAULT_TIER = 2

MAX_VERBOSE = 3
MAX_QUIET = 2


def verbosity_to_level(verbose: int = 0, quiet: int = 0) -> int:
    """
    Map -v/-q counts onto a logging level.

    Counts beyond the supported maximum are clamped.

    Args:
        verbose: Number of -v flags (0-3)
        quiet: Number of -q flags (0-2)

    Returns:
        Logging level number
    """
    verbose = max(0, min(verbose, MAX_VERBOSE))
    quiet = max(0, min(quiet, MAX_QUIET))
    return LEVELS[DEFAULT_TIER + verbose - quiet]


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
    use_colors: Optional[bool] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Logging level number (see verbosity_to_level)
        log_file: Optional file path for log output
        use_colors: Force colours on or off (defaults to stderr being a TTY)
        propagate: Allow log propagation (useful for testing)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("qmaur")
    logger.handlers.clear()

    # File output always records everything from DEBUG up
    logger.setLevel(min(level, logging.DEBUG) if log_file else level)

    if level < OFF:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if use_colors is None:
            use_colors = sys.stderr.isatty()
        console_formatter = ColoredFormatter(
            "%(levelname_colored)s %(message)s",
            use_colors=use_colors,
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(min(level, logging.DEBUG))

        file_formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.propagate = propagate

    return logger


class ColoredFormatter(logging.Formatter):
    """
    Formatter with colored output for different log levels.
    """

    # ANSI color codes
    COLORS = {
        'TRACE': '\033[2;36m',    # Dim cyan
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        label = record.levelname.lower() + ":"
        if self.use_colors:
            color = self.COLORS.get(record.levelname, '')
            record.levelname_colored = f"{color}{label}{self.RESET}"
        else:
            record.levelname_colored = label

        return super().format(record)
