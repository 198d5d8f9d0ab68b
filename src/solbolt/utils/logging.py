"""
Logging configuration for solbolt.

Console output goes to stderr so that listings and JSON on stdout stay
clean. Poll callbacks run on timer threads, so file records carry the
thread name.
"""

import logging
import os
import sys
from typing import Optional

from solbolt.utils.colors import Colors

# Per-instruction detail, below DEBUG
TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

# Third-party loggers that are only interesting with --verbose
QUIET_LIBRARIES = ('urllib3', 'requests')


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name."""

    LEVEL_COLORS = {
        TRACE: Colors.DIM,
        logging.DEBUG: Colors.DIM,
        logging.INFO: Colors.BRIGHT_CYAN,
        logging.WARNING: Colors.BRIGHT_YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
        logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
    }

    def __init__(self, fmt: str = None, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, '')
            reset = Colors.RESET if color else ''
            record.levelname = f"{color}{levelname}{reset}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _stderr_supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    return hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()


def setup_logging(
    quiet: bool = False,
    debug: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``solbolt`` logger tree.

    Args:
        quiet: Suppress console output
        debug: Log at DEBUG
        verbose: Log at TRACE and let the HTTP libraries through
        log_file: Also log everything from DEBUG up to this file

    Returns:
        The configured root solbolt logger
    """
    if verbose:
        level = TRACE
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger('solbolt')
    logger.setLevel(min(level, logging.DEBUG) if log_file else level)
    logger.handlers.clear()
    logger.propagate = False

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(
            fmt='%(levelname)s: %(message)s',
            use_colors=_stderr_supports_color(),
        ))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Return the solbolt logger, or its ``solbolt.<name>`` child."""
    if name:
        return logging.getLogger(f'solbolt.{name}')
    return logging.getLogger('solbolt')


logger = get_logger()


def log_trace(log: logging.Logger, msg: str, *args, **kwargs):
    """Log at TRACE on the given logger."""
    if log.isEnabledFor(TRACE):
        log.log(TRACE, msg, *args, **kwargs)
