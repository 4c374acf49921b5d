"""
Logger setup for the article pipeline.

Modules log through ``get_logger(__name__)``; the CLI attaches a single
handler to the package root logger with ``configure_logging`` so every
``src.*`` logger shares one colored console stream.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "src"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.BOLD}{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_color: bool = True,
) -> logging.Logger:
    """
    Setup and configure a logger with optional file output.

    Args:
        name: Logger name (usually the package root)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging to file
        use_color: Whether to use colored output (only for console)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or "INFO").upper()))

    # Avoid duplicate handlers when called twice
    if logger.handlers:
        return logger

    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    if use_color and sys.stderr.isatty():
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def configure_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> logging.Logger:
    """Attach the console handler to the package root logger."""
    return setup_logger(PACKAGE_LOGGER, level=level, log_file=log_file)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_step(logger: logging.Logger, step: int, total: int, message: str) -> None:
    """Log a numbered pipeline step, e.g. ``[2/5] Planning outline``."""
    logger.info(f"[{step}/{total}] {message}")
