"""Utility module for common functions."""

from .file_handler import FileHandler
from .logger import configure_logging, get_logger, setup_logger

__all__ = ["FileHandler", "configure_logging", "get_logger", "setup_logger"]
