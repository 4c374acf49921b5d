"""Configuration module for managing environment variables, settings and categories."""

from .settings import Settings, get_settings
from .topics import TOPICS, get_all_categories, get_category, get_random_category

__all__ = [
    "Settings",
    "get_settings",
    "TOPICS",
    "get_all_categories",
    "get_category",
    "get_random_category",
]
