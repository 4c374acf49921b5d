"""Persistence of articles in MongoDB."""

from .database import ArticleStore

__all__ = ["ArticleStore"]
