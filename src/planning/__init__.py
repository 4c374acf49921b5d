"""
Planning module: topic to structured outline.
"""

from src.planning.outline_generator import (
    Outline,
    OutlineConclusion,
    OutlineIntroduction,
    OutlinePlanner,
    OutlineSection,
    OutlineSubsection,
)

__all__ = [
    "Outline",
    "OutlineConclusion",
    "OutlineIntroduction",
    "OutlinePlanner",
    "OutlineSection",
    "OutlineSubsection",
]
