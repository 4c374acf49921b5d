"""Parsing helpers for JSON returned by the completion API."""

from .json_repair import (
    extract_json_object,
    parse_json_object,
    repair_truncated_json,
    strip_code_fences,
)

__all__ = [
    "extract_json_object",
    "parse_json_object",
    "repair_truncated_json",
    "strip_code_fences",
]
