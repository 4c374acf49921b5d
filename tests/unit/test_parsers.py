"""Tests for JSON extraction and truncated-JSON repair."""

import json

import pytest

from src.parsers.json_repair import (
    extract_json_object,
    parse_json_object,
    repair_truncated_json,
    strip_code_fences,
)
from src.utils.exceptions import InvalidJSON


class TestParseJsonObject:
    def test_plain_object(self):
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_object(self):
        text = 'Here you go:\n```json\n{"title": "Hello"}\n```\nEnjoy!'
        assert parse_json_object(text) == {"title": "Hello"}

    def test_object_inside_prose(self):
        assert parse_json_object('Sure! {"a": {"b": 2}} Hope it helps.') == {"a": {"b": 2}}

    def test_array_is_rejected(self):
        with pytest.raises(InvalidJSON, match="Expected a JSON object"):
            parse_json_object("[1, 2, 3]")

    def test_garbage_carries_excerpt(self):
        with pytest.raises(InvalidJSON) as exc_info:
            parse_json_object("not json at all")
        assert exc_info.value.excerpt == "not json at all"

    def test_strip_code_fences_without_language(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_extract_json_object_without_braces(self):
        assert extract_json_object("nothing here") == "nothing here"


class TestRepairTruncatedJson:
    """A cut-off response must come back as parseable JSON."""

    def test_complete_json_is_unchanged(self):
        assert repair_truncated_json('{"a": [1, 2]}') == '{"a": [1, 2]}'

    def test_cut_inside_string_value(self):
        repaired = json.loads(repair_truncated_json('{"title": "Vector data'))
        assert repaired == {"title": "Vector data"}

    def test_cut_inside_array(self):
        repaired = json.loads(repair_truncated_json('{"tags": ["ai", "ml", "vec'))
        assert repaired == {"tags": ["ai", "ml", "vec"]}

    def test_cut_inside_nested_objects(self):
        text = '{"sections": [{"h2": "One", "keyPoints": ["a"]}, {"h2": "Tw'
        repaired = json.loads(repair_truncated_json(text))
        assert repaired["sections"][0] == {"h2": "One", "keyPoints": ["a"]}
        assert repaired["sections"][1] == {"h2": "Tw"}

    def test_cut_inside_key_drops_dangling_key(self):
        repaired = json.loads(repair_truncated_json('{"title": "A", "desc'))
        assert repaired == {"title": "A"}

    def test_cut_after_colon(self):
        repaired = json.loads(repair_truncated_json('{"a": 1, "b":'))
        assert repaired == {"a": 1}

    def test_cut_after_comma(self):
        repaired = json.loads(repair_truncated_json('{"a": [1, 2,'))
        assert repaired == {"a": [1, 2]}

    def test_cut_in_escape_sequence(self):
        repaired = json.loads(repair_truncated_json('{"q": "say \\'))
        assert repaired == {"q": "say "}

    def test_fenced_and_truncated(self):
        repaired = json.loads(repair_truncated_json('```json\n{"metaTitle": "Guide to'))
        assert repaired == {"metaTitle": "Guide to"}
