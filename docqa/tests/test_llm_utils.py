"""Tests for shared LLM response parsing utilities."""

import pytest
from docqa.common.llm_utils import clean_string_list, parse_llm_json, strip_code_fences


class TestParseLlmJson:
    def test_valid_json(self):
        assert parse_llm_json('{"type": "FACTUAL"}') == {"type": "FACTUAL"}

    def test_json_with_markdown_fences(self):
        raw = '```json\n{"type": "SEMANTIC", "fields": null}\n```'
        assert parse_llm_json(raw) == {"type": "SEMANTIC", "fields": None}

    def test_json_with_plain_fences(self):
        raw = '```\n{"a": 1}\n```'
        assert parse_llm_json(raw) == {"a": 1}

    def test_json_embedded_in_text(self):
        raw = 'Classification: {"type": "CROSS_DOCUMENT"} done.'
        assert parse_llm_json(raw) == {"type": "CROSS_DOCUMENT"}

    def test_no_json_returns_empty_dict(self):
        assert parse_llm_json("This is not JSON at all") == {}

    def test_empty_string_returns_empty_dict(self):
        assert parse_llm_json("") == {}

    def test_non_object_json_returns_empty_dict(self):
        assert parse_llm_json('["FACTUAL"]') == {}

    def test_invalid_json_with_braces_returns_empty(self):
        assert parse_llm_json('{"broken: json') == {}


class TestStripCodeFences:
    def test_strips_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_leaves_plain_text(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'

    def test_none_safe(self):
        assert strip_code_fences("") == ""


class TestCleanStringList:
    def test_list_drops_blank_and_null(self):
        assert clean_string_list(["id_number", "", "null", " NULL ", "phone"]) == ["id_number", "phone"]

    def test_scalar_becomes_list(self):
        assert clean_string_list("address") == ["address"]

    def test_null_scalar_is_empty(self):
        assert clean_string_list("null") == []

    def test_none_is_empty(self):
        assert clean_string_list(None) == []

    def test_nested_values_ignored(self):
        assert clean_string_list([{"x": 1}, ["y"], "z"]) == ["z"]
