"""Shared utilities for parsing LLM responses."""

from __future__ import annotations

import json
import re
from typing import Any, List

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def strip_code_fences(raw: str) -> str:
    """Remove markdown code fence markers (```json ... ```) around a response."""
    if not raw:
        return ""
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text).strip()
    return text


def parse_llm_json(raw: str) -> dict:
    """Parse a JSON object from an LLM response, handling code fences and preamble text.

    Tries in order:
    1. Strip markdown code fences, then json.loads
    2. Extract substring between first '{' and last '}', then json.loads
    3. Return empty dict

    Anything that parses to a non-object (list, string, number) is treated as
    unparseable.
    """
    if not raw:
        return {}

    text = strip_code_fences(raw)

    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    start = raw.find("{")
    end = raw.rfind("}") + 1
    if start >= 0 and end > start:
        try:
            data = json.loads(raw[start:end])
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass

    return {}


def clean_string_list(value: Any) -> List[str]:
    """Normalize an LLM list-or-scalar value into a list of non-empty strings.

    Accepts a list (non-string items are stringified) or a single string.
    Blank entries and the literal "null" (any case) are dropped.
    """
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    cleaned = []
    for item in items:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text and text.lower() != "null":
            cleaned.append(text)
    return cleaned
