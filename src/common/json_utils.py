"""
JSON Utilities for LLM Response Parsing.

Chat models asked for "ONLY a JSON object" still wrap it in markdown fences,
prepend a sentence, or emit single quotes and trailing commas. This module
extracts and repairs such objects.

Uses json-repair library as a fallback when standard json.loads() fails.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response with error recovery.

    Args:
        text: Raw LLM response text that may contain JSON

    Returns:
        Parsed dictionary

    Raises:
        ValueError: If no JSON object can be extracted or repaired

    Example:
        >>> parse_llm_json('```json\\n{"industry": "construction"}\\n```')
        {'industry': 'construction'}
        >>> parse_llm_json("Sure! {'role': 'contractor',}")
        {'role': 'contractor'}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    candidate = _FENCE_RE.sub("", text.strip())
    match = _OBJECT_RE.search(candidate)
    if not match:
        raise ValueError(f"No JSON object found in text: {text[:200]}")
    json_str = match.group(0)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        parsed = repair_json(json_str, return_objects=True)

    # LLM sometimes wraps the object in brackets: [{...}]
    if isinstance(parsed, list) and len(parsed) == 1:
        parsed = parsed[0]

    if not isinstance(parsed, dict):
        raise ValueError(
            f"Expected a JSON object, got {type(parsed).__name__}. "
            f"Original text (first 200 chars): {text[:200]}"
        )
    return parsed
