"""Shared helpers for turning model text into JSON."""

import json


def strip_json_fences(content: str) -> str:
    """Remove markdown code fences wrapping JSON output."""
    content = content.strip()
    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3].rstrip()
    return content


def parse_json_response(content: str) -> dict | list:
    """Parse JSON from a model response, stripping fences first.

    Raises:
        json.JSONDecodeError: if the text is not valid JSON.
    """
    return json.loads(strip_json_fences(content))
