"""
Response parser for the extraction collaborators.

Handles parsing of LLM responses, including JSON extraction from
various formats (raw JSON, markdown code blocks, surrounding prose).
"""

import json
import re
from typing import Any, Dict


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


_CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON object content from an LLM response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON preceded or followed by prose

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = raw_response.strip()

    match = _CODE_BLOCK_PATTERN.search(content)
    if match:
        content = match.group(1).strip()

    start = content.find("{")
    if start < 0:
        return content

    # Walk to the matching closing brace, skipping braces inside strings
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(content)):
        char = content[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return content[start : i + 1]

    return content[start:]


def parse_json_object(raw_response: str) -> Dict[str, Any]:
    """
    Parse an LLM response into a JSON object.

    Raises:
        ParseError: If the content is not a JSON object
    """
    json_str = extract_json_from_response(raw_response)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}\nContent: {json_str[:500]}")

    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    return data
