"""
JSON extraction and repair for model output.

Models sometimes wrap JSON in markdown fences or prose, and a response cut
off by the token limit leaves strings, arrays and objects open. These
helpers turn such text back into a parsed object where possible.
"""

import json
from typing import Any

from src.utils.exceptions import InvalidJSON


def strip_code_fences(text: str) -> str:
    """Return the body of a ```json fenced block, or the text unchanged."""
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if text.strip().startswith("```"):
        return text.split("```", 2)[1].strip()
    return text.strip()


def extract_json_object(text: str) -> str:
    """Return the outermost ``{...}`` span of ``text`` (greedy, like ``\\{[\\s\\S]*\\}``)."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return text
    return text[start : end + 1]


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Parse model output into a JSON object.

    Tries the raw text, then the fenced body, then the outermost brace span.

    Raises:
        InvalidJSON: If nothing parses or the result is not an object
    """
    candidates = [text, strip_code_fences(text)]
    candidates.append(extract_json_object(candidates[-1]))

    last_error: Exception | None = None
    for candidate in dict.fromkeys(candidates):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        if not isinstance(data, dict):
            raise InvalidJSON(f"Expected a JSON object, got {type(data).__name__}", excerpt=text)
        return data

    raise InvalidJSON(f"Could not parse JSON response ({last_error})", excerpt=text)


def _close(text: str, stack: list[str]) -> str:
    closers = {"{": "}", "[": "]"}
    return text + "".join(closers[opener] for opener in reversed(stack))


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def repair_truncated_json(text: str) -> str:
    """
    Close a JSON document that was cut off mid-stream.

    Walks the text tracking string and escape state plus the stack of open
    arrays and objects. At the end an open string gets its closing quote and
    every open container is closed innermost first. When that still does not
    parse (a dangling key, colon or comma), the text is cut back to the last
    point where the enclosing container was complete and closed from there.

    Args:
        text: Possibly truncated JSON text

    Returns:
        Repaired JSON text (unchanged if it already parses)
    """
    body = strip_code_fences(text)
    start = body.find("{")
    if start == -1:
        start = body.find("[")
    if start == -1:
        return body
    body = body[start:]

    if _parses(body):
        return body

    stack: list[str] = []
    # Whether each open object is waiting for a key (True) or a value (False)
    expecting_key: list[bool] = []
    in_string = False
    string_is_key = False
    escaped = False
    # (cut index, stack snapshot) where body[:index] + closers is valid
    safe_point: tuple[int, list[str]] | None = None

    for index, char in enumerate(body):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
                if not string_is_key:
                    safe_point = (index + 1, list(stack))
            continue

        if char == '"':
            in_string = True
            string_is_key = bool(stack) and stack[-1] == "{" and expecting_key[-1]
        elif char in "{[":
            stack.append(char)
            expecting_key.append(char == "{")
            safe_point = (index + 1, list(stack))
        elif char in "}]":
            if stack:
                stack.pop()
                expecting_key.pop()
            safe_point = (index + 1, list(stack))
        elif char == ":":
            if expecting_key:
                expecting_key[-1] = False
        elif char == ",":
            safe_point = (index, list(stack))
            if stack and stack[-1] == "{":
                expecting_key[-1] = True

    candidate = body
    if in_string:
        if escaped:
            candidate = candidate[:-1]
        candidate += '"'
    candidate = _close(candidate.rstrip(), stack)
    if _parses(candidate):
        return candidate

    if safe_point is not None:
        index, snapshot = safe_point
        fallback = _close(body[:index].rstrip().rstrip(","), snapshot)
        if _parses(fallback):
            return fallback

    return candidate
