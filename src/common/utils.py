"""
Utilities
=========

Helpers shared across the application that do not belong to a more specific
domain.

The main one is `extract_json_array`, a best-effort extractor that pulls a
JSON array out of free-form model output. Language models are asked to answer
with a bare JSON array but routinely wrap it in prose or code fences, so the
extractor is the single place where that text is turned into data.
"""

import json

import structlog

log = structlog.get_logger(__name__)


def _balanced_array_span(text: str, start: int) -> int | None:
    """
    Return the index just past the ``]`` that closes the ``[`` at ``start``.

    Brackets inside JSON string literals are ignored. Returns None when the
    array is never closed.
    """
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
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
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def extract_json_array(text: str) -> list:
    """
    Parse the JSON array embedded in ``text``.

    The slice from the first ``[`` to the last ``]`` is tried first. When that
    does not parse (for example because trailing commentary contains another
    bracket) the first balanced array starting at the first ``[`` is tried.

    Raises:
        ValueError: no bracketed substring exists.
        json.JSONDecodeError: a bracketed substring exists but is not JSON.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON array found in text.")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        balanced_end = _balanced_array_span(text, start)
        if balanced_end is None or balanced_end == end + 1:
            raise
        log.debug("Falling back to balanced array extraction", start=start)
        data = json.loads(text[start:balanced_end])

    if not isinstance(data, list):
        raise ValueError("Extracted JSON is not an array.")
    return data
