"""Extract the JSON object embedded in a free-text model response."""

import json
from typing import Iterator, Optional


def _balanced_spans(text: str) -> Iterator[str]:
    """Yield every balanced ``{...}`` span, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
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
                    yield text[start : pos + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(text: Optional[str]) -> Optional[dict]:
    """
    Return the first JSON object found in ``text``, or None.

    Tries a direct parse first (model answered with bare JSON), then
    scans for balanced brace spans so that prose or markdown fences
    around the object are ignored.
    """
    if not text:
        return None

    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    for span in _balanced_spans(text):
        try:
            data = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    return None
