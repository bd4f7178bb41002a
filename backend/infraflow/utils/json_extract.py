import json
import logging
import re
from typing import Any, Iterator, Optional, Tuple

from infraflow.ir.errors import JSONExtractionError

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


def find_balanced_json(text: str, start: int = 0) -> Optional[str]:
    """
    Return the first balanced {...} or [...] span at or after ``start``.

    Braces and brackets inside string literals are ignored, so values such
    as "a {b}" do not end the match early.
    """
    begin = _next_opener(text, start)
    if begin == -1:
        return None

    stack = []
    in_string = False
    escape = False

    for i in range(begin, len(text)):
        ch = text[i]

        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ("}", "]"):
            if not stack or stack[-1] != ch:
                return None
            stack.pop()
            if not stack:
                return text[begin:i + 1]

    return None


def _next_opener(text: str, start: int) -> int:
    positions = [p for p in (text.find("{", start), text.find("[", start)) if p != -1]
    return min(positions) if positions else -1


def _is_payload(value: Any) -> bool:
    """An object, or a non-empty array of objects."""
    if isinstance(value, dict):
        return True
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def _candidates(text: str) -> Iterator[Tuple[str, bool]]:
    """Yield (candidate, embedded) pairs; embedded spans come from free prose."""
    # 1. raw JSON
    yield text.strip(), False

    # 2. fenced code blocks, labelled or not
    for match in _FENCED_BLOCK.finditer(text):
        yield match.group(1).strip(), False

    # 3. JSON embedded in prose
    pos = _next_opener(text, 0)
    while pos != -1:
        span = find_balanced_json(text, pos)
        if span:
            yield span, True
        pos = _next_opener(text, pos + 1)


def extract_json(text: str) -> Any:
    """
    Extract the first decodable JSON object or array from LLM output.
    Spans found inside prose must be an object or an array of objects.

    Raises JSONExtractionError when nothing usable is found.
    """
    if not text or not isinstance(text, str):
        raise JSONExtractionError("No JSON found: empty response")

    for candidate, embedded in _candidates(text):
        if not candidate or candidate[0] not in _CLOSERS:
            continue
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.debug("[JSON] Candidate rejected: %s", e)
            continue
        # Stray brackets in prose ("step [1]") are not a payload
        if embedded and not _is_payload(value):
            logger.debug("[JSON] Skipping embedded non-object span: %s", candidate[:40])
            continue
        return value

    raise JSONExtractionError("No JSON found in response")


def safe_load_json(text: str) -> Any:
    """
    Never-throwing variant of extract_json.
    Returns {} if parsing fails.
    """
    try:
        return extract_json(text)
    except JSONExtractionError:
        return {}
