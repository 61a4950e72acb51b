"""
Legislator Lens - JSON parsing helpers
Extracts the embedded JSON payload from free-text model output. Models are told
to answer with JSON only, but nothing guarantees they comply.
"""
import json
import logging
from typing import Any, List, Optional, Type, Union

from .exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

_OPENERS = {"{": "}", "[": "]"}


def _strip_code_fences(text: str) -> str:
    """
    Remove common Markdown code fences, e.g. ```json ... ``` or ``` ... ```
    """
    if not text:
        return text
    return (
        text.replace("```json", "")
            .replace("```JSON", "")
            .replace("```", "")
            .strip()
    )


def _find_json_candidates(text: str) -> List[str]:
    """
    Scan the text and return every balanced top-level {...} or [...] substring.
    - brackets inside string literals are ignored
    - nesting is supported, mismatched closers end the current candidate
    Candidates are returned in order of appearance.
    """
    candidates: List[str] = []
    if not text:
        return candidates

    in_string = False
    escape = False
    stack: List[str] = []
    start_idx: Optional[int] = None

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            # quotes only matter once we are inside a candidate
            if stack:
                in_string = True
            continue

        if ch in _OPENERS:
            if not stack:
                start_idx = i
            stack.append(_OPENERS[ch])
        elif stack and ch in ("}", "]"):
            if ch != stack[-1]:
                stack.clear()
                start_idx = None
                continue
            stack.pop()
            if not stack and start_idx is not None:
                candidates.append(text[start_idx:i + 1])
                start_idx = None

    return candidates


def parse_model_json(
    text: str,
    expected_type: Optional[Union[Type[list], Type[dict]]] = None,
    source: str = "model"
) -> Any:
    """
    Parse the first balanced JSON object or array embedded in model output.

    :param text: raw model output
    :param expected_type: list or dict; the parsed value must be of this type
    :param source: component name used in log messages
    :return: the parsed JSON value
    :raises MalformedResponseError: no candidate found, it does not parse,
        or it is not of the expected type
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError(f"{source} returned an empty response")

    candidates = _find_json_candidates(_strip_code_fences(text))
    logger.debug(f"LegislatorLens[JSONParser]: {source} response has {len(candidates)} JSON candidates")
    if not candidates:
        raise MalformedResponseError(f"No JSON found in {source} response")

    first = candidates[0]
    try:
        parsed = json.loads(first)
    except json.JSONDecodeError as e:
        logger.warning(f"LegislatorLens[JSONParser]: failed to parse {source} JSON: {first[:200]}")
        raise MalformedResponseError(f"Failed to parse {source} response as JSON") from e

    if expected_type is not None and not isinstance(parsed, expected_type):
        raise MalformedResponseError(
            f"Expected a JSON {expected_type.__name__} from {source}, got {type(parsed).__name__}"
        )
    return parsed
