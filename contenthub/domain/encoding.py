"""
JSON encoding for the list-valued Content fields (questions, targetCountries).

Read path is tolerant: a stored value may be a native list, a JSON string, or
a JSON string of a JSON string (rows written while the editor double-encoded
its payload). At most one extra decode is attempted. Anything unusable becomes
an empty list.

Write path always encodes exactly once.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from .errors import DecodeFailed
from .questions import Question, parse_questions, questions_to_wire

logger = logging.getLogger(__name__)


def decode_json_list(raw: Any, *, field: str = "value") -> list[Any]:
    """
    Decode a persisted list value.

    Raises DecodeFailed when the value is not a list after at most two
    decode passes.
    """
    if raw is None or raw == "":
        return []

    value = raw
    if isinstance(value, str):
        try:
            value = json.loads(value)
            if isinstance(value, str):
                value = json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            raise DecodeFailed(f"{field} is not valid JSON: {e}") from e

    if not isinstance(value, list):
        raise DecodeFailed(f"{field} did not decode to a list (got {type(value).__name__})")
    return value


def decode_questions(raw: Any) -> list[Question]:
    """Tolerant question decode. Never raises."""
    try:
        items = decode_json_list(raw, field="questions")
        return parse_questions(items)
    except DecodeFailed as e:
        logger.warning("Discarding malformed questions: %s", e.message)
    except ValidationError as e:
        logger.warning("Discarding invalid questions: %s", e.error_count())
    return []


def decode_string_list(raw: Any, *, field: str = "targetCountries") -> list[str]:
    """Tolerant string-list decode. Never raises."""
    try:
        items = decode_json_list(raw, field=field)
    except DecodeFailed as e:
        logger.warning("Discarding malformed %s: %s", field, e.message)
        return []
    return [str(item) for item in items if item is not None]


def encode_questions(questions: list[Question]) -> str:
    return json.dumps(questions_to_wire(questions))


def encode_string_list(values: list[str]) -> str:
    return json.dumps(list(values))
