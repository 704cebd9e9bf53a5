"""
Structured-response extraction: pull a JSON payload out of free-form model text.

The model is asked to answer with a JSON object only, but often wraps it in
prose or markdown fences.  We take the span from the first "{" to the last
"}", parse it, and validate it against the target shape.  Anything short of
a fully valid object is a failure: partial results are never accepted.

No network I/O here; everything is deterministic given the raw text.
"""

import json
from typing import Any

from smart_booking.domain.results import (
    CHAT_ACTIONS,
    DURATIONS,
    MAX_SUGGESTIONS,
    MOODS,
    PRIORITIES,
    SENTIMENTS,
    TOPICS,
    ChatReply,
    ClassificationResult,
)


class ExtractError(Exception):
    """The model reply did not contain a usable payload."""


class NoPayloadFound(ExtractError):
    """No brace-delimited span in the reply."""


class MalformedPayload(ExtractError):
    """The brace-delimited span is not a JSON object."""


class SchemaViolation(ExtractError):
    """The JSON object is missing a field or has an out-of-domain value."""


def find_payload(raw: str) -> dict[str, Any]:
    """Return the JSON object spanning the first "{" to the last "}" of raw."""
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end < start:
        raise NoPayloadFound("no JSON object in model reply")

    try:
        data = json.loads(raw[start:end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedPayload(f"unparsable JSON: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise MalformedPayload(f"expected a JSON object, got {type(data).__name__}")
    return data


def extract_prose(raw: str) -> str:
    """Free-form replies (email drafts) only need to be non-blank."""
    text = (raw or "").strip()
    if not text:
        raise NoPayloadFound("empty model reply")
    return text


def extract_classification(raw: str) -> ClassificationResult:
    data = find_payload(raw)
    confidence = data.get("confidence")
    if confidence is not None:
        if not _is_number(confidence) or not 0.0 <= confidence <= 1.0:
            raise SchemaViolation(f"confidence out of range: {confidence!r}")
        confidence = float(confidence)

    return ClassificationResult(
        sentiment=_one_of(data, "sentiment", SENTIMENTS),
        suggested_duration=_duration(data),
        topics=_topics(data),
        priority=_one_of(data, "priority", PRIORITIES),
        suggestions=_suggestions(data),
        confidence=confidence,
    )


def extract_chat_reply(raw: str) -> ChatReply:
    data = find_payload(raw)
    content = _require(data, "content")
    if not isinstance(content, str) or not content.strip():
        raise SchemaViolation("content must be a non-empty string")

    action = _require(data, "action")
    if action is not None and action not in CHAT_ACTIONS:
        raise SchemaViolation(f"action not allowed: {action!r}")

    return ChatReply(
        content=content,
        suggestions=_suggestions(data),
        action=action,
        mood=_one_of(data, "mood", MOODS),
    )


# -- field validators ----------------------------------------------------------


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise SchemaViolation(f"missing field: {key}")
    return data[key]


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _one_of(data: dict[str, Any], key: str, allowed: tuple) -> Any:
    value = _require(data, key)
    if value not in allowed:
        raise SchemaViolation(f"{key} not allowed: {value!r}")
    return value


def _duration(data: dict[str, Any]) -> int:
    value = _require(data, "suggestedDuration")
    if not _is_number(value) or value not in DURATIONS:
        raise SchemaViolation(f"suggestedDuration not allowed: {value!r}")
    return int(value)


def _topics(data: dict[str, Any]) -> tuple[str, ...]:
    value = _require(data, "topics")
    if not isinstance(value, list) or not value:
        raise SchemaViolation("topics must be a non-empty list")
    topics: list[str] = []
    for topic in value:
        if topic not in TOPICS:
            raise SchemaViolation(f"unknown topic: {topic!r}")
        if topic not in topics:
            topics.append(topic)
    return tuple(topics)


def _suggestions(data: dict[str, Any]) -> tuple[str, ...]:
    value = _require(data, "suggestions")
    if not isinstance(value, list) or len(value) > MAX_SUGGESTIONS:
        raise SchemaViolation(f"suggestions must be a list of at most {MAX_SUGGESTIONS}")
    if not all(isinstance(s, str) for s in value):
        raise SchemaViolation("suggestions must be strings")
    return tuple(value)
