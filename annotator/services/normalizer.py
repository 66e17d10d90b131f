"""Trace payload normalizer.

Turns the heterogeneous ``input``/``output`` payloads that upstream traces
carry into one ordered list of :class:`ChatMessage`.  Payloads are first
classified into one of four shapes (text, single message, message list,
ignored) and each shape has a fixed handling per side.  Nothing here
raises on unexpected data: unknown shapes and entries are skipped so a
malformed trace still renders.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import ValidationError

from annotator.models.trace import ChatMessage, Trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class MessagePayload:
    """A single ``{role, content}`` object with both fields truthy."""

    message: dict


@dataclass(frozen=True)
class MessageListPayload:
    entries: list


@dataclass(frozen=True)
class IgnoredPayload:
    raw: Any


Payload = Union[TextPayload, MessagePayload, MessageListPayload, IgnoredPayload]


def _is_message(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get("role")) and bool(value.get("content"))


def classify_payload(value: Any) -> Payload:
    """Classify a raw trace payload into one of the supported shapes."""
    if isinstance(value, list):
        return MessageListPayload(value)
    if isinstance(value, str):
        return TextPayload(value)
    if _is_message(value):
        return MessagePayload(value)
    return IgnoredPayload(value)


def _to_message(data: dict) -> ChatMessage | None:
    try:
        return ChatMessage.model_validate(data)
    except ValidationError:
        logger.debug("Skipping message that does not look like a chat message: %r", data)
        return None


def _normalize_input(payload: Payload, timestamp: str | None) -> list[ChatMessage]:
    if isinstance(payload, MessageListPayload):
        messages = []
        for entry in payload.entries:
            if not isinstance(entry, dict):
                continue
            message = _to_message({**entry, "timestamp": entry.get("timestamp") or timestamp})
            if message is not None:
                messages.append(message)
        return messages
    if isinstance(payload, TextPayload):
        return [ChatMessage(role="user", content=payload.text, timestamp=timestamp)]
    if isinstance(payload, MessagePayload):
        message = payload.message
        normalized = _to_message(
            {**message, "timestamp": message.get("timestamp") or timestamp}
        )
        return [normalized] if normalized is not None else []
    if isinstance(payload, IgnoredPayload):
        return []
    raise TypeError(f"Unhandled payload shape: {type(payload).__name__}")


def _normalize_output(payload: Payload, timestamp: str | None) -> list[ChatMessage]:
    if isinstance(payload, MessageListPayload):
        messages = []
        for entry in payload.entries:
            if _is_message(entry):
                message = _to_message(entry)
                if message is not None:
                    messages.append(message)
            elif isinstance(entry, dict) and entry.get("text"):
                # Content-part format ({type, text}) used by OpenAI/Anthropic
                messages.append(
                    ChatMessage(role="assistant", content=entry["text"], timestamp=timestamp)
                )
        return messages
    if isinstance(payload, TextPayload):
        return [ChatMessage(role="assistant", content=payload.text, timestamp=timestamp)]
    if isinstance(payload, MessagePayload):
        message = _to_message(payload.message)
        return [message] if message is not None else []
    if isinstance(payload, IgnoredPayload):
        return []
    raise TypeError(f"Unhandled payload shape: {type(payload).__name__}")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Returns ``None`` for missing or unparseable values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _compare_messages(a: ChatMessage, b: ChatMessage) -> int:
    first = parse_timestamp(a.timestamp)
    second = parse_timestamp(b.timestamp)
    if first is None or second is None:
        return 0
    return (first > second) - (first < second)


def sort_messages(messages: list[ChatMessage]) -> list[ChatMessage]:
    """Stable ascending sort by timestamp.

    A pair where either side lacks a timestamp compares equal, so such
    messages keep their relative order.
    """
    return sorted(messages, key=functools.cmp_to_key(_compare_messages))


def trace_messages(trace: Trace) -> list[ChatMessage]:
    """Input messages followed by output messages, unsorted."""
    return _normalize_input(classify_payload(trace.input), trace.timestamp) + _normalize_output(
        classify_payload(trace.output), trace.timestamp
    )


def normalize_trace_messages(trace: Trace) -> list[ChatMessage]:
    """Normalize a single trace into a timestamp-ordered transcript."""
    return sort_messages(trace_messages(trace))
