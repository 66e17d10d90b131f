"""Pydantic models for traces, sessions, existing scores and chat messages."""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field, field_validator

from annotator.models.base import LangfuseModel


class Score(LangfuseModel):
    """Score already attached to a trace upstream."""

    id: str | None = None
    name: str
    value: float | str | None = None
    string_value: str | None = None
    data_type: str | None = None
    comment: str | None = None
    config_id: str | None = None
    timestamp: str | None = None


class Trace(LangfuseModel):
    """Recorded interaction.

    ``input`` and ``output`` are deliberately untyped: upstream sends a
    plain string, a single message object, a list of messages or
    anything else the instrumented application logged.
    """

    id: str
    name: str | None = None
    input: Any = None
    output: Any = None
    timestamp: str | None = None
    scores: list[Score] = Field(default_factory=list)


class Session(LangfuseModel):
    """Ordered collection of traces."""

    id: str
    created_at: str | None = None
    traces: list[Trace] = Field(default_factory=list)


# Epoch values above this are taken as milliseconds.
_EPOCH_MS_THRESHOLD = 1e11


class ChatMessage(LangfuseModel):
    """One transcript line derived from a trace payload (never persisted).

    Numeric epoch timestamps (seconds or milliseconds) are converted to
    ISO-8601; any other non-string timestamp is dropped, the message kept.
    """

    role: str
    content: Any
    timestamp: str | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        if isinstance(value, str) or value is None:
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            seconds = value / 1000 if abs(value) > _EPOCH_MS_THRESHOLD else value
            try:
                return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
            except (OverflowError, OSError, ValueError):
                return None
        return None
