"""Pydantic models for score configs, score inputs and score submissions.

- ScoreConfig: rubric definition fetched from upstream
- ScoreInput: how a config is presented for entry (buttons or free input)
- ScoreSubmission: one score write handed to the ingestion batcher
"""

from enum import Enum
from typing import Literal

from pydantic import Field, model_validator

from annotator.models.base import CamelModel, LangfuseModel


class ScoreDataType(str, Enum):
    NUMERIC = "NUMERIC"
    CATEGORICAL = "CATEGORICAL"
    BOOLEAN = "BOOLEAN"


class ScoreCategory(LangfuseModel):
    """Categorical option; ``value`` may be missing on older configs."""

    label: str
    value: float | None = None


class ScoreConfig(LangfuseModel):
    """Score rubric definition."""

    id: str
    name: str
    data_type: ScoreDataType
    description: str | None = None
    min_value: float | None = None
    max_value: float | None = None
    categories: list[ScoreCategory] | None = None
    is_archived: bool | None = None

    @property
    def has_bounds(self) -> bool:
        return self.min_value is not None and self.max_value is not None


class ScoreOption(CamelModel):
    """One selectable button."""

    label: str
    value: float


class ScoreInput(CamelModel):
    """Render policy for a single score config.

    ``buttons`` carries ``options``; ``bounded_input`` carries
    ``min_value``/``max_value``; ``free_input`` accepts any finite number;
    ``unsupported`` renders nothing and can never be completed.
    """

    config_id: str
    name: str
    description: str | None = None
    kind: Literal["buttons", "bounded_input", "free_input", "unsupported"]
    options: list[ScoreOption] = Field(default_factory=list)
    min_value: float | None = None
    max_value: float | None = None


class ScoreSubmission(LangfuseModel):
    """Single score write bound for the ingestion endpoint.

    Exactly one of ``trace_id`` or ``session_id`` is set.
    """

    config_id: str | None = None
    name: str
    value: float
    string_value: str | None = None
    comment: str | None = None
    data_type: ScoreDataType | None = None
    trace_id: str | None = None
    session_id: str | None = None
    observation_id: str | None = None
    queue_id: str | None = None

    @model_validator(mode="after")
    def _check_subject(self) -> "ScoreSubmission":
        if (self.trace_id is None) == (self.session_id is None):
            raise ValueError("exactly one of traceId or sessionId must be set")
        return self
