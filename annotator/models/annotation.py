"""Pydantic models for the annotation workflow endpoints."""

from pydantic import Field

from annotator.models.base import CamelModel
from annotator.models.queue import AnnotationQueue, QueueItem, QueueItemStatus
from annotator.models.score import ScoreInput
from annotator.models.trace import ChatMessage, Score


class AnnotationView(CamelModel):
    """Snapshot of the annotation page for one queue position."""

    queue_id: str
    queue: AnnotationQueue | None = None
    state: str
    current_index: int
    total: int
    item: QueueItem | None = None
    messages: list[ChatMessage] = Field(default_factory=list)
    scores: list[Score] = Field(default_factory=list)
    score_inputs: list[ScoreInput] = Field(default_factory=list)
    has_prev: bool = False
    has_next: bool = False
    prev_item_id: str | None = None
    next_item_id: str | None = None


class SubmitScoresRequest(CamelModel):
    """Request body for POST /annotate/{queue_id}/items/{item_id}/scores."""

    scores: dict[str, float]
    comment: str = ""


class SubmitScoresResponse(CamelModel):
    """Outcome of a successful submission."""

    item_id: str
    status: QueueItemStatus
    completed_at: str | None = None
    next_item_id: str | None = None
