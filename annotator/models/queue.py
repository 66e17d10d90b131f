"""Pydantic models for annotation queues and queue items.

- AnnotationQueue: queue metadata plus derived pending/completed counts
- QueueItem: one unit of annotation work referencing a trace or session
- QueueItemStatusUpdate: body for PATCH /api/queues/{id}/items/{item_id}
"""

from enum import Enum

from pydantic import BaseModel

from annotator.models.base import LangfuseModel


class ObjectType(str, Enum):
    """Kind of object a queue item points at."""

    SESSION = "SESSION"
    TRACE = "TRACE"


class QueueItemStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class AnnotationQueue(LangfuseModel):
    """Annotation queue as returned by the upstream API.

    ``pending_item_count`` and ``completed_item_count`` are never stored
    upstream; the proxy fills them from the queue's item list.
    """

    id: str
    name: str
    description: str | None = None
    score_config_ids: list[str] = []
    created_at: str | None = None
    updated_at: str | None = None
    pending_item_count: int | None = None
    completed_item_count: int | None = None


class QueueItem(LangfuseModel):
    """Single queue item record."""

    id: str
    queue_id: str | None = None
    object_id: str
    object_type: ObjectType
    status: QueueItemStatus = QueueItemStatus.PENDING
    created_at: str | None = None
    completed_at: str | None = None
    updated_at: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == QueueItemStatus.COMPLETED


class QueueItemStatusUpdate(BaseModel):
    """Request body for PATCH /api/queues/{queue_id}/items/{item_id}."""

    status: QueueItemStatus


def count_items(items: list[QueueItem]) -> tuple[int, int]:
    """Return ``(pending, completed)`` counts for *items*."""
    pending = sum(1 for item in items if item.status == QueueItemStatus.PENDING)
    completed = sum(1 for item in items if item.status == QueueItemStatus.COMPLETED)
    return pending, completed
