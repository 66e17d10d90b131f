"""Read-mostly data access used by the annotation workflow.

Wraps :class:`LangfuseClient` with the degradation rules of the viewer:
lookups that fail are logged and come back as ``None`` or ``[]`` so the
page keeps rendering.  Listing queues and updating an item's status are
required operations and propagate their errors.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from annotator.models.queue import AnnotationQueue, QueueItem, QueueItemStatus, count_items
from annotator.models.score import ScoreConfig
from annotator.models.trace import Session, Trace
from annotator.repositories.langfuse_client import LangfuseAPIError, LangfuseClient

logger = logging.getLogger(__name__)

_READ_ERRORS = (LangfuseAPIError, ValidationError)


def _counted(queue: AnnotationQueue, items: list[QueueItem]) -> AnnotationQueue:
    pending, completed = count_items(items)
    return queue.model_copy(
        update={"pending_item_count": pending, "completed_item_count": completed}
    )


class QueueDataService:
    """Annotation-facing view of the upstream API."""

    def __init__(self, client: LangfuseClient) -> None:
        self.client = client

    async def with_item_counts(self, queue: AnnotationQueue) -> AnnotationQueue:
        """Return *queue* with pending/completed counts filled in.

        A failing item fetch degrades to zero counts.
        """
        try:
            items = await self.client.list_queue_items(queue.id)
        except _READ_ERRORS:
            logger.exception("Error fetching items for queue %s", queue.id)
            items = []
        return _counted(queue, items)

    async def list_queues(self) -> list[AnnotationQueue]:
        queues = await self.client.list_queues()
        return list(await asyncio.gather(*(self.with_item_counts(q) for q in queues)))

    async def _fetch_queue(self, queue_id: str) -> AnnotationQueue | None:
        try:
            return await self.client.get_queue(queue_id)
        except _READ_ERRORS:
            logger.exception("Error fetching queue %s", queue_id)
            return None

    async def get_queue_with_items(
        self, queue_id: str
    ) -> tuple[AnnotationQueue | None, list[QueueItem]]:
        """Fetch a queue and its items, deriving the counts from that one list."""
        queue, items = await asyncio.gather(
            self._fetch_queue(queue_id), self.get_queue_items(queue_id)
        )
        if queue is None:
            return None, items
        return _counted(queue, items), items

    async def get_queue_items(
        self, queue_id: str, status: QueueItemStatus | None = None
    ) -> list[QueueItem]:
        try:
            return await self.client.list_queue_items(queue_id, status)
        except _READ_ERRORS:
            logger.exception("Error fetching queue items for %s", queue_id)
            return []

    async def get_queue_item(self, queue_id: str, item_id: str) -> QueueItem | None:
        try:
            return await self.client.get_queue_item(queue_id, item_id)
        except _READ_ERRORS:
            logger.exception("Error fetching queue item %s", item_id)
            return None

    async def get_session(self, session_id: str) -> Session | None:
        try:
            return await self.client.get_session(session_id)
        except _READ_ERRORS:
            logger.exception("Error fetching session %s", session_id)
            return None

    async def get_trace(self, trace_id: str) -> Trace | None:
        try:
            return await self.client.get_trace(trace_id)
        except _READ_ERRORS:
            logger.exception("Error fetching trace %s", trace_id)
            return None

    async def get_score_config(self, config_id: str) -> ScoreConfig | None:
        try:
            return await self.client.get_score_config(config_id)
        except _READ_ERRORS:
            logger.exception("Error fetching score config %s", config_id)
            return None

    async def update_queue_item_status(
        self, queue_id: str, item_id: str, status: QueueItemStatus
    ) -> QueueItem:
        """Set an item's status upstream; errors propagate."""
        return await self.client.update_queue_item(queue_id, item_id, status)
