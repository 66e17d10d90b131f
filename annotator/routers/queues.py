"""Annotation queue proxy router.

Endpoints:
- GET /api/queues                                -- queues with pending/completed counts
- GET /api/queues/{queue_id}                     -- one queue with counts
- GET /api/queues/{queue_id}/items               -- queue items, optionally by status
- GET /api/queues/{queue_id}/items/{item_id}     -- one queue item
- PATCH /api/queues/{queue_id}/items/{item_id}   -- update a queue item's status

Upstream failures are logged and answered with HTTP 500 and a generic
``{"error": ...}`` body.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from annotator.dependencies import get_langfuse_client, get_queue_data
from annotator.models.queue import (
    AnnotationQueue,
    QueueItem,
    QueueItemStatus,
    QueueItemStatusUpdate,
    count_items,
)
from annotator.repositories.langfuse_client import LangfuseAPIError, LangfuseClient
from annotator.services.queue_data import QueueDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/queues", tags=["queues"])

UPSTREAM_ERRORS = (LangfuseAPIError, ValidationError)


def upstream_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.get("", response_model=list[AnnotationQueue])
async def list_queues(
    data: QueueDataService = Depends(get_queue_data),
) -> list[AnnotationQueue] | JSONResponse:
    """List queues; a queue whose items cannot be fetched reports 0/0."""
    try:
        return await data.list_queues()
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching queues")
        return upstream_error("Failed to fetch queues")


@router.get("/{queue_id}", response_model=AnnotationQueue)
async def get_queue(
    queue_id: str,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> AnnotationQueue | JSONResponse:
    """Return one queue with counts derived from its item list."""
    try:
        queue = await client.get_queue(queue_id)
        items = await client.list_queue_items(queue_id)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching queue %s", queue_id)
        return upstream_error("Failed to fetch queue")

    pending, completed = count_items(items)
    return queue.model_copy(
        update={"pending_item_count": pending, "completed_item_count": completed}
    )


@router.get("/{queue_id}/items", response_model=list[QueueItem])
async def list_queue_items(
    queue_id: str,
    status: QueueItemStatus | None = Query(None, description="Filter by item status"),
    client: LangfuseClient = Depends(get_langfuse_client),
) -> list[QueueItem] | JSONResponse:
    """List items of a queue."""
    try:
        return await client.list_queue_items(queue_id, status)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching items for queue %s", queue_id)
        return upstream_error("Failed to fetch queue items")


@router.get("/{queue_id}/items/{item_id}", response_model=QueueItem)
async def get_queue_item(
    queue_id: str,
    item_id: str,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> QueueItem | JSONResponse:
    """Return one queue item."""
    try:
        return await client.get_queue_item(queue_id, item_id)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching queue item %s", item_id)
        return upstream_error("Failed to fetch queue item")


@router.patch("/{queue_id}/items/{item_id}", response_model=QueueItem)
async def update_queue_item(
    queue_id: str,
    item_id: str,
    body: QueueItemStatusUpdate,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> QueueItem | JSONResponse:
    """Forward a status change to the upstream queue item."""
    try:
        return await client.update_queue_item(queue_id, item_id, body.status)
    except UPSTREAM_ERRORS:
        logger.exception("Error updating queue item %s", item_id)
        return upstream_error("Failed to update queue item")
