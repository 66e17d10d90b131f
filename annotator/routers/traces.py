"""Trace proxy router.

Endpoints:
- GET /api/traces/{trace_id}  -- trace with input/output and scores
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from annotator.dependencies import get_langfuse_client
from annotator.models.trace import Trace
from annotator.repositories.langfuse_client import LangfuseClient
from annotator.routers.queues import UPSTREAM_ERRORS, upstream_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/traces", tags=["traces"])


@router.get("/{trace_id}", response_model=Trace)
async def get_trace(
    trace_id: str,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> Trace | JSONResponse:
    try:
        return await client.get_trace(trace_id)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching trace %s", trace_id)
        return upstream_error("Failed to fetch trace")
