"""Session proxy router.

Endpoints:
- GET /api/sessions/{session_id}  -- session with its traces
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from annotator.dependencies import get_langfuse_client
from annotator.models.trace import Session
from annotator.repositories.langfuse_client import LangfuseClient
from annotator.routers.queues import UPSTREAM_ERRORS, upstream_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("/{session_id}", response_model=Session)
async def get_session(
    session_id: str,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> Session | JSONResponse:
    """Return a session and its traces as stored upstream."""
    try:
        return await client.get_session(session_id)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching session %s", session_id)
        return upstream_error("Failed to fetch session")
