"""Score config proxy router.

Endpoints:
- GET /api/score-configs              -- all score configs (first page)
- GET /api/score-configs/{config_id}  -- one score config
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from annotator.dependencies import get_langfuse_client
from annotator.models.score import ScoreConfig
from annotator.repositories.langfuse_client import LangfuseClient
from annotator.routers.queues import UPSTREAM_ERRORS, upstream_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/score-configs", tags=["score-configs"])


@router.get("", response_model=list[ScoreConfig])
async def list_score_configs(
    client: LangfuseClient = Depends(get_langfuse_client),
) -> list[ScoreConfig] | JSONResponse:
    """List score configs defined in the project."""
    try:
        return await client.list_score_configs()
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching score configs")
        return upstream_error("Failed to fetch score configs")


@router.get("/{config_id}", response_model=ScoreConfig)
async def get_score_config(
    config_id: str,
    client: LangfuseClient = Depends(get_langfuse_client),
) -> ScoreConfig | JSONResponse:
    """Return one score config."""
    try:
        return await client.get_score_config(config_id)
    except UPSTREAM_ERRORS:
        logger.exception("Error fetching score config %s", config_id)
        return upstream_error("Failed to fetch score config")
