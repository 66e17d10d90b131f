"""Annotation workflow router.

Endpoints:
- GET /annotate/{queue_id}?itemId=...                 -- page state for one queue position
- POST /annotate/{queue_id}/items/{item_id}/scores    -- submit scores and complete the item

The position is carried only by ``itemId``; a request without it is
redirected to the first item of the queue.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from annotator.config import Settings, get_settings
from annotator.dependencies import get_queue_data, get_submission_pipeline
from annotator.models.annotation import (
    AnnotationView,
    SubmitScoresRequest,
    SubmitScoresResponse,
)
from annotator.services.annotation_session import SUBMIT_FAILED_ALERT, AnnotationSession
from annotator.services.navigation import ItemLocation, neighbor_item_id
from annotator.services.queue_data import QueueDataService
from annotator.services.score_entry import (
    ScoreValidationError,
    is_offered_value,
    score_input_for,
)
from annotator.services.submission import SubmissionPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/annotate", tags=["annotation"])


def _open_session(
    queue_id: str,
    item_id: str | None,
    data: QueueDataService,
    pipeline: SubmissionPipeline,
    settings: Settings,
) -> AnnotationSession:
    return AnnotationSession(
        queue_id,
        data,
        pipeline,
        location=ItemLocation(queue_id, item_id),
        fence_detail_fetches=settings.fence_detail_fetches,
    )


@router.get("/{queue_id}", response_model=AnnotationView)
async def get_annotation_view(
    queue_id: str,
    request: Request,
    item_id: str | None = Query(None, alias="itemId"),
    data: QueueDataService = Depends(get_queue_data),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
    settings: Settings = Depends(get_settings),
) -> AnnotationView | RedirectResponse:
    """Return transcript, existing scores and score inputs for the current item.

    Without ``itemId`` (and with a non-empty queue) this answers with a
    307 to the same URL pinned to the first item.
    """
    session = _open_session(queue_id, item_id, data, pipeline, settings)
    await session.load_queue()

    if session.location.item_id != item_id:
        url = request.url.include_query_params(itemId=session.location.item_id)
        return RedirectResponse(str(url), status_code=307)

    await session.refresh()
    return session.snapshot()


@router.post("/{queue_id}/items/{item_id}/scores", response_model=SubmitScoresResponse)
async def submit_scores(
    queue_id: str,
    item_id: str,
    body: SubmitScoresRequest,
    data: QueueDataService = Depends(get_queue_data),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
    settings: Settings = Depends(get_settings),
) -> SubmitScoresResponse:
    """Validate the scores, flush them upstream and mark the item COMPLETED."""
    session = _open_session(queue_id, item_id, data, pipeline, settings)
    await session.load_queue()

    item = session.current_item
    if item is None or item.id != item_id:
        raise HTTPException(status_code=404, detail="Queue item not found")
    if item.is_completed:
        raise HTTPException(status_code=409, detail="Queue item already completed")

    configs = {config.id: config for config in session.score_configs}
    unknown = sorted(set(body.scores) - configs.keys())
    if unknown:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown score config(s): {', '.join(unknown)}",
        )

    entry = session.score_entry
    entry.comment = body.comment
    for config_id, value in body.scores.items():
        config = configs[config_id]
        if score_input_for(config).kind == "buttons":
            if not is_offered_value(config, value):
                raise HTTPException(
                    status_code=422,
                    detail=f'Value {value} is not an option for "{config.name}"',
                )
            entry.select(config_id, value)
        elif not entry.enter(config, value):
            raise HTTPException(
                status_code=422,
                detail=f'Value {value} is not valid for "{config.name}"',
            )

    if not session.can_submit:
        missing = ", ".join(f'"{name}"' for name in entry.missing(session.score_configs))
        raise HTTPException(
            status_code=422,
            detail=f"Please select a value for all required criteria: {missing}",
        )

    if not await session.submit(advance=False):
        if isinstance(session.last_error, ScoreValidationError):
            raise HTTPException(status_code=422, detail=session.alert)
        raise HTTPException(status_code=502, detail=session.alert or SUBMIT_FAILED_ALERT)

    completed = session.current_item
    return SubmitScoresResponse(
        item_id=completed.id,
        status=completed.status,
        completed_at=completed.completed_at,
        next_item_id=neighbor_item_id(session.items, item_id, 1),
    )
