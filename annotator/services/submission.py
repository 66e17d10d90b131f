"""Score submission pipeline.

1. Build one :class:`ScoreSubmission` per config (categorical labels are
   resolved here; a bad selection aborts before any I/O).
2. Attach the item's object id as trace or session reference.
3. Enqueue everything and flush it as a single batch request.
4. Mark the queue item COMPLETED upstream.

The caller advances to the next item only when :meth:`SubmissionPipeline.submit`
returns.  Any failure leaves the item's status untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from annotator.models.queue import ObjectType, QueueItem, QueueItemStatus
from annotator.models.score import ScoreConfig, ScoreDataType, ScoreSubmission
from annotator.repositories.langfuse_client import LangfuseAPIError
from annotator.repositories.score_ingestion import ScoreBatcher
from annotator.services.queue_data import QueueDataService
from annotator.services.score_entry import (
    ScoreEntryState,
    ScoreValidationError,
    is_offered_value,
    resolve_category_label,
)

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Flush or status update was rejected upstream."""


def subject_reference(item: QueueItem) -> dict[str, str]:
    """Return the single subject field a score for *item* carries."""
    if item.object_type == ObjectType.TRACE:
        return {"trace_id": item.object_id}
    return {"session_id": item.object_id}


def build_submissions(
    item: QueueItem,
    configs: list[ScoreConfig],
    entry: ScoreEntryState,
    queue_id: str | None = None,
) -> list[ScoreSubmission]:
    """Turn the selected values for *item* into score writes.

    Raises:
        ScoreValidationError: a config has no selected value, a button
            value was never offered, or a categorical value matches no
            category.
    """
    missing = entry.missing(configs)
    if missing:
        raise ScoreValidationError(
            "Missing values for: " + ", ".join(f'"{name}"' for name in missing)
        )

    subject = subject_reference(item)
    submissions = []
    for config in configs:
        value = entry.values[config.id]
        if not is_offered_value(config, value):
            raise ScoreValidationError(f'Invalid value for "{config.name}"')
        string_value = None
        if config.data_type == ScoreDataType.CATEGORICAL:
            string_value = resolve_category_label(config, value)
        submissions.append(
            ScoreSubmission(
                config_id=config.id,
                name=config.name,
                value=value,
                string_value=string_value,
                comment=entry.comment or None,
                data_type=config.data_type,
                queue_id=queue_id,
                **subject,
            )
        )
    return submissions


class SubmissionPipeline:
    """Runs validate -> enqueue -> flush -> status update for one item."""

    def __init__(self, data: QueueDataService, batcher: ScoreBatcher) -> None:
        self.data = data
        self.batcher = batcher

    async def submit(
        self,
        queue_id: str,
        item: QueueItem,
        configs: list[ScoreConfig],
        entry: ScoreEntryState,
    ) -> QueueItem:
        """Submit *entry* for *item* and return the completed item.

        Raises:
            ScoreValidationError: before any network call.
            SubmissionError: the flush or the status update failed.
        """
        submissions = build_submissions(item, configs, entry, queue_id=queue_id)

        for submission in submissions:
            self.batcher.enqueue(submission)

        try:
            await self.batcher.flush()
        except LangfuseAPIError as exc:
            logger.error("Error flushing scores for item %s: %s", item.id, exc)
            raise SubmissionError("Failed to submit scores") from exc

        try:
            await self.data.update_queue_item_status(
                queue_id, item.id, QueueItemStatus.COMPLETED
            )
        except LangfuseAPIError as exc:
            logger.error("Error completing queue item %s: %s", item.id, exc)
            raise SubmissionError("Failed to update queue item status") from exc

        return item.model_copy(
            update={
                "status": QueueItemStatus.COMPLETED,
                "completed_at": datetime.now(timezone.utc).isoformat(),
            }
        )
