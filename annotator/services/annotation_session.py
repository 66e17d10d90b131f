"""Annotation page view model.

:class:`AnnotationSession` owns everything the annotation page shows for
one queue: the item list, the queue's score configs, the transcript of
the current item and the score entry for it.  Position is derived from
the :class:`ItemLocation`; every transition rewrites the location and
re-derives, it never moves an index directly.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from annotator.models.annotation import AnnotationView
from annotator.models.queue import AnnotationQueue, ObjectType, QueueItem
from annotator.models.score import ScoreConfig, ScoreInput
from annotator.models.trace import ChatMessage, Score
from annotator.services.navigation import (
    ItemLocation,
    ViewState,
    neighbor_item_id,
    resolve_current_index,
)
from annotator.services.normalizer import sort_messages, trace_messages
from annotator.services.queue_data import QueueDataService
from annotator.services.score_entry import (
    ScoreEntryState,
    ScoreValidationError,
    score_input_for,
)
from annotator.services.submission import SubmissionError, SubmissionPipeline

logger = logging.getLogger(__name__)

SUBMIT_FAILED_ALERT = "Failed to submit scores. Please try again."


@dataclass
class ItemDetail:
    """Transcript and existing scores of one queue item."""

    item_id: str
    messages: list[ChatMessage] = field(default_factory=list)
    scores: list[Score] = field(default_factory=list)


class AnnotationSession:
    """Navigation, detail loading and scoring for one annotation queue.

    When ``fence_detail_fetches`` is set, a detail fetch that was
    superseded by a later navigation is discarded when it completes.
    Without it, whichever fetch finishes last wins.
    """

    def __init__(
        self,
        queue_id: str,
        data: QueueDataService,
        pipeline: SubmissionPipeline,
        location: ItemLocation | None = None,
        fence_detail_fetches: bool = True,
    ) -> None:
        self.queue_id = queue_id
        self.data = data
        self.pipeline = pipeline
        self.location = location or ItemLocation(queue_id)
        self.fence_detail_fetches = fence_detail_fetches

        self.state = ViewState.LOADING
        self.queue: AnnotationQueue | None = None
        self.items: list[QueueItem] = []
        self.score_configs: list[ScoreConfig] = []
        self.detail: ItemDetail | None = None
        self.score_entry = ScoreEntryState()
        self.is_submitting = False
        self.alert: str | None = None
        self.last_error: Exception | None = None
        self._detail_epoch = 0

    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #

    @property
    def current_index(self) -> int:
        return resolve_current_index(self.items, self.location.item_id)

    @property
    def current_item(self) -> QueueItem | None:
        if not self.items:
            return None
        return self.items[self.current_index]

    @property
    def has_prev(self) -> bool:
        return neighbor_item_id(self.items, self.location.item_id, -1) is not None

    @property
    def has_next(self) -> bool:
        return neighbor_item_id(self.items, self.location.item_id, 1) is not None

    @property
    def score_inputs(self) -> list[ScoreInput]:
        return [score_input_for(config) for config in self.score_configs]

    @property
    def can_submit(self) -> bool:
        item = self.current_item
        return (
            item is not None
            and not item.is_completed
            and not self.is_submitting
            and self.score_entry.is_complete(self.score_configs)
        )

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    async def load(self) -> None:
        """Fetch queue, items and score configs, then the current item."""
        await self.load_queue()
        await self.refresh()

    async def load_queue(self) -> None:
        """Fetch queue metadata, items and score configs.

        Pins the location to the first item when it carries none.
        """
        self.state = ViewState.LOADING
        queue, items = await self.data.get_queue_with_items(self.queue_id)
        self.queue = queue
        self.items = items

        if self.location.item_id is None and items:
            self.location.replace(items[0].id)

        if queue is not None and queue.score_config_ids:
            configs = await asyncio.gather(
                *(self.data.get_score_config(cid) for cid in queue.score_config_ids)
            )
            self.score_configs = [config for config in configs if config is not None]
            if len(self.score_configs) < len(configs):
                logger.warning(
                    "Queue %s: %d score config(s) could not be loaded",
                    self.queue_id,
                    len(configs) - len(self.score_configs),
                )

        self.state = ViewState.READY
        self._enter_item()

    def _enter_item(self) -> QueueItem | None:
        item = self.current_item
        if item is not None and self.score_entry.item_id != item.id:
            self.score_entry = ScoreEntryState(item.id)
        return item

    async def refresh(self) -> None:
        """Re-derive the current item after a location change and load it."""
        item = self._enter_item()
        if item is None:
            return
        await self._fetch_detail(item)

    async def _fetch_detail(self, item: QueueItem) -> None:
        self._detail_epoch += 1
        epoch = self._detail_epoch
        self.state = ViewState.ITEM_LOADING

        detail = await self._load_detail(item)

        if self.fence_detail_fetches and epoch != self._detail_epoch:
            logger.debug("Discarding stale detail for item %s", item.id)
            return
        if detail is not None:
            self.detail = detail
        self.state = ViewState.ITEM_READY

    async def _load_detail(self, item: QueueItem) -> ItemDetail | None:
        messages: list[ChatMessage] = []
        scores: list[Score] = []

        if item.object_type == ObjectType.SESSION:
            session = await self.data.get_session(item.object_id)
            if session is None:
                logger.warning("Session %s for item %s is unavailable", item.object_id, item.id)
                return None
            for trace in session.traces:
                messages.extend(trace_messages(trace))
                scores.extend(trace.scores)
        else:
            trace = await self.data.get_trace(item.object_id)
            if trace is None:
                logger.warning("Trace %s for item %s is unavailable", item.object_id, item.id)
                return None
            messages.extend(trace_messages(trace))
            scores.extend(trace.scores)

        return ItemDetail(item_id=item.id, messages=sort_messages(messages), scores=scores)

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    async def go_to(self, offset: int) -> bool:
        """Move *offset* items; out-of-bounds moves are no-ops."""
        target = neighbor_item_id(self.items, self.location.item_id, offset)
        if target is None:
            return False
        self.location.push(target)
        await self.refresh()
        return True

    async def next(self) -> bool:
        return await self.go_to(1)

    async def prev(self) -> bool:
        return await self.go_to(-1)

    async def back(self) -> bool:
        if not self.location.back():
            return False
        await self.refresh()
        return True

    async def forward(self) -> bool:
        if not self.location.forward():
            return False
        await self.refresh()
        return True

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    async def submit(self, advance: bool = True) -> bool:
        """Submit the current score entry and, with *advance*, move to the next item.

        Returns ``False`` without side effects while submission is not
        allowed.  On failure ``alert`` holds the message to show and the
        item keeps its status.
        """
        item = self.current_item
        if item is None:
            logger.error("No item found at current index")
            return False
        if not self.can_submit:
            return False

        self.is_submitting = True
        self.alert = None
        self.last_error = None
        try:
            completed = await self.pipeline.submit(
                self.queue_id, item, self.score_configs, self.score_entry
            )
        except ScoreValidationError as exc:
            logger.error("Error submitting scores: %s", exc)
            self.last_error = exc
            self.alert = str(exc)
            return False
        except SubmissionError as exc:
            logger.exception("Error submitting scores")
            self.last_error = exc
            self.alert = SUBMIT_FAILED_ALERT
            return False
        finally:
            self.is_submitting = False

        self.items = [completed if i.id == item.id else i for i in self.items]
        if advance:
            await self.next()
        return True

    # ------------------------------------------------------------------ #
    # Presentation
    # ------------------------------------------------------------------ #

    def snapshot(self) -> AnnotationView:
        """Return the current page state as a serializable view."""
        detail = self.detail
        return AnnotationView(
            queue_id=self.queue_id,
            queue=self.queue,
            state=self.state.value,
            current_index=self.current_index,
            total=len(self.items),
            item=self.current_item,
            messages=detail.messages if detail else [],
            scores=detail.scores if detail else [],
            score_inputs=self.score_inputs,
            has_prev=self.has_prev,
            has_next=self.has_next,
            prev_item_id=neighbor_item_id(self.items, self.location.item_id, -1),
            next_item_id=neighbor_item_id(self.items, self.location.item_id, 1),
        )
