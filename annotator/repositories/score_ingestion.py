"""Score batcher for the Langfuse ingestion endpoint.

Scores are queued locally with :meth:`ScoreBatcher.enqueue` and sent in a
single ``POST /api/public/ingestion`` by :meth:`ScoreBatcher.flush`.  Only
the public key is used, mirroring the browser-side scoring SDK.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import httpx

from annotator.models.score import ScoreSubmission
from annotator.repositories.langfuse_client import LangfuseAPIError, langfuse_auth

logger = logging.getLogger(__name__)

INGESTION_ENDPOINT = "/api/public/ingestion"


class ScoreIngestionError(LangfuseAPIError):
    """Batch flush was rejected in whole or in part."""


class ScoreBatcher:
    """Collects score writes and flushes them as one batch request."""

    def __init__(
        self,
        host: str,
        public_key: str | None,
        http_client: httpx.AsyncClient,
    ) -> None:
        self.host = host.rstrip("/")
        self._client = http_client
        self._auth = langfuse_auth(public_key, None)
        self._headers = {"Content-Type": "application/json"}
        self._pending: list[ScoreSubmission] = []

    @property
    def pending(self) -> list[ScoreSubmission]:
        return list(self._pending)

    def enqueue(self, score: ScoreSubmission) -> None:
        """Queue *score* for the next flush (no network call)."""
        self._pending.append(score)

    def clear(self) -> None:
        self._pending.clear()

    def build_batch(self, scores: list[ScoreSubmission]) -> dict:
        """Wrap *scores* in ``score-create`` ingestion events."""
        now = datetime.now(timezone.utc).isoformat()
        events = []
        for score in scores:
            body = score.model_dump(by_alias=True, exclude_none=True, mode="json")
            body["id"] = str(uuid.uuid4())
            events.append(
                {
                    "id": str(uuid.uuid4()),
                    "type": "score-create",
                    "timestamp": now,
                    "body": body,
                }
            )
        return {"batch": events}

    async def flush(self) -> int:
        """Send every queued score in one request and return how many were sent.

        The queue is emptied whether or not the request succeeds; a failed
        flush raises :class:`ScoreIngestionError` and the caller re-submits.
        """
        scores, self._pending = self._pending, []
        if not scores:
            return 0

        try:
            response = await self._client.post(
                f"{self.host}{INGESTION_ENDPOINT}",
                json=self.build_batch(scores),
                headers=self._headers,
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            raise ScoreIngestionError(f"Score flush failed: {exc}") from exc

        if response.is_error:
            raise ScoreIngestionError(
                f"Score flush rejected: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        # Ingestion answers 207 with per-event results.
        try:
            result = response.json()
        except ValueError:
            result = {}
        errors = result.get("errors") if isinstance(result, dict) else None
        if errors:
            logger.error("Score ingestion reported %d error(s): %s", len(errors), errors)
            raise ScoreIngestionError(
                f"Score flush rejected {len(errors)} of {len(scores)} score(s)",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Flushed %d score(s) to Langfuse", len(scores))
        return len(scores)
