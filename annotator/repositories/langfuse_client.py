"""Async HTTP client for the Langfuse public API.

Every request carries an HTTP Basic header built from the public/secret
key pair.  Non-2xx responses and transport failures are raised as
:class:`LangfuseAPIError`; callers decide whether to degrade or propagate.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from annotator.models.base import PaginatedResponse
from annotator.models.queue import AnnotationQueue, QueueItem, QueueItemStatus
from annotator.models.score import ScoreConfig
from annotator.models.trace import Session, Trace

logger = logging.getLogger(__name__)


class LangfuseAPIError(Exception):
    """Upstream request failed (non-2xx status or transport error)."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def langfuse_auth(public_key: str | None, secret_key: str | None) -> httpx.BasicAuth:
    """Return HTTP Basic auth for the public/secret key pair.

    Missing keys are encoded as empty strings so that requests still go
    out and fail upstream rather than locally.
    """
    return httpx.BasicAuth(public_key or "", secret_key or "")


class LangfuseClient:
    """Thin wrapper over :class:`httpx.AsyncClient` for Langfuse endpoints.

    The underlying client is owned by this object unless one is passed
    in; :meth:`aclose` closes an owned client only.
    """

    def __init__(
        self,
        host: str,
        public_key: str | None,
        secret_key: str | None,
        timeout: float = 30.0,
        page_limit: int = 100,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.page_limit = page_limit
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._auth = langfuse_auth(public_key, secret_key)
        self._headers = {"Content-Type": "application/json"}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Low-level helpers
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        url = f"{self.host}{endpoint}"
        if params:
            params = {k: str(v) for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=self._headers,
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            raise LangfuseAPIError(f"Langfuse API request failed: {exc}") from exc

        if response.is_error:
            raise LangfuseAPIError(
                f"Langfuse API error: {response.status_code} "
                f"{response.reason_phrase} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise LangfuseAPIError(
                f"Langfuse API returned invalid JSON for {endpoint}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, body: Any) -> Any:
        return await self.request("POST", endpoint, json=body)

    async def patch(self, endpoint: str, body: Any) -> Any:
        return await self.request("PATCH", endpoint, json=body)

    # ------------------------------------------------------------------ #
    # Annotation queues
    # ------------------------------------------------------------------ #

    async def list_queues(self) -> list[AnnotationQueue]:
        payload = await self.get(
            "/api/public/annotation-queues", {"page": 1, "limit": self.page_limit}
        )
        return PaginatedResponse[AnnotationQueue].model_validate(payload).data

    async def get_queue(self, queue_id: str) -> AnnotationQueue:
        payload = await self.get(f"/api/public/annotation-queues/{queue_id}")
        return AnnotationQueue.model_validate(payload)

    async def list_queue_items(
        self, queue_id: str, status: QueueItemStatus | None = None
    ) -> list[QueueItem]:
        params: dict[str, Any] = {"page": 1, "limit": self.page_limit}
        if status is not None:
            params["status"] = status.value
        payload = await self.get(
            f"/api/public/annotation-queues/{queue_id}/items", params
        )
        return PaginatedResponse[QueueItem].model_validate(payload).data

    async def get_queue_item(self, queue_id: str, item_id: str) -> QueueItem:
        payload = await self.get(
            f"/api/public/annotation-queues/{queue_id}/items/{item_id}"
        )
        return QueueItem.model_validate(payload)

    async def update_queue_item(
        self, queue_id: str, item_id: str, status: QueueItemStatus
    ) -> QueueItem:
        payload = await self.patch(
            f"/api/public/annotation-queues/{queue_id}/items/{item_id}",
            {"status": status.value},
        )
        return QueueItem.model_validate(payload)

    # ------------------------------------------------------------------ #
    # Sessions, traces, score configs
    # ------------------------------------------------------------------ #

    async def get_session(self, session_id: str) -> Session:
        payload = await self.get(f"/api/public/sessions/{session_id}")
        return Session.model_validate(payload)

    async def get_trace(self, trace_id: str) -> Trace:
        payload = await self.get(f"/api/public/traces/{trace_id}")
        return Trace.model_validate(payload)

    async def list_score_configs(self) -> list[ScoreConfig]:
        payload = await self.get(
            "/api/public/score-configs", {"page": 1, "limit": self.page_limit}
        )
        return PaginatedResponse[ScoreConfig].model_validate(payload).data

    async def get_score_config(self, config_id: str) -> ScoreConfig:
        payload = await self.get(f"/api/public/score-configs/{config_id}")
        return ScoreConfig.model_validate(payload)
