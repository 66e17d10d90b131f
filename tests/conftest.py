"""Shared pytest fixtures for Queue Annotator tests.

The Langfuse API is replaced by :class:`tests.fakes.FakeLangfuse`.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from annotator.config import Settings, get_settings
from annotator.repositories.langfuse_client import LangfuseClient
from annotator.repositories.score_ingestion import ScoreBatcher
from annotator.routers import annotation, queues, score_configs, sessions, traces
from annotator.services.queue_data import QueueDataService
from annotator.services.submission import SubmissionPipeline
from tests.fakes import LANGFUSE_HOST, FakeLangfuse


@pytest.fixture()
def upstream() -> FakeLangfuse:
    return FakeLangfuse()


@pytest.fixture()
async def http_client(upstream: FakeLangfuse) -> httpx.AsyncClient:
    """HTTP client whose requests are answered by the fake upstream."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture()
def langfuse(http_client: httpx.AsyncClient) -> LangfuseClient:
    return LangfuseClient(
        host=LANGFUSE_HOST,
        public_key="pk-lf-test",
        secret_key="sk-lf-test",
        http_client=http_client,
    )


@pytest.fixture()
def data(langfuse: LangfuseClient) -> QueueDataService:
    return QueueDataService(langfuse)


@pytest.fixture()
def batcher(http_client: httpx.AsyncClient) -> ScoreBatcher:
    return ScoreBatcher(host=LANGFUSE_HOST, public_key="pk-lf-test", http_client=http_client)


@pytest.fixture()
def pipeline(data: QueueDataService, batcher: ScoreBatcher) -> SubmissionPipeline:
    return SubmissionPipeline(data=data, batcher=batcher)


@pytest.fixture()
async def app_client(
    langfuse: LangfuseClient, http_client: httpx.AsyncClient
) -> httpx.AsyncClient:
    """Create a FastAPI test app wired to the fake upstream and yield an async client."""
    test_app = FastAPI()
    test_app.state.langfuse = langfuse
    test_app.state.ingestion_http = http_client
    test_app.dependency_overrides[get_settings] = lambda: Settings(
        langfuse_host=LANGFUSE_HOST,
        langfuse_public_key="pk-lf-test",
        langfuse_secret_key="sk-lf-test",
        _env_file=None,
    )

    test_app.include_router(queues.router)
    test_app.include_router(sessions.router)
    test_app.include_router(traces.router)
    test_app.include_router(score_configs.router)
    test_app.include_router(annotation.router)

    @test_app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=test_app),
        base_url="http://testserver",
    ) as client:
        yield client
