"""Queue Annotator FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from annotator.config import get_settings, warn_if_missing_credentials
from annotator.repositories.langfuse_client import LangfuseClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown.

    On startup:
    - Warn (but continue) when Langfuse credentials are missing.
    - Create the LangfuseClient used by the proxy and workflow routes.
    - Create the HTTP client shared by per-request score batchers.

    On shutdown:
    - Close both HTTP clients.
    """
    settings = get_settings()
    warn_if_missing_credentials(settings)

    langfuse = LangfuseClient(
        host=settings.langfuse_host,
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        timeout=settings.request_timeout,
        page_limit=settings.page_limit,
    )
    app.state.langfuse = langfuse

    ingestion_http = httpx.AsyncClient(timeout=settings.request_timeout)
    app.state.ingestion_http = ingestion_http

    logger.info("Proxying Langfuse API at %s", settings.langfuse_host)

    yield

    # Shutdown
    await ingestion_http.aclose()
    await langfuse.aclose()


app = FastAPI(
    title="Queue Annotator",
    description="Annotation UI backend for Langfuse annotation queues",
    version="0.1.0",
    lifespan=lifespan,
)

# Behind a reverse proxy (same origin): no CORS needed.
# In local dev: allow the frontend dev server origin.
settings = get_settings()
if not settings.behind_proxy:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Router includes
from annotator.routers import annotation, queues, score_configs, sessions, traces  # noqa: E402

app.include_router(queues.router)
app.include_router(sessions.router)
app.include_router(traces.router)
app.include_router(score_configs.router)
app.include_router(annotation.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}
