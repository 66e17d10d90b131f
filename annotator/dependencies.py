"""FastAPI dependency injection for the Langfuse clients and workflow services."""

from fastapi import Depends, Request

from annotator.config import Settings, get_settings
from annotator.repositories.langfuse_client import LangfuseClient
from annotator.repositories.score_ingestion import ScoreBatcher
from annotator.services.queue_data import QueueDataService
from annotator.services.submission import SubmissionPipeline


def get_langfuse_client(request: Request) -> LangfuseClient:
    """Return the application-wide LangfuseClient stored on app.state."""
    return request.app.state.langfuse


def get_queue_data(
    client: LangfuseClient = Depends(get_langfuse_client),
) -> QueueDataService:
    """Wrap the shared client with the viewer's degradation rules."""
    return QueueDataService(client)


def get_score_batcher(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> ScoreBatcher:
    """Return a fresh ScoreBatcher so concurrent requests never share a batch."""
    return ScoreBatcher(
        host=settings.langfuse_host,
        public_key=settings.langfuse_public_key,
        http_client=request.app.state.ingestion_http,
    )


def get_submission_pipeline(
    data: QueueDataService = Depends(get_queue_data),
    batcher: ScoreBatcher = Depends(get_score_batcher),
) -> SubmissionPipeline:
    """Compose a SubmissionPipeline from its collaborators."""
    return SubmissionPipeline(data=data, batcher=batcher)
