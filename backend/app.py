import logging

from fastapi import FastAPI

from aips.controller import ThreadController
from aips.llm import CompletionClient, EchoCompletionClient, HttpCompletionClient
from aips.storage import Storage
from backend.config import Settings, load_settings
from backend.routes import router

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> CompletionClient:
    if not settings.completion_api_key:
        logger.warning("COMPLETION_API_KEY is not set; completions will echo the query")
        return EchoCompletionClient()
    return HttpCompletionClient(
        base_url=settings.completion_url,
        api_key=settings.completion_api_key,
        model=settings.completion_model,
        timeout=settings.completion_timeout,
        max_retries=settings.completion_max_retries,
    )


def create_app(
    settings: Settings | None = None,
    client: CompletionClient | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    storage = Storage(settings.data_dir)
    client = client or build_client(settings)

    app = FastAPI(title="AIPS")
    app.state.storage = storage
    app.state.client = client
    app.state.controller = ThreadController(storage, client)
    # story_id -> SessionState; holds the pending flag between requests
    app.state.sessions = {}
    app.include_router(router, prefix="/api")
    return app
