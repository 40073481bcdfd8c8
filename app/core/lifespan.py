from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.integrations.github import build_http_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    if not settings.github_token:
        logger.warning("github_token_missing: unauthenticated GitHub quota is 60 requests/hour")

    client = build_http_client()
    app.state.github_http = client
    try:
        yield
    finally:
        app.state.github_http = None
        await client.aclose()
