"""FastAPI dependencies.

Clients are built explicitly from settings and handed to the services. Tests
swap them via ``app.dependency_overrides`` (usually get_llm_client ->
FakeLLMClient and get_notion_client -> a client on an httpx.MockTransport).
"""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prdforge.core.config import Settings, get_settings
from prdforge.db.base import get_session_factory
from prdforge.exports.markdown_exporter import MarkdownExporter
from prdforge.exports.notion import NotionClient
from prdforge.generation.adapter import GenerationAdapter
from prdforge.generation.llm_client import AnthropicLLMClient, LLMClient
from prdforge.services.analytics_service import AnalyticsService
from prdforge.services.artifact_service import ArtifactService
from prdforge.services.generation_service import GenerationService
from prdforge.services.template_service import TemplateService


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


def get_llm_client(request: Request, settings: Settings = Depends(get_settings)) -> LLMClient:
    """Return the app-wide Anthropic client, creating it on first use."""
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        client = AnthropicLLMClient.from_settings(settings)
        request.app.state.llm_client = client
    return client


def get_notion_client(settings: Settings = Depends(get_settings)) -> NotionClient:
    """Raises ExportUnavailableError (503) when Notion is not configured."""
    return NotionClient.from_settings(settings)


def get_session_id(x_session_id: str | None = Header(default=None, alias="X-Session-ID")) -> str | None:
    return x_session_id


def get_artifact_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> ArtifactService:
    return ArtifactService(session_factory)


def get_template_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> TemplateService:
    return TemplateService(session_factory)


def get_analytics_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> AnalyticsService:
    return AnalyticsService(session_factory)


def get_generation_adapter(client: LLMClient = Depends(get_llm_client)) -> GenerationAdapter:
    return GenerationAdapter(client)


def get_generation_service(
    adapter: GenerationAdapter = Depends(get_generation_adapter),
    artifacts: ArtifactService = Depends(get_artifact_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> GenerationService:
    return GenerationService(adapter, artifacts, analytics)


def get_markdown_exporter() -> MarkdownExporter:
    return MarkdownExporter()
