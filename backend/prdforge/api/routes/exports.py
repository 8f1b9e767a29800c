"""Export API routes: Markdown download and Notion page export."""

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from prdforge.api.deps import (
    get_analytics_service,
    get_artifact_service,
    get_markdown_exporter,
    get_notion_client,
    get_session_id,
)
from prdforge.exports.markdown_exporter import MarkdownExporter
from prdforge.exports.notion import NotionClient, export_artifact
from prdforge.schemas.artifacts import NotionExportRequest, NotionExportResponse
from prdforge.services.analytics_service import AnalyticsService
from prdforge.services.artifact_service import ArtifactService

router = APIRouter()


@router.get("/artifacts/{artifact_id}/export/markdown", response_class=PlainTextResponse)
async def export_markdown(
    artifact_id: UUID,
    session_id: str | None = Depends(get_session_id),
    artifacts: ArtifactService = Depends(get_artifact_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
    exporter: MarkdownExporter = Depends(get_markdown_exporter),
):
    artifact = await artifacts.get_artifact(artifact_id)
    markdown = exporter.export(artifact)
    await analytics.record_export(artifact.id, "markdown", session_id=session_id)
    return PlainTextResponse(
        content=markdown,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{exporter.filename(artifact)}"'},
    )


@router.post("/artifacts/{artifact_id}/export/notion", response_model=NotionExportResponse)
async def export_notion(
    artifact_id: UUID,
    request: NotionExportRequest,
    session_id: str | None = Depends(get_session_id),
    artifacts: ArtifactService = Depends(get_artifact_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
    notion: NotionClient = Depends(get_notion_client),
):
    """Export an artifact as a child page of ``parentPageId``.

    Returns 503 when Notion is not configured, 502 when Notion rejects the call.
    """
    artifact = await artifacts.get_artifact(artifact_id)
    url = await export_artifact(notion, artifact, request.parent_page_id)
    await analytics.record_export(artifact.id, "notion", session_id=session_id)
    return NotionExportResponse(url=url)


@router.get("/notion/pages")
async def search_notion_pages(query: str = "", notion: NotionClient = Depends(get_notion_client)):
    """Pages the integration can see, for choosing an export parent."""
    return await notion.search_pages(query)
