from fastapi import APIRouter, Depends, Response

from prdforge.api.deps import get_analytics_service, get_session_id
from prdforge.schemas.artifacts import AnalyticsSummaryResponse, ExportEventRequest
from prdforge.services.analytics_service import AnalyticsService

router = APIRouter()


@router.post("/export", status_code=204)
async def record_export(
    request: ExportEventRequest,
    session_id: str | None = Depends(get_session_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Record a client-side export (pdf, jira, ...)."""
    await service.record_export(request.artifact_id, request.export_type, session_id=session_id)
    return Response(status_code=204)


@router.get("/summary", response_model=AnalyticsSummaryResponse)
async def analytics_summary(service: AnalyticsService = Depends(get_analytics_service)):
    return AnalyticsSummaryResponse(**await service.summary())
