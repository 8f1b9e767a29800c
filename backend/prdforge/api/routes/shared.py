from fastapi import APIRouter, Depends

from prdforge.api.deps import get_artifact_service
from prdforge.schemas.artifacts import ArtifactResponse
from prdforge.services.artifact_service import ArtifactService

router = APIRouter()


@router.get("/shared/{share_id}", response_model=ArtifactResponse)
async def get_shared_artifact(share_id: str, service: ArtifactService = Depends(get_artifact_service)):
    """Public read-only fetch by share id."""
    return ArtifactResponse.from_model(await service.get_by_share_id(share_id))
