"""Artifact API routes: retrieval, editing, versions, sharing and AI rewrite."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response

from prdforge.api.deps import get_artifact_service, get_generation_service
from prdforge.schemas.artifacts import (
    ArtifactResponse,
    RewriteArtifactSectionRequest,
    ShareResponse,
    UpdateArtifactRequest,
    VersionResponse,
)
from prdforge.schemas.payloads import ArtifactKind
from prdforge.services.artifact_service import ArtifactService
from prdforge.services.generation_service import GenerationService

router = APIRouter()


@router.get("", response_model=list[ArtifactResponse])
async def list_artifacts(
    kind: ArtifactKind | None = None,
    service: ArtifactService = Depends(get_artifact_service),
):
    artifacts = await service.list_artifacts(kind)
    return [ArtifactResponse.from_model(artifact) for artifact in artifacts]


@router.get("/{artifact_id}", response_model=ArtifactResponse)
async def get_artifact(artifact_id: UUID, service: ArtifactService = Depends(get_artifact_service)):
    return ArtifactResponse.from_model(await service.get_artifact(artifact_id))


@router.patch("/{artifact_id}", response_model=ArtifactResponse)
async def update_artifact(
    artifact_id: UUID,
    request: UpdateArtifactRequest,
    service: ArtifactService = Depends(get_artifact_service),
):
    """Edit title, status and/or payload. The previous state is kept as a version.

    Returns 409 if expectedRevision is stale.
    """
    artifact = await service.update_artifact(
        artifact_id,
        request.changes(),
        expected_revision=request.expected_revision,
    )
    return ArtifactResponse.from_model(artifact)


@router.delete("/{artifact_id}", status_code=204)
async def delete_artifact(artifact_id: UUID, service: ArtifactService = Depends(get_artifact_service)):
    await service.delete_artifact(artifact_id)
    return Response(status_code=204)


@router.post("/{artifact_id}/share", response_model=ShareResponse)
async def share_artifact(artifact_id: UUID, service: ArtifactService = Depends(get_artifact_service)):
    return ShareResponse(share_id=await service.issue_share_id(artifact_id))


@router.get("/{artifact_id}/versions", response_model=list[VersionResponse])
async def list_versions(artifact_id: UUID, service: ArtifactService = Depends(get_artifact_service)):
    versions = await service.list_versions(artifact_id)
    return [VersionResponse.from_model(version) for version in versions]


@router.post("/{artifact_id}/versions/{version_id}/restore", response_model=ArtifactResponse)
async def restore_version(
    artifact_id: UUID,
    version_id: UUID,
    service: ArtifactService = Depends(get_artifact_service),
):
    return ArtifactResponse.from_model(await service.restore_version(artifact_id, version_id))


@router.post("/{artifact_id}/rewrite", response_model=ArtifactResponse)
async def rewrite_artifact_section(
    artifact_id: UUID,
    request: RewriteArtifactSectionRequest,
    service: GenerationService = Depends(get_generation_service),
):
    """Rewrite one payload section with the model and store it as a new revision."""
    artifact = await service.rewrite_artifact_section(
        artifact_id,
        request.section_name,
        request.instruction,
        expected_revision=request.expected_revision,
        model=request.model,
    )
    return ArtifactResponse.from_model(artifact)
