"""Generation API routes: create artifacts from raw text, rewrite one section."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from prdforge.api.deps import get_generation_adapter, get_generation_service, get_session_id
from prdforge.core.config import Settings, get_settings
from prdforge.core.exceptions import NotFoundError
from prdforge.generation.adapter import GenerationAdapter
from prdforge.schemas.artifacts import ArtifactResponse, ModelOption
from prdforge.schemas.generation import RewriteSectionRequest, RewriteSectionResponse, parse_generation_input
from prdforge.schemas.payloads import ArtifactKind
from prdforge.services.generation_service import GenerationService

router = APIRouter()


@router.get("/models", response_model=list[ModelOption])
async def list_models(settings: Settings = Depends(get_settings)):
    """Selectable model ids; the configured default is flagged."""
    models = list(dict.fromkeys([settings.generation_model, *settings.available_models]))
    return [ModelOption(id=model_id, default=model_id == settings.generation_model) for model_id in models]


@router.post("/generate/{kind}", response_model=ArtifactResponse, status_code=201)
async def generate_artifact(
    kind: str,
    body: Any = Body(default=None),
    session_id: str | None = Depends(get_session_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Generate and store one artifact of ``kind``.

    Input is validated before the model is called; rejected bodies cost nothing.
    """
    try:
        artifact_kind = ArtifactKind(kind)
    except ValueError as exc:
        raise NotFoundError("Artifact kind", kind) from exc

    request = parse_generation_input(artifact_kind, body)
    artifact = await service.generate(artifact_kind, request, session_id=session_id)
    return ArtifactResponse.from_model(artifact)


@router.post("/rewrite-section", response_model=RewriteSectionResponse)
async def rewrite_section(
    request: RewriteSectionRequest,
    adapter: GenerationAdapter = Depends(get_generation_adapter),
):
    """Rewrite free-standing section text. Nothing is persisted."""
    rewritten = await adapter.rewrite_section(
        request.section_name,
        request.current_content,
        request.instruction,
        model=request.model,
    )
    return RewriteSectionResponse(rewritten_content=rewritten)
