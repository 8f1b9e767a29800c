"""GenerationService: glue between the adapter, the artifact store and analytics."""

import time
from uuid import UUID

import structlog

from prdforge.core.exceptions import InputValidationError
from prdforge.db.models.artifact import Artifact
from prdforge.generation.adapter import GenerationAdapter
from prdforge.schemas.generation import GenerationInput
from prdforge.schemas.payloads import ArtifactKind, rewritable_sections
from prdforge.services.analytics_service import AnalyticsService
from prdforge.services.artifact_service import ArtifactService

logger = structlog.get_logger(__name__)


def render_section(value: object) -> str:
    """Render a payload section as plain text for the rewrite prompt."""
    if isinstance(value, list):
        return "\n".join(f"- {item}" for item in value)
    return "" if value is None else str(value)


class GenerationService:
    def __init__(
        self,
        adapter: GenerationAdapter,
        artifacts: ArtifactService,
        analytics: AnalyticsService,
    ):
        self.adapter = adapter
        self.artifacts = artifacts
        self.analytics = analytics

    async def generate(
        self,
        kind: ArtifactKind,
        request: GenerationInput,
        session_id: str | None = None,
    ) -> Artifact:
        """Generate, persist and record one artifact.

        Raises:
            UpstreamGenerationError: the adapter failed; nothing is persisted
        """
        raw_input = request.raw_input()

        started = time.perf_counter()
        generated = await self.adapter.generate(kind, request)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        artifact = await self.artifacts.create_artifact(
            kind=kind,
            raw_input=raw_input,
            title=generated.title,
            payload=generated.payload,
        )
        await self.analytics.record_generation(
            kind=kind.value,
            artifact_id=artifact.id,
            input_length=len(raw_input),
            generation_time_ms=elapsed_ms,
            session_id=session_id,
        )
        logger.info(
            "artifact_generated",
            artifact_id=str(artifact.id),
            kind=kind.value,
            generation_time_ms=elapsed_ms,
        )
        return artifact

    async def rewrite_artifact_section(
        self,
        artifact_id: UUID,
        section_name: str,
        instruction: str,
        expected_revision: int | None = None,
        model: str | None = None,
    ) -> Artifact:
        """Rewrite one payload section via the model and persist it with a version.

        Raises:
            NotFoundError: artifact does not exist
            InputValidationError: section is not rewritable for the artifact's kind
            UpstreamGenerationError: the model call failed
            ConflictError: ``expected_revision`` is stale
        """
        artifact = await self.artifacts.get_artifact(artifact_id)
        if section_name not in rewritable_sections(ArtifactKind(artifact.kind)):
            raise InputValidationError(f"Section '{section_name}' cannot be rewritten")

        current_content = render_section((artifact.payload or {}).get(section_name))
        rewritten = await self.adapter.rewrite_section(
            section_name,
            current_content,
            instruction,
            model=model,
        )
        return await self.artifacts.apply_rewrite(
            artifact_id,
            section_name,
            rewritten,
            expected_revision=expected_revision if expected_revision is not None else artifact.revision,
        )
