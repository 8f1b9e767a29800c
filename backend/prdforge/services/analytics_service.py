"""AnalyticsService: insert-only usage events and aggregate counters.

Recording never raises. A failed insert is logged as a warning and dropped,
so telemetry can never fail a generation or export request.
"""

from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prdforge.db.models.artifact import Artifact
from prdforge.db.models.generation_event import GenerationEvent

logger = structlog.get_logger(__name__)

EVENT_GENERATED = "artifact_generated"
EVENT_EXPORTED = "artifact_exported"


class AnalyticsService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _record(self, event: GenerationEvent) -> None:
        try:
            async with self.session_factory() as session:
                session.add(event)
                await session.commit()
        except Exception as exc:
            logger.warning(
                "analytics_record_failed",
                event_type=event.event_type,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    async def record_generation(
        self,
        kind: str,
        artifact_id: UUID | None,
        input_length: int,
        generation_time_ms: int,
        session_id: str | None = None,
    ) -> None:
        await self._record(
            GenerationEvent(
                event_type=EVENT_GENERATED,
                artifact_id=artifact_id,
                kind=kind,
                input_length=input_length,
                generation_time_ms=generation_time_ms,
                session_id=session_id,
            )
        )

    async def record_export(
        self,
        artifact_id: UUID | None,
        export_type: str,
        session_id: str | None = None,
    ) -> None:
        await self._record(
            GenerationEvent(
                event_type=EVENT_EXPORTED,
                artifact_id=artifact_id,
                export_type=export_type,
                session_id=session_id,
            )
        )

    async def summary(self) -> dict:
        """Aggregate counters across all stored events and artifacts.

        Returns:
            dict with total_artifacts, total_generations, avg_generation_time_ms
            and generations_by_kind
        """
        async with self.session_factory() as session:
            total_artifacts = (await session.execute(select(func.count(Artifact.id)))).scalar_one()

            generated = GenerationEvent.event_type == EVENT_GENERATED
            total_generations, avg_time = (
                await session.execute(
                    select(func.count(GenerationEvent.id), func.avg(GenerationEvent.generation_time_ms)).where(
                        generated
                    )
                )
            ).one()

            rows = await session.execute(
                select(GenerationEvent.kind, func.count(GenerationEvent.id))
                .where(generated, GenerationEvent.kind.is_not(None))
                .group_by(GenerationEvent.kind)
            )
            by_kind = {kind: count for kind, count in rows.all()}

        return {
            "total_artifacts": total_artifacts,
            "total_generations": total_generations,
            "avg_generation_time_ms": int(round(avg_time)) if avg_time is not None else 0,
            "generations_by_kind": by_kind,
        }
