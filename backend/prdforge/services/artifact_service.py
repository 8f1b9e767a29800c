"""ArtifactService: persistence, versioning and sharing of generated artifacts.

Follows the session-factory pattern used across services:
- Constructor dependency injection (session_factory)
- One session per operation, committed before returning
- Row-level lock (SELECT ... FOR UPDATE) on every read-modify-write
- JSON payload mutations marked with flag_modified

Every mutation other than delete writes exactly one ArtifactVersion holding the
pre-mutation state. All of them go through _snapshot_then_apply.
"""

import copy
import secrets
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from prdforge.core.exceptions import (
    ConflictError,
    InputValidationError,
    NotFoundError,
    SchemaValidationError,
    VersionMismatchError,
)
from prdforge.db.models.artifact import Artifact
from prdforge.db.models.artifact_version import ArtifactVersion
from prdforge.generation.adapter import split_rewritten_list
from prdforge.schemas.payloads import (
    PAYLOAD_MODELS,
    ArtifactKind,
    dump_payload,
    rewritable_sections,
    validate_payload,
)

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = ("title", "status", "payload")

# Mutator: applies changes to the locked row and returns the change summary
Mutator = Callable[[AsyncSession, Artifact], Awaitable[str]]


def snapshot_of(artifact: Artifact) -> dict[str, Any]:
    """Capture the mutable fields of an artifact as a version snapshot."""
    return {
        "title": artifact.title,
        "status": artifact.status,
        "payload": copy.deepcopy(artifact.payload),
    }


def _validated_payload(kind: str, data: dict[str, Any]) -> dict[str, Any]:
    try:
        return dump_payload(validate_payload(ArtifactKind(kind), data))
    except SchemaValidationError as exc:
        raise InputValidationError(f"Invalid payload: {exc.message}") from exc


class ArtifactService:
    """Stores artifacts and their snapshot history."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ==================== READS ====================

    async def get_artifact(self, artifact_id: UUID) -> Artifact:
        async with self.session_factory() as session:
            artifact = await session.get(Artifact, artifact_id)
            if artifact is None:
                raise NotFoundError("Artifact", artifact_id)
            return artifact

    async def list_artifacts(self, kind: ArtifactKind | None = None) -> list[Artifact]:
        """List artifacts newest first, optionally filtered by kind."""
        async with self.session_factory() as session:
            query = select(Artifact).order_by(Artifact.created_at.desc())
            if kind is not None:
                query = query.where(Artifact.kind == kind.value)
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_by_share_id(self, share_id: str) -> Artifact:
        async with self.session_factory() as session:
            result = await session.execute(select(Artifact).where(Artifact.share_id == share_id))
            artifact = result.scalar_one_or_none()
            if artifact is None:
                raise NotFoundError("Shared artifact", share_id)
            return artifact

    async def list_versions(self, artifact_id: UUID) -> list[ArtifactVersion]:
        """List versions newest first.

        Raises:
            NotFoundError: the artifact does not exist (including after delete)
        """
        async with self.session_factory() as session:
            if await session.get(Artifact, artifact_id) is None:
                raise NotFoundError("Artifact", artifact_id)
            result = await session.execute(
                select(ArtifactVersion)
                .where(ArtifactVersion.artifact_id == artifact_id)
                .order_by(ArtifactVersion.revision.desc())
            )
            return list(result.scalars().all())

    # ==================== WRITES ====================

    async def create_artifact(
        self,
        kind: ArtifactKind,
        raw_input: str,
        title: str,
        payload: dict[str, Any],
    ) -> Artifact:
        """Insert a new artifact at revision 1. No version is written."""
        async with self.session_factory() as session:
            artifact = Artifact(
                kind=kind.value,
                raw_input=raw_input,
                title=title,
                status="draft",
                payload=payload,
                revision=1,
            )
            session.add(artifact)
            await session.commit()
            await session.refresh(artifact)

        logger.info("artifact_created", artifact_id=str(artifact.id), kind=kind.value)
        return artifact

    async def update_artifact(
        self,
        artifact_id: UUID,
        changes: dict[str, Any],
        expected_revision: int | None = None,
    ) -> Artifact:
        """Apply a partial edit of title, status and/or payload.

        ``payload`` is shallow-merged into the current payload and re-validated.

        Raises:
            InputValidationError: no editable field given, or the merged payload is invalid
            NotFoundError: artifact does not exist
            ConflictError: ``expected_revision`` is stale
        """
        fields = [name for name in EDITABLE_FIELDS if changes.get(name) is not None]
        if not fields:
            raise InputValidationError("No editable fields provided")

        async def mutate(session: AsyncSession, artifact: Artifact) -> str:
            if "title" in fields:
                artifact.title = changes["title"]
            if "status" in fields:
                artifact.status = changes["status"]
            if "payload" in fields:
                level_fields = PAYLOAD_MODELS[ArtifactKind(artifact.kind)].artifact_level_fields
                misplaced = level_fields.intersection(changes["payload"])
                if misplaced:
                    raise InputValidationError(
                        f"Set {', '.join(sorted(misplaced))} at the top level, not inside payload"
                    )
                merged = {**(artifact.payload or {}), **changes["payload"]}
                artifact.payload = _validated_payload(artifact.kind, merged)
            return f"Edited: {', '.join(fields)}"

        return await self._snapshot_then_apply(artifact_id, mutate, expected_revision)

    async def apply_rewrite(
        self,
        artifact_id: UUID,
        section: str,
        rewritten_text: str,
        expected_revision: int | None = None,
    ) -> Artifact:
        """Replace one plain-text payload section with rewritten text.

        List sections are re-split into items with split_rewritten_list.

        Raises:
            InputValidationError: section is not a rewritable text or list field
        """

        async def mutate(session: AsyncSession, artifact: Artifact) -> str:
            sections = rewritable_sections(ArtifactKind(artifact.kind))
            shape = sections.get(section)
            if shape is None:
                raise InputValidationError(f"Section '{section}' cannot be rewritten")
            value: Any = split_rewritten_list(rewritten_text) if shape == "list" else rewritten_text
            artifact.payload = _validated_payload(artifact.kind, {**(artifact.payload or {}), section: value})
            return f"AI rewrite: {section}"

        return await self._snapshot_then_apply(artifact_id, mutate, expected_revision)

    async def restore_version(self, artifact_id: UUID, version_id: UUID) -> Artifact:
        """Overwrite the artifact's mutable fields with a stored snapshot.

        The current state is snapshotted first, so a restore can itself be undone.

        Raises:
            NotFoundError: artifact or version does not exist
            VersionMismatchError: version belongs to a different artifact
        """

        async def mutate(session: AsyncSession, artifact: Artifact) -> str:
            version = await session.get(ArtifactVersion, version_id)
            if version is None:
                raise NotFoundError("Version", version_id)
            if version.artifact_id != artifact.id:
                raise VersionMismatchError("Version does not belong to this artifact")
            snapshot = version.snapshot
            artifact.title = snapshot.get("title", artifact.title)
            artifact.status = snapshot.get("status", artifact.status)
            artifact.payload = copy.deepcopy(snapshot.get("payload", {}))
            return f"Before restore to revision {version.revision}"

        artifact = await self._snapshot_then_apply(artifact_id, mutate)
        logger.info("artifact_restored", artifact_id=str(artifact_id), version_id=str(version_id))
        return artifact

    async def delete_artifact(self, artifact_id: UUID) -> None:
        """Delete an artifact and its versions. Missing ids are a no-op."""
        async with self.session_factory() as session:
            await session.execute(delete(ArtifactVersion).where(ArtifactVersion.artifact_id == artifact_id))
            result = await session.execute(delete(Artifact).where(Artifact.id == artifact_id))
            await session.commit()

        if result.rowcount:
            logger.info("artifact_deleted", artifact_id=str(artifact_id))

    async def issue_share_id(self, artifact_id: UUID) -> str:
        """Return the artifact's share id, minting one on first call.

        Sharing is not an edit: no version is written and revision is unchanged.
        """
        async with self.session_factory() as session:
            artifact = await self._get_for_update(session, artifact_id)
            if artifact.share_id:
                return artifact.share_id

            share_id = secrets.token_hex(8)
            while (
                await session.execute(select(Artifact.id).where(Artifact.share_id == share_id))
            ).scalar_one_or_none() is not None:
                share_id = secrets.token_hex(8)

            artifact.share_id = share_id
            await session.commit()

        logger.info("artifact_shared", artifact_id=str(artifact_id))
        return share_id

    # ==================== INTERNALS ====================

    async def _get_for_update(self, session: AsyncSession, artifact_id: UUID) -> Artifact:
        result = await session.execute(
            select(Artifact).where(Artifact.id == artifact_id).with_for_update()  # Row-level lock
        )
        artifact = result.scalar_one_or_none()
        if artifact is None:
            raise NotFoundError("Artifact", artifact_id)
        return artifact

    async def _snapshot_then_apply(
        self,
        artifact_id: UUID,
        mutate: Mutator,
        expected_revision: int | None = None,
    ) -> Artifact:
        """Lock, check revision, snapshot, mutate, bump revision, commit.

        If ``mutate`` raises, the session closes without commit and nothing
        (neither the version nor the change) is persisted.
        """
        async with self.session_factory() as session:
            artifact = await self._get_for_update(session, artifact_id)

            if expected_revision is not None and expected_revision != artifact.revision:
                raise ConflictError(expected_revision=expected_revision, current_revision=artifact.revision)

            snapshot = snapshot_of(artifact)
            snapshot_revision = artifact.revision

            change_summary = await mutate(session, artifact)

            session.add(
                ArtifactVersion(
                    artifact_id=artifact.id,
                    revision=snapshot_revision,
                    snapshot=snapshot,
                    change_summary=change_summary,
                )
            )
            artifact.revision = snapshot_revision + 1
            flag_modified(artifact, "payload")

            await session.commit()
            await session.refresh(artifact)

        logger.info(
            "artifact_updated",
            artifact_id=str(artifact_id),
            revision=artifact.revision,
            change_summary=change_summary,
        )
        return artifact
