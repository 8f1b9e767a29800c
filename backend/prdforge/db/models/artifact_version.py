"""ArtifactVersion model: append-only snapshots of an artifact's mutable fields."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Uuid

from prdforge.db.base import Base, JSONType


class ArtifactVersion(Base):
    __tablename__ = "artifact_versions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    artifact_id = Column(
        Uuid,
        ForeignKey("artifacts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revision = Column(Integer, nullable=False)  # artifact revision that was snapshotted
    snapshot = Column(JSONType, nullable=False)  # {title, status, payload}
    change_summary = Column(String(500), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # NO updated_at -- versions are immutable
