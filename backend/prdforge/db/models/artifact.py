"""Artifact model: JSON payload storage for generated product documents."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from prdforge.db.base import Base, JSONType


class Artifact(Base):
    """A generated document (PRD or tool result).

    ``payload`` always holds the validated, camelCase shape for ``kind``.
    ``revision`` increases on every mutation and backs optimistic concurrency.
    """

    __tablename__ = "artifacts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    kind = Column(String(50), nullable=False, index=True)  # ArtifactKind value
    raw_input = Column(Text, nullable=False)

    # Mutable fields (captured by version snapshots)
    title = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default="draft")
    payload = Column(JSONType, nullable=False, default=dict)

    share_id = Column(String(32), nullable=True, unique=True, index=True)
    revision = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
