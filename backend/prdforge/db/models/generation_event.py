"""GenerationEvent model: insert-only usage telemetry."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Uuid

from prdforge.db.base import Base


class GenerationEvent(Base):
    __tablename__ = "generation_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(50), nullable=False, index=True)  # artifact_generated, artifact_exported

    # Weak reference: events outlive deleted artifacts
    artifact_id = Column(Uuid, nullable=True)
    kind = Column(String(50), nullable=True)

    input_length = Column(Integer, nullable=True)
    generation_time_ms = Column(Integer, nullable=True)
    export_type = Column(String(20), nullable=True)
    session_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
