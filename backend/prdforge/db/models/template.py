"""Template model: saved reusable product ideas."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from prdforge.db.base import Base


class Template(Base):
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    idea = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, default="custom")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
