"""Pydantic schemas for artifact, version, template and analytics endpoints."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import Field, field_validator

from prdforge.schemas.generation import ApiModel, require_max_length, require_min_length
from prdforge.schemas.payloads import TITLE_MAX_LENGTH, ArtifactKind

# Column widths in db/models
STATUS_MAX_LENGTH = 50
CATEGORY_MAX_LENGTH = 100

# ==================== RESPONSE SCHEMAS ====================


class ArtifactResponse(ApiModel):
    """Artifact response schema."""

    id: UUID
    kind: ArtifactKind
    raw_input: str
    title: str
    status: str
    payload: dict[str, Any]
    share_id: str | None = None
    revision: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, artifact) -> "ArtifactResponse":
        return cls(
            id=artifact.id,
            kind=artifact.kind,
            raw_input=artifact.raw_input,
            title=artifact.title,
            status=artifact.status,
            payload=artifact.payload or {},
            share_id=artifact.share_id,
            revision=artifact.revision,
            created_at=artifact.created_at,
            updated_at=artifact.updated_at,
        )


class VersionResponse(ApiModel):
    id: UUID
    artifact_id: UUID
    revision: int
    snapshot: dict[str, Any]
    change_summary: str
    created_at: datetime

    @classmethod
    def from_model(cls, version) -> "VersionResponse":
        return cls(
            id=version.id,
            artifact_id=version.artifact_id,
            revision=version.revision,
            snapshot=version.snapshot,
            change_summary=version.change_summary,
            created_at=version.created_at,
        )


class ShareResponse(ApiModel):
    share_id: str


class TemplateResponse(ApiModel):
    id: int
    name: str
    description: str | None = None
    idea: str
    category: str
    created_at: datetime

    @classmethod
    def from_model(cls, template) -> "TemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            description=template.description,
            idea=template.idea,
            category=template.category,
            created_at=template.created_at,
        )


class AnalyticsSummaryResponse(ApiModel):
    total_artifacts: int = 0
    total_generations: int = 0
    avg_generation_time_ms: int = 0
    generations_by_kind: dict[str, int] = Field(default_factory=dict)


class ModelOption(ApiModel):
    id: str
    default: bool = False


class NotionExportResponse(ApiModel):
    url: str


# ==================== REQUEST SCHEMAS ====================


class UpdateArtifactRequest(ApiModel):
    """Partial update. ``payload`` is shallow-merged into the current payload."""

    title: str | None = None
    status: str | None = None
    payload: dict[str, Any] | None = None
    expected_revision: int | None = None

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("Title must not be empty")
        return require_max_length(value, TITLE_MAX_LENGTH, "Title")

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str | None) -> str | None:
        return value if value is None else require_max_length(value, STATUS_MAX_LENGTH, "Status")

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"expected_revision"})


class RewriteArtifactSectionRequest(ApiModel):
    section_name: str
    instruction: str
    expected_revision: int | None = None
    model: str | None = None

    @field_validator("instruction")
    @classmethod
    def _check_instruction(cls, value: str) -> str:
        return require_min_length(value, 5, "Rewrite instruction")


class CreateTemplateRequest(ApiModel):
    name: str
    description: str | None = None
    idea: str
    category: str = "custom"

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) < 1:
            raise ValueError("Template name is required")
        return require_max_length(value, TITLE_MAX_LENGTH, "Template name")

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: str) -> str:
        return require_max_length(value, CATEGORY_MAX_LENGTH, "Category")

    @field_validator("idea")
    @classmethod
    def _check_idea(cls, value: str) -> str:
        return require_min_length(value, 20, "Template idea")


class ExportEventRequest(ApiModel):
    artifact_id: UUID | None = None
    export_type: Literal["markdown", "pdf", "notion", "jira"] = "markdown"


class NotionExportRequest(ApiModel):
    parent_page_id: str

    @field_validator("parent_page_id")
    @classmethod
    def _check_parent(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Parent page id is required")
        return value
