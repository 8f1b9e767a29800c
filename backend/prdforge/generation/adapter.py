"""GenerationAdapter: prompt in, validated payload out.

Single round-trip per call. No retry, no streaming, no storage access.
Every failure (transport error, timeout, empty reply, unparseable JSON,
schema mismatch) surfaces as UpstreamGenerationError with the cause chained.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from prdforge.core.exceptions import SchemaValidationError, UpstreamGenerationError
from prdforge.generation.llm_client import LLMClient
from prdforge.generation.llm_helpers import parse_json_response
from prdforge.generation.prompts import build_prompts, build_rewrite_prompts
from prdforge.schemas.generation import GenerationInput
from prdforge.schemas.payloads import (
    KIND_LABELS,
    ArtifactKind,
    PayloadModel,
    PrdPayload,
    dump_payload,
    validate_payload,
)

logger = structlog.get_logger(__name__)

TITLE_INPUT_CHARS = 60

# "- item", "* item", "• item", "1. item", "2) item"
_BULLET_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")


@dataclass
class GeneratedArtifact:
    title: str
    payload: dict[str, Any] = field(default_factory=dict)


def derive_title(kind: ArtifactKind, raw_input: str) -> str:
    """Build ``"<Kind label>: <first 60 chars of input>"`` for tool kinds."""
    snippet = " ".join(raw_input.split())[:TITLE_INPUT_CHARS]
    return f"{KIND_LABELS[kind]}: {snippet}"


def split_rewritten_list(text: str) -> list[str]:
    """Split rewritten bullet text back into list items.

    Strips bullet markers and numbering; blank lines are dropped.
    """
    items = []
    for line in text.splitlines():
        item = _BULLET_PREFIX.sub("", line).strip()
        if item:
            items.append(item)
    return items


def _backfill_story_ids(payload: PayloadModel) -> None:
    stories = getattr(payload, "user_stories", None)
    if not stories:
        return
    for index, story in enumerate(stories):
        if not story.id.strip():
            story.id = f"us-{index + 1}"


class GenerationAdapter:
    """Builds prompts, calls the LLM client and validates the reply."""

    def __init__(self, client: LLMClient):
        self.client = client

    async def _complete_json(self, system: str, user: str, model: str | None) -> Any:
        content = await self.client.complete(system, user, model=model)
        if not content or not content.strip():
            raise ValueError("No response from model")
        return parse_json_response(content)

    async def generate(self, kind: ArtifactKind, request: GenerationInput) -> GeneratedArtifact:
        """Generate one artifact of ``kind`` from a validated request.

        Raises:
            UpstreamGenerationError: the model call or reply handling failed
        """
        label = KIND_LABELS[kind]
        system, user = build_prompts(kind, request.prompt_text())

        try:
            data = await self._complete_json(system, user, request.model)
            payload = validate_payload(kind, data)
        except SchemaValidationError as exc:
            logger.warning(
                "generation_schema_invalid",
                kind=kind.value,
                field_path=exc.field_path,
                expected=exc.expected,
            )
            raise UpstreamGenerationError(f"Failed to generate {label}") from exc
        except Exception as exc:
            logger.warning(
                "generation_failed",
                kind=kind.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise UpstreamGenerationError(f"Failed to generate {label}") from exc

        _backfill_story_ids(payload)

        if isinstance(payload, PrdPayload):
            title = payload.title
        else:
            title = derive_title(kind, request.raw_input())

        logger.info("generation_completed", kind=kind.value, title=title)
        return GeneratedArtifact(title=title, payload=dump_payload(payload))

    async def rewrite_section(
        self,
        section_name: str,
        current_content: str,
        instruction: str,
        *,
        model: str | None = None,
    ) -> str:
        """Rewrite one section of a document following ``instruction``.

        Returns:
            The rewritten text

        Raises:
            UpstreamGenerationError: the model call failed or the reply lacks
                a string ``rewrittenContent``
        """
        system, user = build_rewrite_prompts(section_name, current_content, instruction)
        try:
            data = await self._complete_json(system, user, model)
            if not isinstance(data, dict) or not isinstance(data.get("rewrittenContent"), str):
                raise SchemaValidationError(field_path="rewrittenContent", expected="string")
        except (SchemaValidationError, json.JSONDecodeError, ValueError) as exc:
            logger.warning("rewrite_invalid_response", section=section_name, error=str(exc))
            raise UpstreamGenerationError("Failed to rewrite section") from exc
        except Exception as exc:
            logger.warning(
                "rewrite_failed",
                section=section_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise UpstreamGenerationError("Failed to rewrite section") from exc

        return data["rewrittenContent"]
