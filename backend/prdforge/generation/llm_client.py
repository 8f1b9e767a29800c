"""LLMClient protocol and the Anthropic-backed production implementation.

The client is constructed explicitly with its credentials and limits and
handed to the GenerationAdapter; nothing here is module-level state.
"""

import asyncio
from typing import Protocol, runtime_checkable

import anthropic
import structlog

from prdforge.core.config import Settings

logger = structlog.get_logger(__name__)


@runtime_checkable
class LLMClient(Protocol):
    """One system+user prompt pair in, raw response text out."""

    async def complete(self, system: str, user: str, *, model: str | None = None) -> str:
        """Run a single completion.

        Returns:
            The response text ("" when the model returned no text content)
        """
        ...


class AnthropicLLMClient:
    """LLMClient backed by anthropic.AsyncAnthropic.

    Single round-trip per call; the call is bounded by ``timeout_seconds``.
    """

    def __init__(
        self,
        api_key: str,
        default_model: str,
        max_tokens: int = 4096,
        timeout_seconds: float = 90.0,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.default_model = default_model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicLLMClient":
        return cls(
            api_key=settings.anthropic_api_key,
            default_model=settings.generation_model,
            max_tokens=settings.generation_max_tokens,
            timeout_seconds=settings.generation_timeout_seconds,
        )

    async def complete(self, system: str, user: str, *, model: str | None = None) -> str:
        model_id = model or self.default_model
        response = await asyncio.wait_for(
            self._client.messages.create(
                model=model_id,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": user}],
            ),
            timeout=self.timeout_seconds,
        )
        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        logger.debug(
            "llm_completion_received",
            model=model_id,
            stop_reason=getattr(response, "stop_reason", None),
            chars=len(text),
        )
        return text
