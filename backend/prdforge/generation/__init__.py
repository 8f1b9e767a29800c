from prdforge.generation.adapter import GeneratedArtifact, GenerationAdapter, split_rewritten_list
from prdforge.generation.llm_client import AnthropicLLMClient, LLMClient
from prdforge.generation.llm_fake import FakeLLMClient

__all__ = [
    "AnthropicLLMClient",
    "FakeLLMClient",
    "GeneratedArtifact",
    "GenerationAdapter",
    "LLMClient",
    "split_rewritten_list",
]
