"""LLM Provider Package"""

from typing import Optional

from ai_commit_msg.llm.base import (
    Provider, ProviderError, ProviderResult, Usage, build_prompt, clean_message, extract_usage,
)
from ai_commit_msg.llm.anthropic import AnthropicProvider
from ai_commit_msg.llm.copilot import CopilotProvider
from ai_commit_msg.llm.gemini import GeminiProvider
from ai_commit_msg.llm.openai import OpenAIProvider
from ai_commit_msg.transport import Transport

PROVIDERS: dict[str, type[Provider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
    "copilot": CopilotProvider,
}


def get_provider(name: str, transport: Optional[Transport] = None) -> Provider:
    """Get a provider by name: 'openai', 'anthropic', 'gemini' or 'copilot'."""
    if name in PROVIDERS:
        return PROVIDERS[name](transport=transport)
    raise ProviderError(f"Unknown provider: {name}. Use one of: {', '.join(PROVIDERS)}.")


__all__ = [
    "Provider",
    "ProviderError",
    "ProviderResult",
    "Usage",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "CopilotProvider",
    "get_provider",
    "PROVIDERS",
    "build_prompt",
    "clean_message",
    "extract_usage",
]
