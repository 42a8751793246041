"""Claude (Anthropic) LLM Client"""

from typing import Any, Optional

from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import Provider, ProviderError, Usage, clean_message, extract_usage


class AnthropicProvider(Provider):
    """Claude Messages API. Requires ANTHROPIC_API_KEY env var."""

    name = "anthropic"
    label = "Anthropic"
    API_URL = "https://api.anthropic.com/v1/messages"
    API_KEY_ENV = "ANTHROPIC_API_KEY"
    API_VERSION = "2023-06-01"
    MAX_TOKENS = 1000

    def build_payload(self, config: Config, prompt: str) -> dict[str, Any]:
        return {
            "model": config.model,
            "max_tokens": config.max_tokens or self.MAX_TOKENS,
            "temperature": config.temperature,
            "system": config.system_prompt,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def _generate(self, config: Config, diff: str) -> tuple[str, Optional[Usage]]:
        api_key = self._api_key(self.API_KEY_ENV)
        response = await self._post_json(
            self.API_URL,
            {
                "Content-Type": "application/json",
                "x-api-key": api_key,
                "anthropic-version": self.API_VERSION,
            },
            self.build_payload(config, self._prompt(config, diff)),
        )

        content = ""
        for block in response.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                content = block.get("text", "")
                break
        if not content:
            raise ProviderError(f"Unexpected {self.label} response format")

        return clean_message(content), extract_usage(response.get("usage"))
