"""OpenAI LLM Client"""

from typing import Optional

from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import Usage
from ai_commit_msg.llm.chat import ChatCompletionsProvider, build_chat_payload


class OpenAIProvider(ChatCompletionsProvider):
    """OpenAI chat completions. Requires OPENAI_API_KEY env var."""

    name = "openai"
    label = "OpenAI"
    API_URL = "https://api.openai.com/v1/chat/completions"
    API_KEY_ENV = "OPENAI_API_KEY"

    async def _generate(self, config: Config, diff: str) -> tuple[str, Optional[Usage]]:
        api_key = self._api_key(self.API_KEY_ENV)
        payload = build_chat_payload(config, self._prompt(config, diff))
        response = await self._post_json(
            self.API_URL,
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            payload,
        )
        return self.parse_response(response)
