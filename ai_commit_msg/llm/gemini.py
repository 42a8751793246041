"""Google Gemini LLM Client"""

from typing import Any, Optional

from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import Provider, ProviderError, Usage, _token_count, clean_message


class GeminiProvider(Provider):
    """Gemini generateContent API. Requires GEMINI_API_KEY env var."""

    name = "gemini"
    label = "Gemini"
    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    API_KEY_ENV = "GEMINI_API_KEY"

    def build_payload(self, config: Config, prompt: str) -> dict[str, Any]:
        generation_config: dict[str, Any] = {"temperature": config.temperature}
        if config.max_tokens is not None:
            generation_config["maxOutputTokens"] = config.max_tokens
        return {
            "systemInstruction": {"parts": [{"text": config.system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    async def _generate(self, config: Config, diff: str) -> tuple[str, Optional[Usage]]:
        api_key = self._api_key(self.API_KEY_ENV)
        response = await self._post_json(
            self.API_URL.format(model=config.model),
            {
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
            self.build_payload(config, self._prompt(config, diff)),
        )

        text = _candidate_text(response)
        if text is None:
            raise ProviderError(f"Unexpected {self.label} response format")

        usage = None
        metadata = response.get("usageMetadata")
        if isinstance(metadata, dict):
            usage = Usage(
                input_tokens=_token_count(metadata, "promptTokenCount"),
                output_tokens=_token_count(metadata, "candidatesTokenCount"),
            )
        return clean_message(text), usage


def _candidate_text(response: dict) -> Optional[str]:
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    texts = [part["text"] for part in content.get("parts") or []
             if isinstance(part, dict) and isinstance(part.get("text"), str)]
    return "".join(texts) if texts else None
