"""Chat-completions request building and response parsing (OpenAI wire format)."""

from typing import Any, Optional

from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import Provider, ProviderError, Usage, clean_message, extract_usage

# Models that accept the reasoning_effort parameter
REASONING_EFFORT_MODELS = {"gpt-5", "gpt-5-mini", "gpt-5-nano"}
REASONING_MODEL_PREFIX = "gpt-5"


def supports_reasoning_effort(model: str) -> bool:
    return model in REASONING_EFFORT_MODELS or model.startswith(REASONING_MODEL_PREFIX)


def accepts_temperature(model: str) -> bool:
    # gpt-5 family rejects a custom temperature
    return not model.startswith(REASONING_MODEL_PREFIX)


def build_chat_payload(config: Config, prompt: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": config.model,
        "messages": [
            {"role": "system", "content": config.system_prompt},
            {"role": "user", "content": prompt},
        ],
        "n": 1,
    }
    if config.max_tokens is not None:
        payload["max_completion_tokens"] = config.max_tokens
    if accepts_temperature(config.model):
        payload["temperature"] = config.temperature
    if config.reasoning_effort and supports_reasoning_effort(config.model):
        payload["reasoning_effort"] = config.reasoning_effort
    return payload


def _first(items: Any) -> Optional[dict]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def extract_chat_text(response: dict) -> Optional[str]:
    """Find the generated text in the known response shapes, in preference order."""
    choice = _first(response.get("choices"))
    if choice:
        message = choice.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(choice.get("text"), str):
            return choice["text"]

    result = _first(response.get("result"))
    if result and isinstance(result.get("content"), str):
        return result["content"]
    return None


class ChatCompletionsProvider(Provider):
    """Base for providers speaking the chat-completions protocol."""

    def parse_response(self, response: dict) -> tuple[str, Optional[Usage]]:
        text = extract_chat_text(response)
        if text is None:
            raise ProviderError(f"Unexpected {self.label} response format")
        return clean_message(text), extract_usage(response.get("usage"))
