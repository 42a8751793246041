"""LLM Base Classes and Shared Code"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ai_commit_msg.config import Config
from ai_commit_msg.transport import CurlTransport, Transport

logger = logging.getLogger(__name__)

DIFF_PLACEHOLDER = "{diff}"

_OPENING_FENCE = re.compile(r'^```[\w-]*\n')
_CLOSING_FENCE = re.compile(r'\n```$')


@dataclass(frozen=True)
class Usage:
    """Token accounting reported by a provider."""
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider call. Exactly one of message/error is set."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    usage: Optional[Usage] = None

    @classmethod
    def ok(cls, message: str, usage: Optional[Usage] = None) -> 'ProviderResult':
        return cls(success=True, message=message, usage=usage)

    @classmethod
    def failure(cls, error: str) -> 'ProviderResult':
        return cls(success=False, error=error)


class ProviderError(Exception):
    """Raised inside a provider; reported to the caller as a failed result."""
    pass


def build_prompt(template: str, diff: str) -> str:
    """Put the diff where the template asks for it, or after a blank line."""
    if DIFF_PLACEHOLDER in template:
        before, _, after = template.rpartition(DIFF_PLACEHOLDER)
        return f"{before}{diff}{after}"
    return f"{template}\n\n{diff}"


def clean_message(text: str) -> str:
    """Strip a code fence or stray backticks wrapped around the message."""
    text = text.strip()
    text = _OPENING_FENCE.sub('', text, count=1)
    text = _CLOSING_FENCE.sub('', text, count=1)
    if text.startswith('`'):
        text = text[1:]
    if text.endswith('`'):
        text = text[:-1]
    return text.strip()


def _token_count(data: Mapping[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def extract_usage(usage: Any) -> Optional[Usage]:
    """Normalize prompt/completion and input/output token naming."""
    if not isinstance(usage, dict):
        return None
    return Usage(
        input_tokens=_token_count(usage, "prompt_tokens", "input_tokens"),
        output_tokens=_token_count(usage, "completion_tokens", "output_tokens"),
    )


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or "Unknown error")
    return str(error)


class Provider(ABC):
    """One LLM backend. `call` never raises for request failures."""

    name: str = ""
    label: str = ""

    def __init__(self, transport: Optional[Transport] = None, environ: Optional[Mapping[str, str]] = None):
        self.transport = transport or CurlTransport()
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    async def call(self, config: Config, diff: str) -> ProviderResult:
        try:
            message, usage = await self._generate(config, diff)
        except ProviderError as e:
            return ProviderResult.failure(str(e))
        return ProviderResult.ok(message, usage)

    @abstractmethod
    async def _generate(self, config: Config, diff: str) -> tuple[str, Optional[Usage]]:
        pass

    def _prompt(self, config: Config, diff: str) -> str:
        prompt = build_prompt(config.prompt, diff)
        logger.debug("%s prompt length: %d chars", self.label, len(prompt))
        return prompt

    def _api_key(self, env_var: str) -> str:
        key = self.environ.get(env_var)
        if not key:
            raise ProviderError(f"No {self.label} API key found. Set {env_var} environment variable")
        return key

    async def _post_json(self, url: str, headers: Mapping[str, str], payload: dict) -> dict:
        """POST a JSON payload and return the decoded response object."""
        result = await self.transport.request("POST", url, headers, json.dumps(payload))
        if not result.ok:
            raise ProviderError(f"API request failed: {result.stderr.strip() or 'Unknown error'}")

        try:
            response = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Failed to parse API response: {e}")

        if not isinstance(response, dict):
            raise ProviderError(f"Unexpected {self.label} response format")
        if response.get("error"):
            raise ProviderError(f"{self.label} API error: {_error_message(response['error'])}")
        return response
