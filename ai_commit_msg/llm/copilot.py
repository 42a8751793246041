"""GitHub Copilot LLM Client"""

import logging
from typing import Any, Mapping, Optional

from ai_commit_msg import APP_SLUG, __version__
from ai_commit_msg.auth import CredentialCache, CredentialStore, TokenExchangeCoordinator, TokenExchangeError
from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import ProviderError, Usage
from ai_commit_msg.llm.chat import ChatCompletionsProvider, build_chat_payload
from ai_commit_msg.transport import Transport

logger = logging.getLogger(__name__)

_default_cache = CredentialCache()


class CopilotProvider(ChatCompletionsProvider):
    """GitHub Copilot chat completions.

    Uses COPILOT_TOKEN directly when set. Otherwise the GitHub OAuth token
    (from Codespaces or the github-copilot config files) is exchanged for a
    short-lived Copilot token, which is cached until it expires.
    """

    name = "copilot"
    label = "Copilot"
    API_URL = "https://models.github.ai/inference/chat/completions"
    TOKEN_ENV = "COPILOT_TOKEN"
    EDITOR_VERSION = f"{APP_SLUG}/{__version__}"
    INTEGRATION_ID = "vscode-chat"

    def __init__(self, transport: Optional[Transport] = None, environ: Optional[Mapping[str, str]] = None,
                 cache: Optional[CredentialCache] = None, platform: Optional[str] = None):
        super().__init__(transport, environ)
        self.cache = cache or _default_cache
        self.store = CredentialStore(self.cache, environ=environ, platform=platform)
        self.coordinator = TokenExchangeCoordinator(self.cache, self.transport)

    async def _resolve_token(self) -> tuple[str, Optional[dict[str, Any]]]:
        env_token = self.environ.get(self.TOKEN_ENV)
        if env_token:
            return env_token, None

        secret = self.store.resolve_secret()
        if not secret:
            raise ProviderError(
                "No Copilot token found. Set COPILOT_TOKEN env var or authenticate with GitHub Copilot"
            )

        try:
            credential = await self.coordinator.exchange(secret)
        except TokenExchangeError as e:
            raise ProviderError(str(e))
        return credential.derived_token, credential.endpoints

    def api_url(self, endpoints: Optional[Mapping[str, Any]]) -> str:
        if endpoints and endpoints.get("api"):
            return f"{str(endpoints['api']).rstrip('/')}/chat/completions"
        return self.API_URL

    def headers(self, token: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
            "Editor-Version": self.EDITOR_VERSION,
            "Editor-Plugin-Version": f"{APP_SLUG}/*",
            "Copilot-Integration-Id": self.INTEGRATION_ID,
        }

    async def _generate(self, config: Config, diff: str) -> tuple[str, Optional[Usage]]:
        token, endpoints = await self._resolve_token()
        if not token:
            raise ProviderError("Invalid Copilot token")

        payload = build_chat_payload(config, self._prompt(config, diff))
        response = await self._post_json(self.api_url(endpoints), self.headers(token), payload)
        return self.parse_response(response)
