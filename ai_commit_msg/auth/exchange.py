"""Token Exchange - trade the long-lived GitHub secret for a short-lived Copilot token.

Many generations can ask for a token at once. Only one exchange is in flight
at a time: later callers wait on the pending exchange instead of starting
their own, up to `max_wait` seconds. A caller that gives up waiting runs its
own exchange, so a stuck request cannot block everyone forever.
"""

import asyncio
import json
import logging
from typing import Optional

from ai_commit_msg.auth.store import Credential, CredentialCache
from ai_commit_msg.transport import Transport

logger = logging.getLogger(__name__)

TOKEN_URL = "https://api.github.com/copilot_internal/v2/token"
MAX_WAIT_SECONDS = 5.0


class TokenExchangeError(Exception):
    """Raised when a Copilot token cannot be obtained."""
    pass


class TokenExchangeCoordinator:
    """Caches exchanged tokens and deduplicates concurrent exchanges."""

    def __init__(self, cache: CredentialCache, transport: Transport,
                 max_wait: float = MAX_WAIT_SECONDS, token_url: str = TOKEN_URL):
        self.cache = cache
        self.transport = transport
        self.max_wait = max_wait
        self.token_url = token_url

    async def exchange(self, secret: Optional[str]) -> Credential:
        """Return a usable credential, exchanging `secret` only when needed."""
        cached = self.cache.valid_credential()
        if cached:
            logger.debug("Using cached Copilot token")
            return cached

        # A failed exchange hands over to whichever waiter retries first;
        # the rest keep waiting on that one until the shared deadline runs out
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.max_wait
        while self.cache.exchange_in_progress:
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning("Token exchange still pending after %.1fs, starting another", self.max_wait)
                break
            waited = await self._wait_for(self.cache.exchange, remaining)
            if waited:
                return waited

        if not secret:
            raise TokenExchangeError("No OAuth token found")

        return await self._exchange(secret)

    async def _wait_for(self, pending: asyncio.Future, timeout: float) -> Optional[Credential]:
        logger.debug("Token exchange already in progress, waiting")
        try:
            credential = await asyncio.wait_for(asyncio.shield(pending), timeout=timeout)
        except asyncio.TimeoutError:
            return self.cache.valid_credential()
        return credential or self.cache.valid_credential()

    async def _exchange(self, secret: str) -> Credential:
        pending = asyncio.get_running_loop().create_future()
        self.cache.exchange = pending
        credential = None
        try:
            credential = await self._request_token(secret)
            return credential
        finally:
            # Waiters see None on failure; the first to wake retries
            if self.cache.exchange is pending:
                self.cache.exchange = None
            if not pending.done():
                pending.set_result(credential)

    async def _request_token(self, secret: str) -> Credential:
        logger.debug("Exchanging OAuth token for a Copilot token")
        result = await self.transport.request(
            "GET",
            self.token_url,
            {
                "Authorization": f"Bearer {secret}",
                "Accept": "application/json",
            },
        )
        if not result.ok:
            raise TokenExchangeError(f"Failed to get Copilot token: {result.stderr.strip() or 'Unknown error'}")

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            raise TokenExchangeError("Failed to parse Copilot token response")
        if not isinstance(data, dict):
            raise TokenExchangeError("Failed to parse Copilot token response")

        token = data.get("token")
        if not isinstance(token, str) or not token:
            if data.get("message"):
                raise TokenExchangeError(f"Failed to get Copilot token: {data['message']}")
            raise TokenExchangeError("Failed to parse Copilot token response")

        expires_at = data.get("expires_at")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            expires_at = None
        endpoints = data.get("endpoints") if isinstance(data.get("endpoints"), dict) else None

        credential = Credential(secret=secret, derived_token=token, expires_at=expires_at, endpoints=endpoints)
        self.cache.credential = credential
        logger.debug("Copilot token cached until %s", expires_at)
        return credential
