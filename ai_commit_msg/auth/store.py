"""Credential Store - resolve the long-lived GitHub secret and hold derived tokens."""

import asyncio
import json
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

HOST_MARKER = "github.com"
CREDENTIAL_FILES = ("hosts.json", "apps.json")


@dataclass
class Credential:
    """Long-lived secret plus the short-lived token derived from it.

    A missing `derived_token` means an exchange is required.
    """
    secret: str
    derived_token: Optional[str] = None
    expires_at: Optional[float] = None
    endpoints: Optional[dict[str, Any]] = None

    def is_valid(self, now: float) -> bool:
        return bool(self.derived_token) and self.expires_at is not None and self.expires_at > now


@dataclass
class CredentialCache:
    """Process-wide credential state. Owned by whoever builds the providers.

    `exchange` is the in-flight token exchange, if any. It doubles as the
    in-progress flag: set while a request is outstanding, cleared on response.
    """
    secret: Optional[str] = None
    credential: Optional[Credential] = None
    exchange: Optional[asyncio.Future] = None
    clock: Callable[[], float] = field(default=time.time, repr=False)

    def valid_credential(self) -> Optional[Credential]:
        """The cached credential, only while its token has not expired."""
        if self.credential and self.credential.is_valid(self.clock()):
            return self.credential
        return None

    @property
    def exchange_in_progress(self) -> bool:
        return self.exchange is not None and not self.exchange.done()


def find_config_path(environ: Mapping[str, str] | None = None, platform: str | None = None) -> Optional[Path]:
    """Locate the directory holding the github-copilot credential files."""
    environ = os.environ if environ is None else environ
    platform = platform or sys.platform

    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg and Path(xdg).exists():
        return Path(xdg)

    home = environ.get("HOME") or environ.get("USERPROFILE")
    if not home:
        return None

    if platform == "win32":
        path = Path(home) / "AppData" / "Local"
    else:
        path = Path(home) / ".config"
    return path if path.exists() else None


class CredentialStore:
    """Resolves the long-lived secret once and caches it for the process."""

    def __init__(self, cache: CredentialCache, environ: Mapping[str, str] | None = None,
                 platform: str | None = None):
        self.cache = cache
        self._environ = environ
        self._platform = platform

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def resolve_secret(self) -> Optional[str]:
        """Return the cached secret, or find one. None when no source has it."""
        if self.cache.secret:
            return self.cache.secret

        secret = self._from_environment() or self._from_files()
        if secret:
            self.cache.secret = secret
        return secret

    def _from_environment(self) -> Optional[str]:
        # GITHUB_TOKEN is only an OAuth token inside Codespaces
        token = self.environ.get("GITHUB_TOKEN")
        if token and self.environ.get("CODESPACES"):
            logger.debug("Using GITHUB_TOKEN from the Codespaces environment")
            return token
        return None

    def candidate_files(self) -> list[Path]:
        config_path = find_config_path(self.environ, self._platform)
        if config_path is None:
            return []
        return [config_path / "github-copilot" / name for name in CREDENTIAL_FILES]

    def _from_files(self) -> Optional[str]:
        for path in self.candidate_files():
            if not path.is_file():
                continue
            secret = _read_oauth_token(path)
            if secret:
                logger.debug("Using OAuth token from %s", path)
                return secret
        return None


def _read_oauth_token(path: Path) -> Optional[str]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.debug("Skipping %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        return None
    for key, value in data.items():
        if HOST_MARKER in key and isinstance(value, dict) and value.get("oauth_token"):
            return value["oauth_token"]
    return None
