"""Credential Package"""

from ai_commit_msg.auth.store import Credential, CredentialCache, CredentialStore, find_config_path
from ai_commit_msg.auth.exchange import TokenExchangeCoordinator, TokenExchangeError, TOKEN_URL

__all__ = [
    "Credential",
    "CredentialCache",
    "CredentialStore",
    "TokenExchangeCoordinator",
    "TokenExchangeError",
    "TOKEN_URL",
    "find_config_path",
]
