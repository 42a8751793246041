"""
Tests for the credential store and the Copilot token exchange.

Run with:
    pytest tests/test_auth.py -v
"""

import asyncio
import json

import pytest

from ai_commit_msg.auth import (
    Credential, CredentialCache, CredentialStore, TokenExchangeCoordinator, TokenExchangeError,
    TOKEN_URL, find_config_path,
)
from ai_commit_msg.process import CommandResult

from tests.fakes import FakeClock, ScriptedTransport, json_response


def _token_body(token="tok-1", expires_at=2000, endpoints=None):
    body = {"token": token, "expires_at": expires_at}
    if endpoints is not None:
        body["endpoints"] = endpoints
    return json_response(body)


def _write_hosts(config_dir, filename, data):
    target = config_dir / "github-copilot"
    target.mkdir(parents=True, exist_ok=True)
    (target / filename).write_text(json.dumps(data))


# ---------------------------------------------------------------------------
# Credential store
# ---------------------------------------------------------------------------

class TestFindConfigPath:

    def test_prefers_xdg_config_home(self, tmp_path):
        assert find_config_path({"XDG_CONFIG_HOME": str(tmp_path), "HOME": "/nowhere"}) == tmp_path

    def test_falls_back_to_dot_config(self, tmp_path):
        (tmp_path / ".config").mkdir()
        assert find_config_path({"HOME": str(tmp_path)}, platform="linux") == tmp_path / ".config"

    def test_windows_uses_appdata(self, tmp_path):
        appdata = tmp_path / "AppData" / "Local"
        appdata.mkdir(parents=True)
        assert find_config_path({"USERPROFILE": str(tmp_path)}, platform="win32") == appdata

    def test_none_without_home(self):
        assert find_config_path({}) is None


class TestCredentialStore:

    @pytest.fixture
    def config_dir(self, tmp_path):
        path = tmp_path / ".config"
        path.mkdir()
        return path

    def _store(self, environ, cache=None):
        return CredentialStore(cache or CredentialCache(), environ=environ, platform="linux")

    def test_codespaces_token(self):
        store = self._store({"GITHUB_TOKEN": "gho_env", "CODESPACES": "true"})
        assert store.resolve_secret() == "gho_env"

    def test_github_token_ignored_outside_codespaces(self, tmp_path):
        store = self._store({"GITHUB_TOKEN": "gho_env", "HOME": str(tmp_path)})
        assert store.resolve_secret() is None

    def test_reads_hosts_json(self, tmp_path, config_dir):
        _write_hosts(config_dir, "hosts.json", {"github.com": {"user": "me", "oauth_token": "gho_file"}})
        store = self._store({"HOME": str(tmp_path)})
        assert store.resolve_secret() == "gho_file"

    def test_key_only_needs_to_contain_host(self, tmp_path, config_dir):
        _write_hosts(config_dir, "apps.json", {"github.com:Iv1.b507a08c87ecfe98": {"oauth_token": "gho_app"}})
        store = self._store({"HOME": str(tmp_path)})
        assert store.resolve_secret() == "gho_app"

    def test_hosts_json_wins_over_apps_json(self, tmp_path, config_dir):
        _write_hosts(config_dir, "hosts.json", {"github.com": {"oauth_token": "gho_hosts"}})
        _write_hosts(config_dir, "apps.json", {"github.com:app": {"oauth_token": "gho_apps"}})
        store = self._store({"HOME": str(tmp_path)})
        assert store.resolve_secret() == "gho_hosts"

    def test_skips_malformed_file(self, tmp_path, config_dir):
        (config_dir / "github-copilot").mkdir()
        (config_dir / "github-copilot" / "hosts.json").write_text("{oops")
        _write_hosts(config_dir, "apps.json", {"github.com:app": {"oauth_token": "gho_apps"}})
        store = self._store({"HOME": str(tmp_path)})
        assert store.resolve_secret() == "gho_apps"

    def test_entries_without_token_are_skipped(self, tmp_path, config_dir):
        _write_hosts(config_dir, "hosts.json", {"github.com": {"user": "me"}, "gitlab.com": {"oauth_token": "x"}})
        store = self._store({"HOME": str(tmp_path)})
        assert store.resolve_secret() is None

    def test_secret_is_cached_for_process(self):
        environ = {"GITHUB_TOKEN": "first", "CODESPACES": "1"}
        cache = CredentialCache()
        store = self._store(environ, cache)
        assert store.resolve_secret() == "first"

        environ["GITHUB_TOKEN"] = "second"
        assert store.resolve_secret() == "first"
        assert cache.secret == "first"


# ---------------------------------------------------------------------------
# Credential validity
# ---------------------------------------------------------------------------

class TestCredential:

    def test_valid_before_expiry(self):
        assert Credential("s", "tok", expires_at=2000).is_valid(1999)

    def test_invalid_at_expiry(self):
        assert not Credential("s", "tok", expires_at=2000).is_valid(2000)

    def test_missing_token_needs_exchange(self):
        assert not Credential("s", None, expires_at=2000).is_valid(0)

    def test_missing_expiry_is_invalid(self):
        assert not Credential("s", "tok").is_valid(0)


# ---------------------------------------------------------------------------
# Token exchange
# ---------------------------------------------------------------------------

class TestTokenExchange:

    @pytest.fixture
    def clock(self):
        return FakeClock(1000.0)

    @pytest.fixture
    def cache(self, clock):
        return CredentialCache(clock=clock)

    @pytest.mark.asyncio
    async def test_cached_token_skips_network(self, cache):
        cache.credential = Credential("gho", "cached", expires_at=1500, endpoints={"api": "https://x"})
        transport = ScriptedTransport()

        credential = await TokenExchangeCoordinator(cache, transport).exchange("gho")

        assert credential.derived_token == "cached"
        assert credential.endpoints == {"api": "https://x"}
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_exchange_sends_bearer_secret(self, cache):
        transport = ScriptedTransport(_token_body(endpoints={"api": "https://api.example"}))

        credential = await TokenExchangeCoordinator(cache, transport).exchange("gho_secret")

        request = transport.requests[0]
        assert request["method"] == "GET"
        assert request["url"] == TOKEN_URL
        assert request["headers"]["Authorization"] == "Bearer gho_secret"
        assert credential.derived_token == "tok-1"
        assert credential.endpoints == {"api": "https://api.example"}
        assert cache.credential is credential
        assert not cache.exchange_in_progress

    @pytest.mark.asyncio
    async def test_expired_token_is_exchanged_again(self, cache, clock):
        transport = ScriptedTransport(_token_body("tok-1", 1010), _token_body("tok-2", 3000))
        coordinator = TokenExchangeCoordinator(cache, transport)

        assert (await coordinator.exchange("gho")).derived_token == "tok-1"
        assert (await coordinator.exchange("gho")).derived_token == "tok-1"
        clock.advance(10)
        assert (await coordinator.exchange("gho")).derived_token == "tok-2"
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_exchange(self, cache):
        transport = ScriptedTransport(_token_body("shared"), delay=0.01)
        coordinator = TokenExchangeCoordinator(cache, transport)

        first, second = await asyncio.gather(coordinator.exchange("gho"), coordinator.exchange("gho"))

        assert len(transport.requests) == 1
        assert first.derived_token == second.derived_token == "shared"

    @pytest.mark.asyncio
    async def test_waiter_gives_up_after_bound(self, cache):
        transport = ScriptedTransport(_token_body("slow"), _token_body("own"), delay=0.2)
        coordinator = TokenExchangeCoordinator(cache, transport, max_wait=0.02)

        first, second = await asyncio.gather(coordinator.exchange("gho"), coordinator.exchange("gho"))

        assert len(transport.requests) == 2
        assert first.derived_token == "slow"
        assert second.derived_token == "own"

    @pytest.mark.asyncio
    async def test_waiter_retries_when_leader_fails(self, cache):
        transport = ScriptedTransport(
            CommandResult(7, "", "Could not resolve host"),
            _token_body("retry"),
            delay=0.01,
        )
        coordinator = TokenExchangeCoordinator(cache, transport)

        first, second = await asyncio.gather(
            coordinator.exchange("gho"), coordinator.exchange("gho"), return_exceptions=True,
        )

        assert isinstance(first, TokenExchangeError)
        assert second.derived_token == "retry"

    @pytest.mark.asyncio
    async def test_waiters_share_one_retry_after_leader_fails(self, cache):
        transport = ScriptedTransport(
            CommandResult(7, "", "boom"),
            _token_body("retry"),
            _token_body("extra-1"),
            _token_body("extra-2"),
            delay=0.02,
        )
        coordinator = TokenExchangeCoordinator(cache, transport)

        results = await asyncio.gather(
            *(coordinator.exchange("gho") for _ in range(4)), return_exceptions=True,
        )

        assert isinstance(results[0], TokenExchangeError)
        assert [r.derived_token for r in results[1:]] == ["retry"] * 3
        assert len(transport.requests) == 2
        assert transport.peak == 1

    @pytest.mark.asyncio
    async def test_no_secret(self, cache):
        with pytest.raises(TokenExchangeError, match="No OAuth token found"):
            await TokenExchangeCoordinator(cache, ScriptedTransport()).exchange(None)

    @pytest.mark.asyncio
    async def test_transport_failure(self, cache):
        transport = ScriptedTransport(CommandResult(6, "", "curl: (6) Could not resolve host\n"))

        with pytest.raises(TokenExchangeError) as exc_info:
            await TokenExchangeCoordinator(cache, transport).exchange("gho")

        assert str(exc_info.value) == "Failed to get Copilot token: curl: (6) Could not resolve host"
        assert not cache.exchange_in_progress

    @pytest.mark.parametrize("body", ["<html>", "[1, 2]", '{"expires_at": 5}'])
    @pytest.mark.asyncio
    async def test_malformed_response(self, cache, body):
        transport = ScriptedTransport(CommandResult(0, body, ""))

        with pytest.raises(TokenExchangeError, match="Failed to parse Copilot token response"):
            await TokenExchangeCoordinator(cache, transport).exchange("gho")

        assert cache.credential is None

    @pytest.mark.asyncio
    async def test_github_error_message_is_reported(self, cache):
        transport = ScriptedTransport(json_response({"message": "Bad credentials"}))

        with pytest.raises(TokenExchangeError, match="Bad credentials"):
            await TokenExchangeCoordinator(cache, transport).exchange("gho")
