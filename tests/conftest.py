"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
import os
from typing import Any

import httpx
import pytest

from vaultkit.config import VaultConfig
from vaultkit.vault import Vault

ADDRESS = "http://vault.test:8200"
TOKEN = "s.test-token"


class FakeVaultServer:
    """Answers requests from a queue of canned responses and records them.

    The last queued response keeps being served once the queue runs dry, so a
    single ``respond(500)`` simulates a server that always fails.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[dict[str, Any]] = []

    def respond(
        self,
        status: int = 200,
        json_body: Any = None,
        *,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        times: int = 1,
    ) -> FakeVaultServer:
        spec: dict[str, Any] = {"status_code": status, "headers": headers}
        if json_body is not None:
            spec["json"] = json_body
        else:
            spec["content"] = content or b""
        self._responses.extend([spec] * times)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(204)
        spec = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        return httpx.Response(**spec)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture(autouse=True)
def clean_vault_env(monkeypatch, tmp_path):
    """Hide the host's VAULT_* variables and token file."""
    for name in list(os.environ):
        if name.startswith("VAULT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VAULT_TOKEN_FILE", str(tmp_path / "no-such-token-file"))


@pytest.fixture
def server():
    """A fake Vault server."""
    return FakeVaultServer()


@pytest.fixture
def sleeps():
    """Records retry sleeps instead of sleeping."""
    return []


@pytest.fixture
def config():
    """Configuration with a token, KV version 2 and 100 ms retries."""
    return VaultConfig.build(address=ADDRESS, token=TOKEN, retry_interval_ms=100)


@pytest.fixture
def vault(config, server, sleeps):
    """Vault client wired to the fake server."""
    return Vault(config, transport=server.transport, sleep=sleeps.append)
