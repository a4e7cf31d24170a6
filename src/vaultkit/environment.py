"""Vault settings read from the hosting environment."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from vaultkit.errors import ConfigurationError


def _default_token_file() -> Path:
    return Path.home() / ".vault-token"


class VaultEnvironment(BaseSettings):
    """``VAULT_*`` environment variables.

    Values passed to the constructor win over the process environment, so
    tests (and embedding applications) can supply an explicit environment:

        >>> env = VaultEnvironment(addr="http://127.0.0.1:8200", token="root")
    """

    model_config = SettingsConfigDict(env_prefix="VAULT_", extra="ignore")

    addr: str | None = None
    token: str | None = None
    token_file: Path = Field(default_factory=_default_token_file)
    namespace: str | None = None
    ssl_verify: bool | None = None
    ssl_cert: Path | None = None
    open_timeout: float | None = None
    read_timeout: float | None = None
    max_retries: int | None = None
    retry_interval_ms: int | None = None
    kv_version: int | None = None

    def lookup_token(self) -> str | None:
        """Return ``VAULT_TOKEN``, falling back to the token file (``~/.vault-token``)."""
        if self.token:
            return self.token
        try:
            return self.token_file.read_text(encoding="utf-8").strip() or None
        except OSError:
            return None


def load_environment() -> VaultEnvironment:
    """Read the process environment.

    Raises:
        ConfigurationError: If a ``VAULT_*`` variable holds a malformed value
    """
    try:
        return VaultEnvironment()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid VAULT_* environment variable: {e}") from e
