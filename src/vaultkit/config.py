"""Immutable client configuration."""

from __future__ import annotations

import ssl
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vaultkit.environment import VaultEnvironment, load_environment
from vaultkit.errors import ConfigurationError
from vaultkit.paths import ENGINE_VERSIONS


def _engine_version(value: Any) -> int:
    try:
        version = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"The engine version must be 1 or 2, got {value!r}") from None
    if version not in ENGINE_VERSIONS:
        raise ValueError(f"The engine version must be 1 or 2, got {value!r}")
    return version


class SslConfig(BaseModel):
    """TLS settings for connections to Vault.

    ``verify=False`` turns off all certificate and hostname checks and
    takes precedence over any trust material. Only use it against
    development servers.
    """

    model_config = ConfigDict(frozen=True)

    verify: bool = True
    pem_file: Path | None = None
    pem_utf8: str | None = None
    client_pem_file: Path | None = None
    client_key_pem_file: Path | None = None

    @model_validator(mode="after")
    def _check_client_identity(self) -> SslConfig:
        if self.client_key_pem_file is not None and self.client_pem_file is None:
            raise ValueError("client_key_pem_file requires client_pem_file")
        return self

    @classmethod
    def build(
        cls,
        environment: VaultEnvironment | None = None,
        **values: Any,
    ) -> SslConfig:
        """Create an SslConfig, filling unset values from the environment.

        ``VAULT_SSL_VERIFY`` sets ``verify``; ``VAULT_SSL_CERT`` sets
        ``pem_file`` when verifying and no CA material was given.

        Raises:
            ConfigurationError: If the values are invalid
        """
        environment = environment if environment is not None else load_environment()
        values = {name: value for name, value in values.items() if value is not None}
        if "verify" not in values and environment.ssl_verify is not None:
            values["verify"] = environment.ssl_verify
        if (
            values.get("verify", True)
            and "pem_file" not in values
            and "pem_utf8" not in values
            and environment.ssl_cert is not None
        ):
            values["pem_file"] = environment.ssl_cert
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid SSL configuration: {e}") from e

    @property
    def has_trust_material(self) -> bool:
        return any(
            value is not None
            for value in (self.pem_file, self.pem_utf8, self.client_pem_file)
        )

    def ssl_context(self) -> ssl.SSLContext | None:
        """Build the SSL context for the configured trust material.

        Returns None when verification is off or no material is configured
        (the system trust store then applies).

        Raises:
            ConfigurationError: If a certificate or key cannot be loaded
        """
        if not self.verify or not self.has_trust_material:
            return None
        try:
            context = ssl.create_default_context(
                cafile=str(self.pem_file) if self.pem_file else None,
                cadata=self.pem_utf8,
            )
            if self.client_pem_file is not None:
                context.load_cert_chain(
                    certfile=str(self.client_pem_file),
                    keyfile=str(self.client_key_pem_file) if self.client_key_pem_file else None,
                )
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(f"Unable to load TLS material: {e}") from e
        return context


class VaultConfig(BaseModel):
    """Everything needed to reach a Vault server.

    Instances are frozen. Create them with :meth:`build`, which resolves
    defaults from the environment, and derive variations with :meth:`evolve`.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    token: str | None = None
    namespace: str | None = None
    open_timeout: float | None = Field(default=None, gt=0)
    read_timeout: float | None = Field(default=None, gt=0)
    ssl_config: SslConfig = Field(default_factory=SslConfig)
    max_retries: int = Field(default=0, ge=0)
    retry_interval_ms: int = Field(default=1000, ge=0)
    global_engine_version: int = 2
    secrets_engine_path_map: dict[str, int] = Field(default_factory=dict)
    prefix_path_depth: int = Field(default=1, ge=1)

    @field_validator("address")
    @classmethod
    def _strip_address(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("No address is set")
        return value

    @field_validator("global_engine_version", mode="before")
    @classmethod
    def _check_global_engine_version(cls, value: Any) -> int:
        return _engine_version(value)

    @field_validator("secrets_engine_path_map", mode="before")
    @classmethod
    def _normalize_path_map(cls, value: Any) -> dict[str, int]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("secrets_engine_path_map must be a mapping")
        return {
            (path if path.endswith("/") else f"{path}/"): _engine_version(version)
            for path, version in value.items()
        }

    @classmethod
    def build(
        cls,
        *,
        address: str | None = None,
        token: str | None = None,
        namespace: str | None = None,
        open_timeout: float | None = None,
        read_timeout: float | None = None,
        ssl_config: SslConfig | None = None,
        max_retries: int | None = None,
        retry_interval_ms: int | None = None,
        global_engine_version: int | None = None,
        secrets_engine_path_map: Mapping[str, int | str] | None = None,
        prefix_path_depth: int | None = None,
        environment: VaultEnvironment | None = None,
    ) -> VaultConfig:
        """Resolve a complete configuration.

        Explicit arguments win, then ``VAULT_*`` environment values, then
        defaults. The environment is only consulted here, never while
        requests execute.

        Args:
            address: Server address (``VAULT_ADDR``)
            token: Client token (``VAULT_TOKEN`` or ``~/.vault-token``)
            namespace: Namespace sent with every request (``VAULT_NAMESPACE``)
            open_timeout: Connect timeout in seconds (``VAULT_OPEN_TIMEOUT``)
            read_timeout: Read timeout in seconds (``VAULT_READ_TIMEOUT``)
            ssl_config: TLS settings (defaults from ``VAULT_SSL_*``)
            max_retries: Retries after the first attempt (``VAULT_MAX_RETRIES``)
            retry_interval_ms: Pause between attempts (``VAULT_RETRY_INTERVAL_MS``)
            global_engine_version: KV version for unmapped paths (``VAULT_KV_VERSION``)
            secrets_engine_path_map: KV version per mount path
            prefix_path_depth: Number of path segments forming a mount
            environment: Environment to read; defaults to the process environment

        Returns:
            A frozen VaultConfig

        Raises:
            ConfigurationError: If no address is available or a value is invalid
        """
        environment = environment if environment is not None else load_environment()

        address = address or environment.addr
        if not address:
            raise ConfigurationError("No address is set")

        values: dict[str, Any] = {
            "address": address,
            "token": token or environment.lookup_token(),
            "namespace": namespace or environment.namespace,
            "open_timeout": open_timeout if open_timeout is not None else environment.open_timeout,
            "read_timeout": read_timeout if read_timeout is not None else environment.read_timeout,
            "ssl_config": ssl_config if ssl_config is not None else SslConfig.build(environment),
            "max_retries": max_retries if max_retries is not None else environment.max_retries,
            "retry_interval_ms": (
                retry_interval_ms
                if retry_interval_ms is not None
                else environment.retry_interval_ms
            ),
            "global_engine_version": (
                global_engine_version
                if global_engine_version is not None
                else environment.kv_version
            ),
            "secrets_engine_path_map": secrets_engine_path_map,
            "prefix_path_depth": prefix_path_depth,
        }
        try:
            return cls(**{name: value for name, value in values.items() if value is not None})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Vault configuration: {e}") from e

    def evolve(self, **changes: Any) -> VaultConfig:
        """Return a validated copy with ``changes`` applied.

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        try:
            return type(self)(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Vault configuration: {e}") from e
