"""Connection options shared by every command."""

from __future__ import annotations

from dataclasses import dataclass

import typer

from vaultkit.config import SslConfig, VaultConfig
from vaultkit.errors import ConfigurationError
from vaultkit.output.rich import print_error
from vaultkit.vault import Vault


@dataclass(frozen=True)
class ConnectionOptions:
    """Global options given before the command name. Unset values fall back to VAULT_*."""

    address: str | None = None
    token: str | None = None
    namespace: str | None = None
    kv_version: int | None = None
    max_retries: int | None = None
    retry_interval: int | None = None
    no_verify: bool = False


def open_vault(ctx: typer.Context) -> Vault:
    """Build a Vault client from the global options, exiting on bad configuration."""
    options: ConnectionOptions = ctx.obj or ConnectionOptions()
    try:
        config = VaultConfig.build(
            address=options.address,
            token=options.token,
            namespace=options.namespace,
            global_engine_version=options.kv_version,
            max_retries=options.max_retries,
            retry_interval_ms=options.retry_interval,
            ssl_config=SslConfig.build(verify=False) if options.no_verify else None,
        )
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return Vault(config)
