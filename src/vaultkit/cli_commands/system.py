"""Server state commands: health, seal-status."""

from __future__ import annotations

import typer

from vaultkit.cli_commands.connection import open_vault
from vaultkit.errors import VaultError
from vaultkit.output.rich import print_error, print_key_values


def health(ctx: typer.Context) -> None:
    """Show server health. Exits with 1 when the server is sealed or uninitialized."""
    vault = open_vault(ctx)
    try:
        response = vault.debug().health()
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_key_values(
        f"Health ({response.status})",
        {
            "initialized": response.initialized,
            "sealed": response.sealed,
            "standby": response.standby,
            "performance_standby": response.performance_standby,
            "version": response.version,
            "cluster_name": response.cluster_name,
        },
    )
    if response.sealed or response.initialized is False:
        raise typer.Exit(code=1)


def seal_status(ctx: typer.Context) -> None:
    """Show the seal state and unseal progress."""
    vault = open_vault(ctx)
    try:
        response = vault.seal().seal_status()
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_key_values(
        "Seal status",
        {
            "sealed": response.sealed,
            "threshold": response.threshold,
            "shares": response.number_of_shares,
            "progress": response.progress,
            "version": response.version,
        },
    )
