"""Command-line interface for vaultkit."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

from vaultkit.cli_commands.connection import ConnectionOptions
from vaultkit.cli_commands.secrets import delete, list_secrets, read, write
from vaultkit.cli_commands.system import health, seal_status
from vaultkit.output.rich import console

app = typer.Typer(
    name="vaultkit",
    help="Read and write Vault secrets from the command line.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    address: Annotated[
        str | None, typer.Option("--address", "-a", help="Vault address (default: VAULT_ADDR)")
    ] = None,
    token: Annotated[
        str | None,
        typer.Option("--token", "-t", help="Vault token (default: VAULT_TOKEN or ~/.vault-token)"),
    ] = None,
    namespace: Annotated[
        str | None, typer.Option("--namespace", "-n", help="Vault namespace")
    ] = None,
    kv_version: Annotated[
        int | None,
        typer.Option("--kv-version", min=1, max=2, help="KV engine version for all paths (default: 2)"),
    ] = None,
    max_retries: Annotated[
        int | None, typer.Option("--max-retries", min=0, help="Retries after a failed attempt")
    ] = None,
    retry_interval: Annotated[
        int | None,
        typer.Option("--retry-interval", min=0, help="Milliseconds between attempts"),
    ] = None,
    no_verify: Annotated[
        bool,
        typer.Option("--no-verify", help="Skip TLS certificate checks (development servers only)"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log requests and retries")] = False,
) -> None:
    """Read and write Vault secrets from the command line."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = ConnectionOptions(
        address=address,
        token=token,
        namespace=namespace,
        kv_version=kv_version,
        max_retries=max_retries,
        retry_interval=retry_interval,
        no_verify=no_verify,
    )


app.command()(read)
app.command()(write)
app.command("list")(list_secrets)
app.command()(delete)
app.command()(health)
app.command("seal-status")(seal_status)


@app.command()
def version() -> None:
    """Show vaultkit version."""
    from vaultkit import __version__

    console.print(f"vaultkit [bold green]{__version__}[/bold green]")


if __name__ == "__main__":
    app()
