"""Secret commands: read, write, list, delete."""

from __future__ import annotations

from typing import Annotated

import typer

from vaultkit.cli_commands.connection import open_vault
from vaultkit.errors import VaultError
from vaultkit.output.rich import console, print_error, print_key_values, print_success, print_warning
from vaultkit.response import LogicalResponse


def _parse_pairs(pairs: list[str]) -> dict[str, str]:
    data: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            print_error(f"Expected KEY=VALUE, got {pair!r}")
            raise typer.Exit(code=1)
        data[key] = value
    return data


def _fail_on_client_error(response: LogicalResponse, path: str) -> None:
    if not response.is_client_error:
        return
    if response.status == 404:
        print_error(f"No secret found at {path}")
    else:
        reasons = "; ".join(response.errors) or "no details"
        print_error(f"Vault refused the request ({response.status}): {reasons}")
    raise typer.Exit(code=1)


def read(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path including the mount (e.g. secret/app)")],
    version: Annotated[
        int | None, typer.Option("--version", "-v", help="Secret version (KV v2 only)")
    ] = None,
    field: Annotated[
        str | None, typer.Option("--field", "-f", help="Print only this key's value")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the data as JSON")] = False,
) -> None:
    """Read a secret."""
    vault = open_vault(ctx)
    try:
        response = vault.logical().read(path, version=version)
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _fail_on_client_error(response, path)

    if field is not None:
        value = response.get(field)
        if value is None:
            print_error(f"Key '{field}' not found at {path}")
            raise typer.Exit(code=1)
        console.print(value, markup=False, highlight=False)
        return

    if as_json:
        console.print_json(data=response.data_object)
        return

    title = path
    if response.data_metadata.version is not None:
        title = f"{path} (version {response.data_metadata.version})"
    print_key_values(title, response.data)


def write(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path including the mount")],
    pairs: Annotated[list[str], typer.Argument(help="Values as KEY=VALUE")],
) -> None:
    """Write KEY=VALUE pairs to a secret, replacing its previous data."""
    data = _parse_pairs(pairs)
    vault = open_vault(ctx)
    try:
        response = vault.logical().write(path, data)
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _fail_on_client_error(response, path)
    message = f"Wrote {len(data)} key(s) to {path}"
    if response.data_metadata.version is not None:
        message += f" (version {response.data_metadata.version})"
    print_success(message)


def list_secrets(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Path to list (e.g. secret/ or secret/app/)")],
) -> None:
    """List the keys under a path."""
    vault = open_vault(ctx)
    try:
        response = vault.logical().list(path)
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if response.status != 404:
        _fail_on_client_error(response, path)
    if not response.list_data:
        print_warning(f"No keys found under {path}")
        return
    for key in response.list_data:
        console.print(key, markup=False, highlight=False)


def delete(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Secret path including the mount")],
) -> None:
    """Delete a secret (all versions on KV v2)."""
    vault = open_vault(ctx)
    try:
        vault.logical().delete(path)
    except VaultError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Deleted {path}")
