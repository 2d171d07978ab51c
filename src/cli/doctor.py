"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console

from adapters.http_client import build_async_client
from cli.ui_components import build_settings_table
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_endpoint(settings: AppSettings) -> tuple[bool, str]:
    # Cualquier status HTTP cuenta como alcanzable; solo el transporte falla.
    try:
        async with build_async_client(settings) as client:
            response = await client.get(settings.api_url)
        return True, f"HTTP {response.status_code}"
    except httpx.TransportError as exc:
        return False, str(exc) or type(exc).__name__


@app.command()
def run(ctx: typer.Context) -> None:
    """Show the effective configuration and check the vault is reachable."""

    settings = ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()
    _console.print(build_settings_table(settings))

    ok, detail = asyncio.run(_check_endpoint(settings))
    if ok:
        _console.print(f"[green]Vault reachable:[/green] {settings.api_url} ({detail})")
        return

    _console.print(f"[red]Vault unreachable:[/red] {settings.api_url} ({detail})")
    raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    current = AppSettings()
    api_url = typer.prompt("Vault API URL", default=current.api_url, show_default=True).strip()
    timeout = typer.prompt(
        "HTTP timeout (seconds)",
        default=current.http_timeout_seconds,
        type=float,
        show_default=True,
    )

    if not api_url.startswith(("http://", "https://")):
        raise typer.BadParameter("the API URL must start with http:// or https://")
    if timeout <= 0:
        raise typer.BadParameter("the timeout must be greater than zero")

    env_path = write_user_env_vars(
        {
            "WAIFU_VAULT_API_URL": api_url.rstrip("/"),
            "WAIFU_VAULT_HTTP_TIMEOUT_SECONDS": f"{timeout:g}",
        }
    )

    _console.print(f"[green]Saved vault config to:[/green] {env_path}")
