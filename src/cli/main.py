"""CLI principal (Typer).

La CLI es el borde de errores:
- Fallos reportados por el vault: se muestran y el proceso sale con 0
  (la petición llegó bien aunque la operación fallase).
- Transporte, parseo, contrato roto o escritura local: exit 1.
- Uso incorrecto de flags: exit 2 (Typer/Click).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console

from adapters.http_client import build_async_client
from cli.doctor import app as doctor_app
from cli.ui_components import render_interpretation
from core.config import AppSettings
from core.domain.models import DownloadSpec, Interpretation, ModifySpec, TokenSpec, UploadSpec
from core.errors import ContractViolationError, PreconditionError, ResponseParseError
from core.logging import configure_logging, get_logger
from core.services import vault_commands
from core.services.response_interpreter import interpret_transport_error

app = typer.Typer(
    no_args_is_help=True,
    help="Upload, download and manage files stored in the Waifu Vault.",
    pretty_exceptions_enable=False,
)
app.add_typer(doctor_app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)
_log = get_logger("cli")

SpecT = TypeVar("SpecT", bound=BaseModel)
VaultCommand = Callable[[httpx.AsyncClient, AppSettings], Awaitable[Interpretation]]


@app.callback()
def main(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help="Override the vault REST endpoint for this invocation.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP traffic to stderr."),
) -> None:
    """Waifu Vault client."""

    overrides = {"api_url": api_url} if api_url else {}
    settings = AppSettings(**overrides)
    configure_logging(settings, verbose=verbose)
    ctx.obj = settings


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()


def _build_spec(model: type[SpecT], **values: Any) -> SpecT:
    """Valida los argumentos en el modelo; los rechazos son errores de uso."""

    try:
        return model(**values)
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            if error["loc"]:
                option = str(error["loc"][0]).replace("_", "-")
                problems.append(f"--{option}: {error['msg']}")
            else:
                problems.append(error["msg"])
        raise typer.BadParameter("; ".join(problems)) from exc


def _execute(settings: AppSettings, command: VaultCommand) -> None:
    async def _run() -> Interpretation:
        async with build_async_client(settings) as client:
            return await command(client, settings)

    try:
        interpretation = asyncio.run(_run())
    except httpx.RequestError as exc:
        _log.debug("transport failure", exc_info=True)
        render_interpretation(_console, interpret_transport_error(exc))
        raise typer.Exit(code=1) from exc
    except httpx.InvalidURL as exc:
        raise typer.BadParameter(str(exc)) from exc
    except PreconditionError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except ResponseParseError as exc:
        _err_console.print(f"[bold red]Unexpected response from the vault:[/bold red] {exc}")
        if exc.body:
            _err_console.print(exc.body, markup=False, highlight=False)
        raise typer.Exit(code=1) from exc
    except ContractViolationError as exc:
        _err_console.print(f"[bold red]Vault contract violation:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        _err_console.print(f"[bold red]Local file error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    render_interpretation(_console, interpretation)


@app.command()
def upload(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="File to upload to the vault (max 100MB)."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Upload to the vault via a URL (max 100MB)."),
    expires: Optional[str] = typer.Option(
        None,
        "--expires",
        "-e",
        help="Expiry for the content, e.g. 30m, 12h or 1d.",
    ),
    hide_filename: bool = typer.Option(False, "--hide-filename", help="Hide the filename from the generated URL."),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Password required to download the file.",
    ),
    one_time_download: bool = typer.Option(
        False,
        "--one-time-download",
        help="Delete the file after its first download.",
    ),
) -> None:
    """Upload a file (or a remote URL) to the vault."""

    if (file is None) == (url is None):
        raise typer.BadParameter("pass exactly one of --file or --url")

    spec = _build_spec(
        UploadSpec,
        file=file,
        url=url,
        password=password,
        expires=expires,
        hide_filename=hide_filename,
        one_time_download=one_time_download,
    )
    _execute(
        _settings(ctx),
        lambda client, settings: vault_commands.upload_file(client, spec, api_url=settings.api_url),
    )


@app.command()
def download(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Direct URL of the file to download."),
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Token of the file to download."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file, or an existing directory to save into.",
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Password, if the file is protected.",
    ),
) -> None:
    """Download a file from the vault."""

    if (url is None) == (token is None):
        raise typer.BadParameter("pass exactly one of --url or --token")

    spec = _build_spec(DownloadSpec, url=url, token=token, output=output, password=password)
    _execute(
        _settings(ctx),
        lambda client, settings: vault_commands.download_file(client, spec, api_url=settings.api_url),
    )


@app.command()
def info(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-t", help="Token of the file."),
) -> None:
    """Show information about a file in the vault."""

    spec = _build_spec(TokenSpec, token=token)
    _execute(
        _settings(ctx),
        lambda client, settings: vault_commands.file_info(client, spec, api_url=settings.api_url),
    )


@app.command()
def modify(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-t", help="Token of the file to modify."),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Add a password (replaces the current one if set).",
    ),
    previous_password: Optional[str] = typer.Option(
        None,
        "--previous-password",
        help="Current password (required when changing an existing password).",
    ),
    custom_expiry: Optional[str] = typer.Option(
        None,
        "--custom-expiry",
        "-e",
        help="New expiry for the file, e.g. 1d.",
    ),
    hide_filename: Optional[bool] = typer.Option(
        None,
        "--hide-filename/--show-filename",
        help="Hide or show the filename in the URL.",
    ),
) -> None:
    """Modify the options of a file in the vault."""

    spec = _build_spec(
        ModifySpec,
        token=token,
        password=password,
        previous_password=previous_password,
        custom_expiry=custom_expiry,
        hide_filename=hide_filename,
    )
    _execute(
        _settings(ctx),
        lambda client, settings: vault_commands.modify_file(client, spec, api_url=settings.api_url),
    )


@app.command()
def delete(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", "-t", help="Token of the file to delete."),
) -> None:
    """Delete a file from the vault."""

    spec = _build_spec(TokenSpec, token=token)
    _execute(
        _settings(ctx),
        lambda client, settings: vault_commands.delete_file(client, spec, api_url=settings.api_url),
    )


def run() -> None:
    app()
