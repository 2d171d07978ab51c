"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- El Core devuelve líneas con un rol semántico (`Emphasis`); aquí se decide
  el color y el formato.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from core.config import AppSettings, get_user_env_file
from core.domain.models import DisplayLine, Emphasis, Interpretation

HEADER = "--= Waifu Vault Client =--"

_EMPHASIS_STYLES: dict[Emphasis, str] = {
    Emphasis.LINK: "bold bright_cyan",
    Emphasis.TOKEN: "bold bright_white",
    Emphasis.PROTECTED: "bold bright_magenta",
    Emphasis.UNPROTECTED: "bold bright_blue",
    Emphasis.DURATION: "bold bright_green",
    Emphasis.PATH: "bold bright_green",
    Emphasis.ERROR: "bold red",
    Emphasis.HINT: "bold bright_yellow",
    Emphasis.SUCCESS: "bright_green",
    Emphasis.FAILURE: "bright_red",
}


def print_header(console: Console) -> None:
    console.print(Text(HEADER, style="bold bright_yellow"))
    console.print()


def build_line(line: DisplayLine) -> Text:
    text = Text(line.text)
    if line.value is not None:
        style = _EMPHASIS_STYLES.get(line.emphasis, "") if line.emphasis else ""
        text.append(line.value, style=style)
    text.append(line.suffix)
    return text


def render_interpretation(console: Console, interpretation: Interpretation) -> None:
    """Cabecera + una línea por `DisplayLine`, sin partir URLs largas."""

    print_header(console)
    for line in interpretation.lines:
        console.print(build_line(line), soft_wrap=True)


def build_settings_table(settings: AppSettings) -> Table:
    """Tabla con la configuración efectiva (usada por `doctor run`)."""

    table = Table(title="Effective configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("api_url", settings.api_url)
    table.add_row("http_timeout_seconds", f"{settings.http_timeout_seconds:g}")
    table.add_row("user_agent", settings.user_agent)
    table.add_row("log_level", settings.log_level)
    table.add_row("user .env", str(get_user_env_file()))
    return table
