"""Configuración de logging.

Los logs van a stderr (RichHandler) para no mezclarse con la salida del
comando en stdout. Todo cuelga del logger `waifuvault`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.logging import RichHandler

from core.config import AppSettings

LOGGER_NAME = "waifuvault"

_REDACT_KEYS = {"x-password", "password", "previouspassword", "authorization"}


def redact_mapping(values: Mapping[str, Any], extra_keys: Iterable[str] = ()) -> dict[str, Any]:
    """Copia superficial de `values` con las claves sensibles ocultas."""

    redact_keys = _REDACT_KEYS | {key.lower() for key in extra_keys}
    return {
        key: "***REDACTED***" if key.lower() in redact_keys else value
        for key, value in values.items()
    }


def configure_logging(settings: AppSettings, *, verbose: bool = False) -> None:
    """Configura `waifuvault.*` y `httpx` con un único handler a stderr.

    `httpx` queda fijo en WARNING incluso con `verbose`.

    Reemplaza handlers previos: la CLI puede invocarse varias veces en el
    mismo proceso (tests con CliRunner).
    """

    level = logging.DEBUG if verbose else logging.getLevelName(settings.log_level)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s", datefmt="[%X]"))

    for name in (LOGGER_NAME, "httpx"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False

    logging.getLogger(LOGGER_NAME).setLevel(level)
    # httpx registra la URL completa (query con `password`); `waifuvault.http`
    # ya traza cada request sin ella.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(suffix: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{suffix}" if suffix else LOGGER_NAME)
