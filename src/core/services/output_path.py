"""Resolución del destino local de una descarga.

Un único flag `--output` admite "guardar en esta carpeta" y "guardar con este
nombre exacto": si apunta a un directorio existente se le añade el nombre
derivado de la URL; si no, se usa tal cual.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlsplit

from core.errors import ContractViolationError


def filename_from_url(url: str) -> str:
    """Último segmento del path de la URL (o el token si no es una URL)."""

    segment = urlsplit(url).path.rsplit("/", 1)[-1]
    # Un %2F escapado no puede sacar el fichero del directorio destino.
    filename = Path(unquote(segment)).name
    if filename in ("", ".", ".."):
        raise ContractViolationError(f"cannot derive a filename from {url!r}: no path segment")
    return filename


def resolve_output_path(url: str, output: Path | None = None) -> Path:
    filename = filename_from_url(url)
    if output is None:
        return Path(".") / filename
    if output.is_dir():
        return output / filename
    return output
