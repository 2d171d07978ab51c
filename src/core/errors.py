"""Errores del cliente.

Por qué una jerarquía propia:
- La CLI es el único borde que decide el exit code; el Core solo lanza.
- Los fallos de transporte siguen siendo `httpx.TransportError` y no se envuelven.
"""

from __future__ import annotations


class VaultClientError(Exception):
    """Base de todos los errores propios del cliente."""


class PreconditionError(VaultClientError, ValueError):
    """Uso incorrecto de una especificación de comando (p.ej. file y url a la vez)."""


class ResponseParseError(VaultClientError):
    """El cuerpo recibido no encaja con ninguna forma conocida de respuesta."""

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class ContractViolationError(VaultClientError):
    """La respuesta rompe el contrato del servicio (versión cliente/servicio distinta)."""
