"""Interpretación de respuestas del vault.

El servicio codifica éxito/fallo en la *forma* del cuerpo y no solo en el
status ("ya existe" y "creado" comparten forma y difieren en 200/201), así que
aquí se ramifica por ambos ejes.

Todas las funciones son puras: devuelven `Interpretation` (outcome + líneas)
y no imprimen nada. El color lo pone `cli.ui_components`.
"""

from __future__ import annotations

import os
from pathlib import Path

from core.domain.models import (
    DeleteResult,
    DisplayLine,
    Emphasis,
    Interpretation,
    Operation,
    Outcome,
    ServiceFailure,
    ServiceResponse,
    StoredFile,
)
from core.errors import ContractViolationError

_STORED_HEADINGS: dict[Outcome, str] = {
    Outcome.FILE_EXISTS: "File exists!",
    Outcome.FILE_STORED: "File stored successfully!",
    Outcome.FILE_UPDATED: "File updated successfully!",
}


def interpret_response(
    status_code: int,
    response: ServiceResponse,
    *,
    operation: Operation,
) -> Interpretation:
    """Mapea (status HTTP, respuesta parseada) a un `Interpretation`."""

    if isinstance(response, StoredFile):
        return _interpret_stored(status_code, response, operation=operation)
    if isinstance(response, ServiceFailure):
        return interpret_failure(response)
    if isinstance(response, DeleteResult):
        if operation is not Operation.DELETE:
            raise ContractViolationError(
                f"boolean body is only valid for delete, got one from {operation.value}"
            )
        return _interpret_delete(response)
    raise TypeError(f"unsupported response type: {type(response).__name__}")


def check_stored_status(status_code: int) -> None:
    """Un cuerpo Stored solo puede llegar con 200 o 201."""

    if status_code not in (200, 201):
        raise ContractViolationError(
            f"stored-file body returned with HTTP {status_code}; the service only pairs it with 200 or 201"
        )


def stored_outcome(status_code: int, *, operation: Operation) -> Outcome:
    check_stored_status(status_code)
    if operation is Operation.MODIFY:
        return Outcome.FILE_UPDATED
    return Outcome.FILE_EXISTS if status_code == 200 else Outcome.FILE_STORED


def _interpret_stored(status_code: int, stored: StoredFile, *, operation: Operation) -> Interpretation:
    outcome = stored_outcome(status_code, operation=operation)

    lines = [
        DisplayLine(_STORED_HEADINGS[outcome]),
        DisplayLine("It is stored at ", stored.url, Emphasis.LINK),
        DisplayLine("It has the unique token: ", stored.token, Emphasis.TOKEN),
    ]
    if stored.protected:
        lines.append(DisplayLine("It is a ", "PROTECTED", Emphasis.PROTECTED, " file"))
    else:
        lines.append(DisplayLine("It is an ", "UNPROTECTED", Emphasis.UNPROTECTED, " file"))
    lines.append(DisplayLine("It is available for ", stored.retention_period, Emphasis.DURATION))
    if stored.one_time_download:
        lines.append(DisplayLine("It will be ", "DELETED", Emphasis.PROTECTED, " after the first download"))

    return Interpretation(outcome=outcome, lines=tuple(lines))


def interpret_failure(failure: ServiceFailure) -> Interpretation:
    """Nombre + mensaje siempre; una línea extra por error anidado, en orden."""

    lines = [
        DisplayLine(
            "Received a bad response from the API: ",
            failure.name,
            Emphasis.ERROR,
            f" ({failure.status})",
        ),
        DisplayLine("This is probably due to: ", failure.message, Emphasis.HINT),
    ]
    for detail in failure.errors or ():
        lines.append(DisplayLine("  - ", detail.name, Emphasis.ERROR, f": {detail.message}"))

    return Interpretation(outcome=Outcome.SERVICE_ERROR, lines=tuple(lines))


def _interpret_delete(result: DeleteResult) -> Interpretation:
    if result.root:
        return Interpretation(
            outcome=Outcome.FILE_DELETED,
            lines=(DisplayLine("", "File deleted successfully!", Emphasis.SUCCESS),),
        )
    return Interpretation(
        outcome=Outcome.FILE_NOT_DELETED,
        lines=(DisplayLine("", "File was NOT deleted successfully...", Emphasis.FAILURE),),
    )


def interpret_forbidden(*, password_supplied: bool) -> Interpretation:
    """403 en el tramo de contenido: no hay cuerpo JSON, solo el status."""

    if password_supplied:
        message = "The password given for this file is incorrect!"
    else:
        message = "This file is password protected and needs a password to download!"
    return Interpretation(
        outcome=Outcome.SERVICE_ERROR,
        lines=(DisplayLine("", message, Emphasis.FAILURE),),
    )


def interpret_password_required() -> Interpretation:
    return interpret_forbidden(password_supplied=False)


def _display_path(path: Path) -> str:
    # Path(".") / "x" se normaliza a "x"; se muestra como "./x".
    if path.is_absolute() or path.parent != Path("."):
        return str(path)
    return os.path.join(os.curdir, str(path))


def interpret_download_success(output_path: Path) -> Interpretation:
    return Interpretation(
        outcome=Outcome.FILE_DOWNLOADED,
        lines=(
            DisplayLine("File downloaded successfully!"),
            DisplayLine("It is stored at ", _display_path(output_path), Emphasis.PATH),
        ),
    )


def interpret_transport_error(exc: Exception) -> Interpretation:
    detail = str(exc) or type(exc).__name__
    return Interpretation(
        outcome=Outcome.TRANSPORT_ERROR,
        lines=(DisplayLine("Could not reach the vault: ", detail, Emphasis.ERROR),),
    )
