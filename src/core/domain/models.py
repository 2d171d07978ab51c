"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Las respuestas del vault son polimórficas y sin discriminante explícito;
  validar cada forma por separado nos da un parseo estructural y estricto.
- Los argumentos de la CLI llegan aquí ya normalizados como specs inmutables.

Nota:
- Estos modelos describen *qué* se pide y *qué* se recibe, no *cómo* viaja.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, Field, RootModel, StrictBool, ValidationError, field_validator, model_validator
from pydantic.config import ConfigDict

from core.errors import ResponseParseError


# ---------------------------------------------------------------------------
# Specs de comandos (entrada)
# ---------------------------------------------------------------------------


class UploadSpec(BaseModel):
    """Subida de un fichero local o de un recurso remoto (URL).

    La exclusión mutua file/url la garantiza la CLI; el Request Builder la
    vuelve a comprobar antes de construir nada.
    """

    model_config = ConfigDict(frozen=True)

    file: Path | None = Field(default=None, description="Fichero local a subir.")
    url: str | None = Field(default=None, description="Recurso remoto que el vault descargará.")
    password: str | None = Field(default=None, description="Password requerido para descargar.")
    expires: str | None = Field(
        default=None,
        description="Expiración relativa (p.ej. '10m', '1h', '1d').",
    )
    hide_filename: bool = Field(default=False, description="Oculta el nombre en la URL generada.")
    one_time_download: bool = Field(default=False, description="Borra el fichero tras el primer acceso.")


class DownloadSpec(BaseModel):
    """Descarga por token (metadata + contenido) o por URL directa."""

    model_config = ConfigDict(frozen=True)

    token: str | None = Field(default=None, min_length=1)
    url: str | None = Field(default=None, min_length=1)
    output: Path | None = Field(
        default=None,
        description="Fichero o directorio destino. Por defecto, el directorio actual.",
    )
    password: str | None = None


class TokenSpec(BaseModel):
    """Token asignado por el vault (info/delete)."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1)


class ModifySpec(BaseModel):
    """Cambios sobre un fichero ya almacenado. Solo viajan los campos presentes."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1)
    password: str | None = None
    previous_password: str | None = None
    custom_expiry: str | None = None
    hide_filename: bool | None = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.password, self.previous_password, self.custom_expiry, self.hide_filename)
        )


# ---------------------------------------------------------------------------
# Respuestas del servicio
# ---------------------------------------------------------------------------


class StoredFile(BaseModel):
    """Fichero almacenado: éxito de upload/info/modify (HTTP 200 o 201).

    Revisiones recientes del servicio anidan `protected`/`oneTimeDownload`
    dentro de `options`; si el campo plano existe, gana el plano.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    url: str
    protected: bool
    retention_period: str = Field(..., alias="retentionPeriod")
    one_time_download: bool = Field(default=False, alias="oneTimeDownload")

    @model_validator(mode="before")
    @classmethod
    def _lift_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        options = data.get("options")
        if not isinstance(options, dict):
            return data
        merged = dict(data)
        for key in ("protected", "oneTimeDownload"):
            if key not in merged and key in options:
                merged[key] = options[key]
        return merged

    @field_validator("retention_period", mode="before")
    @classmethod
    def _retention_as_text(cls, value: Any) -> Any:
        # Sin `formatted=true` el servicio devuelve milisegundos.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ServiceErrorDetail(BaseModel):
    name: str
    message: str


class ServiceFailure(BaseModel):
    """Error reportado por el servicio, independiente del status HTTP."""

    model_config = ConfigDict(frozen=True)

    name: str
    message: str
    status: int
    errors: list[ServiceErrorDetail] | None = None


class DeleteResult(RootModel[StrictBool]):
    """Única forma que devuelve el endpoint de borrado: un booleano desnudo."""


ServiceResponse = Union[StoredFile, ServiceFailure, DeleteResult]

# Orden de prueba: Stored y Failure no comparten campos requeridos.
_RESPONSE_SHAPES: tuple[type[BaseModel], ...] = (StoredFile, ServiceFailure, DeleteResult)


def parse_service_response(body: bytes | str) -> ServiceResponse:
    """Deserializa un cuerpo JSON probando cada forma conocida en orden.

    Lanza `ResponseParseError` si el cuerpo no es JSON o no encaja en ninguna.
    """

    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"response body is not valid JSON: {exc}", body=text) from exc

    for shape in _RESPONSE_SHAPES:
        try:
            return shape.model_validate(payload)  # type: ignore[return-value]
        except ValidationError:
            continue

    raise ResponseParseError("response body matches no known vault response shape", body=text)


# ---------------------------------------------------------------------------
# Resultado normalizado (salida del intérprete)
# ---------------------------------------------------------------------------


class Operation(str, Enum):
    """Endpoint lógico que produjo la respuesta."""

    UPLOAD = "upload"
    INFO = "info"
    MODIFY = "modify"
    DOWNLOAD = "download"
    DELETE = "delete"


class Outcome(str, Enum):
    FILE_EXISTS = "file_exists"
    FILE_STORED = "file_stored"
    FILE_UPDATED = "file_updated"
    FILE_DOWNLOADED = "file_downloaded"
    FILE_DELETED = "file_deleted"
    FILE_NOT_DELETED = "file_not_deleted"
    SERVICE_ERROR = "service_error"
    TRANSPORT_ERROR = "transport_error"


class Emphasis(str, Enum):
    """Rol semántico de un valor resaltado; el color lo decide la UI."""

    LINK = "link"
    TOKEN = "token"
    PROTECTED = "protected"
    UNPROTECTED = "unprotected"
    DURATION = "duration"
    PATH = "path"
    ERROR = "error"
    HINT = "hint"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class DisplayLine:
    """Una línea de salida: `text` + valor resaltado opcional + `suffix`."""

    text: str
    value: str | None = None
    emphasis: Emphasis | None = None
    suffix: str = ""

    @property
    def plain(self) -> str:
        return f"{self.text}{self.value or ''}{self.suffix}"


@dataclass(frozen=True)
class Interpretation:
    """Outcome + líneas ordenadas para mostrar."""

    outcome: Outcome
    lines: tuple[DisplayLine, ...] = field(default_factory=tuple)

    @property
    def plain_lines(self) -> list[str]:
        return [line.plain for line in self.lines]
