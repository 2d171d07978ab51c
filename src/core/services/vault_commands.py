"""Orquestación de los comandos del vault.

Cada comando encadena Request Builder -> envío -> parseo -> intérprete y
devuelve un `Interpretation`; imprimir es cosa de la CLI.

Concurrencia:
- Un comando = una o dos peticiones secuenciales. La descarga por token
  necesita `protected` y la URL real antes de pedir el contenido.

Errores:
- `httpx.RequestError`, `ResponseParseError` y `ContractViolationError` se
  propagan sin tocar; los fallos reportados por el servicio son un
  `Interpretation` más.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from core.domain.models import (
    DownloadSpec,
    Interpretation,
    ModifySpec,
    Operation,
    ServiceFailure,
    StoredFile,
    TokenSpec,
    UploadSpec,
    parse_service_response,
)
from core.errors import ContractViolationError, PreconditionError
from core.logging import get_logger
from core.services.output_path import resolve_output_path
from core.services.request_builder import (
    VaultRequest,
    build_content_request,
    build_delete_request,
    build_info_request,
    build_metadata_request,
    build_modify_request,
    build_upload_request,
)
from core.services.response_interpreter import (
    check_stored_status,
    interpret_download_success,
    interpret_failure,
    interpret_forbidden,
    interpret_password_required,
    interpret_response,
)

_log = get_logger("commands")


async def _send(client: httpx.AsyncClient, request: VaultRequest) -> httpx.Response:
    return await client.send(request.build(client))


def _interpret(response: httpx.Response, *, operation: Operation) -> Interpretation:
    parsed = parse_service_response(response.content)
    _log.debug("%s: HTTP %s parsed as %s", operation.value, response.status_code, type(parsed).__name__)
    return interpret_response(response.status_code, parsed, operation=operation)


async def upload_file(client: httpx.AsyncClient, spec: UploadSpec, *, api_url: str) -> Interpretation:
    request = build_upload_request(spec, api_url=api_url)
    _log.info("uploading %s", spec.file or spec.url)
    response = await _send(client, request)
    return _interpret(response, operation=Operation.UPLOAD)


async def file_info(client: httpx.AsyncClient, spec: TokenSpec, *, api_url: str) -> Interpretation:
    response = await _send(client, build_info_request(spec, api_url=api_url))
    return _interpret(response, operation=Operation.INFO)


async def modify_file(client: httpx.AsyncClient, spec: ModifySpec, *, api_url: str) -> Interpretation:
    response = await _send(client, build_modify_request(spec, api_url=api_url))
    return _interpret(response, operation=Operation.MODIFY)


async def delete_file(client: httpx.AsyncClient, spec: TokenSpec, *, api_url: str) -> Interpretation:
    response = await _send(client, build_delete_request(spec, api_url=api_url))
    return _interpret(response, operation=Operation.DELETE)


async def download_file(client: httpx.AsyncClient, spec: DownloadSpec, *, api_url: str) -> Interpretation:
    """Descarga por URL directa o por token (metadata y luego contenido).

    En modo token, un fichero protegido sin password corta antes de pedir
    el contenido. Sin 200 en el contenido no se escribe nada en disco.
    """

    if (spec.token is None) == (spec.url is None):
        raise PreconditionError("exactly one of a token or a direct URL must be given")

    if spec.token is not None:
        response = await _send(client, build_metadata_request(spec.token, api_url=api_url))
        metadata = parse_service_response(response.content)
        if isinstance(metadata, ServiceFailure):
            return interpret_failure(metadata)
        if not isinstance(metadata, StoredFile):
            raise ContractViolationError("metadata endpoint returned a boolean body")
        check_stored_status(response.status_code)

        if metadata.protected and spec.password is None:
            _log.info("token %s is protected and no password was given; skipping content fetch", spec.token)
            return interpret_password_required()
        content_url = metadata.url
    else:
        content_url = spec.url

    assert content_url is not None
    return await _fetch_content(client, content_url, spec)


async def _fetch_content(client: httpx.AsyncClient, url: str, spec: DownloadSpec) -> Interpretation:
    response = await _send(client, build_content_request(url, password=spec.password))

    # 403 llega sin cuerpo JSON: se decide solo por el status.
    if response.status_code == httpx.codes.FORBIDDEN:
        return interpret_forbidden(password_supplied=spec.password is not None)
    if response.status_code != httpx.codes.OK:
        return _interpret(response, operation=Operation.DOWNLOAD)

    output_path = resolve_output_path(url, spec.output)
    write_content(output_path, response.content)
    _log.info("wrote %d bytes to %s", len(response.content), output_path)
    return interpret_download_success(output_path)


def write_content(path: Path, content: bytes) -> None:
    """Escribe el contenido; si la escritura falla no deja un fichero a medias."""

    fh = path.open("wb")
    try:
        with fh:
            fh.write(content)
    except OSError:
        path.unlink(missing_ok=True)
        raise
