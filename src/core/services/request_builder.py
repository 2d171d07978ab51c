"""Construcción de requests hacia el vault.

Devuelve `VaultRequest` (una descripción inmutable) sin enviar nada: el
dispatcher la convierte en `httpx.Request` con `client.build_request`, así
se aplican headers y timeouts del cliente y cada forma se verifica sin red.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from core.domain.models import ModifySpec, TokenSpec, UploadSpec
from core.errors import PreconditionError

PASSWORD_HEADER = "x-password"


@dataclass(frozen=True)
class VaultRequest:
    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] | None = None
    files: dict[str, tuple[str, bytes]] | None = None
    json: dict[str, Any] | None = None

    def build(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            self.method,
            self.url,
            params=self.params or None,
            headers=self.headers or None,
            data=self.data,
            files=self.files,
            json=self.json,
        )


def _flag(value: bool) -> str:
    return "true" if value else "false"


def token_url(api_url: str, token: str) -> str:
    """`{endpoint}/{token}` con el token escapado como un único segmento."""

    return f"{api_url.rstrip('/')}/{quote(token, safe='')}"


def build_upload_request(spec: UploadSpec, *, api_url: str) -> VaultRequest:
    """PUT (store-or-replace) de un fichero local o de una URL remota.

    Reglas:
    - `hide_filename` viaja siempre; `password`, `expires` y
      `one_time_download` solo si se indicaron.
    - Cuerpo multipart (`file`) o form urlencoded (`url`), nunca ambos.
    """

    if (spec.file is None) == (spec.url is None):
        raise PreconditionError("exactly one of a local file or a remote URL must be given")

    params: dict[str, str] = {"hide_filename": _flag(spec.hide_filename)}
    if spec.password is not None:
        params["password"] = spec.password
    if spec.expires is not None:
        params["expires"] = spec.expires
    if spec.one_time_download:
        params["one_time_download"] = _flag(True)

    if spec.file is not None:
        if not spec.file.is_file():
            raise PreconditionError(f"file to upload does not exist: {spec.file}")
        files = {"file": (spec.file.name, spec.file.read_bytes())}
        return VaultRequest("PUT", api_url, params=params, files=files)

    return VaultRequest("PUT", api_url, params=params, data={"url": spec.url})


def build_info_request(spec: TokenSpec, *, api_url: str) -> VaultRequest:
    # formatted=true: el servicio devuelve la retención legible ("2 days ...").
    return VaultRequest("GET", token_url(api_url, spec.token), params={"formatted": _flag(True)})


def build_metadata_request(token: str, *, api_url: str) -> VaultRequest:
    """Primer tramo de la descarga por token."""

    return build_info_request(TokenSpec(token=token), api_url=api_url)


def build_delete_request(spec: TokenSpec, *, api_url: str) -> VaultRequest:
    return VaultRequest("DELETE", token_url(api_url, spec.token))


def build_content_request(url: str, *, password: str | None = None) -> VaultRequest:
    """GET del contenido bruto; `x-password` solo si hay password."""

    headers = {PASSWORD_HEADER: password} if password is not None else {}
    return VaultRequest("GET", url, headers=headers)


def build_modify_request(spec: ModifySpec, *, api_url: str) -> VaultRequest:
    if not spec.has_changes():
        raise PreconditionError("nothing to modify: pass at least one option to change")

    body: dict[str, Any] = {}
    if spec.password is not None:
        body["password"] = spec.password
    if spec.previous_password is not None:
        body["previousPassword"] = spec.previous_password
    if spec.custom_expiry is not None:
        body["customExpiry"] = spec.custom_expiry
    if spec.hide_filename is not None:
        body["hideFilename"] = spec.hide_filename

    return VaultRequest("PATCH", token_url(api_url, spec.token), json=body)
