"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y logging de todas las llamadas al vault.
- Facilita testeo: se inyecta un `httpx.MockTransport` en lugar de la red.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.logging import get_logger, redact_mapping

_log = get_logger("http")


async def _log_request(request: httpx.Request) -> None:
    _log.debug(
        "%s %s headers=%s",
        request.method,
        request.url.copy_remove_param("password"),
        redact_mapping(dict(request.headers)),
    )


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    _log.debug(
        "%s %s -> HTTP %s",
        request.method,
        request.url.copy_remove_param("password"),
        response.status_code,
    )


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los defaults del cliente.

    `transport` solo se usa en tests (MockTransport).
    """

    settings = settings or AppSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent, "Accept": "application/json, */*"},
        event_hooks={"request": [_log_request], "response": [_log_response]},
        transport=transport,
    )
