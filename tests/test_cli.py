from pathlib import Path
from typing import Callable

import httpx
import pytest
from typer.testing import CliRunner

from adapters import http_client
from cli import main as cli_main

API = "https://vault.test/rest"
CONTENT_URL = "https://vault.test/f/1711111111/cat.png"

runner = CliRunner()


@pytest.fixture
def calls(monkeypatch) -> list[httpx.Request]:
    monkeypatch.delenv("WAIFU_VAULT_API_URL", raising=False)
    return []


def _serve(monkeypatch, calls: list[httpx.Request], handler: Callable[[httpx.Request], httpx.Response]) -> None:
    def _recording(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    def _factory(settings=None, **kwargs):
        return http_client.build_async_client(settings, transport=httpx.MockTransport(_recording))

    monkeypatch.setattr(cli_main, "build_async_client", _factory)


def _invoke(*args: str):
    return runner.invoke(cli_main.app, ["--api-url", API, *args])


def test_upload_created(monkeypatch, calls, tmp_path: Path) -> None:
    source = tmp_path / "cat.png"
    source.write_bytes(b"png")
    body = {"token": "tok-1", "url": CONTENT_URL, "protected": True, "retentionPeriod": "1 day"}
    _serve(monkeypatch, calls, lambda request: httpx.Response(201, json=body))

    result = _invoke("upload", "--file", str(source), "--password", "pw", "--expires", "1d")

    assert result.exit_code == 0, result.output
    assert "--= Waifu Vault Client =--" in result.stdout
    assert "File stored successfully!" in result.stdout
    assert CONTENT_URL in result.stdout
    assert "PROTECTED" in result.stdout
    assert calls[0].url.params["expires"] == "1d"


def test_service_failure_is_rendered_and_exits_zero(monkeypatch, calls) -> None:
    body = {
        "name": "BAD_REQUEST",
        "message": "Validation failed",
        "status": 400,
        "errors": [{"name": "url", "message": "not a valid URL"}],
    }
    _serve(monkeypatch, calls, lambda request: httpx.Response(400, json=body))

    result = _invoke("upload", "--url", "not-a-url")

    assert result.exit_code == 0
    assert "BAD_REQUEST (400)" in result.stdout
    assert "Validation failed" in result.stdout
    assert "url: not a valid URL" in result.stdout


@pytest.mark.parametrize(
    "args",
    [
        ["upload"],
        ["upload", "--file", "a.txt", "--url", "https://example.com/a.txt"],
        ["download"],
        ["download", "--token", "t", "--url", CONTENT_URL],
        ["modify", "--token", "t"],
        ["delete", "--token", ""],
        ["info", "--token", ""],
        ["modify", "--token", "", "--custom-expiry", "1d"],
        ["download", "--token", ""],
        ["download", "--url", ""],
    ],
)
def test_invalid_usage_exits_two_without_network(monkeypatch, calls, args) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(500))

    result = _invoke(*args)

    assert result.exit_code == 2
    assert calls == []


def test_transport_error_exits_non_zero(monkeypatch, calls) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _serve(monkeypatch, calls, handler)

    result = _invoke("info", "--token", "tok-1")

    assert result.exit_code == 1
    assert "Could not reach the vault: connection refused" in result.stdout


def test_unparseable_response_exits_non_zero(monkeypatch, calls) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, json={"unexpected": True}))

    result = _invoke("info", "--token", "tok-1")

    assert result.exit_code == 1
    assert "File exists!" not in result.stdout


def test_stored_body_with_unexpected_status_exits_non_zero(monkeypatch, calls) -> None:
    body = {"token": "tok-1", "url": CONTENT_URL, "protected": False, "retentionPeriod": "1 day"}
    _serve(monkeypatch, calls, lambda request: httpx.Response(500, json=body))

    result = _invoke("info", "--token", "tok-1")

    assert result.exit_code == 1


def test_delete(monkeypatch, calls) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, content=b"true"))

    result = _invoke("delete", "--token", "tok-1")

    assert result.exit_code == 0
    assert "File deleted successfully!" in result.stdout
    assert str(calls[0].url) == f"{API}/tok-1"


def test_protected_token_download_without_password(monkeypatch, calls, tmp_path: Path) -> None:
    body = {"token": "tok-1", "url": CONTENT_URL, "protected": True, "retentionPeriod": "1 day"}
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, json=body))

    result = _invoke("download", "--token", "tok-1", "--output", str(tmp_path))

    assert result.exit_code == 0
    assert "needs a password" in result.stdout
    assert len(calls) == 1
    assert not (tmp_path / "cat.png").exists()


def test_direct_download_writes_file(monkeypatch, calls, tmp_path: Path) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, content=b"meow"))

    result = _invoke("download", "--url", CONTENT_URL, "--output", str(tmp_path), "--password", "pw")

    assert result.exit_code == 0, result.output
    assert "File downloaded successfully!" in result.stdout
    assert (tmp_path / "cat.png").read_bytes() == b"meow"
    assert calls[0].headers["x-password"] == "pw"


def test_download_into_missing_directory_exits_non_zero(monkeypatch, calls, tmp_path: Path) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, content=b"meow"))

    result = _invoke("download", "--url", CONTENT_URL, "--output", str(tmp_path / "missing" / "cat.png"))

    assert result.exit_code == 1


def test_modify_hide_filename_flag(monkeypatch, calls) -> None:
    body = {"token": "tok-1", "url": CONTENT_URL, "protected": False, "retentionPeriod": "1 day"}
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, json=body))

    result = _invoke("modify", "--token", "tok-1", "--show-filename")

    assert result.exit_code == 0
    assert "File updated successfully!" in result.stdout
    assert calls[0].method == "PATCH"
    assert calls[0].read() in (b'{"hideFilename":false}', b'{"hideFilename": false}')


def test_empty_token_is_reported_as_usage_error(monkeypatch, calls) -> None:
    _serve(monkeypatch, calls, lambda request: httpx.Response(200, content=b"true"))

    result = _invoke("delete", "--token", "")

    assert result.exit_code == 2
    assert "ValidationError" not in result.output
    assert "--token" in result.output


@pytest.mark.parametrize(
    "error",
    [
        httpx.TooManyRedirects("Exceeded maximum allowed redirects."),
        httpx.DecodingError("Malformed gzip payload"),
    ],
)
def test_any_request_failure_renders_transport_error(monkeypatch, calls, error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        error.request = request
        raise error

    _serve(monkeypatch, calls, handler)

    result = _invoke("info", "--token", "tok-1")

    assert result.exit_code == 1
    assert "Could not reach the vault:" in result.stdout


def test_verbose_logging_never_shows_the_password(monkeypatch, calls, tmp_path: Path) -> None:
    source = tmp_path / "cat.png"
    source.write_bytes(b"png")
    body = {"token": "tok-1", "url": CONTENT_URL, "protected": True, "retentionPeriod": "1 day"}
    _serve(monkeypatch, calls, lambda request: httpx.Response(201, json=body))

    result = _invoke("-v", "upload", "--file", str(source), "--password", "hunter2")

    assert result.exit_code == 0, result.output
    assert calls[0].url.params["password"] == "hunter2"
    assert "hunter2" not in result.output
