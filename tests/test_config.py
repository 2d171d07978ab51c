import sys
from pathlib import Path

import httpx
import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

from adapters import http_client
from cli import doctor
from cli import main as cli_main
from core.config import DEFAULT_API_URL, AppSettings, get_user_env_file, write_user_env_vars
from core.logging import redact_mapping

runner = CliRunner()


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("WAIFU_VAULT_API_URL", raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.api_url == DEFAULT_API_URL
    assert settings.http_timeout_seconds > 0


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("WAIFU_VAULT_API_URL", "http://localhost:8280/rest/")
    monkeypatch.setenv("WAIFU_VAULT_LOG_LEVEL", "debug")

    settings = AppSettings(_env_file=None)

    assert settings.api_url == "http://localhost:8280/rest"
    assert settings.log_level == "DEBUG"


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, http_timeout_seconds=0)
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, log_level="chatty")


@pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout only")
def test_write_user_env_vars_merges_existing_values(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True)
    env_path.write_text("# comment\nWAIFU_VAULT_USER_AGENT='custom/1.0'\n", encoding="utf-8")

    written = write_user_env_vars({"WAIFU_VAULT_API_URL": "http://localhost/rest", "IGNORED": None})

    assert written == tmp_path / "waifuvault-cli" / ".env"
    lines = written.read_text(encoding="utf-8").splitlines()
    assert "WAIFU_VAULT_API_URL=http://localhost/rest" in lines
    assert "WAIFU_VAULT_USER_AGENT=custom/1.0" in lines
    assert not any(line.startswith("IGNORED") for line in lines)


def test_redact_mapping_hides_passwords() -> None:
    redacted = redact_mapping({"X-Password": "secret", "accept": "*/*"})

    assert redacted == {"X-Password": "***REDACTED***", "accept": "*/*"}


def _serve_doctor(monkeypatch, handler) -> None:
    def _factory(settings=None, **kwargs):
        return http_client.build_async_client(settings, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(doctor, "build_async_client", _factory)


def test_doctor_reports_reachable_endpoint(monkeypatch) -> None:
    _serve_doctor(monkeypatch, lambda request: httpx.Response(404))

    result = runner.invoke(cli_main.app, ["--api-url", "https://vault.test/rest", "doctor", "run"])

    assert result.exit_code == 0, result.output
    assert "Vault reachable" in result.stdout
    assert "HTTP 404" in result.stdout


def test_doctor_reports_unreachable_endpoint(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    _serve_doctor(monkeypatch, handler)

    result = runner.invoke(cli_main.app, ["--api-url", "https://vault.test/rest", "doctor", "run"])

    assert result.exit_code == 1
    assert "Vault unreachable" in result.stdout
