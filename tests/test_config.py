"""
Tests for the tool config loader, dotenv parsing, the installation
locator and remote resources.
"""

import textwrap
import urllib.error
from pathlib import Path

import pytest

from seat_installer.core.config.loader import load_tool_config, parse_env_file, parse_env_text
from seat_installer.core.errors import (
    ConfigError,
    ExternalDownloadError,
    InstallationNotFoundError,
    InvalidResourceError,
)
from seat_installer.core.models.config import DEFAULT_RESOURCE_URL, ToolConfig
from seat_installer.core.services import resources
from seat_installer.core.services.installation import (
    find_installation,
    is_installation,
    resolve_installation,
)
from seat_installer.core.services.resources import ResourceDownloader, check_reachable, fetch

# ── Dotenv parsing ──────────────────────────────────────────────


class TestParseEnv:
    def test_forms(self):
        content = textwrap.dedent("""\
            # comment
            APP_KEY=base64:abc=
            export REDIS_HOST=127.0.0.1
            DB_PASSWORD="with spaces"
            MAIL_DRIVER='smtp'

            not a pair
        """)
        assert parse_env_text(content) == {
            "APP_KEY": "base64:abc=",
            "REDIS_HOST": "127.0.0.1",
            "DB_PASSWORD": "with spaces",
            "MAIL_DRIVER": "smtp",
        }

    def test_missing_file(self, tmp_path: Path):
        assert parse_env_file(tmp_path / ".env") == {}


# ── Tool config ─────────────────────────────────────────────────


class TestLoadToolConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_tool_config(tmp_path / "seat-tool.conf")
        assert config == ToolConfig()
        assert config.resource_url == DEFAULT_RESOURCE_URL

    def test_env_style(self, tmp_path: Path):
        path = tmp_path / "seat-tool.conf"
        path.write_text("SEAT_PATH=/srv/seat\nSEAT_COMMAND_TIMEOUT=120\nUNRELATED=1\n")
        config = load_tool_config(path)
        assert config.seat_path == "/srv/seat"
        assert config.command_timeout == 120

    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "seat-tool.yml"
        path.write_text("seat_path: /opt/seat\nresource_url: https://mirror.example/resources/\n")
        config = load_tool_config(path)
        assert config.seat_path == "/opt/seat"
        assert config.resource_url == "https://mirror.example/resources/"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "custom.conf"
        path.write_text("SEAT_PATH=/from/env\n")
        monkeypatch.setenv("SEAT_TOOL_CONF", str(path))
        assert load_tool_config().seat_path == "/from/env"

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "seat-tool.conf"
        path.write_text("SEAT_COMMAND_TIMEOUT=soon\n")
        with pytest.raises(ConfigError):
            load_tool_config(path)

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "seat-tool.yaml"
        path.write_text("seat_path: [unclosed\n")
        with pytest.raises(ConfigError):
            load_tool_config(path)

    def test_yaml_not_mapping(self, tmp_path: Path):
        path = tmp_path / "seat-tool.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_tool_config(path)

    def test_directory(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_tool_config(tmp_path)


# ── Installation locator ────────────────────────────────────────


def _make_installation(root: Path) -> Path:
    for d in ("app", "changelogs", "database"):
        (root / d).mkdir(parents=True)
    for f in ("artisan", "composer.json", "server.php"):
        (root / f).write_text("")
    return root


class TestInstallation:
    def test_signature(self, tmp_path: Path):
        assert is_installation(_make_installation(tmp_path / "seat"))
        (tmp_path / "seat" / "server.php").unlink()
        assert not is_installation(tmp_path / "seat")

    def test_first_candidate_wins(self, tmp_path: Path):
        first = _make_installation(tmp_path / "a")
        _make_installation(tmp_path / "b")
        found = find_installation(candidates=[str(tmp_path / "missing"), str(first), str(tmp_path / "b")])
        assert found == str(first)

    def test_config_path_preferred(self, tmp_path: Path):
        configured = _make_installation(tmp_path / "configured")
        candidate = _make_installation(tmp_path / "candidate")
        config = ToolConfig(seat_path=str(configured))
        assert find_installation(config, candidates=[str(candidate)]) == str(configured)

    def test_invalid_config_path_falls_back(self, tmp_path: Path, caplog):
        candidate = _make_installation(tmp_path / "candidate")
        config = ToolConfig(seat_path=str(tmp_path / "gone"))
        assert find_installation(config, candidates=[str(candidate)]) == str(candidate)
        assert "does not exist" in caplog.text

    def test_not_found(self, tmp_path: Path):
        with pytest.raises(InstallationNotFoundError) as exc:
            find_installation(candidates=[str(tmp_path)])
        assert exc.value.remediation == "--seat-path /path/to/seat"

    def test_resolve_explicit(self, tmp_path: Path):
        seat = _make_installation(tmp_path / "seat")
        assert resolve_installation(str(seat)) == str(seat)
        with pytest.raises(InstallationNotFoundError, match="could not be found"):
            resolve_installation(str(tmp_path))


# ── Remote resources ────────────────────────────────────────────


class FakeResponse:
    def __init__(self, body: bytes = b"", status: int = 200) -> None:
        self.body = body
        self.status = status

    def read(self):
        return self.body

    def getcode(self):
        return self.status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestResources:
    def test_download_registered(self, monkeypatch):
        urls = []

        def urlopen(req, timeout):
            urls.append(req.full_url)
            return FakeResponse(b"[program:seat]")

        monkeypatch.setattr(resources.urllib.request, "urlopen", urlopen)
        text = ResourceDownloader("https://example.invalid/resources").download_resource("supervisor-seat.ini")
        assert text == "[program:seat]"
        assert urls == ["https://example.invalid/resources/supervisor-seat.ini"]

    def test_unregistered_name(self):
        with pytest.raises(InvalidResourceError):
            ResourceDownloader().download_resource("../../etc/passwd")

    def test_http_error(self, monkeypatch):
        def urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 404, "Not Found", {}, None)

        monkeypatch.setattr(resources.urllib.request, "urlopen", urlopen)
        with pytest.raises(ExternalDownloadError, match="HTTP 404"):
            fetch("https://example.invalid/x")

    def test_reachable(self, monkeypatch):
        monkeypatch.setattr(resources.urllib.request, "urlopen", lambda req, timeout: FakeResponse(status=200))
        status = check_reachable("https://example.invalid/status")
        assert status["reachable"] is True
        assert status["status"] == 200

    def test_unreachable(self, monkeypatch):
        def urlopen(req, timeout):
            raise urllib.error.URLError("Name or service not known")

        monkeypatch.setattr(resources.urllib.request, "urlopen", urlopen)
        status = check_reachable("https://example.invalid/status")
        assert status["reachable"] is False
        assert "Name or service" in status["error"]
