import pytest
from pydantic import ValidationError

from task_resolver.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_port(self) -> None:
        s = Settings()
        assert s.port == 8000

    def test_default_upload_limit(self) -> None:
        s = Settings()
        assert s.max_upload_bytes == 10 * 1024 * 1024

    def test_default_adapter_timeout(self) -> None:
        s = Settings()
        assert s.adapter_timeout_seconds == 30.0

    def test_default_allowed_commands(self) -> None:
        s = Settings()
        assert s.allowed_commands == ["echo", "date", "uname"]
        assert "python3" not in s.allowed_commands
        assert "rm" not in s.allowed_commands


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9001")
        s = Settings()
        assert s.port == 9001

    def test_loads_temp_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEMP_DIR", "/srv/resolver-tmp")
        s = Settings()
        assert s.temp_dir == "/srv/resolver-tmp"

    def test_loads_adapter_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADAPTER_TIMEOUT_SECONDS", "2.5")
        s = Settings()
        assert s.adapter_timeout_seconds == 2.5

    def test_loads_allowed_commands_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOWED_COMMANDS", '["echo", "ls"]')
        s = Settings()
        assert s.allowed_commands == ["echo", "ls"]


class TestSettingsValidation:
    def test_invalid_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_upload_limit_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "ten megs")
        with pytest.raises(ValidationError):
            Settings()
