"""Tests for errors, configuration and logging setup."""

import io
import logging

import pytest
import yaml

from weekgoals.foundation.config import (
    StorageConfig,
    WeekGoalsConfig,
    _apply_env_overrides,
    _defaults,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)
from weekgoals.foundation.errors import (
    ConfigError,
    ErrorCode,
    NotFoundError,
    WeekGoalsError,
    goal_not_found,
)
from weekgoals.foundation.logging import configure_logging
from weekgoals.storage import open_server_stores


class TestErrors:
    """Structured error codes and messages."""

    def test_message_and_id(self) -> None:
        err = goal_not_found("abc")
        assert isinstance(err, NotFoundError)
        assert err.message == "Goal 'abc' not found."
        assert err.error_id == "WG-2001"
        assert str(err) == "[WG-2001] Goal 'abc' not found."

    def test_categories(self) -> None:
        assert ErrorCode.AUTH_REQUIRED.category == "auth"
        assert ErrorCode.TEXT_EMPTY.category == "validation"
        assert ErrorCode.STORAGE_CORRUPT.category == "io"

    def test_missing_context_keeps_template(self) -> None:
        err = WeekGoalsError(ErrorCode.TEXT_EMPTY)
        assert err.message == "{field} must not be empty"

    def test_to_dict(self) -> None:
        data = goal_not_found("abc").to_dict()
        assert data["code"] == 2001
        assert data["category"] == "not_found"
        assert data["context"] == {"id": "abc"}


class TestConfig:
    """YAML files, env overrides and caching."""

    def test_defaults(self) -> None:
        config = load_config()
        assert isinstance(config, WeekGoalsConfig)
        assert config.storage.backend == "json"
        assert config.auth.session_ttl_days == 30
        assert config.server.port == 3001
        assert config.debug is False

    def test_explicit_file(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"storage": {"backend": "sqlite"}, "server": {"port": 8000}}),
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.storage.backend == "sqlite"
        assert config.server.port == 8000
        assert config.server.host == "127.0.0.1"

    def test_project_file_is_found(self, tmp_path) -> None:
        project = tmp_path / ".weekgoals"
        project.mkdir()
        (project / "config.yaml").write_text("auth:\n  session_ttl_days: 7\n", encoding="utf-8")
        assert load_config().auth.session_ttl_days == 7

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("WEEKGOALS_SERVER_PORT", "9000")
        monkeypatch.setenv("WEEKGOALS_SERVER_CORS_ORIGINS", "http://a, http://b")
        monkeypatch.setenv("WEEKGOALS_DEBUG", "true")
        config = load_config()
        assert config.storage.backend == "memory"
        assert config.server.port == 9000
        assert config.server.cors_origins == ["http://a", "http://b"]
        assert config.debug is True

    def test_unknown_env_keys_ignored(self) -> None:
        result = _apply_env_overrides(_defaults(), {"WEEKGOALS_SERVER_COLOR": "blue", "OTHER": "x"})
        assert result == _defaults()

    def test_unknown_backend_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_STORAGE_BACKEND", "postgres")
        with pytest.raises(ConfigError):
            load_config()

    def test_non_positive_ttl_falls_back(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_AUTH_SESSION_TTL_DAYS", "-3")
        assert load_config().auth.session_ttl_days == 30

    def test_get_config_caches(self) -> None:
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_save_default_config(self, tmp_path) -> None:
        path = save_default_config(tmp_path / "nested" / "config.yaml")
        assert yaml.safe_load(path.read_text(encoding="utf-8")) == _defaults()
        assert load_config(path).server.port == 3001


class TestLogging:
    """Level resolution order."""

    def test_default_is_warning(self) -> None:
        assert configure_logging(stream=io.StringIO()) == logging.WARNING

    def test_debug_flag(self) -> None:
        assert configure_logging(debug=True, stream=io.StringIO()) == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_LOG_LEVEL", "ERROR")
        assert configure_logging(level="INFO", stream=io.StringIO()) == logging.INFO

    def test_env_level(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_LOG_LEVEL", "error")
        assert configure_logging(debug=True, stream=io.StringIO()) == logging.ERROR

    def test_noisy_loggers_quieted(self) -> None:
        configure_logging(debug=True, stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_output_goes_to_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)
        logging.getLogger("weekgoals.test").info("hello")
        assert "hello" in stream.getvalue()


class TestServerLogging:
    """The profile used by ``weekgoals serve``."""

    def test_server_defaults_to_info(self) -> None:
        assert configure_logging(server=True, stream=io.StringIO()) == logging.INFO

    def test_access_log_only_in_server_profile(self) -> None:
        configure_logging(server=True, stream=io.StringIO())
        assert logging.getLogger("uvicorn.access").level == logging.INFO
        configure_logging(stream=io.StringIO())
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_server_lines_carry_level_and_logger(self) -> None:
        stream = io.StringIO()
        configure_logging(server=True, stream=stream)
        logging.getLogger("weekgoals.storage").info("Server using sqlite store at x.db")
        line = stream.getvalue()
        assert "INFO" in line
        assert "weekgoals.storage: Server using sqlite store at x.db" in line

    def test_store_selection_is_logged(self, tmp_path) -> None:
        stream = io.StringIO()
        configure_logging(server=True, stream=stream)
        goals, _ = open_server_stores(StorageConfig(backend="sqlite"), tmp_path / "s.db")
        goals.close()
        assert f"sqlite store at {tmp_path / 's.db'}" in stream.getvalue()

    def test_log_file_captures_debug(self, tmp_path) -> None:
        stream = io.StringIO()
        log_file = tmp_path / "logs" / "server.log"
        configure_logging(server=True, stream=stream, log_file=log_file)
        logging.getLogger("weekgoals.test").debug("detail")
        configure_logging(stream=io.StringIO())

        assert "detail" in log_file.read_text(encoding="utf-8")
        assert "detail" not in stream.getvalue()

    def test_log_file_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("WEEKGOALS_SERVER_LOG_FILE", "/var/log/weekgoals.log")
        assert load_config().server.log_file == "/var/log/weekgoals.log"
