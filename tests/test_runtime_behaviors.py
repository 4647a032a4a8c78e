from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
import structlog

from article_renderer.config import AppSettings, load_settings
from article_renderer.logging_config import (
    TELEMETRY_LOG_FILE_NAME,
    _stream_supports_color,  # pyright: ignore[reportPrivateUsage]
    configure_application_logging,
)


def test_config_defaults_follow_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(tmp_path / "data"))

    settings = load_settings()

    assert settings.data_dir == (tmp_path / "data").resolve()
    assert settings.log_dir == (tmp_path / "data" / "logs").resolve()
    assert settings.environment == "production"
    assert settings.is_development is False
    assert settings.default_timezone == "Asia/Tokyo"
    assert settings.revalidate_secret is None


def test_config_explicit_log_dir_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("ARTICLE_RENDERER_LOG_DIR", str(tmp_path / "elsewhere"))

    settings = load_settings()
    assert settings.log_dir == (tmp_path / "elsewhere").resolve()


def test_config_env_bool_branches(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(tmp_path))

    monkeypatch.setenv("ARTICLE_RENDERER_TELEMETRY_ENABLED", "off")
    assert load_settings().telemetry_enabled is False

    monkeypatch.setenv("ARTICLE_RENDERER_TELEMETRY_ENABLED", "yes")
    assert load_settings().telemetry_enabled is True

    monkeypatch.setenv("ARTICLE_RENDERER_TELEMETRY_ENABLED", "maybe")
    assert load_settings().telemetry_enabled is True


def test_config_normalizes_secret_and_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ARTICLE_RENDERER_REVALIDATE_SECRET", "   ")
    monkeypatch.setenv("ARTICLE_RENDERER_ARTICLES_PATH_PREFIX", "posts/")
    monkeypatch.setenv("ARTICLE_RENDERER_SEARCH_PATH", " /find ")
    monkeypatch.setenv("ARTICLE_RENDERER_ENVIRONMENT", "Development")

    settings = load_settings()

    assert settings.revalidate_secret is None
    assert settings.articles_path_prefix == "/posts"
    assert settings.search_path == "/find"
    assert settings.is_development is True


@pytest.mark.parametrize(
    ("env_name", "value"),
    [
        ("ARTICLE_RENDERER_ENVIRONMENT", "staging"),
        ("ARTICLE_RENDERER_TELEMETRY_SINK", "otlp"),
        ("ARTICLE_RENDERER_TAGS_PATH_PREFIX", "/"),
        ("ARTICLE_RENDERER_DEFAULT_TIMEZONE", " "),
    ],
)
def test_config_rejects_invalid_values(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    env_name: str,
    value: str,
) -> None:
    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv(env_name, value)

    with pytest.raises(ValueError):
        load_settings()


def test_configure_application_logging_creates_file(tmp_path: Path) -> None:
    settings = AppSettings(
        data_dir=tmp_path,
        log_dir=tmp_path / "logs",
        log_level="INFO",
        environment="production",
    )
    log_file = configure_application_logging(settings)
    logger = logging.getLogger("article_renderer.test")
    logger.info("runtime-log-test")
    structlog.get_logger("article_renderer.telemetry").info(
        "telemetry",
        telemetry_event="test.event",
    )

    app_logger = logging.getLogger("article_renderer")
    assert len(app_logger.handlers) == 2
    levels = {handler.level for handler in app_logger.handlers}
    assert logging.INFO in levels
    assert logging.DEBUG in levels
    file_handlers = [
        handler for handler in app_logger.handlers if isinstance(handler, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert not isinstance(file_handlers[0], RotatingFileHandler)

    for handler in app_logger.handlers:
        handler.flush()
    telemetry_logger = logging.getLogger("article_renderer.telemetry")
    assert telemetry_logger.propagate is False
    assert len(telemetry_logger.handlers) == 1
    for handler in telemetry_logger.handlers:
        handler.flush()

    assert log_file.exists()
    log_lines = [
        line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()
    ]
    parsed_events = [json.loads(line) for line in log_lines]
    runtime_event = next(
        event for event in parsed_events if event.get("event") == "runtime-log-test"
    )
    assert runtime_event["logger"] == "article_renderer.test"
    assert runtime_event["level"] == "info"
    assert runtime_event["pathname"]
    assert runtime_event["lineno"]
    assert all(event.get("telemetry_event") != "test.event" for event in parsed_events)

    telemetry_log_file = settings.log_dir / TELEMETRY_LOG_FILE_NAME
    telemetry_events = [
        json.loads(line)
        for line in telemetry_log_file.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    telemetry_event = next(
        event for event in telemetry_events if event.get("telemetry_event") == "test.event"
    )
    assert telemetry_event["logger"] == "article_renderer.telemetry"


def test_development_mode_logs_debug_to_console(tmp_path: Path) -> None:
    settings = AppSettings(data_dir=tmp_path, log_dir=tmp_path / "logs", environment="development")
    configure_application_logging(settings)

    app_logger = logging.getLogger("article_renderer")
    levels = {handler.level for handler in app_logger.handlers}
    assert levels == {logging.DEBUG}


def test_stream_supports_color_detects_tty() -> None:
    class _TTY:
        def isatty(self) -> bool:
            return True

    class _Pipe:
        def isatty(self) -> bool:
            return False

    class _Broken:
        def isatty(self) -> bool:
            raise RuntimeError("boom")

    assert _stream_supports_color(_TTY()) is True
    assert _stream_supports_color(_Pipe()) is False
    assert _stream_supports_color(_Broken()) is False
    assert _stream_supports_color(object()) is False
