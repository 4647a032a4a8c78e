from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog
from structlog.typing import EventDict, Processor

from article_renderer.config import AppSettings

APP_LOGGER_NAME = "article_renderer"
TELEMETRY_LOGGER_NAME = "article_renderer.telemetry"
LOG_FILE_NAME = "article-renderer.log"
TELEMETRY_LOG_FILE_NAME = "article-renderer-telemetry.log"


def configure_application_logging(settings: AppSettings) -> Path:
    """Route ``article_renderer.*`` loggers to the console and JSON log files.

    Application records go to stdout and ``article-renderer.log``; telemetry
    events only go to ``article-renderer-telemetry.log``. Calling this again
    replaces the handlers installed by a previous call.
    """
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / LOG_FILE_NAME
    telemetry_log_file = settings.log_dir / TELEMETRY_LOG_FILE_NAME

    _configure_structlog()

    console_level = _console_level(settings)
    _install_handlers(
        logging.getLogger(APP_LOGGER_NAME),
        level=logging.DEBUG,
        handlers=[
            _console_handler(sys.stdout, console_level),
            _json_file_handler(log_file, logging.DEBUG),
        ],
    )
    _install_handlers(
        logging.getLogger(TELEMETRY_LOGGER_NAME),
        level=logging.INFO,
        handlers=[_json_file_handler(telemetry_log_file, logging.INFO)],
    )

    logging.getLogger(APP_LOGGER_NAME).info(
        "logging configured console_level=%s environment=%s path=%s telemetry_path=%s",
        logging.getLevelName(console_level),
        settings.environment,
        log_file,
        telemetry_log_file,
    )
    return log_file


def _console_level(settings: AppSettings) -> int:
    # Content detection diagnostics are logged at DEBUG.
    if settings.is_development:
        return logging.DEBUG
    resolved = getattr(logging, settings.log_level.strip().upper(), None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def _install_handlers(
    logger: logging.Logger,
    *,
    level: int,
    handlers: list[logging.Handler],
) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        logger.addHandler(handler)


def _console_handler(stream: TextIO, level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=_stream_supports_color(stream)),
            ],
        )
    )
    return handler


def _json_file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                _add_record_metadata,
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
        )
    )
    return handler


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _shared_pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _add_record_metadata(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict["pathname"] = record.pathname
        event_dict["lineno"] = record.lineno
        event_dict["func_name"] = record.funcName
    return event_dict


def _stream_supports_color(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except Exception:
        return False
