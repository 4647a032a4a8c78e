from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sized
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Literal, Protocol

import structlog

from article_renderer.logging_config import TELEMETRY_LOGGER_NAME

TelemetryValue = bool | int | float | str | None

# Attribute keys containing any of these are never forwarded, since article
# bodies and webhook secrets travel through the same code paths.
_REDACTED_KEY_PARTS: tuple[str, ...] = (
    "authorization",
    "body",
    "content",
    "cookie",
    "html",
    "markdown",
    "payload",
    "secret",
    "token",
)
_REDACTED = "[redacted]"
_MAX_TEXT_LENGTH = 160


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        ...


class DiscardingTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        _ = (event_name, attributes)


class LogTelemetrySink:
    """Writes events to the dedicated telemetry log file."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(TELEMETRY_LOGGER_NAME)

    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        self._logger.info("telemetry", telemetry_event=event_name, **dict(attributes))


@dataclass(frozen=True)
class TelemetryClient:
    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=DiscardingTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if not self.enabled:
            return
        self.sink.emit(event_name=event_name, attributes=sanitize_attributes(attributes))

    @contextmanager
    def timed(self, event_name: str, **attributes: Any) -> Iterator[dict[str, Any]]:
        """Emit ``event_name`` with ``duration_ms`` once the block finishes.

        The yielded dict can be filled with attributes known only at the end
        of the block. Nothing is emitted when the block raises.
        """
        extra: dict[str, Any] = {}
        started_at = perf_counter()
        yield extra
        self.emit(
            event_name,
            **attributes,
            **extra,
            duration_ms=int((perf_counter() - started_at) * 1000),
        )


def build_telemetry_client(*, enabled: bool, sink: Literal["none", "log"]) -> TelemetryClient:
    if not enabled or sink == "none":
        return TelemetryClient.disabled()
    if sink == "log":
        return TelemetryClient(enabled=True, sink=LogTelemetrySink())

    logging.getLogger(TELEMETRY_LOGGER_NAME).warning(
        "unknown telemetry sink, telemetry disabled sink=%s",
        sink,
    )
    return TelemetryClient.disabled()


def sanitize_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    sanitized: dict[str, TelemetryValue] = {}
    for raw_key, raw_value in attributes.items():
        key = str(raw_key).strip().lower()
        if not key:
            continue
        if any(part in key for part in _REDACTED_KEY_PARTS):
            sanitized[key] = _REDACTED
        else:
            sanitized[key] = _summarize(raw_value)
    return sanitized


def _summarize(value: Any) -> TelemetryValue:
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, str):
        compact = " ".join(value.split())
        if len(compact) > _MAX_TEXT_LENGTH:
            return f"{compact[:_MAX_TEXT_LENGTH]}..."
        return compact
    if isinstance(value, Sized):
        return f"{type(value).__name__}[{len(value)}]"
    return type(value).__name__
