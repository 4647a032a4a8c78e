from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "Asia/Tokyo"


def format_date(value: str | datetime, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Render a publish date as ``"5 March, 2024"`` in ``timezone``.

    Naive datetimes and ISO strings without an offset are taken as UTC.
    """
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {timezone}") from exc

    moment = value if isinstance(value, datetime) else _parse_iso(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    local = moment.astimezone(zone)
    return f"{local.day} {local.strftime('%B')}, {local.year}"


def _parse_iso(value: str) -> datetime:
    normalized = value.strip()
    if not normalized:
        raise ValueError("date value must not be empty")
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO-8601 date: {value}") from exc
