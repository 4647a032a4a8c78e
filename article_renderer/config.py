from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "ARTICLE_RENDERER_"
DEFAULT_DATA_DIR = Path(".article-renderer")
DEFAULT_LOG_SUBDIR = Path("logs")

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: frozenset[str] = frozenset({"0", "false", "no", "off"})
_ROUTE_PATH_FIELDS: tuple[str, ...] = ("articles_path_prefix", "tags_path_prefix", "search_path")


def _env_name(field_name: str | None) -> str:
    return f"{ENV_PREFIX}{(field_name or '').upper()}"


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _lenient_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return {1: True, 0: False}.get(value, default)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    return default


def _blank_to_none(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _choice(value: Any, *, choices: tuple[str, ...], env_name: str) -> str:
    normalized = value.strip().lower() if isinstance(value, str) else None
    if normalized in choices:
        return normalized
    raise ValueError(f"{env_name} must be set to: {', '.join(choices)}.")


class AppSettings(BaseSettings):
    """
    Runtime configuration.

    Read from `ARTICLE_RENDERER_*` environment variables or a local `.env`
    file. Use :func:`load_settings` so that paths derived from `data_dir`
    are filled in and resolved.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Root runtime directory.")
    environment: Literal["production", "development"] = Field(
        default="production",
        description="`development` logs content-detection diagnostics to the console.",
    )
    host: str = Field(default="127.0.0.1", description="Bind host for `article-renderer serve`.")
    port: int = Field(default=8765, ge=1, le=65535, description="Bind port for `serve`.")

    revalidate_secret: str | None = Field(
        default=None,
        description=(
            "Value the webhook must pass in its `secret` query parameter. "
            "While unset, every revalidation request is rejected."
        ),
    )

    default_timezone: str = Field(
        default="Asia/Tokyo",
        description="Timezone used when formatting article dates.",
    )
    articles_path_prefix: str = Field(
        default="/articles",
        description="Article pages live at `{prefix}/{content_id}`.",
    )
    tags_path_prefix: str = Field(
        default="/tags",
        description="Tag listing pages live at `{prefix}/{tag_id}`.",
    )
    search_path: str = Field(default="/search", description="Search page path.")

    log_dir: Path = Field(
        default=DEFAULT_DATA_DIR / DEFAULT_LOG_SUBDIR,
        description="Log file directory. Defaults to `${ARTICLE_RENDERER_DATA_DIR}/logs`.",
    )
    log_level: str = Field(default="INFO", description="Console log level.")

    telemetry_enabled: bool = Field(default=True, description="Emit internal telemetry events.")
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description="`log` writes telemetry to its own log file; `none` discards it.",
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: Any) -> str:
        return _choice(
            value,
            choices=("production", "development"),
            env_name=_env_name("environment"),
        )

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        return _choice(value, choices=("none", "log"), env_name=_env_name("telemetry_sink"))

    @field_validator("telemetry_enabled", mode="before")
    @classmethod
    def _normalize_telemetry_enabled(cls, value: Any) -> bool:
        return _lenient_bool(value, default=True)

    @field_validator(*_ROUTE_PATH_FIELDS, mode="before")
    @classmethod
    def _normalize_route_path(cls, value: Any, info: ValidationInfo) -> str:
        env_name = _env_name(info.field_name)
        if not isinstance(value, str):
            raise ValueError(f"{env_name} must be a string.")
        normalized = "/" + value.strip().strip("/")
        if normalized == "/":
            raise ValueError(f"{env_name} must not be the site root.")
        return normalized

    @field_validator("default_timezone", mode="before")
    @classmethod
    def _require_timezone(cls, value: Any) -> str:
        normalized = _blank_to_none(value)
        if normalized is None:
            raise ValueError(f"{_env_name('default_timezone')} must not be empty.")
        return normalized

    @field_validator("revalidate_secret", mode="before")
    @classmethod
    def _normalize_secret(cls, value: Any) -> str | None:
        return _blank_to_none(value)

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return None
        return _resolve_path(value)


def load_settings() -> AppSettings:
    settings = AppSettings()
    log_dir = settings.log_dir
    if "log_dir" not in settings.model_fields_set:
        log_dir = settings.data_dir / DEFAULT_LOG_SUBDIR
    return settings.model_copy(
        update={
            "data_dir": _resolve_path(settings.data_dir),
            "log_dir": _resolve_path(log_dir),
        }
    )
