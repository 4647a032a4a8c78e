from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_CONTENT_LENGTH = 2_000_000


def _normalize_optional_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if not normalized:
        return None
    return normalized


class RenderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(max_length=MAX_CONTENT_LENGTH)
    content_type: str | list[str] | None = None
    page_path: str | None = Field(default=None, max_length=2048)
    published_at: str | None = Field(default=None, max_length=64)

    @field_validator("page_path", mode="before")
    @classmethod
    def _normalize_page_path(cls, value: object) -> str | None:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            return None
        if not normalized.startswith("/"):
            raise ValueError("page_path must start with '/'")
        if any(ord(character) < 32 for character in normalized):
            raise ValueError("page_path contains control characters")
        return normalized


class RenderResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    html: str
    content_type: str | None
    page_path: str | None = None
    cached: bool = False
    published_date: str | None = None


class CachedRenderResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page_path: str
    html: str
    rendered_at: str
