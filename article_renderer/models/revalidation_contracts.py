from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_identifier(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if not normalized:
        return None
    return normalized


def _default_tags() -> list[RevalidationTag]:
    return []


class RevalidationTag(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: object) -> str | None:
        return _normalize_identifier(value)


class RevalidationContents(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    tags: list[RevalidationTag] = Field(default_factory=_default_tags)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: object) -> str | None:
        return _normalize_identifier(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _drop_malformed_tags(cls, value: object) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [tag for tag in value if isinstance(tag, dict)]


class RevalidationPayload(BaseModel):
    """Webhook body sent by the CMS when an article changes."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str | None = None
    contents: RevalidationContents | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: object) -> str | None:
        return _normalize_identifier(value)

    @field_validator("contents", mode="before")
    @classmethod
    def _drop_malformed_contents(cls, value: object) -> object:
        if isinstance(value, dict):
            return value
        return None

    @property
    def content_id(self) -> str | None:
        if self.contents is not None and self.contents.id is not None:
            return self.contents.id
        return self.id

    @property
    def tag_ids(self) -> list[str]:
        if self.contents is None:
            return []
        return [tag.id for tag in self.contents.tags if tag.id is not None]


class RevalidationResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    revalidated: bool
    content_id: str | None = Field(default=None, serialization_alias="contentId")
    paths: list[str]
    timestamp: str


class RevalidationErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    error: str | None = None


class RevalidationHealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    timestamp: str
