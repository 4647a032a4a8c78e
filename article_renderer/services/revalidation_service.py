from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from article_renderer.models.revalidation_contracts import RevalidationPayload
from article_renderer.repositories.common import utc_now_iso
from article_renderer.repositories.page_cache_repository import PageCacheRepository
from article_renderer.telemetry import TelemetryClient

LOGGER = logging.getLogger("article_renderer.revalidation")

ROOT_PATH = "/"


class RevalidationUnauthorizedError(Exception):
    pass


@dataclass(frozen=True)
class RevalidationOutcome:
    content_id: str | None
    paths: list[str]
    evicted_paths: list[str]
    timestamp: str


class RevalidationService:
    def __init__(
        self,
        *,
        secret: str | None,
        page_cache: PageCacheRepository,
        articles_path_prefix: str = "/articles",
        tags_path_prefix: str = "/tags",
        search_path: str = "/search",
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._secret = secret
        self._page_cache = page_cache
        self._articles_path_prefix = articles_path_prefix
        self._tags_path_prefix = tags_path_prefix
        self._search_path = search_path
        self._telemetry = telemetry or TelemetryClient.disabled()

    def authorize(self, provided_secret: str | None) -> None:
        if self._secret is None or provided_secret is None:
            raise RevalidationUnauthorizedError("Invalid secret")
        if not hmac.compare_digest(provided_secret.encode("utf-8"), self._secret.encode("utf-8")):
            raise RevalidationUnauthorizedError("Invalid secret")

    def paths_for(self, payload: RevalidationPayload) -> list[str]:
        paths: list[str] = []
        content_id = payload.content_id
        if content_id is not None:
            paths.append(f"{self._articles_path_prefix}/{content_id}")
        paths.append(ROOT_PATH)
        paths.append(self._search_path)
        for tag_id in payload.tag_ids:
            paths.append(f"{self._tags_path_prefix}/{tag_id}")
        return _dedupe_keep_order(paths)

    def revalidate(self, payload: RevalidationPayload) -> RevalidationOutcome:
        LOGGER.info(
            "revalidation triggered content_id=%s event_type=%s",
            payload.content_id,
            payload.type,
        )
        paths = self.paths_for(payload)
        evicted = [path for path in paths if self._page_cache.invalidate(path)]
        for path in paths:
            LOGGER.debug("revalidated path=%s", path)

        self._telemetry.emit(
            "revalidate.accepted",
            article_id=payload.content_id,
            event_type=payload.type,
            path_count=len(paths),
            evicted_count=len(evicted),
        )
        LOGGER.info(
            "revalidation completed paths=%d evicted=%d",
            len(paths),
            len(evicted),
        )
        return RevalidationOutcome(
            content_id=payload.content_id,
            paths=paths,
            evicted_paths=evicted,
            timestamp=utc_now_iso(),
        )


def _dedupe_keep_order(values: list[str]) -> list[str]:
    seen: set[str] = set()
    deduped: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        deduped.append(value)
    return deduped
