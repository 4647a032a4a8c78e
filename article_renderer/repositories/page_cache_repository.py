from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from article_renderer.repositories.common import utc_now_iso


@dataclass(frozen=True)
class CachedPage:
    path: str
    html: str
    rendered_at: str


class PageCacheRepository:
    """In-process cache of rendered pages keyed by site path."""

    def __init__(self) -> None:
        self._pages: dict[str, CachedPage] = {}
        self._lock = Lock()

    def store(self, path: str, html: str) -> CachedPage:
        page = CachedPage(path=path, html=html, rendered_at=utc_now_iso())
        with self._lock:
            self._pages[path] = page
        return page

    def get(self, path: str) -> CachedPage | None:
        with self._lock:
            return self._pages.get(path)

    def invalidate(self, path: str) -> bool:
        with self._lock:
            return self._pages.pop(path, None) is not None

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._pages)
