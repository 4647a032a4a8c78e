from __future__ import annotations

from functools import lru_cache

from article_renderer.config import AppSettings, load_settings
from article_renderer.repositories.page_cache_repository import PageCacheRepository
from article_renderer.services.revalidation_service import RevalidationService
from article_renderer.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_page_cache() -> PageCacheRepository:
    return PageCacheRepository()


@lru_cache(maxsize=1)
def get_revalidation_service() -> RevalidationService:
    settings = get_settings()
    return RevalidationService(
        secret=settings.revalidate_secret,
        page_cache=get_page_cache(),
        articles_path_prefix=settings.articles_path_prefix,
        tags_path_prefix=settings.tags_path_prefix,
        search_path=settings.search_path,
        telemetry=get_telemetry(),
    )


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


def reset_cached_dependencies() -> None:
    get_revalidation_service.cache_clear()
    get_page_cache.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
