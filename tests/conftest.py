from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from article_renderer.dependencies import reset_cached_dependencies
from article_renderer.main import create_app

TEST_REVALIDATE_SECRET = "test-revalidate-secret"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    for name in (
        "ARTICLE_RENDERER_REVALIDATE_SECRET",
        "ARTICLE_RENDERER_ENVIRONMENT",
        "ARTICLE_RENDERER_LOG_DIR",
        "ARTICLE_RENDERER_ARTICLES_PATH_PREFIX",
        "ARTICLE_RENDERER_TAGS_PATH_PREFIX",
        "ARTICLE_RENDERER_SEARCH_PATH",
        "ARTICLE_RENDERER_DEFAULT_TIMEZONE",
        "ARTICLE_RENDERER_LOG_LEVEL",
        "ARTICLE_RENDERER_TELEMETRY_ENABLED",
        "ARTICLE_RENDERER_TELEMETRY_SINK",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("ARTICLE_RENDERER_DATA_DIR", str(data_dir))
    monkeypatch.setenv("ARTICLE_RENDERER_REVALIDATE_SECRET", TEST_REVALIDATE_SECRET)
    monkeypatch.setenv("ARTICLE_RENDERER_TELEMETRY_ENABLED", "0")
    reset_cached_dependencies()

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    reset_cached_dependencies()
