from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from structlog.contextvars import bind_contextvars, reset_contextvars

from article_renderer.api.routes import router
from article_renderer.dependencies import get_page_cache, get_settings, get_telemetry
from article_renderer.logging_config import configure_application_logging
from article_renderer.services.markdown_renderer import get_parser

LOGGER = logging.getLogger("article_renderer.main")

REQUEST_ID_HEADER = "X-Request-ID"


def health_check() -> dict[str, str]:
    return {"status": "ok"}


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_application_logging(settings)
    if settings.revalidate_secret is None:
        LOGGER.warning("revalidate secret is not configured; webhook calls will be rejected")
    get_parser()
    try:
        yield
    finally:
        page_cache = get_page_cache()
        LOGGER.info("shutting down cached_pages=%d", len(page_cache.paths()))


def _request_id_for(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    return incoming or str(uuid4())


async def request_context_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    telemetry = get_telemetry()
    request_id = _request_id_for(request)
    request_attributes = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
    }
    context_tokens = bind_contextvars(
        http_request_id=request_id,
        http_method=request.method,
        http_path=request.url.path,
    )
    telemetry.emit("http.request.start", **request_attributes)
    started_at = perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:
        telemetry.emit(
            "http.request.error",
            **request_attributes,
            duration_ms=int((perf_counter() - started_at) * 1000),
            error_type=type(exc).__name__,
        )
        raise
    finally:
        reset_contextvars(**context_tokens)

    response.headers[REQUEST_ID_HEADER] = request_id
    telemetry.emit(
        "http.request.finish",
        **request_attributes,
        duration_ms=int((perf_counter() - started_at) * 1000),
        status_code=response.status_code,
    )
    return response


def create_app() -> FastAPI:
    app = FastAPI(title="Article Renderer API", version="0.1.0", lifespan=app_lifespan)
    app.middleware("http")(request_context_middleware)
    app.include_router(router)
    app.add_api_route(
        "/health",
        health_check,
        methods=["GET"],
        tags=["system"],
        operation_id="health_check",
    )
    return app


app = create_app()
