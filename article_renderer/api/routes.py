from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from structlog.contextvars import bind_contextvars, reset_contextvars

from article_renderer.config import AppSettings
from article_renderer.dependencies import (
    get_page_cache,
    get_revalidation_service,
    get_settings,
    get_telemetry,
)
from article_renderer.models.render_contracts import (
    CachedRenderResponse,
    RenderRequest,
    RenderResponse,
)
from article_renderer.models.revalidation_contracts import (
    RevalidationErrorResponse,
    RevalidationHealthResponse,
    RevalidationPayload,
    RevalidationResponse,
)
from article_renderer.repositories.common import utc_now_iso
from article_renderer.repositories.page_cache_repository import PageCacheRepository
from article_renderer.services.content_formatter import format_content, normalize_content_type
from article_renderer.services.date_format import format_date
from article_renderer.services.revalidation_service import (
    RevalidationService,
    RevalidationUnauthorizedError,
)
from article_renderer.telemetry import TelemetryClient

LOGGER = logging.getLogger("article_renderer.api")

router = APIRouter()


@router.post(
    "/api/revalidate",
    response_model=RevalidationResponse,
    responses={401: {"model": RevalidationErrorResponse}, 500: {"model": RevalidationErrorResponse}},
    tags=["revalidation"],
    operation_id="revalidate_content",
)
async def revalidate_content(
    request: Request,
    service: Annotated[RevalidationService, Depends(get_revalidation_service)],
    telemetry: Annotated[TelemetryClient, Depends(get_telemetry)],
    secret: Annotated[str | None, Query()] = None,
) -> Any:
    try:
        service.authorize(secret)
        raw_body: Any = await request.json()
        payload = RevalidationPayload.model_validate(raw_body if isinstance(raw_body, dict) else {})
        context_tokens = bind_contextvars(revalidate_content_id=payload.content_id)
        try:
            outcome = service.revalidate(payload)
        finally:
            reset_contextvars(**context_tokens)
    except RevalidationUnauthorizedError as exc:
        telemetry.emit("revalidate.rejected", reason="invalid_secret")
        return JSONResponse(
            status_code=401,
            content=RevalidationErrorResponse(message=str(exc)).model_dump(exclude_none=True),
        )
    except Exception as exc:
        LOGGER.exception("revalidation failed")
        telemetry.emit("revalidate.failed", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content=RevalidationErrorResponse(
                message="Revalidation failed",
                error=str(exc),
            ).model_dump(),
        )

    return RevalidationResponse(
        revalidated=True,
        content_id=outcome.content_id,
        paths=outcome.paths,
        timestamp=outcome.timestamp,
    )


@router.get(
    "/api/revalidate",
    response_model=RevalidationHealthResponse,
    tags=["revalidation"],
    operation_id="revalidate_health",
)
def revalidate_health() -> RevalidationHealthResponse:
    return RevalidationHealthResponse(
        message="Revalidation API is working",
        timestamp=utc_now_iso(),
    )


@router.post(
    "/render",
    response_model=RenderResponse,
    tags=["render"],
    operation_id="render_content",
)
async def render_content(
    request: RenderRequest,
    settings: Annotated[AppSettings, Depends(get_settings)],
    page_cache: Annotated[PageCacheRepository, Depends(get_page_cache)],
    telemetry: Annotated[TelemetryClient, Depends(get_telemetry)],
    content_type: Annotated[list[str] | None, Query()] = None,
) -> RenderResponse:
    hint = request.content_type if request.content_type is not None else content_type
    normalized = normalize_content_type(hint)
    published_date: str | None = None
    if request.published_at is not None:
        try:
            published_date = format_date(request.published_at, settings.default_timezone)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    cached = False
    with telemetry.timed(
        "content.format",
        format_hint=normalized,
        input_length=len(request.content),
    ) as event:
        html = await format_content(request.content, hint, debug=settings.is_development)
        if request.page_path is not None:
            page_cache.store(request.page_path, html)
            cached = True
        event.update(output_length=len(html), cached=cached)

    return RenderResponse(
        html=html,
        content_type=normalized,
        page_path=request.page_path,
        cached=cached,
        published_date=published_date,
    )


@router.get(
    "/render",
    response_model=CachedRenderResponse,
    tags=["render"],
    operation_id="get_cached_render",
)
def get_cached_render(
    page_cache: Annotated[PageCacheRepository, Depends(get_page_cache)],
    page_path: Annotated[str, Query(max_length=2048)],
) -> CachedRenderResponse:
    page = page_cache.get(page_path)
    if page is None:
        raise HTTPException(status_code=404, detail=f"No cached render for path={page_path}")
    return CachedRenderResponse(page_path=page.path, html=page.html, rendered_at=page.rendered_at)
