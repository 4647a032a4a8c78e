from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from article_renderer.services.format_classifier import analyze, classify
from article_renderer.services.html_reducer import reduce_to_markdown
from article_renderer.services.markdown_patterns import has_html_tags
from article_renderer.services.markdown_renderer import render_markdown_sync
from article_renderer.services.syntax_highlighter import highlight

LOGGER = logging.getLogger("article_renderer.formatter")

ContentTypeHint = str | Sequence[str] | None

PREVIEW_LENGTH = 200


def normalize_content_type(content_type: ContentTypeHint) -> str | None:
    """Collapse a possibly multi-valued hint to a single value.

    Query strings can repeat ``content_type``; only the first value is
    honoured and the rest are ignored.
    """
    if content_type is None or isinstance(content_type, str):
        return content_type
    return next(iter(content_type), None)


def format_markdown_with_highlight_sync(markdown_text: str) -> str:
    return highlight(render_markdown_sync(markdown_text))


def format_content_sync(
    content: str,
    content_type: ContentTypeHint = None,
    *,
    debug: bool = False,
) -> str:
    normalized = normalize_content_type(content_type)

    if normalized == "markdown":
        if has_html_tags(content):
            return format_markdown_with_highlight_sync(reduce_to_markdown(content))
        return format_markdown_with_highlight_sync(content)

    if normalized == "html":
        return highlight(content)

    detected = classify(content)
    if debug:
        match = analyze(content)
        LOGGER.debug(
            "content type detection content_type=%r normalized=%r detected=%s "
            "has_html_tags=%s tag_count=%d patterns=%s preview=%r",
            content_type,
            normalized,
            detected,
            has_html_tags(content),
            match.tag_count,
            ",".join(match.matched_categories),
            content[:PREVIEW_LENGTH],
        )

    if detected == "markdown":
        return format_markdown_with_highlight_sync(content)
    return highlight(content)


async def format_markdown_with_highlight(markdown_text: str) -> str:
    return await asyncio.to_thread(format_markdown_with_highlight_sync, markdown_text)


async def format_content(
    content: str,
    content_type: ContentTypeHint = None,
    *,
    debug: bool = False,
) -> str:
    """Render article content to syntax-highlighted HTML.

    ``content_type`` may be ``"markdown"``, ``"html"``, anything else, a
    sequence of those, or ``None``. Unknown or missing hints fall back to
    format detection. Markdown that arrives already rendered to HTML is
    reduced back to Markdown before being rendered again.

    Detection, reduction, rendering and highlighting all run in a worker
    thread so large documents do not stall the event loop.
    """
    return await asyncio.to_thread(format_content_sync, content, content_type, debug=debug)
