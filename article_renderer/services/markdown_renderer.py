"""Markdown → HTML rendering with GitHub-flavoured extensions.

Tables, strikethrough and autolinks come from markdown-it-py's ``gfm-like``
preset; task lists from ``mdit_py_plugins``. Raw HTML embedded in Markdown
is passed through so that lightly tagged prose keeps its inline markup.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from html import escape

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

LOGGER = logging.getLogger("article_renderer.markdown")


@lru_cache(maxsize=1)
def get_parser() -> MarkdownIt:
    return MarkdownIt("gfm-like").use(tasklists_plugin)


def render_markdown_sync(markdown_text: str) -> str:
    try:
        return get_parser().render(markdown_text)
    except Exception:
        LOGGER.exception("markdown render failed; falling back to escaped paragraph")
        return f"<p>{escape(markdown_text)}</p>\n"


async def render_markdown(markdown_text: str) -> str:
    return await asyncio.to_thread(render_markdown_sync, markdown_text)
