"""Best-effort HTML → Markdown reduction.

Used to undo accidental Markdown → HTML promotion (content stored as
Markdown by the CMS but delivered already rendered) before re-rendering.
Passes rewrite the parsed tree in place and must run in order: code blocks
are consumed before any text extraction, paragraphs last.

Nested inline formatting inside list items or headings, tables and
blockquotes are not reduced and degrade to plain text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from article_renderer.services.markdown_patterns import (
    HEADING_LINE_PATTERN,
    HEADING_PREFIX_PATTERN,
)
from article_renderer.services.syntax_highlighter import HTML_PARSER, extract_language

LOGGER = logging.getLogger("article_renderer.reducer")

_HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(frozen=True)
class ReductionResult:
    markdown: str | None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.markdown is not None


def reduce_to_markdown(html: str) -> str:
    result = reduce_html(html)
    if result.ok and result.markdown is not None:
        return result.markdown
    return html


def reduce_html(html: str) -> ReductionResult:
    try:
        document = BeautifulSoup(html, HTML_PARSER)
        _reduce_code(document)
        _reduce_headings(document)
        _reduce_lists(document)
        _reduce_emphasis(document)
        _reduce_links(document)
        _reduce_paragraphs(document)
        return ReductionResult(markdown=document.get_text().strip())
    except Exception as exc:
        LOGGER.exception("html to markdown reduction failed; keeping original html")
        return ReductionResult(markdown=None, error=exc)


def _reduce_code(document: BeautifulSoup) -> None:
    for pre in document.find_all("pre"):
        # Nested blocks are consumed with their outermost <pre>.
        if pre.find_parent("pre") is not None:
            continue
        codes = pre.find_all("code")
        if not codes:
            continue
        language = extract_language(codes[0].get("class")) or ""
        text = "".join(code.get_text() for code in codes).rstrip("\n")
        pre.replace_with(f"```{language}\n{text}\n```\n\n")

    for code in document.find_all("code"):
        if code.find_parent("pre") is not None:
            continue
        code.replace_with(f"`{code.get_text()}`")


def _reduce_headings(document: BeautifulSoup) -> None:
    for heading in document.find_all(_HEADING_TAGS):
        level = int(heading.name[1])
        heading.replace_with(f"{'#' * level} {heading.get_text()}\n\n")


def _reduce_lists(document: BeautifulSoup) -> None:
    for item in document.select("ul > li"):
        item.replace_with(f"- {item.get_text()}\n")

    for ordered in document.find_all("ol"):
        items = [child for child in ordered.children if isinstance(child, Tag) and child.name == "li"]
        for position, item in enumerate(items, start=1):
            item.replace_with(f"{position}. {item.get_text()}\n")


def _reduce_emphasis(document: BeautifulSoup) -> None:
    for element in document.find_all(["strong", "b"]):
        element.replace_with(f"**{element.get_text()}**")
    for element in document.find_all(["em", "i"]):
        element.replace_with(f"*{element.get_text()}*")


def _reduce_links(document: BeautifulSoup) -> None:
    for anchor in document.find_all("a"):
        href = anchor.get("href") or ""
        anchor.replace_with(f"[{anchor.get_text()}]({href})")


def _reduce_paragraphs(document: BeautifulSoup) -> None:
    for paragraph in document.find_all("p"):
        text = paragraph.get_text().strip()
        if HEADING_PREFIX_PATTERN.match(text):
            heading = HEADING_LINE_PATTERN.match(text)
            if heading is not None:
                paragraph.replace_with(f"{heading.group(1)} {heading.group(2)}\n\n")
                continue
        paragraph.replace_with(f"{text}\n\n")
