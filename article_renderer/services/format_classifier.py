from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from article_renderer.services.markdown_patterns import (
    count_html_tags,
    has_html_tags,
    matching_pattern_names,
)

ContentFormat = Literal["markdown", "html"]

# Empirical thresholds; changing them changes how existing articles render.
MAX_EMBEDDED_TAGS = 5
MIN_PATTERNS_WITH_TAGS = 2


@dataclass(frozen=True)
class MatchResult:
    tag_count: int
    matched_categories: tuple[str, ...]

    @property
    def pattern_count(self) -> int:
        return len(self.matched_categories)


def analyze(content: str) -> MatchResult:
    return MatchResult(
        tag_count=count_html_tags(content),
        matched_categories=matching_pattern_names(content),
    )


def classify(content: str) -> ContentFormat:
    """Guess whether ``content`` is Markdown or HTML.

    Blank input is treated as HTML. A few inline tags do not prevent Markdown
    detection, but a tag-dense document is always HTML.
    """
    if not content or not content.strip():
        return "html"

    result = analyze(content)
    if has_html_tags(content):
        if result.tag_count < MAX_EMBEDDED_TAGS and result.pattern_count >= MIN_PATTERNS_WITH_TAGS:
            return "markdown"
        return "html"

    if result.pattern_count >= 1:
        return "markdown"
    return "html"


def is_markdown(content: str) -> bool:
    return classify(content) == "markdown"
