from __future__ import annotations

import re
from dataclasses import dataclass


def through_last(content: str, terminator: str) -> str | None:
    """Cut ``content`` after the last ``terminator``, or ``None`` if absent.

    A pattern that must end with ``terminator`` cannot match past that
    point, and searching the shorter text keeps scans from every unclosed
    opener bounded by the next terminator.
    """
    cut = content.rfind(terminator)
    if cut < 0:
        return None
    return content[: cut + 1]


@dataclass(frozen=True)
class MarkdownPattern:
    name: str
    regex: re.Pattern[str]
    terminator: str | None = None

    def matches(self, content: str) -> bool:
        if self.terminator is not None:
            bounded = through_last(content, self.terminator)
            if bounded is None:
                return False
            content = bounded
        return self.regex.search(content) is not None


HTML_TAG_PRESENCE_PATTERN = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[a-z][\s\S]*?>", re.IGNORECASE)

# Order is significant only for reporting; classification counts distinct matches.
# Line-start patterns use [^\S\n]* so leading whitespace never spans lines.
MARKDOWN_PATTERNS: tuple[MarkdownPattern, ...] = (
    MarkdownPattern("heading", re.compile(r"^#{1,6}\s+", re.MULTILINE)),
    MarkdownPattern("unordered_list", re.compile(r"^[^\S\n]*[-*+]\s+", re.MULTILINE)),
    MarkdownPattern("ordered_list", re.compile(r"^[^\S\n]*\d+\.\s+", re.MULTILINE)),
    MarkdownPattern("fenced_code", re.compile(r"```[\s\S]*?```")),
    MarkdownPattern("inline_code", re.compile(r"`[^`]+`")),
    MarkdownPattern("link", re.compile(r"\[([^\[\]]+)\]\(([^)]+)\)"), terminator=")"),
    MarkdownPattern("image", re.compile(r"!\[([^\[\]]*)\]\(([^)]+)\)"), terminator=")"),
    MarkdownPattern("bold_asterisk", re.compile(r"\*\*[^*]+\*\*")),
    MarkdownPattern("italic_asterisk", re.compile(r"\*[^*]+\*")),
    MarkdownPattern("bold_underscore", re.compile(r"_{2}[^_]+_{2}")),
    MarkdownPattern("italic_underscore", re.compile(r"_[^_]+_")),
    MarkdownPattern("blockquote", re.compile(r"^>\s+", re.MULTILINE)),
    MarkdownPattern("horizontal_rule", re.compile(r"^---+\s*$", re.MULTILINE)),
    MarkdownPattern("table_row", re.compile(r"^[^\S\n]*\|.+\|", re.MULTILINE)),
    MarkdownPattern("checkbox", re.compile(r"^[^\S\n]*\[(?:x| )\]", re.MULTILINE)),
)

HEADING_LINE_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
HEADING_PREFIX_PATTERN = re.compile(r"^#{1,6}\s")


def has_html_tags(content: str) -> bool:
    bounded = through_last(content, ">")
    if bounded is None:
        return False
    return HTML_TAG_PRESENCE_PATTERN.search(bounded) is not None


def count_html_tags(content: str) -> int:
    bounded = through_last(content, ">")
    if bounded is None:
        return 0
    return len(HTML_TAG_PATTERN.findall(bounded))


def matching_pattern_names(content: str) -> tuple[str, ...]:
    return tuple(pattern.name for pattern in MARKDOWN_PATTERNS if pattern.matches(content))
