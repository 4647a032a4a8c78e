from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

LOGGER = logging.getLogger("article_renderer.highlight")

HIGHLIGHT_MARKER_CLASS = "hljs"
HTML_PARSER = "html.parser"
_LANGUAGE_PREFIX = re.compile(r"^language-")
_FORMATTER = HtmlFormatter(nowrap=True)


@dataclass(frozen=True)
class CodeFragment:
    text: str
    language: str | None

    @classmethod
    def from_element(cls, code: Tag) -> CodeFragment:
        return cls(text=code.get_text(), language=extract_language(code.get("class")))


def extract_language(class_value: str | list[str] | None) -> str | None:
    """Return the language token of a ``class`` attribute such as ``language-js``.

    Only a leading ``language-`` prefix is removed; the first whitespace
    separated token of what remains is the language.
    """
    if not class_value:
        return None
    raw = class_value if isinstance(class_value, str) else " ".join(class_value)
    tokens = _LANGUAGE_PREFIX.sub("", raw).split()
    if not tokens:
        return None
    return tokens[0]


def resolve_lexer(language: str | None, code: str) -> Lexer:
    if language:
        try:
            return get_lexer_by_name(language, stripnl=False, ensurenl=False)
        except ClassNotFound:
            LOGGER.debug("unknown code language, guessing instead language=%s", language)
    try:
        return guess_lexer(code, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False, ensurenl=False)


def highlight_fragment(fragment: CodeFragment) -> str:
    lexer = resolve_lexer(fragment.language, fragment.text)
    return pygments_highlight(fragment.text, lexer, _FORMATTER)


def highlight(html: str) -> str:
    """Syntax-highlight every ``<pre><code>`` block of an HTML fragment.

    Code elements get their content replaced with highlighted span markup and
    are tagged with :data:`HIGHLIGHT_MARKER_CLASS`. Fragments without code
    blocks are returned untouched. Failures are logged and the input is
    returned as-is.
    """
    if "<pre" not in html.lower():
        return html
    try:
        document = BeautifulSoup(html, HTML_PARSER)
        code_elements = document.select("pre code")
        if not code_elements:
            return html
        for code in code_elements:
            _replace_with_highlighted(code)
        return str(document)
    except Exception:
        LOGGER.exception("syntax highlighting failed; returning input html")
        return html


def _replace_with_highlighted(code: Tag) -> None:
    markup = highlight_fragment(CodeFragment.from_element(code))
    code.clear()
    for node in list(BeautifulSoup(markup, HTML_PARSER).contents):
        code.append(node.extract())

    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if HIGHLIGHT_MARKER_CLASS not in classes:
        code["class"] = [*classes, HIGHLIGHT_MARKER_CLASS]
