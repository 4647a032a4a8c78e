from __future__ import annotations

import pytest

from article_renderer.services import html_reducer
from article_renderer.services.html_reducer import reduce_html, reduce_to_markdown


def test_headings_and_emphasis() -> None:
    markdown = reduce_to_markdown("<h1>Title</h1>\n<p>Some <strong>bold</strong> text.</p>")

    assert markdown.startswith("# Title\n")
    assert markdown.endswith("Some **bold** text.")


@pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
def test_heading_levels(level: int) -> None:
    assert reduce_to_markdown(f"<h{level}>Heading</h{level}>") == f"{'#' * level} Heading"


def test_unordered_list() -> None:
    assert reduce_to_markdown("<ul><li>alpha</li><li>beta</li></ul>") == "- alpha\n- beta"


def test_ordered_list_positions_follow_tree() -> None:
    html = "<ol>\n<li>one</li>\n<li>two</li>\n<li>three</li>\n</ol>"
    assert reduce_to_markdown(html) == "1. one\n\n2. two\n\n3. three"


def test_ordered_list_ignores_start_attribute() -> None:
    assert reduce_to_markdown('<ol start="7"><li>a</li><li>b</li></ol>') == "1. a\n2. b"


def test_fenced_code_block_keeps_language() -> None:
    html = '<pre><code class="language-js">const x = 1;\n</code></pre>'
    assert reduce_to_markdown(html) == "```js\nconst x = 1;\n```"


def test_code_block_content_is_not_treated_as_prose() -> None:
    html = "<pre><code># not a heading\n- not a list\n</code></pre>"
    assert reduce_to_markdown(html) == "```\n# not a heading\n- not a list\n```"


def test_inline_code_emphasis_and_links() -> None:
    html = (
        '<p>Use <code>pip</code> with <em>care</em> and <b>speed</b>, '
        'see <a href="https://example.com">docs</a> or <a>nowhere</a>.</p>'
    )
    assert reduce_to_markdown(html) == (
        "Use `pip` with *care* and **speed**, see [docs](https://example.com) or [nowhere]()."
    )


def test_paragraph_with_heading_syntax_becomes_heading() -> None:
    assert reduce_to_markdown("<p>  ## Already reduced  </p>") == "## Already reduced"


def test_paragraph_with_list_syntax_is_kept() -> None:
    html = "<p>- first</p><p>2. second</p>"
    assert reduce_to_markdown(html) == "- first\n\n2. second"


def test_unsupported_structures_degrade_to_text() -> None:
    html = "<blockquote>quoted</blockquote><table><tr><td>cell</td></tr></table>"
    assert reduce_to_markdown(html) == "quotedcell"


def test_failure_returns_original_html(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(_document: object) -> None:
        raise RuntimeError("tree exploded")

    monkeypatch.setattr(html_reducer, "_reduce_headings", _boom)
    html = "<h1>Title</h1>"

    result = reduce_html(html)
    assert result.ok is False
    assert isinstance(result.error, RuntimeError)
    assert reduce_to_markdown(html) == html


def test_successful_reduction_result() -> None:
    result = reduce_html("<p>plain</p>")
    assert result.ok is True
    assert result.markdown == "plain"
    assert result.error is None


def test_pre_with_several_code_children_keeps_rest_of_document() -> None:
    html = '<pre><code class="language-sh">a\n</code><code>b</code></pre><h1>T</h1><ul><li>x</li></ul>'

    result = reduce_html(html)

    assert result.ok is True
    assert result.markdown == "```sh\na\nb\n```\n\n# T\n\n- x"


def test_nested_pre_is_reduced_once() -> None:
    html = "<pre><code>outer</code><pre><code>inner</code></pre></pre><p>after</p>"
    assert reduce_to_markdown(html) == "```\nouterinner\n```\n\nafter"
