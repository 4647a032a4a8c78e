"""Command line entry point for Article Renderer."""

import asyncio
from pathlib import Path

import click
import uvicorn
from rich.console import Console

from article_renderer.config import load_settings
from article_renderer.services.content_formatter import format_content
from article_renderer.services.date_format import format_date
from article_renderer.services.format_classifier import analyze, classify
from article_renderer.services.html_reducer import reduce_to_markdown

console = Console()


def _read_source(source: str) -> str:
    if source == "-":
        return click.get_text_stream("stdin").read()
    return Path(source).read_text(encoding="utf-8")


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Article Renderer - normalize Markdown/HTML articles into highlighted HTML."""
    pass


@main.command()
@click.argument("source", default="-")
@click.option(
    "--type",
    "-t",
    "content_types",
    multiple=True,
    help="Declared content type (markdown/html). Repeatable; only the first value is used.",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
def render(source: str, content_types: tuple[str, ...], output: Path | None):
    """Render SOURCE (file path or - for stdin) to highlighted HTML."""
    settings = load_settings()
    content = _read_source(source)
    html = asyncio.run(
        format_content(content, list(content_types) or None, debug=settings.is_development)
    )

    if output is None:
        click.echo(html, nl=False)
        return
    output.write_text(html, encoding="utf-8")
    console.print(f"[green]Wrote[/green] {output}")


@main.command(name="classify")
@click.argument("source", default="-")
def classify_command(source: str):
    """Show whether SOURCE would be treated as Markdown or HTML."""
    content = _read_source(source)
    detected = classify(content)
    match = analyze(content)

    console.print(f"[bold]Format:[/bold] {detected}")
    console.print(f"  HTML tags: {match.tag_count}")
    categories = ", ".join(match.matched_categories) or "none"
    console.print(f"  Markdown patterns ({match.pattern_count}): {categories}")


@main.command()
@click.argument("source", default="-")
def reduce(source: str):
    """Recover approximate Markdown from rendered HTML in SOURCE."""
    click.echo(reduce_to_markdown(_read_source(source)))


@main.command(name="format-date")
@click.argument("value")
@click.option(
    "--timezone",
    "-z",
    default=None,
    help="IANA timezone (defaults to ARTICLE_RENDERER_DEFAULT_TIMEZONE).",
)
def format_date_command(value: str, timezone: str | None):
    """Show an ISO-8601 VALUE the way article pages display dates."""
    try:
        click.echo(format_date(value, timezone or load_settings().default_timezone))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="VALUE") from exc


@main.command()
@click.option("--host", default=None, help="Bind host (defaults to ARTICLE_RENDERER_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to ARTICLE_RENDERER_PORT).")
def serve(host: str | None, port: int | None):
    """Run the HTTP API."""
    settings = load_settings()
    uvicorn.run(
        "article_renderer.main:app",
        host=host or settings.host,
        port=port or settings.port,
    )


if __name__ == "__main__":
    main()
