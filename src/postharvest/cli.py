"""Command-line interface for PostHarvest."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from postharvest import __version__
from postharvest.archive import ArchiveBuilder
from postharvest.config.config import Config, load_config
from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import AllStrategiesFailedError, InvalidInputError
from postharvest.extractor.manager import ExtractorManager
from postharvest.extractor.models import ExtractedContent
from postharvest.observability.logging import configure_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: str) -> None:
    """PostHarvest - extract text and media from LinkedIn posts."""
    ctx.ensure_object(dict)
    loaded = load_config(Path(config) if config else None)
    loaded.monitoring = loaded.monitoring.model_copy(update={"log_level": log_level})
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


def _extract(config: Config, url: str, demo: bool) -> ExtractedContent:
    manager = ExtractorManager(config)
    try:
        return asyncio.run(manager.extract(url, demo_mode=demo))
    except InvalidInputError as e:
        console.print(f"[red]❌ Invalid URL: {escape(str(e))}[/red]")
        sys.exit(1)
    except AllStrategiesFailedError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        for line in e.summary():
            console.print(f"  [dim]{escape(line)}[/dim]")
        sys.exit(1)


def render_content(content: ExtractedContent) -> None:
    """Print ``content`` as a text panel followed by a media table."""
    console.print(Panel(Text(content.text), title="Post text", expand=False))

    table = Table(title="Media")
    table.add_column("Kind", style="cyan")
    table.add_column("Filename", style="magenta")
    table.add_column("Details")
    table.add_column("URL", overflow="fold")

    for image in content.images:
        table.add_row("image", image.filename, escape(image.alt), str(image.url))
    for video in content.videos:
        details = f"{video.title} ({video.duration})"
        table.add_row("video", video.filename, escape(details), str(video.url))
    for document in content.documents:
        details = f"{document.title}, {document.type}, {document.size}"
        table.add_row("document", document.filename, escape(details), str(document.url))

    if content.has_media:
        console.print(table)
    else:
        console.print("[yellow]No media found in this post.[/yellow]")


@cli.command()
@click.argument("url")
@click.option("--demo", is_flag=True, help="Return the built-in sample post without network access")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def extract(ctx: click.Context, url: str, demo: bool, as_json: bool) -> None:
    """Extract text and media from a LinkedIn post URL."""
    content = _extract(ctx.obj["config"], url, demo)
    if as_json:
        console.print_json(content.model_dump_json())
    else:
        render_content(content)


@cli.command()
@click.argument("url")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default="linkedin-post-content.zip",
    show_default=True,
    help="Where to write the ZIP archive",
)
@click.option("--demo", is_flag=True, help="Package the built-in sample post")
@click.pass_context
def download(ctx: click.Context, url: str, output: str, demo: bool) -> None:
    """Extract a post and package everything into a ZIP archive."""
    config: Config = ctx.obj["config"]
    content = _extract(config, url, demo)

    total = len(content.images) + len(content.videos) + len(content.documents)
    console.print(f"[blue]📦 Packaging {total} media items...[/blue]")
    data = asyncio.run(ArchiveBuilder(PageFetcher(config.crawler)).build(content))
    Path(output).write_bytes(data)
    console.print(f"[green]✅ Archive written to {output} ({len(data)} bytes)[/green]")


@cli.command()
@click.option("--host", default=None, help="Host to bind to (defaults to configuration)")
@click.option("--port", default=None, type=int, help="Port to bind to (defaults to configuration)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP API server."""
    from postharvest.web.main import run_web_server

    config: Config = ctx.obj["config"]
    console.print(
        f"[green]🚀 Starting PostHarvest API at "
        f"http://{host or config.monitoring.web_ui.host}:{port or config.monitoring.web_ui.port}[/green]"
    )
    run_web_server(host=host, port=port, config=config)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
