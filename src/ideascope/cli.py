"""
IdeaScope CLI - Command-line interface.

Inspect cache configuration and query a running premium API.
"""

import json
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ideascope.config import CacheConfig
from ideascope.core.exceptions import ConfigurationError
from ideascope.core.models import ArtifactKind
from ideascope.generation.fallback import generate_fallback

app = typer.Typer(
    name="ideascope",
    help="IdeaScope - premium analysis cache tooling",
    no_args_is_help=True,
)
console = Console()

DEFAULT_URL = "http://127.0.0.1:8000"


@app.command()
def version():
    """Show IdeaScope version."""
    from ideascope import __version__

    console.print(f"IdeaScope v{__version__}")


@app.command()
def config():
    """Show the effective cache TTLs and sweep interval."""
    try:
        cache_config = CacheConfig.from_env()
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Cache TTLs (hours)")
    table.add_column("Kind", style="cyan")
    table.add_column("Slug", style="magenta")
    table.add_column("Store default", justify="right")
    table.add_column("On generation", justify="right", style="green")

    for kind in ArtifactKind:
        table.add_row(
            kind.value,
            kind.slug,
            f"{cache_config.ttl_for(kind):g}",
            f"{cache_config.generation_ttl_for(kind):g}",
        )

    console.print(table)
    console.print(
        f"Sweep interval: {cache_config.sweep_interval_seconds:g}s "
        f"({cache_config.sweep_interval_ms} ms)"
    )
    console.print(f"Export TTL: {cache_config.export_ttl_hours:g}h")


@app.command("cache-stats")
def cache_stats(
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Base URL of the API"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Query cache statistics from a running server."""
    endpoint = f"{url.rstrip('/')}/api/premium/cache-stats"
    try:
        response = httpx.get(endpoint, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        console.print(f"[red]Server returned {e.response.status_code}[/red] for {endpoint}")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Could not reach {endpoint}:[/red] {e}")
        raise typer.Exit(1)

    stats = response.json()
    if as_json:
        console.print_json(data=stats)
        return

    table = Table(title="Premium Cache")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total items", str(stats.get("totalItems", 0)))
    table.add_row("Expired items", str(stats.get("expiredItems", 0)))
    table.add_row("Memory usage", str(stats.get("memoryUsage", "-")))
    console.print(table)


@app.command()
def preview(
    slug: str = typer.Argument(..., help="Artifact slug, e.g. keywords or gtm-plan"),
    analysis_id: str = typer.Option("preview", "--analysis-id", "-a", help="Analysis id"),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Generation parameter as key=value (repeatable)"
    ),
):
    """Print the heuristic payload for an artifact without calling the LLM."""
    try:
        kind = ArtifactKind.from_slug(slug)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if kind is ArtifactKind.PREMIUM_ANALYSIS:
        console.print("[red]The aggregate analysis has no standalone preview[/red]")
        raise typer.Exit(1)

    params: dict[str, str] = {}
    for item in param or []:
        key, sep, value = item.partition("=")
        if not sep:
            console.print(f"[red]Expected key=value, got:[/red] {item}")
            raise typer.Exit(1)
        params[key.strip()] = value.strip()

    payload = generate_fallback(kind, analysis_id, params)
    console.print(Panel(f"{kind.label} for {analysis_id}", style="bold blue"))
    console.print_json(json.dumps(payload))


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
