"""
Version command for the taxcache CLI.

Commands:
    taxcache version  - Show version information and cache format
"""

from __future__ import annotations

from rich.panel import Panel

from py_taxcache import __version__
from py_taxcache.cli.utils import console
from py_taxcache.config import ENV_VAR_CACHE, ENV_VAR_TAXDUMP, get_cache_path, get_taxdump_dir
from py_taxcache.models import CACHE_FORMAT_VERSION


def version() -> None:
    """Show version information."""
    console.print(
        Panel.fit(
            f"[bold cyan]taxcache[/bold cyan]\n"
            f"Version: {__version__}\n"
            f"Cache format: {CACHE_FORMAT_VERSION}\n\n"
            f"Minimal NCBI taxonomy lineage caches for dataset imports.",
            title="Version Info",
            border_style="cyan",
        ),
    )

    console.print("\n[bold]Paths:[/bold]")
    console.print(f"  Cache:   {get_cache_path()}  [dim](${ENV_VAR_CACHE})[/dim]")
    console.print(f"  Taxdump: {get_taxdump_dir()}  [dim](${ENV_VAR_TAXDUMP})[/dim]")
    console.print()
