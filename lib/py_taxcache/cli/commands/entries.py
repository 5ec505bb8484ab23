"""
Cache inspection commands for the taxcache CLI.

Commands:
    taxcache list    - List all cache entries
    taxcache lookup  - Show the lineage of one taxid
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from py_taxcache.cli.utils import console, error, output_json, warning
from py_taxcache.config import get_cache_path
from py_taxcache.errors import TaxonCacheError
from py_taxcache.models import CacheEntry, TaxonomyCache
from py_taxcache.store import load_cache

CacheOption = Annotated[
    Path | None,
    typer.Option(
        "--cache",
        "-c",
        help="Cache file to use (default: $TAXCACHE_PATH or ~/.taxcache/taxa.json)",
    ),
]


def _load(cache: Path | None) -> TaxonomyCache:
    cache_path = get_cache_path(cache)
    if not cache_path.exists():
        error(f"Cache file not found: {cache_path}\nRun 'taxcache build' to create it.")
    try:
        return load_cache(cache_path)
    except TaxonCacheError as e:
        error(escape(str(e)))
        raise typer.Exit(1) from e


def _entry_json(entry: CacheEntry) -> dict:
    return {
        "tax_id": entry.tax_id,
        "name": entry.name,
        "lineage": [{"rank": rank, "name": name} for rank, name in entry.lineage],
        "referenced_as": list(entry.referenced_as),
    }


def list_entries(
    cache: CacheOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List current cache entries."""
    taxon_cache = _load(cache)
    entries = taxon_cache.list_entries()

    if json_output:
        output_json([_entry_json(entry) for entry in entries])
        return

    if not entries:
        warning("Cache is empty")
        return

    table = Table(title="Taxon Cache", show_header=True, header_style="bold cyan")
    table.add_column("TaxID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Genus")
    table.add_column("Superkingdom")
    table.add_column("Merged From", justify="right")

    for entry in entries:
        merged_from = [t for t in entry.referenced_as if t != entry.tax_id]
        table.add_row(
            str(entry.tax_id),
            escape(entry.name),
            escape(entry.rank("genus") or "-"),
            escape(entry.rank("superkingdom") or "-"),
            ", ".join(str(t) for t in merged_from) or "-",
        )

    console.print(table)
    console.print(f"\n{len(entries)} entries total")


def lookup(
    tax_id: Annotated[int, typer.Argument(help="Taxid to look up (merged taxids are followed)")],
    cache: CacheOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the cached lineage of a taxid."""
    taxon_cache = _load(cache)
    entry = taxon_cache.lookup(tax_id)

    if entry is None:
        if json_output:
            output_json({"tax_id": tax_id, "found": False})
        else:
            warning(f"TaxID {tax_id} is not in the cache")
        raise typer.Exit(1)

    if json_output:
        output_json(_entry_json(entry))
        return

    console.print(f"\n[bold]{escape(entry.name)}[/bold] (taxid {entry.tax_id})")
    if entry.tax_id != tax_id:
        console.print(f"  [dim]{tax_id} was merged into {entry.tax_id}[/dim]")
    for rank, name in entry.lineage:
        console.print(f"  {rank:<14} {escape(name)}")
    console.print()
