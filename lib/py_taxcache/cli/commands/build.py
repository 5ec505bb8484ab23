"""
Cache build command for the taxcache CLI.

Commands:
    taxcache build  - Build a taxon cache for a dataset directory
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from py_taxcache.builder import build_cache, build_cache_from_archive
from py_taxcache.cli.utils import (
    MAX_PREVIEW_ITEMS,
    console,
    error,
    output_json,
    success,
    warning,
)
from py_taxcache.config import (
    get_cache_path,
    get_dataset_pattern,
    get_merged_path,
    get_ranked_lineage_path,
)
from py_taxcache.errors import TaxonCacheError
from py_taxcache.store import save_cache


def build(
    datadir: Annotated[
        Path,
        typer.Option(
            "--datadir",
            "-d",
            help="Dataset JSON directory used to determine the needed taxids",
        ),
    ],
    cache: Annotated[
        Path | None,
        typer.Option(
            "--cache",
            "-c",
            help="Cache file to write (default: $TAXCACHE_PATH or ~/.taxcache/taxa.json)",
        ),
    ] = None,
    mergeddump: Annotated[
        Path | None,
        typer.Option(
            "--mergeddump",
            "-m",
            help="NCBI merged.dmp to load from (default: $TAXCACHE_TAXDUMP_DIR/merged.dmp)",
        ),
    ] = None,
    taxdump: Annotated[
        Path | None,
        typer.Option(
            "--taxdump",
            "-t",
            help="NCBI rankedlineage.dmp (default: $TAXCACHE_TAXDUMP_DIR/rankedlineage.dmp)",
        ),
    ] = None,
    archive: Annotated[
        Path | None,
        typer.Option(
            "--archive",
            "-a",
            help="Read both dumps from a new_taxdump.tar.gz instead",
        ),
    ] = None,
    pattern: Annotated[
        str | None,
        typer.Option(
            "--pattern",
            "-p",
            help="Glob selecting dataset files (default: *.json)",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print a JSON build summary"),
    ] = False,
) -> None:
    """
    Build a taxon cache for the taxids referenced by a dataset.

    Every build is a full rebuild; an existing cache file is replaced only
    after the new cache has been built successfully.

    Examples:

        # Build from explicit dump files
        taxcache build -c taxa.json -d results/ -m merged.dmp -t rankedlineage.dmp

        # Build straight from the NCBI archive
        taxcache build -c taxa.json -d results/ --archive new_taxdump.tar.gz
    """
    if archive is not None and (mergeddump is not None or taxdump is not None):
        error("--archive cannot be combined with --mergeddump/--taxdump")

    cache_path = get_cache_path(cache)
    dataset_pattern = get_dataset_pattern(pattern)

    try:
        if archive is not None:
            result = build_cache_from_archive(archive, datadir, dataset_pattern)
        else:
            result = build_cache(
                get_ranked_lineage_path(taxdump),
                get_merged_path(mergeddump),
                datadir,
                dataset_pattern,
            )
        save_cache(result.cache, cache_path)
    except TaxonCacheError as e:
        error(escape(str(e)))
        raise typer.Exit(1) from e
    except OSError as e:
        error(escape(f"Failed to build cache: {e}"))
        raise typer.Exit(1) from e

    scan = result.scan

    if json_output:
        output_json(
            {
                "cache": str(cache_path),
                "entries": len(result.cache),
                "deprecated_ids": len(result.cache.deprecated_ids),
                "files_scanned": scan.files_scanned,
                "skipped": [
                    {"path": str(w.path), "reason": w.reason} for w in scan.warnings
                ],
            },
        )
        return

    if scan.warnings:
        warning(f"Skipped {len(scan.warnings)} of {scan.files_scanned} dataset file(s):")
        for skipped in scan.warnings[:MAX_PREVIEW_ITEMS]:
            console.print(f"    {escape(skipped.path.name)}: {escape(skipped.reason)}")
        if len(scan.warnings) > MAX_PREVIEW_ITEMS:
            console.print(f"    ... and {len(scan.warnings) - MAX_PREVIEW_ITEMS} more")

    success(f"Wrote {len(result.cache)} entries to {cache_path}")
    if result.cache.deprecated_ids:
        console.print(
            f"  {len(result.cache.deprecated_ids)} merged taxid(s) resolved to current taxids",
        )
