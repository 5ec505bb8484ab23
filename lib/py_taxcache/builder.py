"""
End-to-end cache builds.

A build is a full rebuild from a dump pair and a dataset directory:

    1. Parse rankedlineage.dmp and merged.dmp        (dumps)
    2. Build the merge resolver                       (merge)
    3. Scan the dataset directory for taxon refs      (scanner)
    4. Resolve refs and pick their lineage records    (closure)
    5. Assemble the immutable cache                   (assembler)

Writing the result is left to the caller (see store.save_cache) so a
failed build never produces a cache file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from py_taxcache.assembler import assemble_cache
from py_taxcache.closure import compute_closure
from py_taxcache.dumps import (
    DumpPair,
    index_ranked_lineage,
    read_dump_pair,
    read_dump_pair_from_archive,
)
from py_taxcache.merge import MergeResolver
from py_taxcache.models import TaxonomyCache
from py_taxcache.scanner import DEFAULT_DATASET_PATTERN, ScanResult, scan_dataset_dir


@dataclass(frozen=True)
class BuildResult:
    """A built cache plus the scan that fed it (for reporting skipped files)."""

    cache: TaxonomyCache
    scan: ScanResult


def build_from_dumps(dumps: DumpPair, scan: ScanResult) -> TaxonomyCache:
    """Combine already-parsed dumps and scan results into a cache."""
    resolver = MergeResolver.from_records(dumps.merged)
    resolver.validate()
    index = index_ranked_lineage(dumps.ranked_lineage)
    closure = compute_closure(scan.taxids, resolver, index)
    return assemble_cache(closure, sources=dumps.sources)


def build_cache(
    ranked_lineage_path: Path | str,
    merged_path: Path | str,
    datadir: Path | str,
    pattern: str = DEFAULT_DATASET_PATTERN,
) -> BuildResult:
    """
    Build a taxon cache from dump files and a dataset directory.

    Raises:
        TaxonCacheError: Any fatal parse, merge, lookup or consistency error.
        OSError: If a dump file cannot be read.
    """
    dumps = read_dump_pair(ranked_lineage_path, merged_path)
    scan = scan_dataset_dir(datadir, pattern)
    cache = build_from_dumps(dumps, scan)
    logger.info(f"Built taxon cache with {len(cache)} entries")
    return BuildResult(cache=cache, scan=scan)


def build_cache_from_archive(
    archive_path: Path | str,
    datadir: Path | str,
    pattern: str = DEFAULT_DATASET_PATTERN,
) -> BuildResult:
    """Same as build_cache(), reading both dumps from new_taxdump.tar.gz."""
    dumps = read_dump_pair_from_archive(Path(archive_path))
    scan = scan_dataset_dir(datadir, pattern)
    cache = build_from_dumps(dumps, scan)
    logger.info(f"Built taxon cache with {len(cache)} entries")
    return BuildResult(cache=cache, scan=scan)
