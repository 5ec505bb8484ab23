"""
Path and option resolution.

taxcache Home Directory:
    Data is stored under ~/.taxcache/ by default:
        ~/.taxcache/
        ├── taxa.json               # Built taxon cache
        └── taxdump/                # NCBI new_taxdump files
            ├── rankedlineage.dmp
            └── merged.dmp

Resolution (hierarchical fallback):
    Cache:           explicit path > TAXCACHE_PATH env var > ~/.taxcache/taxa.json
    Taxdump:         TAXCACHE_TAXDUMP_DIR env var > ~/.taxcache/taxdump/
    Dataset pattern: explicit value > TAXCACHE_DATASET_PATTERN env var > *.json

Nothing is created on resolution; a build creates the cache's parent
directory when it writes the cache.
"""

from __future__ import annotations

import os
from pathlib import Path

from py_taxcache.dumps import MERGED_FILE, RANKED_LINEAGE_FILE
from py_taxcache.scanner import DEFAULT_DATASET_PATTERN

DEFAULT_TAXCACHE_HOME = Path.home() / ".taxcache"

ENV_VAR_CACHE = "TAXCACHE_PATH"
ENV_VAR_TAXDUMP = "TAXCACHE_TAXDUMP_DIR"
ENV_VAR_PATTERN = "TAXCACHE_DATASET_PATTERN"

DEFAULT_CACHE_PATH = DEFAULT_TAXCACHE_HOME / "taxa.json"
DEFAULT_TAXDUMP_DIR = DEFAULT_TAXCACHE_HOME / "taxdump"


def get_cache_path(explicit_path: Path | str | None = None) -> Path:
    """
    Resolve the cache file path.

    Priority:
        1. Explicit path argument (from CLI)
        2. TAXCACHE_PATH environment variable
        3. Default: ~/.taxcache/taxa.json
    """
    if explicit_path is not None:
        return Path(explicit_path)
    if ENV_VAR_CACHE in os.environ:
        return Path(os.environ[ENV_VAR_CACHE])
    return DEFAULT_CACHE_PATH


def get_taxdump_dir(explicit_path: Path | str | None = None) -> Path:
    """Resolve the directory holding rankedlineage.dmp and merged.dmp."""
    if explicit_path is not None:
        return Path(explicit_path)
    if ENV_VAR_TAXDUMP in os.environ:
        return Path(os.environ[ENV_VAR_TAXDUMP])
    return DEFAULT_TAXDUMP_DIR


def get_ranked_lineage_path(explicit_path: Path | str | None = None) -> Path:
    if explicit_path is not None:
        return Path(explicit_path)
    return get_taxdump_dir() / RANKED_LINEAGE_FILE


def get_merged_path(explicit_path: Path | str | None = None) -> Path:
    if explicit_path is not None:
        return Path(explicit_path)
    return get_taxdump_dir() / MERGED_FILE


def get_dataset_pattern(explicit_pattern: str | None = None) -> str:
    if explicit_pattern:
        return explicit_pattern
    return os.environ.get(ENV_VAR_PATTERN) or DEFAULT_DATASET_PATTERN
