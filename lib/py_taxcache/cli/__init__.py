"""
taxcache CLI - a Typer-based command-line interface for taxon caches.

Usage:
    taxcache build --cache taxa.json --datadir results/ -m merged.dmp -t rankedlineage.dmp
    taxcache list --cache taxa.json
    taxcache --help
"""

from py_taxcache.cli.app import app, main
from py_taxcache.cli.utils import (
    MAX_PREVIEW_ITEMS,
    configure_logging,
    console,
    error,
    info,
    success,
    warning,
)

__all__ = [
    # App and entry point
    "app",
    "main",
    # Utilities
    "configure_logging",
    "console",
    "error",
    "info",
    "success",
    "warning",
    # Constants
    "MAX_PREVIEW_ITEMS",
]
