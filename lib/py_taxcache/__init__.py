"""Minimal NCBI taxonomy lineage caches for dataset imports."""

__version__ = "0.3.0"

# Re-export key modules for convenient access
from py_taxcache import builder, dumps, merge, models, scanner, store

__all__ = [
    "__version__",
    "builder",
    "dumps",
    "merge",
    "models",
    "scanner",
    "store",
]
