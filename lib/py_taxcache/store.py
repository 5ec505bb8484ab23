"""
Persistence of taxon caches as JSON.

The cache file is a versioned, human-readable JSON document:

    {
      "deprecated_ids": {"12345": 23456},
      "entries": {
        "23456": {
          "lineage": [["species", "Streptomyces examplis"], ["genus", "Streptomyces"], ...],
          "name": "Streptomyces examplis NBC12345",
          "referenced_as": [12345],
          "tax_id": 23456
        }
      },
      "format_version": 1,
      "sources": {"merged": {"blake3": "...", "file_name": "merged.dmp"}, ...}
    }

Keys are sorted so that identical caches serialize to identical bytes.
Loading validates the whole document and never fills in defaults; any
mismatch raises CacheFormatError.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from py_taxcache.errors import CacheFormatError, CacheVersionError
from py_taxcache.models import CACHE_FORMAT_VERSION, TaxonomyCache

# Cap on the number of schema violations reported in one error message
MAX_REPORTED_VIOLATIONS = 5


def dumps_cache(cache: TaxonomyCache) -> str:
    """Serialize a cache to its canonical JSON text (with trailing newline)."""
    data = cache.model_dump(mode="json")
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def save_cache(cache: TaxonomyCache, path: Path | str) -> Path:
    """
    Write a cache to path atomically.

    The JSON is written to a temporary sibling file which is then renamed
    over the target, so a failed write never leaves a partial cache.

    Returns:
        The path written.
    """
    path = Path(path)
    content = dumps_cache(cache)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Wrote {len(cache)} cache entries to {path}")
    return path


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors()[:MAX_REPORTED_VIOLATIONS]:
        location = ".".join(str(part) for part in detail["loc"])
        if location:
            problems.append(f"{location}: {detail['msg']}")
        else:
            problems.append(detail["msg"])
    remaining = error.error_count() - len(problems)
    if remaining > 0:
        problems.append(f"... and {remaining} more")
    return "; ".join(problems)


def loads_cache(text: str, source: Path | str = "<string>") -> TaxonomyCache:
    """
    Parse and validate cache JSON text.

    Raises:
        CacheFormatError: If the text is not JSON or violates the schema.
        CacheVersionError: If format_version is not CACHE_FORMAT_VERSION.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CacheFormatError(source, f"not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise CacheFormatError(source, f"expected a JSON object, got {type(data).__name__}")
    if "format_version" not in data:
        raise CacheFormatError(source, "format_version: Field required")
    if data["format_version"] != CACHE_FORMAT_VERSION or isinstance(
        data["format_version"],
        bool,
    ):
        raise CacheVersionError(source, data["format_version"], CACHE_FORMAT_VERSION)

    try:
        return TaxonomyCache.model_validate(data)
    except ValidationError as e:
        raise CacheFormatError(source, _format_validation_error(e)) from e


def load_cache(path: Path | str) -> TaxonomyCache:
    """
    Load a cache file written by save_cache().

    Raises:
        FileNotFoundError: If the cache file does not exist.
        CacheFormatError: If the file is not a valid cache.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CacheFormatError(path, f"not valid UTF-8 ({e.reason})") from e
    cache = loads_cache(text, source=path)
    logger.debug(f"Loaded {len(cache)} cache entries from {path}")
    return cache
