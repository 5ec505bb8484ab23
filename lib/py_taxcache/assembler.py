"""Packaging of a closure into a TaxonomyCache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_taxcache.errors import ConsistencyError
from py_taxcache.models import CACHE_FORMAT_VERSION, CacheEntry, TaxonomyCache

if TYPE_CHECKING:
    from collections.abc import Mapping

    from py_taxcache.closure import Closure
    from py_taxcache.models import DumpSource, RankedLineageRecord


def _single_record(tax_id: int, rows: list[RankedLineageRecord]) -> RankedLineageRecord:
    """Collapse identical duplicate rows; differing rows are a consistency error."""
    assert rows, f"closure holds no record for taxid {tax_id}"
    first = rows[0]
    for other in rows[1:]:
        if other != first:
            msg = (
                f"Taxid {tax_id} has conflicting ranked lineage records: "
                f"{first.name!r} {list(first.lineage)} vs {other.name!r} {list(other.lineage)}"
            )
            raise ConsistencyError(msg)
    return first


def assemble_cache(
    closure: Closure,
    sources: Mapping[str, DumpSource] | None = None,
) -> TaxonomyCache:
    """
    Build the immutable cache from a closure.

    Names and lineages are copied verbatim from the dump records.

    Raises:
        ConsistencyError: If one canonical taxid maps to differing records,
            or a canonical taxid is also recorded as retired.
    """
    entries: dict[int, CacheEntry] = {}
    for tax_id in sorted(closure.records):
        record = _single_record(tax_id, closure.records[tax_id])
        if record.tax_id != tax_id:
            msg = f"Closure key {tax_id} holds the record for taxid {record.tax_id}"
            raise ConsistencyError(msg)
        entries[tax_id] = CacheEntry.from_record(
            record,
            referenced_as=closure.referenced_as.get(tax_id, (tax_id,)),
        )

    deprecated_ids: dict[int, int] = {}
    for old_id in sorted(closure.redirects):
        new_id = closure.redirects[old_id]
        if old_id in entries:
            msg = f"Taxid {old_id} is both a cache entry and a retired taxid"
            raise ConsistencyError(msg)
        if new_id not in entries:
            msg = f"Retired taxid {old_id} resolves to {new_id}, which has no entry"
            raise ConsistencyError(msg)
        deprecated_ids[old_id] = new_id

    return TaxonomyCache(
        format_version=CACHE_FORMAT_VERSION,
        sources=dict(sources or {}),
        deprecated_ids=deprecated_ids,
        entries=entries,
    )
