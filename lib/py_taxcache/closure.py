"""
Closure of the referenced taxa.

Each rankedlineage.dmp record already carries its whole named lineage, so no
ancestor walk over taxids is needed: the closure is the set of canonical
taxids the dataset references, each paired with its own dump record(s).

Resolution is strict. A referenced taxid that is missing from the dump after
merge resolution (including a retired id whose replacement is missing, a
"dangling" redirect) means the dump and dataset disagree, and the build
fails.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from py_taxcache.errors import TaxonNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from py_taxcache.merge import MergeResolver
    from py_taxcache.models import RankedLineageRecord


@dataclass(frozen=True)
class Closure:
    """
    Records needed to answer lineage queries for a dataset.

    Attributes:
        records: canonical taxid -> dump rows for that taxid (normally one)
        referenced_as: canonical taxid -> dataset taxids that resolved to it
        redirects: retired dataset taxid -> canonical taxid
    """

    records: dict[int, list[RankedLineageRecord]] = field(default_factory=dict)
    referenced_as: dict[int, tuple[int, ...]] = field(default_factory=dict)
    redirects: dict[int, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)


def compute_closure(
    referenced: Iterable[int],
    resolver: MergeResolver,
    index: Mapping[int, list[RankedLineageRecord]],
) -> Closure:
    """
    Resolve every referenced taxid and collect its lineage record.

    Taxids are processed in sorted order so the outcome (including which
    error is reported first) does not depend on input ordering.

    Args:
        referenced: Taxids found in the dataset
        resolver: Merge resolver built from merged.dmp
        index: Ranked lineage records indexed by taxid

    Returns:
        Closure keyed by canonical taxid.

    Raises:
        MergeCycleError: If a referenced taxid sits on a redirect cycle.
        TaxonNotFoundError: If a canonical taxid has no dump record.
    """
    grouped: dict[int, list[int]] = defaultdict(list)
    redirects: dict[int, int] = {}

    for tax_id in sorted(set(referenced)):
        canonical = resolver.resolve(tax_id)
        grouped[canonical].append(tax_id)
        if canonical != tax_id:
            redirects[tax_id] = canonical

    records: dict[int, list[RankedLineageRecord]] = {}
    for canonical in sorted(grouped):
        rows = index.get(canonical)
        if not rows:
            raise TaxonNotFoundError(canonical, tuple(grouped[canonical]))
        records[canonical] = list(rows)

    if redirects:
        logger.info(f"Resolved {len(redirects)} merged taxid(s) to current taxids")
    logger.debug(f"Closure holds {len(records)} canonical taxid(s)")

    return Closure(
        records=records,
        referenced_as={canonical: tuple(ids) for canonical, ids in grouped.items()},
        redirects=redirects,
    )
