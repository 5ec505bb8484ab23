"""
Merged (retired) taxid resolution.

merged.dmp maps each retired taxid to the taxid that replaced it. A
replacement may itself be retired later, so resolving an id means following
redirects until reaching an id with no further entry (A -> B -> C).

A chain that revisits an id means the merge data is corrupt; this is fatal
rather than something to bail out of quietly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_taxcache.errors import MergeConflictError, MergeCycleError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from py_taxcache.models import MergeRecord


def build_merge_map(records: Iterable[MergeRecord]) -> dict[int, int]:
    """
    Build the one-hop old -> new redirect map.

    Repeated identical records are tolerated.

    Raises:
        MergeConflictError: If one taxid is retired to two different targets.
    """
    merge_map: dict[int, int] = {}
    for record in records:
        existing = merge_map.get(record.old_tax_id)
        if existing is not None and existing != record.new_tax_id:
            raise MergeConflictError(record.old_tax_id, existing, record.new_tax_id)
        merge_map[record.old_tax_id] = record.new_tax_id
    return merge_map


class MergeResolver:
    """
    Resolves taxids through merge redirect chains.

    Resolved chains are memoised, so resolving every id of a large dataset
    walks each chain once.
    """

    def __init__(self, merge_map: Mapping[int, int]) -> None:
        self._merge_map = dict(merge_map)
        self._resolved: dict[int, int] = {}

    @classmethod
    def from_records(cls, records: Iterable[MergeRecord]) -> MergeResolver:
        return cls(build_merge_map(records))

    @property
    def merge_map(self) -> dict[int, int]:
        return dict(self._merge_map)

    def __len__(self) -> int:
        return len(self._merge_map)

    def is_retired(self, tax_id: int) -> bool:
        """True if tax_id has a redirect entry."""
        return tax_id in self._merge_map

    def resolve(self, tax_id: int) -> int:
        """
        Follow redirects from tax_id to its canonical taxid.

        Ids without a redirect are already canonical and are returned as-is,
        so resolve(resolve(x)) == resolve(x).

        Raises:
            MergeCycleError: If the redirect chain revisits a taxid.
        """
        cached = self._resolved.get(tax_id)
        if cached is not None:
            return cached

        chain = [tax_id]
        seen = {tax_id}
        current = tax_id
        while current in self._merge_map:
            current = self._merge_map[current]
            chain.append(current)
            if current in seen:
                raise MergeCycleError(chain)
            seen.add(current)
            if current in self._resolved:
                current = self._resolved[current]
                break

        for visited in chain:
            self._resolved[visited] = current
        return current

    def validate(self) -> None:
        """
        Resolve every retired taxid once.

        Raises:
            MergeCycleError: If any redirect chain in the map is cyclic,
                whether or not a dataset references it.
        """
        for old_tax_id in sorted(self._merge_map):
            self.resolve(old_tax_id)
