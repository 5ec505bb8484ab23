"""
Data models for py_taxcache.

Dump records are plain frozen dataclasses: a ranked lineage dump holds millions
of rows and they only live for the duration of a build. The persisted cache
uses pydantic models so that loading a cache file validates every field and
rejects anything that does not match the schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

# Rank columns of rankedlineage.dmp, lowest to highest, after tax_id and tax_name
RANKED_LINEAGE_RANKS = (
    "species",
    "genus",
    "family",
    "order",
    "class",
    "phylum",
    "kingdom",
    "superkingdom",
)

CACHE_FORMAT_VERSION = 1

# Dict keys arrive as JSON strings, so they are parsed leniently; values are strict
TaxIdKey = Annotated[int, Field(ge=0)]
StrictTaxId = Annotated[StrictInt, Field(ge=0)]
LineagePair = tuple[StrictStr, StrictStr]


# =============================================================================
# Dump records
# =============================================================================


@dataclass(frozen=True)
class RankedLineageRecord:
    """
    One row of rankedlineage.dmp.

    The lineage holds (rank, name) pairs from the lowest rank to the highest.
    Ranks left empty in the dump are omitted.
    """

    tax_id: int
    name: str
    lineage: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        assert self.tax_id >= 0, f"tax_id must be non-negative, got {self.tax_id}"
        assert self.name, "name cannot be empty"


@dataclass(frozen=True)
class MergeRecord:
    """One row of merged.dmp: old_tax_id was retired in favour of new_tax_id."""

    old_tax_id: int
    new_tax_id: int


# =============================================================================
# Persisted cache
# =============================================================================


class CacheEntry(BaseModel):
    """A cached taxon with its full named lineage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tax_id: StrictTaxId
    name: StrictStr
    lineage: tuple[LineagePair, ...]
    # Dataset taxids that resolved to this entry (differs from tax_id for merged ids)
    referenced_as: tuple[StrictTaxId, ...]

    @classmethod
    def from_record(
        cls,
        record: RankedLineageRecord,
        referenced_as: tuple[int, ...] = (),
    ) -> CacheEntry:
        """Copy a dump record verbatim into a cache entry."""
        return cls(
            tax_id=record.tax_id,
            name=record.name,
            lineage=record.lineage,
            referenced_as=tuple(sorted(referenced_as)),
        )

    def rank(self, rank_name: str) -> str | None:
        """Return the lineage name at rank_name, or None if the rank is absent."""
        for rank, name in self.lineage:
            if rank == rank_name:
                return name
        return None

    def lineage_string(self) -> str:
        """Format the lineage as "rank:name; rank:name; ..." from lowest rank up."""
        return "; ".join(f"{rank}:{name}" for rank, name in self.lineage)


class DumpSource(BaseModel):
    """Provenance of a dump file used to build the cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_name: StrictStr
    blake3: StrictStr = Field(min_length=64, max_length=64)


class TaxonomyCache(BaseModel):
    """
    Minimal taxonomy lookup table for one dataset.

    Keys of ``entries`` are always canonical taxids. Retired taxids that the
    dataset referenced are kept in ``deprecated_ids`` so lookups by the old
    id still succeed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    format_version: StrictInt
    sources: dict[StrictStr, DumpSource]
    deprecated_ids: dict[TaxIdKey, StrictTaxId]
    entries: dict[TaxIdKey, CacheEntry]

    @model_validator(mode="after")
    def check_canonical_keys(self) -> TaxonomyCache:
        """Entry keys must match their entries and never be retired ids."""
        for key, entry in self.entries.items():
            if key != entry.tax_id:
                raise ValueError(f"entry key {key} does not match tax_id {entry.tax_id}")
        for old_id, new_id in self.deprecated_ids.items():
            if old_id in self.entries:
                raise ValueError(f"retired taxid {old_id} is also an entry key")
            if new_id not in self.entries:
                raise ValueError(
                    f"retired taxid {old_id} points at {new_id}, which has no entry",
                )
        return self

    def lookup(self, tax_id: int) -> CacheEntry | None:
        """
        Look up a taxid, following recorded merges.

        Absence is a normal query outcome and returns None.
        """
        canonical = self.deprecated_ids.get(tax_id, tax_id)
        return self.entries.get(canonical)

    def list_entries(self) -> list[CacheEntry]:
        """All entries ordered by taxid."""
        return [self.entries[tax_id] for tax_id in sorted(self.entries)]

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, tax_id: object) -> bool:
        return isinstance(tax_id, int) and self.lookup(tax_id) is not None
