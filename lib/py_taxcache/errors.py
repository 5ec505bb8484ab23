"""
Error types for taxon cache construction and loading.

Every fatal condition raised by py_taxcache derives from TaxonCacheError so
callers (the CLI, bulk importers) can catch the whole family in one place.
Each error carries enough context (file, line, identifier) to diagnose the
problem without re-running the build.

Per-file problems found while scanning a dataset directory are not errors;
they are recorded as warnings on the scan result.
"""

from __future__ import annotations

from pathlib import Path


class TaxonCacheError(Exception):
    """Base class for all fatal taxon cache errors."""


class DumpFormatError(TaxonCacheError):
    """
    Raised when a taxdump file contains a malformed line.

    A corrupted dump cannot be partially trusted, so the whole parse fails.

    Attributes:
        path: Dump file (or stream label) being parsed
        line_number: 1-based line number of the offending line
        reason: What was wrong with the line
    """

    def __init__(self, path: Path | str, line_number: int, reason: str) -> None:
        self.path = path
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"{path}:{line_number}: {reason}")


class DumpArchiveError(TaxonCacheError):
    """
    Raised when a taxdump archive cannot be opened or read.

    Attributes:
        path: Archive file
        reason: Underlying tar or compression error
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read taxdump archive {path}: {reason}")


class MergeConflictError(TaxonCacheError):
    """Raised when merged.dmp retires the same taxid to two different targets."""

    def __init__(self, old_tax_id: int, first_target: int, second_target: int) -> None:
        self.old_tax_id = old_tax_id
        self.first_target = first_target
        self.second_target = second_target
        super().__init__(
            f"Merged taxid {old_tax_id} redirects to both {first_target} "
            f"and {second_target}",
        )


class MergeCycleError(TaxonCacheError):
    """
    Raised when following merged.dmp redirects revisits a taxid.

    Attributes:
        chain: The redirect chain walked, ending with the repeated taxid
    """

    def __init__(self, chain: list[int]) -> None:
        self.chain = list(chain)
        rendered = " -> ".join(str(t) for t in self.chain)
        super().__init__(f"Cycle in merged taxid redirects: {rendered}")


class DatasetError(TaxonCacheError):
    """Raised when the dataset directory itself cannot be scanned."""


class TaxonNotFoundError(TaxonCacheError):
    """
    Raised when a referenced taxid has no ranked lineage record.

    This means the dump and the dataset are inconsistent, so the cache
    cannot be considered complete.

    Attributes:
        tax_id: Canonical taxid that was looked up
        referenced_as: Dataset taxids that resolved to tax_id
    """

    def __init__(self, tax_id: int, referenced_as: tuple[int, ...] = ()) -> None:
        self.tax_id = tax_id
        self.referenced_as = tuple(referenced_as)
        others = [t for t in self.referenced_as if t != tax_id]
        if others:
            via = ", ".join(str(t) for t in others)
            msg = f"TaxID not found: {tax_id} (referenced as merged taxid {via})"
        else:
            msg = f"TaxID not found: {tax_id}"
        super().__init__(msg)


class ConsistencyError(TaxonCacheError):
    """Raised when assembled cache content contradicts itself."""


class CacheFormatError(TaxonCacheError):
    """
    Raised when a cache file does not match the expected schema.

    Attributes:
        path: Cache file (or stream label) being loaded
        violation: Description of the first schema violations found
    """

    def __init__(self, path: Path | str, violation: str) -> None:
        self.path = path
        self.violation = violation
        super().__init__(f"Invalid taxon cache {path}: {violation}")


class CacheVersionError(CacheFormatError):
    """Raised when a cache file was written with a different format version."""

    def __init__(self, path: Path | str, found: object, expected: int) -> None:
        self.found = found
        self.expected = expected
        super().__init__(
            path,
            f"format_version {found!r} is not supported (expected {expected}); "
            f"rebuild the cache",
        )
