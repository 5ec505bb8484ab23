"""
Discovery of the taxids a dataset refers to.

A dataset directory holds one JSON result record per file. Records declare
their taxon through NCBI-style cross references, e.g.

    "db_xref": ["taxon:1883", "BioProject:PRJNA1234"]

Every string value of the form "taxon:<digits>" anywhere in a record counts
as a reference. Files that can't be read, aren't valid JSON, or carry no
taxon reference are skipped with a warning; one bad file never aborts the
scan.
"""

from __future__ import annotations

import json
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from py_taxcache.errors import DatasetError

DEFAULT_DATASET_PATTERN = "*.json"

TAXON_XREF_PATTERN = re.compile(r"taxon:([0-9]+)")


@dataclass(frozen=True)
class ScanWarning:
    """A dataset file that was skipped, and why."""

    path: Path
    reason: str


@dataclass
class ScanResult:
    """
    Taxids referenced by a dataset directory.

    Note: This is a mutable dataclass because the scan builds it file by file.
    """

    taxids: frozenset[int] = frozenset()
    files_scanned: int = 0
    warnings: list[ScanWarning] = field(default_factory=list)
    # taxid -> names of the files that referenced it
    references: dict[int, tuple[str, ...]] = field(default_factory=dict)


def extract_taxids(document: Any) -> set[int]:
    """Collect every "taxon:<id>" string value found anywhere in a JSON document."""
    taxids: set[int] = set()
    stack = [document]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            match = TAXON_XREF_PATTERN.fullmatch(node)
            if match:
                taxids.add(int(match.group(1)))
        elif isinstance(node, dict):
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return taxids


def _skip(result: ScanResult, path: Path, reason: str) -> None:
    logger.warning(f"Skipping dataset file {path}: {reason}")
    result.warnings.append(ScanWarning(path=path, reason=reason))


def scan_dataset_dir(
    datadir: Path | str,
    pattern: str = DEFAULT_DATASET_PATTERN,
) -> ScanResult:
    """
    Scan every file matching pattern in datadir for taxon references.

    Files are visited in sorted order so the result is independent of
    directory enumeration order.

    Args:
        datadir: Directory of dataset JSON records
        pattern: Glob pattern selecting record files

    Returns:
        ScanResult with the union of taxids over all readable records.

    Raises:
        DatasetError: If datadir does not exist or is not a directory.
    """
    datadir = Path(datadir)
    if not datadir.is_dir():
        msg = f"Dataset directory not found: {datadir}"
        raise DatasetError(msg)

    result = ScanResult()
    references: dict[int, list[str]] = defaultdict(list)

    for path in sorted(p for p in datadir.glob(pattern) if p.is_file()):
        result.files_scanned += 1
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _skip(result, path, f"unreadable ({e})")
            continue

        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            _skip(result, path, f"invalid JSON ({e})")
            continue
        except RecursionError:
            _skip(result, path, "invalid JSON (nested too deeply)")
            continue

        found = extract_taxids(document)
        if not found:
            _skip(result, path, "no taxon reference")
            continue

        logger.debug(f"{path.name}: {len(found)} taxon reference(s)")
        for tax_id in found:
            references[tax_id].append(path.name)

    result.taxids = frozenset(references)
    result.references = {tax_id: tuple(names) for tax_id, names in references.items()}

    logger.info(
        f"Scanned {result.files_scanned} dataset file(s): "
        f"{len(result.taxids)} distinct taxid(s), {len(result.warnings)} skipped",
    )
    return result
