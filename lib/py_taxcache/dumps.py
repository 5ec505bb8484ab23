"""
Parsers for the NCBI new_taxdump flat files.

Two files are needed to build a taxon cache:

    rankedlineage.dmp
        tax_id | tax_name | species | genus | family | order | class |
        phylum | kingdom | superkingdom |
    merged.dmp
        old_tax_id | new_tax_id |

Fields are separated by "\\t|\\t" and every line ends with "\\t|". Both files
are read fully into memory and parsed strictly: any malformed line fails the
whole parse with a DumpFormatError naming the file and line, since a
corrupted dump cannot be partially trusted.
"""

from __future__ import annotations

import tarfile
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import blake3
from loguru import logger

from py_taxcache.errors import DumpArchiveError, DumpFormatError
from py_taxcache.models import (
    RANKED_LINEAGE_RANKS,
    DumpSource,
    MergeRecord,
    RankedLineageRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

RANKED_LINEAGE_FILE = "rankedlineage.dmp"
MERGED_FILE = "merged.dmp"

RANKED_LINEAGE_FIELD_COUNT = 2 + len(RANKED_LINEAGE_RANKS)
MERGED_FIELD_COUNT = 2


@dataclass(frozen=True)
class DumpPair:
    """Parsed contents of one rankedlineage.dmp / merged.dmp pair."""

    ranked_lineage: list[RankedLineageRecord]
    merged: list[MergeRecord]
    sources: dict[str, DumpSource] = field(default_factory=dict)


def _split_fields(line: str) -> list[str]:
    """Split a dump line on "|" and strip the padding around each field."""
    text = line.rstrip()
    if text.endswith("|"):
        text = text[:-1]
    return [part.strip() for part in text.split("|")]


def _iter_lines(
    lines: Iterable[str | bytes],
    source: Path | str,
) -> Iterable[tuple[int, list[str]]]:
    """Yield (line_number, fields) for every non-blank line."""
    for line_number, raw in enumerate(lines, start=1):
        if isinstance(raw, bytes):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DumpFormatError(source, line_number, f"not valid UTF-8 ({e.reason})") from e
        else:
            line = raw
        if not line.strip():
            continue
        yield line_number, _split_fields(line)


def _parse_tax_id(
    value: str,
    source: Path | str,
    line_number: int,
    column: str,
) -> int:
    if not (value.isascii() and value.isdigit()):
        raise DumpFormatError(source, line_number, f"{column} is not a taxid: {value!r}")
    return int(value)


def _check_field_count(
    fields: list[str],
    expected: int,
    source: Path | str,
    line_number: int,
) -> None:
    if len(fields) != expected:
        raise DumpFormatError(
            source,
            line_number,
            f"expected {expected} fields, found {len(fields)}",
        )


def parse_ranked_lineage(
    lines: Iterable[str | bytes],
    source: Path | str = "<rankedlineage>",
) -> list[RankedLineageRecord]:
    """
    Parse rankedlineage.dmp lines into records.

    Args:
        lines: Lines of the dump, as text or undecoded bytes
        source: File name used in error messages

    Returns:
        One RankedLineageRecord per non-blank line, in file order.

    Raises:
        DumpFormatError: On a wrong field count, a non-numeric taxid or an
            empty taxon name.
    """
    records: list[RankedLineageRecord] = []
    for line_number, fields in _iter_lines(lines, source):
        _check_field_count(fields, RANKED_LINEAGE_FIELD_COUNT, source, line_number)
        tax_id = _parse_tax_id(fields[0], source, line_number, "tax_id")
        name = fields[1]
        if not name:
            raise DumpFormatError(source, line_number, f"taxid {tax_id} has an empty name")
        lineage = tuple(
            (rank, value)
            for rank, value in zip(RANKED_LINEAGE_RANKS, fields[2:], strict=True)
            if value
        )
        records.append(RankedLineageRecord(tax_id=tax_id, name=name, lineage=lineage))
    return records


def parse_merged(
    lines: Iterable[str | bytes],
    source: Path | str = "<merged>",
) -> list[MergeRecord]:
    """
    Parse merged.dmp lines into (old, new) redirect records.

    Raises:
        DumpFormatError: On a wrong field count or a non-numeric taxid.
    """
    records: list[MergeRecord] = []
    for line_number, fields in _iter_lines(lines, source):
        _check_field_count(fields, MERGED_FIELD_COUNT, source, line_number)
        records.append(
            MergeRecord(
                old_tax_id=_parse_tax_id(fields[0], source, line_number, "old_tax_id"),
                new_tax_id=_parse_tax_id(fields[1], source, line_number, "new_tax_id"),
            ),
        )
    return records


def _source_for(name: str, data: bytes) -> DumpSource:
    return DumpSource(file_name=name, blake3=blake3.blake3(data).hexdigest())


def read_ranked_lineage(path: Path | str) -> list[RankedLineageRecord]:
    """Read and parse a rankedlineage.dmp file."""
    path = Path(path)
    return parse_ranked_lineage(path.read_bytes().splitlines(), source=path)


def read_merged(path: Path | str) -> list[MergeRecord]:
    """Read and parse a merged.dmp file."""
    path = Path(path)
    return parse_merged(path.read_bytes().splitlines(), source=path)


def read_dump_pair(
    ranked_lineage_path: Path | str,
    merged_path: Path | str,
) -> DumpPair:
    """
    Read both dump files, recording a blake3 digest of each.

    The digests end up in the cache so a cache can be traced back to the
    exact taxdump release it was built from.
    """
    ranked_lineage_path = Path(ranked_lineage_path)
    merged_path = Path(merged_path)

    ranked_data = ranked_lineage_path.read_bytes()
    merged_data = merged_path.read_bytes()

    ranked = parse_ranked_lineage(ranked_data.splitlines(), source=ranked_lineage_path)
    logger.info(f"Parsed {len(ranked)} ranked lineage records from {ranked_lineage_path}")
    merged = parse_merged(merged_data.splitlines(), source=merged_path)
    logger.info(f"Parsed {len(merged)} merged taxid records from {merged_path}")

    return DumpPair(
        ranked_lineage=ranked,
        merged=merged,
        sources={
            "ranked_lineage": _source_for(ranked_lineage_path.name, ranked_data),
            "merged": _source_for(merged_path.name, merged_data),
        },
    )


def read_dump_pair_from_archive(tar_path: Path | str) -> DumpPair:
    """
    Read rankedlineage.dmp and merged.dmp straight out of new_taxdump.tar.gz.

    Members are read with extractfile() so nothing is written to disk.

    Raises:
        DumpArchiveError: If the file is not a readable tar archive.
        FileNotFoundError: If the archive lacks either dump file.
        DumpFormatError: If either dump is malformed.
    """
    tar_path = Path(tar_path)
    wanted = {RANKED_LINEAGE_FILE, MERGED_FILE}
    contents: dict[str, bytes] = {}

    try:
        with tarfile.open(tar_path, "r:*") as tar:
            for member in tar.getmembers():
                base_name = Path(member.name).name
                if base_name not in wanted or not member.isfile():
                    continue
                file_obj = tar.extractfile(member)
                if file_obj is not None:
                    contents[base_name] = file_obj.read()
    except (tarfile.TarError, EOFError) as e:
        raise DumpArchiveError(tar_path, str(e) or type(e).__name__) from e

    missing = sorted(wanted - contents.keys())
    if missing:
        msg = f"{tar_path} does not contain {', '.join(missing)}"
        raise FileNotFoundError(msg)

    ranked_label = f"{tar_path}:{RANKED_LINEAGE_FILE}"
    merged_label = f"{tar_path}:{MERGED_FILE}"
    ranked = parse_ranked_lineage(contents[RANKED_LINEAGE_FILE].splitlines(), ranked_label)
    logger.info(f"Parsed {len(ranked)} ranked lineage records from {ranked_label}")
    merged = parse_merged(contents[MERGED_FILE].splitlines(), merged_label)
    logger.info(f"Parsed {len(merged)} merged taxid records from {merged_label}")

    return DumpPair(
        ranked_lineage=ranked,
        merged=merged,
        sources={
            "ranked_lineage": _source_for(RANKED_LINEAGE_FILE, contents[RANKED_LINEAGE_FILE]),
            "merged": _source_for(MERGED_FILE, contents[MERGED_FILE]),
        },
    )


def index_ranked_lineage(
    records: Iterable[RankedLineageRecord],
) -> dict[int, list[RankedLineageRecord]]:
    """
    Index records by taxid.

    Duplicate rows for a taxid are all kept; the assembler decides whether
    they agree.
    """
    index: dict[int, list[RankedLineageRecord]] = defaultdict(list)
    for record in records:
        index[record.tax_id].append(record)
    return dict(index)
