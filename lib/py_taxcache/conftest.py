"""Shared pytest fixtures for py_taxcache tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from loguru import logger

from py_taxcache.models import RANKED_LINEAGE_RANKS


def ranked_line(tax_id: int | str, name: str, **ranks: str) -> str:
    """Format one rankedlineage.dmp line; rank keywords use "class_" for class."""
    values = [ranks.get("class_" if r == "class" else r, "") for r in RANKED_LINEAGE_RANKS]
    return "\t|\t".join([str(tax_id), name, *values]) + "\t|\n"


def merged_line(old_tax_id: int | str, new_tax_id: int | str) -> str:
    return f"{old_tax_id}\t|\t{new_tax_id}\t|\n"


RANKED_LINEAGE_CONTENT = "".join(
    [
        ranked_line(100, "Foo", species="Foo", genus="Bar"),
        ranked_line(
            23456,
            "Streptomyces examplis NBC12345",
            species="Streptomyces examplis",
            genus="Streptomyces",
            family="Streptomycetaceae",
            order="Streptomycetales",
            class_="Actinomycetia",
            phylum="Actinobacteria",
            superkingdom="Bacteria",
        ),
        ranked_line(
            9606,
            "Homo sapiens",
            genus="Homo",
            family="Hominidae",
            order="Primates",
            class_="Mammalia",
            phylum="Chordata",
            kingdom="Metazoa",
            superkingdom="Eukaryota",
        ),
        ranked_line(2, "Bacteria", superkingdom="Bacteria"),
    ],
)

# 50 -> 100, 12345 -> 23456, 11111 -> 22222 -> 9606, 77777 -> 88888 (absent)
MERGED_CONTENT = "".join(
    [
        merged_line(50, 100),
        merged_line(12345, 23456),
        merged_line(11111, 22222),
        merged_line(22222, 9606),
        merged_line(77777, 88888),
    ],
)


@pytest.fixture
def taxdump_dir(tmp_path: Path) -> Path:
    """
    Create a minimal new_taxdump directory.

    Contains rankedlineage.dmp with taxa 2, 100, 9606 and 23456, and a
    merged.dmp with single-hop, multi-hop and dangling redirects.
    """
    dump_dir = tmp_path / "taxdump"
    dump_dir.mkdir()
    (dump_dir / "rankedlineage.dmp").write_text(RANKED_LINEAGE_CONTENT)
    (dump_dir / "merged.dmp").write_text(MERGED_CONTENT)
    return dump_dir


@pytest.fixture
def ranked_lineage_path(taxdump_dir: Path) -> Path:
    return taxdump_dir / "rankedlineage.dmp"


@pytest.fixture
def merged_path(taxdump_dir: Path) -> Path:
    return taxdump_dir / "merged.dmp"


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    """Create an empty dataset directory."""
    datadir = tmp_path / "dataset"
    datadir.mkdir()
    return datadir


@pytest.fixture
def write_record(dataset_dir: Path) -> Callable[..., Path]:
    """Return a helper writing a dataset JSON record referencing the given taxids."""

    def _write(file_name: str, *taxids: int) -> Path:
        record = {
            "records": [
                {
                    "name": file_name,
                    "features": [
                        {
                            "type": "source",
                            "qualifiers": {
                                "db_xref": [f"taxon:{t}" for t in taxids],
                            },
                        },
                    ],
                },
            ],
        }
        path = dataset_dir / file_name
        path.write_text(json.dumps(record))
        return path

    return _write


@pytest.fixture
def log_messages():
    """Capture loguru messages (level and text) emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(
            f"{message.record['level'].name} {message.record['message']}",
        ),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
