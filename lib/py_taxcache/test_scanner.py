"""Tests for py_taxcache.scanner module."""

import json
from pathlib import Path

import pytest

from py_taxcache.errors import DatasetError
from py_taxcache.scanner import extract_taxids, scan_dataset_dir


class TestExtractTaxids:
    def test_nested_db_xref(self):
        document = {
            "records": [
                {"features": [{"qualifiers": {"db_xref": ["taxon:1883", "GeneID:5"]}}]},
            ],
        }
        assert extract_taxids(document) == {1883}

    def test_multiple_references(self):
        document = {"a": "taxon:1", "b": ["taxon:2", {"c": "taxon:3"}]}
        assert extract_taxids(document) == {1, 2, 3}

    def test_only_whole_values_match(self):
        """Strings merely containing a taxon reference are not references."""
        document = {"note": "see taxon:5 for details", "id": "taxon:5x"}
        assert extract_taxids(document) == set()

    def test_keys_and_numbers_ignored(self):
        assert extract_taxids({"taxon:9": 9, "n": 1.5, "z": None}) == set()

    def test_non_ascii_digits_ignored(self):
        """Only ASCII digits form a taxid."""
        assert extract_taxids({"a": "taxon:١٠٠", "b": "taxon:100"}) == {100}


class TestScanDatasetDir:
    """Tests for scanning a directory of dataset records."""

    def test_union_over_files(self, dataset_dir: Path, write_record):
        write_record("a.json", 100)
        write_record("b.json", 100, 23456)
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100, 23456})
        assert result.files_scanned == 2
        assert result.warnings == []
        assert result.references[100] == ("a.json", "b.json")

    def test_pattern_filters_files(self, dataset_dir: Path, write_record):
        write_record("a.json", 100)
        (dataset_dir / "notes.txt").write_text("taxon:999")
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100})
        assert result.files_scanned == 1

    def test_custom_pattern(self, dataset_dir: Path, write_record):
        write_record("a.results.json", 100)
        write_record("b.json", 200)
        result = scan_dataset_dir(dataset_dir, pattern="*.results.json")
        assert result.taxids == frozenset({100})

    def test_invalid_json_skipped_with_warning(
        self,
        dataset_dir: Path,
        write_record,
        log_messages: list[str],
    ):
        """A malformed record is skipped; the rest of the scan proceeds."""
        (dataset_dir / "broken.json").write_text("{not json")
        write_record("good.json", 100)
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100})
        assert len(result.warnings) == 1
        assert result.warnings[0].path.name == "broken.json"
        assert "invalid JSON" in result.warnings[0].reason
        assert any(m.startswith("WARNING") and "broken.json" in m for m in log_messages)

    def test_deeply_nested_json_skipped(self, dataset_dir: Path, write_record):
        depth = 200_000
        (dataset_dir / "deep.json").write_text("[" * depth + "]" * depth)
        write_record("good.json", 100)
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100})
        assert [w.path.name for w in result.warnings] == ["deep.json"]
        assert "invalid JSON" in result.warnings[0].reason

    def test_undecodable_file_skipped(self, dataset_dir: Path, write_record):
        (dataset_dir / "binary.json").write_bytes(b"\xff\xfe\x00garbage")
        write_record("good.json", 100)
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100})
        assert "unreadable" in result.warnings[0].reason

    def test_record_without_taxon_skipped(self, dataset_dir: Path, write_record):
        (dataset_dir / "empty.json").write_text(json.dumps({"records": []}))
        write_record("good.json", 100)
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset({100})
        assert result.warnings[0].reason == "no taxon reference"

    def test_subdirectories_ignored(self, dataset_dir: Path, write_record):
        (dataset_dir / "nested.json").mkdir()
        write_record("good.json", 100)
        result = scan_dataset_dir(dataset_dir)
        assert result.files_scanned == 1

    def test_empty_directory(self, dataset_dir: Path):
        result = scan_dataset_dir(dataset_dir)
        assert result.taxids == frozenset()
        assert result.files_scanned == 0

    def test_missing_directory_fails(self, tmp_path: Path):
        with pytest.raises(DatasetError, match="not found"):
            scan_dataset_dir(tmp_path / "nope")

    def test_file_order_independent(self, tmp_path: Path):
        """Creation order does not change the result."""
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        names = {"a.json": 1, "b.json": 2, "c.json": 3}
        for name in names:
            (first / name).write_text(json.dumps({"x": f"taxon:{names[name]}"}))
        for name in reversed(list(names)):
            (second / name).write_text(json.dumps({"x": f"taxon:{names[name]}"}))
        assert scan_dataset_dir(first).references == scan_dataset_dir(second).references
