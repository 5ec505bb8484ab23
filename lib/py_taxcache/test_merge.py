"""Tests for py_taxcache.merge module."""

import pytest

from py_taxcache.errors import MergeConflictError, MergeCycleError
from py_taxcache.merge import MergeResolver, build_merge_map
from py_taxcache.models import MergeRecord


def _records(*pairs: tuple[int, int]) -> list[MergeRecord]:
    return [MergeRecord(old_tax_id=old, new_tax_id=new) for old, new in pairs]


class TestBuildMergeMap:
    def test_one_hop_map(self):
        merge_map = build_merge_map(_records((50, 100), (11111, 22222)))
        assert merge_map == {50: 100, 11111: 22222}

    def test_repeated_identical_record_tolerated(self):
        merge_map = build_merge_map(_records((50, 100), (50, 100)))
        assert merge_map == {50: 100}

    def test_conflicting_targets_fail(self):
        """Retiring one taxid to two different targets is corrupt data."""
        with pytest.raises(MergeConflictError) as exc_info:
            build_merge_map(_records((50, 100), (50, 200)))
        assert exc_info.value.old_tax_id == 50
        assert "100" in str(exc_info.value)
        assert "200" in str(exc_info.value)


class TestMergeResolver:
    """Tests for redirect chain resolution."""

    def test_unmerged_taxid_is_canonical(self):
        resolver = MergeResolver({50: 100})
        assert resolver.resolve(9606) == 9606

    def test_single_hop(self):
        resolver = MergeResolver({50: 100})
        assert resolver.resolve(50) == 100

    def test_multi_hop_chain(self):
        """A -> B -> C resolves to C."""
        resolver = MergeResolver.from_records(_records((11111, 22222), (22222, 9606)))
        assert resolver.resolve(11111) == 9606
        assert resolver.resolve(22222) == 9606

    def test_chain_resolved_after_intermediate_cached(self):
        """Resolving the tail of a chain first doesn't change the head's result."""
        resolver = MergeResolver({1: 2, 2: 3, 3: 4})
        assert resolver.resolve(2) == 4
        assert resolver.resolve(1) == 4

    def test_idempotent(self):
        """resolve(resolve(x)) == resolve(x) for every id."""
        resolver = MergeResolver({1: 2, 2: 3, 10: 3, 50: 100})
        for tax_id in [1, 2, 3, 10, 50, 100, 999]:
            once = resolver.resolve(tax_id)
            assert resolver.resolve(once) == once

    def test_two_cycle_detected(self):
        """old -> new -> old fails instead of looping forever."""
        resolver = MergeResolver({11111: 22222, 22222: 11111})
        with pytest.raises(MergeCycleError) as exc_info:
            resolver.resolve(11111)
        assert exc_info.value.chain == [11111, 22222, 11111]
        assert "11111 -> 22222 -> 11111" in str(exc_info.value)

    def test_self_redirect_is_cycle(self):
        resolver = MergeResolver({7: 7})
        with pytest.raises(MergeCycleError):
            resolver.resolve(7)

    def test_cycle_reached_from_outside(self):
        """A chain leading into a cycle is also detected."""
        resolver = MergeResolver({1: 2, 2: 3, 3: 2})
        with pytest.raises(MergeCycleError) as exc_info:
            resolver.resolve(1)
        assert exc_info.value.chain == [1, 2, 3, 2]

    def test_cycle_does_not_affect_unrelated_ids(self):
        resolver = MergeResolver({1: 2, 2: 1, 50: 100})
        assert resolver.resolve(50) == 100

    def test_is_retired(self):
        resolver = MergeResolver({50: 100})
        assert resolver.is_retired(50)
        assert not resolver.is_retired(100)
        assert len(resolver) == 1

    def test_merge_map_is_copy(self):
        resolver = MergeResolver({50: 100})
        resolver.merge_map[60] = 70
        assert not resolver.is_retired(60)

    def test_validate_finds_cycle_off_any_lookup_path(self):
        resolver = MergeResolver({50: 100, 11111: 22222, 22222: 11111})
        with pytest.raises(MergeCycleError) as exc_info:
            resolver.validate()
        assert exc_info.value.chain == [11111, 22222, 11111]

    def test_validate_accepts_chains(self):
        resolver = MergeResolver({11111: 22222, 22222: 9606, 50: 100})
        resolver.validate()
        assert resolver.resolve(11111) == 9606
