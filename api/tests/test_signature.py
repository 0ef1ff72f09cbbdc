"""Tests for duplicate detection by component signature."""

import itertools

import pytest

from setbuilder.models import SetJob, SetJobItem
from setbuilder.schemas.set_job import SetJobStatus
from setbuilder.services.set_job_service import create_set_job
from setbuilder.services.signature import (
    build_signature,
    find_duplicate,
    normalize_variant_ids,
    positive_variant_ids,
)


class TestSignature:
    """Tests for the canonical signature."""

    def test_sorted_numerically(self):
        assert build_signature([14, 7, 100]) == "7,14,100"

    def test_repeats_kept(self):
        assert build_signature([7, 14, 7]) == "7,7,14"

    def test_non_positive_dropped(self):
        assert normalize_variant_ids([0, -3, 5, "x", None, "12"]) == [5, 12]

    def test_positive_ids_keep_input_order(self):
        assert positive_variant_ids([30, 0, 10, 30]) == [30, 10, 30]


class TestFindDuplicate:
    """Tests for find_duplicate."""

    @pytest.mark.parametrize("permutation", list(itertools.permutations([3, 1, 2])))
    def test_symmetric_over_permutations(self, test_db, permutation):
        existing = create_set_job(test_db, 8, "423;476", [1, 2, 3])
        match = find_duplicate(test_db, list(permutation))
        assert match is not None
        assert match.job_id == existing.id

    def test_multiplicity_must_match(self, test_db):
        create_set_job(test_db, 8, "423;476", [7, 14, 14])
        assert find_duplicate(test_db, [7, 7, 14]) is None

    def test_different_count_never_matches(self, test_db):
        create_set_job(test_db, 8, "423;476", [7, 14])
        assert find_duplicate(test_db, [7, 14, 14]) is None

    def test_sub_threshold_candidate_skipped(self, test_db):
        single = SetJob(requested_by=8, set_type="423;476", status=SetJobStatus.OPEN)
        single.items.append(SetJobItem(variant_id=7, sort_index=0))
        test_db.add(single)
        test_db.commit()

        assert find_duplicate(test_db, [7]) is None
        assert find_duplicate(test_db, [7, 0, -14]) is None

    def test_excluded_job_ignored(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [7, 14])
        assert find_duplicate(test_db, [14, 7], exclude_job_id=job.id) is None

    def test_reports_published_variant(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [7, 14])
        job.new_variant_id = 9001
        test_db.commit()

        match = find_duplicate(test_db, [7, 14])
        assert match.new_variant_id == 9001
