"""Tests for set job lifecycle operations."""

import pytest

from setbuilder.models import SetJob, SetJobItem
from setbuilder.schemas.set_job import SetJobStatus
from setbuilder.services.errors import (
    DuplicateSetError,
    InvalidSetJobStateError,
    SetJobNotFoundError,
    SetValidationError,
)
from setbuilder.services.set_job_service import (
    apply_import,
    create_set_job,
    delete_set_job,
    list_set_jobs,
    to_response,
    update_set_job,
)


class TestCreateSetJob:
    """Tests for create_set_job."""

    def test_creates_open_job_with_ordered_items(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [30, 10, 20])

        assert job.status == SetJobStatus.OPEN
        assert job.variant_ids == [30, 10, 20]
        assert [item.sort_index for item in job.items] == [0, 1, 2]
        assert job.barcode is None

    def test_non_positive_ids_dropped(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [5, 0, -1, 6])
        assert job.variant_ids == [5, 6]

    def test_repeated_components_allowed(self, test_db):
        job = create_set_job(test_db, 8, "mikrowellenset", [5, 5])
        assert job.variant_ids == [5, 5]

    @pytest.mark.parametrize(
        "requested_by,set_type,variant_ids",
        [
            (0, "423;476", [1, 2]),
            (8, "  ", [1, 2]),
            (8, "423;476", [1]),
            (8, "423;476", [1, 0, -2]),
        ],
    )
    def test_rejects_insufficient_input(self, test_db, requested_by, set_type, variant_ids):
        with pytest.raises(SetValidationError):
            create_set_job(test_db, requested_by, set_type, variant_ids)
        assert test_db.query(SetJob).count() == 0

    def test_duplicate_rejected_and_nothing_persisted(self, test_db):
        first = create_set_job(test_db, 8, "423;476", [7, 14])

        with pytest.raises(DuplicateSetError) as exc_info:
            create_set_job(test_db, 47, "423;428", [14, 7])

        assert exc_info.value.job_id == first.id
        assert "7, 14" in str(exc_info.value)
        assert test_db.query(SetJob).count() == 1
        assert test_db.query(SetJobItem).count() == 2


class TestUpdateSetJob:
    """Tests for update_set_job."""

    def test_replaces_components_densely(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2, 3])

        updated = update_set_job(test_db, job.id, 47, "423;428", [9, 8])

        assert updated.requested_by == 47
        assert updated.set_type == "423;428"
        assert updated.variant_ids == [9, 8]
        assert [item.sort_index for item in updated.items] == [0, 1]
        assert test_db.query(SetJobItem).count() == 2

    def test_same_components_do_not_conflict_with_itself(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2])
        updated = update_set_job(test_db, job.id, 8, "423;476", [2, 1])
        assert updated.variant_ids == [2, 1]

    def test_duplicate_of_other_job_rejected(self, test_db):
        create_set_job(test_db, 8, "423;476", [1, 2])
        job = create_set_job(test_db, 8, "423;476", [3, 4])

        with pytest.raises(DuplicateSetError):
            update_set_job(test_db, job.id, 8, "423;476", [2, 1])

        test_db.refresh(job)
        assert job.variant_ids == [3, 4]

    def test_aggregated_job_not_editable(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2])
        job.status = SetJobStatus.WAITING_FOR_COMPONENTS
        test_db.commit()

        with pytest.raises(InvalidSetJobStateError):
            update_set_job(test_db, job.id, 8, "423;476", [1, 3])

    def test_error_job_is_reopened(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2])
        job.status = SetJobStatus.ERROR
        job.error_message = "Job 1: variants not found: 2"
        test_db.commit()

        updated = update_set_job(test_db, job.id, 8, "423;476", [1, 3])

        assert updated.status == SetJobStatus.OPEN
        assert updated.error_message is None

    def test_unknown_job(self, test_db):
        with pytest.raises(SetJobNotFoundError):
            update_set_job(test_db, 999, 8, "423;476", [1, 2])


class TestDeleteAndList:
    """Tests for delete_set_job and list_set_jobs."""

    def test_delete_removes_items(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2])
        delete_set_job(test_db, job.id)

        assert test_db.query(SetJob).count() == 0
        assert test_db.query(SetJobItem).count() == 0

    def test_delete_unknown_job(self, test_db):
        with pytest.raises(SetJobNotFoundError):
            delete_set_job(test_db, 999)

    def test_list_newest_first(self, test_db):
        first = create_set_job(test_db, 8, "423;476", [1, 2])
        second = create_set_job(test_db, 8, "423;476", [3, 4])
        assert [job.id for job in list_set_jobs(test_db)] == [second.id, first.id]

    def test_response_resolves_names(self, test_db):
        job = create_set_job(test_db, 47, "423;476", [1, 2])
        response = to_response(job)

        assert response.requested_by_id == 47
        assert response.requested_by == "Emily"
        assert response.set_label == "Backofen-Set"

    def test_unknown_requester_name(self, test_db):
        job = create_set_job(test_db, 123, "custom", [1, 2])
        response = to_response(job)

        assert response.requested_by == "Unbekannt"
        assert response.set_label == "custom"


class TestApplyImport:
    """Tests for apply_import."""

    def test_only_waiting_jobs_updated(self, test_db):
        job = create_set_job(test_db, 8, "423;476", [1, 2])

        assert apply_import(test_db, job.id, 500, 600) is False

        job.status = SetJobStatus.WAITING_FOR_COMPONENTS
        test_db.commit()

        assert apply_import(test_db, job.id, 500, 600) is True
        test_db.commit()
        test_db.refresh(job)
        assert job.status == SetJobStatus.COMPONENTS_ADDED
        assert (job.new_item_id, job.new_variant_id) == (500, 600)

        assert apply_import(test_db, job.id, 501, 601) is False

    def test_unknown_job_skipped(self, test_db):
        assert apply_import(test_db, 999, 500, 600) is False
