"""Set job business logic service."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from setbuilder.models.set_job import SetJob
from setbuilder.models.set_job_item import SetJobItem
from setbuilder.schemas.set_job import SetJobResponse, SetJobStatus
from setbuilder.services.errors import (
    DuplicateSetError,
    InvalidSetJobStateError,
    SetJobNotFoundError,
    SetValidationError,
)
from setbuilder.services.labels import requester_name, set_label
from setbuilder.services.signature import (
    MIN_COMPONENTS,
    find_duplicate,
    lock_signatures,
    normalize_variant_ids,
    positive_variant_ids,
)

logger = logging.getLogger(__name__)

# Error jobs never hold a barcode, so re-editing them restarts the lifecycle
EDITABLE_STATUSES = (None, SetJobStatus.OPEN, SetJobStatus.ERROR)


def get_set_job(db: Session, job_id: int) -> SetJob:
    """
    Get set job by ID.

    Raises:
        SetJobNotFoundError: If job not found
    """
    job = db.query(SetJob).filter(SetJob.id == job_id).first()
    if not job:
        raise SetJobNotFoundError(f"Set job {job_id} not found")
    return job


def validate_set_request(requested_by: int, set_type: str, variant_ids: List) -> List[int]:
    """
    Validate operator input and return the positive variant IDs in input order.

    Raises:
        SetValidationError: If requester, set type or components are insufficient
    """
    if not requested_by or int(requested_by) <= 0:
        raise SetValidationError("A requester is required")
    if not set_type or not set_type.strip():
        raise SetValidationError("A set type is required")
    components = positive_variant_ids(variant_ids or [])
    if len(components) < MIN_COMPONENTS:
        raise SetValidationError("At least two positive variant IDs are required")
    return components


def _guard_duplicate(db: Session, variant_ids: List[int], exclude_job_id: Optional[int] = None) -> None:
    lock_signatures(db)
    match = find_duplicate(db, variant_ids, exclude_job_id=exclude_job_id)
    if match:
        raise DuplicateSetError(
            job_id=match.job_id,
            variant_ids=normalize_variant_ids(variant_ids),
            new_variant_id=match.new_variant_id,
        )


def _replace_items(db: Session, job: SetJob, variant_ids: List[int]) -> None:
    # Delete-all-then-reinsert keeps sort_index dense
    if job.items:
        job.items.clear()
        db.flush()
    for sort_index, variant_id in enumerate(variant_ids):
        job.items.append(SetJobItem(variant_id=variant_id, sort_index=sort_index))


def create_set_job(db: Session, requested_by: int, set_type: str, variant_ids: List) -> SetJob:
    """
    Create a set job with its ordered components.

    The duplicate check and the insert share one transaction.

    Raises:
        SetValidationError: On insufficient input
        DuplicateSetError: If the component multiset already exists
    """
    components = validate_set_request(requested_by, set_type, variant_ids)

    try:
        _guard_duplicate(db, components)

        job = SetJob(
            requested_by=int(requested_by),
            set_type=set_type.strip(),
            status=SetJobStatus.OPEN,
        )
        _replace_items(db, job, components)
        db.add(job)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(job)
    logger.info(f"Created set job {job.id} with variants {components}")
    return job


def update_set_job(
    db: Session,
    job_id: int,
    requested_by: int,
    set_type: str,
    variant_ids: List,
) -> SetJob:
    """
    Replace header and components of an open (or failed) set job.

    Raises:
        SetJobNotFoundError: If job not found
        InvalidSetJobStateError: If the job already left the open state
        SetValidationError: On insufficient input
        DuplicateSetError: If another job has the same component multiset
    """
    job = get_set_job(db, job_id)
    if job.status not in EDITABLE_STATUSES:
        raise InvalidSetJobStateError(
            f"Set job {job_id} is not editable (current: {job.status})"
        )

    components = validate_set_request(requested_by, set_type, variant_ids)

    try:
        _guard_duplicate(db, components, exclude_job_id=job.id)

        job.requested_by = int(requested_by)
        job.set_type = set_type.strip()
        job.status = SetJobStatus.OPEN
        job.error_message = None
        job.updated_at = datetime.utcnow()
        _replace_items(db, job, components)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(job)
    logger.info(f"Updated set job {job.id} with variants {components}")
    return job


def delete_set_job(db: Session, job_id: int) -> None:
    """
    Delete a set job together with its items.

    Raises:
        SetJobNotFoundError: If job not found
    """
    job = get_set_job(db, job_id)
    db.delete(job)
    db.commit()
    logger.info(f"Deleted set job {job_id}")


def list_set_jobs(db: Session) -> List[SetJob]:
    """All set jobs, newest first."""
    return db.query(SetJob).order_by(SetJob.id.desc()).all()


def to_response(job: SetJob) -> SetJobResponse:
    """Build the API view of a job, resolving the requester name."""
    return SetJobResponse(
        id=job.id,
        requested_by_id=job.requested_by,
        requested_by=requester_name(job.requested_by),
        set_type=job.set_type,
        set_label=set_label(job.set_type),
        status=job.status,
        new_item_id=job.new_item_id,
        new_variant_id=job.new_variant_id,
        barcode=job.barcode,
        error_message=job.error_message,
        variant_ids=job.variant_ids,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def apply_import(db: Session, job_id: int, item_id: int, variant_id: int) -> bool:
    """
    Attach the published item/variant identity to a job awaiting components.

    Only jobs exactly in ``waiting_for_components`` are updated; the caller
    commits. Returns False when the row has to be skipped.
    """
    job = (
        db.query(SetJob)
        .filter(SetJob.id == job_id)
        .with_for_update()
        .first()
    )
    if not job or job.status != SetJobStatus.WAITING_FOR_COMPONENTS:
        return False

    job.new_item_id = item_id
    job.new_variant_id = variant_id
    job.status = SetJobStatus.COMPONENTS_ADDED
    job.updated_at = datetime.utcnow()
    db.flush()
    return True
