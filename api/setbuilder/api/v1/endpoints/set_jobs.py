"""Set job API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from setbuilder.api.deps import get_db
from setbuilder.schemas.set_job import (
    SetJobCreateRequest,
    SetJobListResponse,
    SetJobResponse,
    SetJobUpdateRequest,
)
from setbuilder.services.errors import (
    DuplicateSetError,
    InvalidSetJobStateError,
    SetJobNotFoundError,
    SetValidationError,
)
from setbuilder.services.labels import REQUESTERS
from setbuilder.services.set_job_service import (
    create_set_job,
    delete_set_job,
    get_set_job,
    list_set_jobs,
    to_response,
    update_set_job,
)

router = APIRouter()


@router.get("", response_model=SetJobListResponse)
def list_all_set_jobs(db: Session = Depends(get_db)):
    """List all set jobs (newest first) with the requester table."""
    jobs = list_set_jobs(db)
    return SetJobListResponse(
        jobs=[to_response(job) for job in jobs],
        requesters=REQUESTERS,
    )


@router.get("/requesters")
def list_requesters():
    """Requester IDs and display names for the request form."""
    return REQUESTERS


@router.post("", response_model=SetJobResponse, status_code=status.HTTP_201_CREATED)
def create(payload: SetJobCreateRequest, db: Session = Depends(get_db)):
    """
    Create a set job.

    - **requested_by**: Requester ID
    - **set_type**: Set type token
    - **variant_ids**: At least two component variant IDs, in order

    Rejected with 409 when a set with the same components already exists.
    """
    try:
        job = create_set_job(db, payload.requested_by, payload.set_type, payload.variant_ids)
    except SetValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateSetError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_response(job)


@router.get("/{job_id}", response_model=SetJobResponse)
def get_one(job_id: int, db: Session = Depends(get_db)):
    """Get a set job by ID."""
    try:
        return to_response(get_set_job(db, job_id))
    except SetJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{job_id}", response_model=SetJobResponse)
def update(job_id: int, payload: SetJobUpdateRequest, db: Session = Depends(get_db)):
    """
    Replace header and components of a set job that has not been aggregated yet.
    """
    try:
        job = update_set_job(db, job_id, payload.requested_by, payload.set_type, payload.variant_ids)
    except SetJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SetValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (DuplicateSetError, InvalidSetJobStateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_response(job)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(job_id: int, db: Session = Depends(get_db)):
    """Delete a set job and its components."""
    try:
        delete_set_job(db, job_id)
    except SetJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
