"""Barcode pool endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from setbuilder.api.deps import get_db
from setbuilder.services.barcode_pool import add_barcodes, count_unused_barcodes

router = APIRouter()


class BarcodeUpload(BaseModel):
    """New barcodes for the pool."""

    barcodes: List[str] = Field(..., min_length=1)


class BarcodePoolStatus(BaseModel):
    """Pool fill level."""

    unused: int
    added: int = 0


@router.get("", response_model=BarcodePoolStatus)
def get_pool_status(db: Session = Depends(get_db)):
    """Number of unused barcodes left in the pool."""
    return BarcodePoolStatus(unused=count_unused_barcodes(db))


@router.post("", response_model=BarcodePoolStatus, status_code=status.HTTP_201_CREATED)
def upload_barcodes(payload: BarcodeUpload, db: Session = Depends(get_db)):
    """
    Append barcodes to the pool.

    - **barcodes**: Barcodes to add; already known ones are skipped
    """
    added = add_barcodes(db, payload.barcodes)
    return BarcodePoolStatus(unused=count_unused_barcodes(db), added=added)
