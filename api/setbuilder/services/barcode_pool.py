"""FIFO barcode pool with exactly-once claims."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from setbuilder.models.set_barcode import SetBarcode
from setbuilder.services.errors import MissingBarcodeError

logger = logging.getLogger(__name__)


def _next_unused(db: Session, lock: bool) -> Optional[SetBarcode]:
    query = db.query(SetBarcode).filter(SetBarcode.used == False).order_by(SetBarcode.id)  # noqa: E712
    if lock:
        # Concurrent runs skip rows another transaction already holds
        query = query.with_for_update(skip_locked=True)
    return query.first()


def claim_next_barcode(db: Session) -> str:
    """
    Mark the lowest-ID unused barcode as used and return it.

    The row stays locked until the caller commits, so the claim becomes
    visible together with the job transition that consumes it.

    Raises:
        MissingBarcodeError: If the pool is exhausted
    """
    slot = _next_unused(db, lock=True)
    if slot is None:
        raise MissingBarcodeError("No unused barcode available")

    slot.used = True
    slot.used_at = datetime.utcnow()
    db.flush()
    logger.info(f"Claimed barcode {slot.barcode} (slot {slot.id})")
    return slot.barcode


def peek_next_barcode(db: Session) -> str:
    """
    Return the barcode a claim would take, without consuming it.

    Raises:
        MissingBarcodeError: If the pool is exhausted
    """
    slot = _next_unused(db, lock=False)
    if slot is None:
        raise MissingBarcodeError("No unused barcode available")
    return slot.barcode


def count_unused_barcodes(db: Session) -> int:
    """Number of barcodes still available."""
    return db.query(SetBarcode).filter(SetBarcode.used == False).count()  # noqa: E712


def add_barcodes(db: Session, barcodes: Iterable[str]) -> int:
    """Append new barcodes to the pool, skipping ones already known."""
    known = {row[0] for row in db.query(SetBarcode.barcode).all()}
    added = 0
    for code in barcodes:
        code = code.strip()
        if not code or code in known:
            continue
        db.add(SetBarcode(barcode=code, used=False))
        known.add(code)
        added += 1
    db.commit()
    logger.info(f"Added {added} barcodes to the pool")
    return added
