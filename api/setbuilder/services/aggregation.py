"""Commercial aggregation of open set jobs.

Pipeline per job:
1. Load components in sort order
2. Merge texts, sum price and weight, take dimensions from the first component
3. Classify the shipping profile by total weight
4. Claim a barcode (last step, same transaction as the status change)
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from setbuilder.models.set_job import SetJob
from setbuilder.schemas.set_job import SetJobStatus
from setbuilder.services.barcode_pool import claim_next_barcode, peek_next_barcode
from setbuilder.services.component_repository import ComponentRecord, ComponentRepository
from setbuilder.services.errors import (
    AggregationError,
    ExportWriteError,
    InsufficientComponentsError,
    UnexpectedAggregationError,
)
from setbuilder.services.labels import set_label
from setbuilder.services.notifications import Notifier
from setbuilder.services.signature import MIN_COMPONENTS

logger = logging.getLogger(__name__)

TEXT_SEPARATOR = " + "
DESCRIPTION_SEPARATOR = "\n---\n"

LIGHT_PARCEL_LIMIT_G = 1000
FREIGHT_LIMIT_G = 30000

SET_EXPORT_HEADER = [
    "SetJobID",
    "SetItemTextsName1",
    "SetItemTextsName2",
    "SetItemTextsName3",
    "SetItemTextsShortDescription",
    "SetExternalItemID",
    "SetModel",
    "SetVariantName",
    "SetPurchasePrice",
    "SetWeightG",
    "SetWidthMM",
    "SetLengthMM",
    "SetHeightMM",
    "SetItemProducerName",
    "ItemShippingProfiles",
    "SourceVariantIDs",
    "SetType",
    "SetBarcode",
    "Bearbeiter",
    "ErstelltAm",
]


class SetRecord(BaseModel):
    """Merged commercial data of one set."""

    job_id: int
    name1: str
    name2: str
    name3: str
    short_description: str
    external_item_id: str
    model: str
    variant_name: str
    purchase_price: Decimal
    weight_g: int
    width_mm: Optional[int] = None
    length_mm: Optional[int] = None
    height_mm: Optional[int] = None
    producer_name: Optional[str] = None
    shipping_profile: str
    source_variant_ids: List[int]
    set_type: str
    barcode: Optional[str] = None
    requested_by: int
    created_at: datetime

    def to_row(self) -> List[str]:
        """Row in ``SET_EXPORT_HEADER`` order."""
        return [
            str(self.job_id),
            self.name1,
            self.name2,
            self.name3,
            self.short_description,
            self.external_item_id,
            self.model,
            self.variant_name,
            format_decimal_comma(self.purchase_price),
            str(self.weight_g),
            _blank(self.width_mm),
            _blank(self.length_mm),
            _blank(self.height_mm),
            self.producer_name or "",
            self.shipping_profile,
            ", ".join(str(v) for v in self.source_variant_ids),
            self.set_type,
            self.barcode or "",
            str(self.requested_by),
            self.created_at.strftime("%d.%m.%Y %H:%M"),
        ]


class JobFailure(BaseModel):
    """Diagnostic for one failed job."""

    job_id: int
    error_type: str
    message: str


class AggregationReport(BaseModel):
    """End-of-run report of one aggregation batch."""

    dry_run: bool = False
    processed: int = 0
    succeeded: List[int] = []
    failures: List[JobFailure] = []
    records: List[SetRecord] = []
    export_path: Optional[str] = None
    workflow_status: Optional[str] = None


def _blank(value) -> str:
    return "" if value is None else str(value)


def format_decimal_comma(amount: Decimal) -> str:
    """Two fraction digits with a comma separator, e.g. ``"178,50"``."""
    return f"{amount:.2f}".replace(".", ",")


def shipping_profile_for_weight(weight_g: int) -> str:
    """Shipping profile token for the summed set weight in grams."""
    if weight_g < LIGHT_PARCEL_LIMIT_G:
        return "21;12"
    if weight_g < FREIGHT_LIMIT_G:
        return "12"
    return "8"


def merge_text(values: List[Optional[str]], separator: str = TEXT_SEPARATOR) -> str:
    """Join component texts in component order; missing texts are empty."""
    return separator.join(value or "" for value in values)


def build_set_record(
    job_id: int,
    set_type: str,
    requested_by: int,
    created_at: datetime,
    components: List[ComponentRecord],
) -> SetRecord:
    """
    Merge ordered components into one set record (without barcode).

    Raises:
        InsufficientComponentsError: If fewer than two components are given
    """
    if len(components) < MIN_COMPONENTS:
        raise InsufficientComponentsError(f"Job {job_id} has too few variants")

    label = set_label(set_type)

    def names(attr: str) -> str:
        return f"{label} {merge_text([getattr(c, attr) for c in components])}"

    purchase_price = Decimal(0)
    weight_g = 0
    for component in components:
        purchase_price += Decimal(component.purchase_price or 0)
        weight_g += int(component.weight_g or 0)

    first = components[0]
    return SetRecord(
        job_id=job_id,
        name1=names("name1"),
        name2=names("name2"),
        name3=names("name3"),
        short_description=merge_text(
            [c.short_description for c in components], DESCRIPTION_SEPARATOR
        ),
        external_item_id=merge_text([c.external_item_id for c in components]),
        model=merge_text([c.model for c in components]),
        variant_name=merge_text([c.variant_name for c in components]),
        purchase_price=purchase_price,
        weight_g=weight_g,
        width_mm=first.width_mm,
        length_mm=first.length_mm,
        height_mm=first.height_mm,
        producer_name=first.producer_name,
        shipping_profile=shipping_profile_for_weight(weight_g),
        source_variant_ids=[c.variant_id for c in components],
        set_type=set_type,
        requested_by=requested_by,
        created_at=created_at,
    )


def aggregate_job(db: Session, job: SetJob, dry_run: bool = False) -> SetRecord:
    """
    Aggregate one job and claim its barcode.

    Nothing is committed here; the caller commits or rolls back.

    Raises:
        AggregationError: On insufficient or missing components or an empty pool
    """
    variant_ids = job.variant_ids
    if len(variant_ids) < MIN_COMPONENTS:
        raise InsufficientComponentsError(f"Job {job.id} has too few variants")

    components = ComponentRepository(db).fetch(job.id, variant_ids)
    record = build_set_record(
        job_id=job.id,
        set_type=job.set_type,
        requested_by=job.requested_by,
        created_at=job.created_at,
        components=components,
    )

    if dry_run:
        record.barcode = peek_next_barcode(db)
        return record

    record.barcode = claim_next_barcode(db)
    job.barcode = record.barcode
    job.status = SetJobStatus.WAITING_FOR_COMPONENTS
    job.error_message = None
    job.updated_at = datetime.utcnow()
    return record


def eligible_job_ids(db: Session) -> List[int]:
    """IDs of jobs still open (NULL status counts as open)."""
    rows = db.query(SetJob.id).filter(
        or_(SetJob.status.is_(None), SetJob.status == SetJobStatus.OPEN)
    ).order_by(SetJob.id).all()
    return [row[0] for row in rows]


def _lock_eligible_job(db: Session, job_id: int) -> Optional[SetJob]:
    return (
        db.query(SetJob)
        .filter(
            SetJob.id == job_id,
            or_(SetJob.status.is_(None), SetJob.status == SetJobStatus.OPEN),
        )
        .with_for_update(skip_locked=True)
        .first()
    )


def mark_job_error(db: Session, job_id: int, message: str) -> None:
    """Move a job to error with its diagnostic, in its own transaction."""
    job = db.query(SetJob).filter(SetJob.id == job_id).first()
    if not job:
        return
    job.status = SetJobStatus.ERROR
    job.error_message = message
    job.updated_at = datetime.utcnow()
    db.commit()


def _emit(on_record: Callable[[SetRecord], None], record: SetRecord) -> None:
    try:
        on_record(record)
    except Exception as e:
        raise ExportWriteError(f"Could not export set job {record.job_id}: {e}") from e


def aggregate_open_jobs(
    db: Session,
    notifier: Optional[Notifier] = None,
    dry_run: bool = False,
    on_record: Optional[Callable[[SetRecord], None]] = None,
) -> AggregationReport:
    """
    Aggregate every open job, one transaction per job.

    A failing job is rolled back, moved to error and reported; the batch
    continues with the next job. In dry-run mode nothing is committed.

    ``on_record`` receives each record after its barcode is claimed and
    before the job is committed. If it fails, the job is rolled back and the
    run aborts with ``ExportWriteError``.

    Args:
        db: Database session
        notifier: Receives one message per failed job
        dry_run: Compute rows only, mutate nothing
        on_record: Export sink, not called in dry-run mode

    Returns:
        AggregationReport
    """
    report = AggregationReport(dry_run=dry_run)
    job_ids = eligible_job_ids(db)
    logger.info(f"Found {len(job_ids)} open set jobs (dry_run={dry_run})")

    for job_id in job_ids:
        try:
            job = _lock_eligible_job(db, job_id)
            if job is None:
                # Taken by an overlapping run
                db.rollback()
                continue

            report.processed += 1
            record = aggregate_job(db, job, dry_run=dry_run)

            if dry_run:
                db.rollback()
            else:
                if on_record:
                    _emit(on_record, record)
                db.commit()

            report.succeeded.append(job_id)
            report.records.append(record)
            logger.info(f"Aggregated set job {job_id} with barcode {record.barcode}")

        except ExportWriteError:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            error = e if isinstance(e, AggregationError) else UnexpectedAggregationError(f"Job {job_id}: {e}")
            if isinstance(error, UnexpectedAggregationError):
                logger.error(f"Unexpected failure aggregating job {job_id}: {e}", exc_info=True)
            else:
                logger.warning(f"Aggregation of job {job_id} failed: {error}")

            report.failures.append(JobFailure(
                job_id=job_id,
                error_type=type(error).__name__,
                message=str(error),
            ))

            if dry_run:
                continue

            mark_job_error(db, job_id, str(error))
            if notifier:
                notifier.notify(f"Set export failed for job {job_id}", str(error))

    logger.info(
        f"Aggregation finished: {len(report.succeeded)} succeeded, "
        f"{len(report.failures)} failed"
    )
    return report
