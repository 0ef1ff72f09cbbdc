"""Import of published set identities and the post-import exports."""

import csv
import logging
import shutil
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from setbuilder.models.set_job import SetJob
from setbuilder.services.component_repository import ComponentRepository
from setbuilder.services.errors import ImportFileError, MissingPriceError
from setbuilder.services.export_service import (
    COMPONENTS_EXPORT_HEADER,
    CSV_DELIMITER,
    FURTHER_DATA_EXPORT_HEADER,
    component_rows,
    further_data_row,
    timestamped_path,
    write_csv,
)
from setbuilder.services.pricing import DEFAULT_CHANNEL_MARKUP, DEFAULT_TAX_RATE
from setbuilder.services.set_job_service import apply_import

logger = logging.getLogger(__name__)

COLUMN_ITEM_ID = "ItemID"
COLUMN_VARIANT_ID = "MainVariantID"
COLUMN_JOB_ID = "FreeText17"
REQUIRED_COLUMNS = (COLUMN_ITEM_ID, COLUMN_VARIANT_ID, COLUMN_JOB_ID)


class ImportRow(BaseModel):
    """One row of the import file, raw and trimmed."""

    item_id: str
    variant_id: str
    job_id: str

    @property
    def is_complete(self) -> bool:
        return bool(self.item_id and self.variant_id and self.job_id)


class ImportReport(BaseModel):
    """End-of-run report of one import batch."""

    dry_run: bool = False
    updated: List[int] = []
    skipped: int = 0
    price_diagnostics: List[str] = []
    components_export_path: Optional[str] = None
    further_data_export_path: Optional[str] = None
    archived_path: Optional[str] = None
    workflow_status: Optional[str] = None


def read_import_file(path: Path) -> List[ImportRow]:
    """
    Read the semicolon-delimited import file.

    Raises:
        ImportFileError: If the file or a required column is missing
    """
    if not path.exists():
        raise ImportFileError(f"Import file '{path}' not found")

    with open(path, newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle, delimiter=CSV_DELIMITER, quotechar='"')
        header = reader.fieldnames
        if not header:
            raise ImportFileError("Import file header is missing or empty")
        for column in REQUIRED_COLUMNS:
            if column not in header:
                raise ImportFileError(f"Expected column '{column}' is missing in the import file")

        return [
            ImportRow(
                item_id=(row.get(COLUMN_ITEM_ID) or "").strip(),
                variant_id=(row.get(COLUMN_VARIANT_ID) or "").strip(),
                job_id=(row.get(COLUMN_JOB_ID) or "").strip(),
            )
            for row in reader
        ]


def apply_import_rows(db: Session, rows: Iterable[ImportRow], report: ImportReport) -> None:
    """Apply complete rows to jobs awaiting components; count everything else as skipped."""
    for row in rows:
        if not row.is_complete:
            report.skipped += 1
            continue
        try:
            job_id = int(row.job_id)
            item_id = int(row.item_id)
            variant_id = int(row.variant_id)
        except ValueError:
            report.skipped += 1
            continue

        if apply_import(db, job_id, item_id, variant_id):
            report.updated.append(job_id)
        else:
            report.skipped += 1


def build_exports(
    db: Session,
    job_ids: List[int],
    report: ImportReport,
    ignored_property_ids: Iterable = (),
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    markup: Decimal = DEFAULT_CHANNEL_MARKUP,
):
    """Component rows and enriched set rows for the updated jobs."""
    repository = ComponentRepository(db)
    components_out = []
    further_out = []

    jobs = db.query(SetJob).filter(SetJob.id.in_(job_ids)).order_by(SetJob.id).all()
    for job in jobs:
        components_out.extend(component_rows(job))

        variant_ids = job.variant_ids
        if not variant_ids:
            continue
        components = repository.fetch(job.id, variant_ids, strict=False)
        row, price = further_data_row(
            job,
            components,
            ignored_property_ids=ignored_property_ids,
            tax_rate=tax_rate,
            markup=markup,
        )
        if not price.is_complete:
            report.price_diagnostics.append(f"Job {job.id}: {MissingPriceError(price.missing)}")
        further_out.append(row)

    return components_out, further_out


def archive_import_file(path: Path, archive_dir: str, now: Optional[datetime] = None) -> Path:
    """Move the processed import file aside under a timestamped name."""
    target = timestamped_path(archive_dir, path.stem, now)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(path), str(target))
    logger.info(f"Archived import file as {target}")
    return target


def import_new_sets(
    db: Session,
    import_file: str,
    export_dir: str,
    archive_dir: str,
    ignored_property_ids: Iterable = (),
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    markup: Decimal = DEFAULT_CHANNEL_MARKUP,
    dry_run: bool = False,
) -> ImportReport:
    """
    Apply published identities from the import file and write both exports.

    Job transitions and export files succeed or fail together: on any error
    the transaction is rolled back and no job changes state.

    Raises:
        ImportFileError: If the import file is missing or malformed
    """
    report = ImportReport(dry_run=dry_run)
    path = Path(import_file)
    rows = read_import_file(path)

    try:
        apply_import_rows(db, rows, report)
        logger.info(f"Import: {len(report.updated)} jobs updated, {report.skipped} rows skipped")

        if report.updated:
            components_out, further_out = build_exports(
                db,
                report.updated,
                report,
                ignored_property_ids=ignored_property_ids,
                tax_rate=tax_rate,
                markup=markup,
            )
            for diagnostic in report.price_diagnostics:
                logger.warning(diagnostic)

            if not dry_run:
                now = datetime.now()
                report.components_export_path = str(write_csv(
                    timestamped_path(export_dir, "komponenten", now),
                    COMPONENTS_EXPORT_HEADER,
                    components_out,
                ))
                report.further_data_export_path = str(write_csv(
                    timestamped_path(export_dir, "set_weitere_daten", now),
                    FURTHER_DATA_EXPORT_HEADER,
                    further_out,
                ))
        else:
            logger.info("No jobs updated, no exports written")

        if dry_run:
            db.rollback()
        else:
            db.commit()
    except Exception:
        db.rollback()
        raise

    if not dry_run:
        report.archived_path = str(archive_import_file(path, archive_dir))

    return report
