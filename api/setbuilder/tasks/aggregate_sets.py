"""Scheduled aggregation of open set jobs."""

import logging

from setbuilder.celery_app import celery_app
from setbuilder.config import settings
from setbuilder.database import SessionLocal
from setbuilder.services.aggregation import SET_EXPORT_HEADER, aggregate_open_jobs
from setbuilder.services.export_service import CsvExportWriter, timestamped_path
from setbuilder.services.notifications import get_notifier
from setbuilder.services.workflow_client import WorkflowError, get_workflow_client

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="setbuilder.tasks.aggregate_sets.aggregate_open_sets")
def aggregate_open_sets(self, dry_run: bool = False) -> dict:
    """
    Aggregate all open set jobs and export the merged set rows.

    Pipeline:
    1. Aggregate each open job; its export row is written before its commit
    2. Start the "create sets" workflow if any row was exported

    Args:
        dry_run: Report the rows only; no job, barcode or file is touched

    Returns:
        Dict with the aggregation report
    """
    logger.info(f"Starting set aggregation run (dry_run={dry_run})")
    notifier = get_notifier()
    db = SessionLocal()

    try:
        if dry_run:
            report = aggregate_open_jobs(db, notifier=notifier, dry_run=True)
            return report.model_dump(mode="json")

        with CsvExportWriter(timestamped_path(settings.export_dir, "sets"), SET_EXPORT_HEADER) as export:
            report = aggregate_open_jobs(
                db,
                notifier=notifier,
                on_record=lambda record: export.write_row(record.to_row()),
            )

        if not export.rows_written:
            logger.info("No set rows produced, no export written and no workflow started")
            return report.model_dump(mode="json")

        report.export_path = str(export.path)

        client = get_workflow_client()
        if client:
            try:
                report.workflow_status = client.trigger(settings.workflow_create_sets_flow)
            except WorkflowError as e:
                logger.error(f"Could not start workflow: {e}")
                report.workflow_status = f"failed: {e}"

        return report.model_dump(mode="json")

    except Exception as e:
        logger.error(f"Set aggregation run failed: {e}", exc_info=True)
        if not dry_run:
            notifier.notify("Critical error in set export", f"Unexpected error in set export: {e}")
        raise
    finally:
        db.close()
