"""Scheduled import of published set identities."""

import logging
from decimal import Decimal
from pathlib import Path

from setbuilder.celery_app import celery_app
from setbuilder.config import settings
from setbuilder.database import SessionLocal
from setbuilder.services.import_service import import_new_sets as run_import
from setbuilder.services.notifications import get_notifier
from setbuilder.services.workflow_client import WorkflowError, get_workflow_client

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="setbuilder.tasks.import_sets.import_new_sets")
def import_new_sets(self, dry_run: bool = False) -> dict:
    """
    Import published set identities and write the component exports.

    A missing import file is the normal idle case and ends the run quietly;
    a malformed one fails the run without touching any job.

    Returns:
        Dict with the import report
    """
    logger.info(f"Starting set import run (dry_run={dry_run})")

    if not Path(settings.import_file).exists():
        logger.info(f"No import file at {settings.import_file}, nothing to do")
        return {"status": "skipped", "message": "import file not found"}

    db = SessionLocal()

    try:
        report = run_import(
            db,
            import_file=settings.import_file,
            export_dir=settings.export_dir,
            archive_dir=settings.import_archive_dir,
            ignored_property_ids=settings.ignored_property_ids,
            tax_rate=Decimal(settings.tax_rate),
            markup=Decimal(settings.channel_markup),
            dry_run=dry_run,
        )

        client = get_workflow_client()
        if client and report.updated and not dry_run:
            try:
                report.workflow_status = client.trigger(settings.workflow_set_components_flow)
            except WorkflowError as e:
                logger.error(f"Could not start workflow: {e}")
                report.workflow_status = f"failed: {e}"

        return report.model_dump(mode="json")

    except Exception as e:
        logger.error(f"Set import run failed: {e}", exc_info=True)
        if not dry_run:
            get_notifier().notify("Critical error in set import", str(e))
        raise
    finally:
        db.close()
