"""Celery application and beat schedule for the set batch runs."""

from celery import Celery

from setbuilder.config import settings

celery_app = Celery(
    "set_builder",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["setbuilder.tasks.aggregate_sets", "setbuilder.tasks.import_sets"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # One batch run at a time per worker; overlapping runs are still safe
    worker_prefetch_multiplier=1,
)

celery_app.conf.beat_schedule = {
    "aggregate-open-sets": {
        "task": "setbuilder.tasks.aggregate_sets.aggregate_open_sets",
        "schedule": float(settings.aggregate_interval_seconds),
    },
    "import-new-sets": {
        "task": "setbuilder.tasks.import_sets.import_new_sets",
        "schedule": float(settings.import_interval_seconds),
    },
}
