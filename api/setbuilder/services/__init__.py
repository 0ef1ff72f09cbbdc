"""Business logic services."""

from setbuilder.services.aggregation import aggregate_open_jobs
from setbuilder.services.import_service import import_new_sets
from setbuilder.services.property_reconciler import reconcile_properties
from setbuilder.services.signature import find_duplicate

__all__ = ["aggregate_open_jobs", "import_new_sets", "reconcile_properties", "find_duplicate"]
