"""SQLAlchemy models."""

from setbuilder.database import Base
from setbuilder.models.component import ComponentItem, ComponentPrice
from setbuilder.models.set_barcode import SetBarcode
from setbuilder.models.set_job import SetJob
from setbuilder.models.set_job_item import SetJobItem

__all__ = [
    "Base",
    "ComponentItem",
    "ComponentPrice",
    "SetBarcode",
    "SetJob",
    "SetJobItem",
]
