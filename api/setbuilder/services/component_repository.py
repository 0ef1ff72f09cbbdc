"""Point lookups of component records by variant ID."""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from setbuilder.models.component import ComponentItem, ComponentPrice
from setbuilder.services.errors import MissingComponentError

logger = logging.getLogger(__name__)


class ComponentPrices(BaseModel):
    """Channel prices of one component; None means not maintained."""

    model_config = ConfigDict(from_attributes=True)

    gross_min_price: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    shop_price: Optional[Decimal] = None
    ebay_price: Optional[Decimal] = None
    amazon_price: Optional[Decimal] = None
    manual_price: Optional[Decimal] = None
    real_price: Optional[Decimal] = None
    real_lowest_price: Optional[Decimal] = None
    b2b_price: Optional[Decimal] = None


class ComponentRecord(BaseModel):
    """Read-only view of one component variant."""

    model_config = ConfigDict(from_attributes=True)

    variant_id: int
    name1: Optional[str] = None
    name2: Optional[str] = None
    name3: Optional[str] = None
    short_description: Optional[str] = None
    description_html: Optional[str] = None
    external_item_id: Optional[str] = None
    model: Optional[str] = None
    variant_name: Optional[str] = None
    purchase_price: Optional[Decimal] = None
    weight_g: Optional[int] = None
    width_mm: Optional[int] = None
    length_mm: Optional[int] = None
    height_mm: Optional[int] = None
    producer_name: Optional[str] = None
    image_urls: Optional[str] = None
    item_property_ids: Optional[str] = None
    variation_property_ids: Optional[str] = None
    prices: ComponentPrices = ComponentPrices()


class ComponentRepository:
    """Loads component records from the ERP tables."""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, job_id: int, variant_ids: List[int], strict: bool = True) -> List[ComponentRecord]:
        """
        Load components in the given order.

        Lookup is by distinct ID; repeated IDs get the same record at each
        position. With ``strict=False`` a missing ID yields an empty record
        (no texts, weight or prices) instead of an error.

        Raises:
            MissingComponentError: If any requested ID has no record (strict)
        """
        distinct_ids = list(dict.fromkeys(variant_ids))
        items: Dict[int, ComponentItem] = {
            item.variant_id: item
            for item in self.db.query(ComponentItem).filter(
                ComponentItem.variant_id.in_(distinct_ids)
            ).all()
        }

        if len(items) != len(distinct_ids):
            missing = [vid for vid in distinct_ids if vid not in items]
            if strict:
                raise MissingComponentError(job_id, missing)
            logger.warning(f"Job {job_id}: no component data for variants {missing}")

        prices: Dict[int, ComponentPrice] = {
            price.variant_id: price
            for price in self.db.query(ComponentPrice).filter(
                ComponentPrice.variant_id.in_(distinct_ids)
            ).all()
        }

        records = {}
        for vid in distinct_ids:
            item = items.get(vid)
            record = ComponentRecord.model_validate(item) if item else ComponentRecord(variant_id=vid)
            if vid in prices:
                record.prices = ComponentPrices.model_validate(prices[vid])
            records[vid] = record

        logger.debug(f"Loaded {len(records)} component records for job {job_id}")
        return [records[vid] for vid in variant_ids]
