"""Read-only component source tables.

These tables are filled by the ERP sync and only ever read here.
"""

from sqlalchemy import Column, Integer, Numeric, String, Text

from setbuilder.database import Base


class ComponentItem(Base):
    """Commercial attributes of one sellable variant."""

    __tablename__ = "component_items"

    variant_id = Column(Integer, primary_key=True)
    name1 = Column(String(500), nullable=True)
    name2 = Column(String(500), nullable=True)
    name3 = Column(String(500), nullable=True)
    short_description = Column(Text, nullable=True)
    description_html = Column(Text, nullable=True)
    external_item_id = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    variant_name = Column(String(255), nullable=True)
    purchase_price = Column(Numeric(12, 2), nullable=True)
    weight_g = Column(Integer, nullable=True)
    width_mm = Column(Integer, nullable=True)
    length_mm = Column(Integer, nullable=True)
    height_mm = Column(Integer, nullable=True)
    producer_name = Column(String(255), nullable=True)
    image_urls = Column(Text, nullable=True)  # comma separated
    item_property_ids = Column(Text, nullable=True)  # "6=A;7=B"
    variation_property_ids = Column(Text, nullable=True)

    def __repr__(self):
        return f"<ComponentItem(variant_id={self.variant_id}, model={self.model})>"


class ComponentPrice(Base):
    """Channel prices of one variant."""

    __tablename__ = "component_prices"

    variant_id = Column(Integer, primary_key=True)
    gross_min_price = Column(Numeric(12, 2), nullable=True)
    list_price = Column(Numeric(12, 2), nullable=True)
    shop_price = Column(Numeric(12, 2), nullable=True)
    ebay_price = Column(Numeric(12, 2), nullable=True)
    amazon_price = Column(Numeric(12, 2), nullable=True)
    manual_price = Column(Numeric(12, 2), nullable=True)
    real_price = Column(Numeric(12, 2), nullable=True)
    real_lowest_price = Column(Numeric(12, 2), nullable=True)
    b2b_price = Column(Numeric(12, 2), nullable=True)

    def __repr__(self):
        return f"<ComponentPrice(variant_id={self.variant_id}, gross_min_price={self.gross_min_price})>"
