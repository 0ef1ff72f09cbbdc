"""Barcode pool model."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from setbuilder.database import Base


class SetBarcode(Base):
    """Pre-generated barcode; claimed at most once and never released."""

    __tablename__ = "set_barcodes"

    id = Column(Integer, primary_key=True, index=True)
    barcode = Column(String(50), nullable=False, unique=True)
    used = Column(Boolean, nullable=False, default=False, index=True)
    used_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<SetBarcode(id={self.id}, barcode={self.barcode}, used={self.used})>"
