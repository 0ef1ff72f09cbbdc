"""Set job model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from setbuilder.database import Base


class SetJob(Base):
    """One requested set product."""

    __tablename__ = "set_jobs"

    id = Column(Integer, primary_key=True, index=True)
    requested_by = Column(Integer, nullable=False)  # requester ID, never a name
    set_type = Column(String(100), nullable=False)
    status = Column(String(50), nullable=True, default="open", index=True)
    # Status: open, waiting_for_components, components_added, error (NULL == open)
    new_item_id = Column(Integer, nullable=True)
    new_variant_id = Column(Integer, nullable=True)
    barcode = Column(String(50), nullable=True, unique=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship(
        "SetJobItem",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="SetJobItem.sort_index",
    )

    @property
    def variant_ids(self):
        """Component variant IDs in sort order."""
        return [item.variant_id for item in self.items]

    def __repr__(self):
        return f"<SetJob(id={self.id}, status={self.status}, set_type={self.set_type})>"
