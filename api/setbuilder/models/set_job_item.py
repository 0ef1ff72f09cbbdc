"""Set job item model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from setbuilder.database import Base


class SetJobItem(Base):
    """One ordered component reference of a set job."""

    __tablename__ = "set_job_items"
    __table_args__ = (
        UniqueConstraint("set_job_id", "sort_index", name="uix_set_job_item_position"),
        CheckConstraint("variant_id > 0", name="chk_set_job_item_variant_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    set_job_id = Column(Integer, ForeignKey("set_jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(Integer, nullable=False, index=True)
    sort_index = Column(Integer, nullable=False)  # dense 0..N-1 per job

    job = relationship("SetJob", back_populates="items")

    def __repr__(self):
        return f"<SetJobItem(job_id={self.set_job_id}, variant_id={self.variant_id}, sort_index={self.sort_index})>"
