"""
UploadBatch — one row per roster import.

Employees created by an import point back here via batch_id so reports
can be scoped to a single batch.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text, Uuid
from sqlalchemy.orm import relationship

from portal.db.models.base import Base, generate_uuid, utcnow


class UploadBatch(Base):
    """A named group of employees imported together."""

    __tablename__ = "upload_batches"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    batch_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    employees = relationship("Employee", back_populates="batch")

    def __repr__(self) -> str:
        return f"<UploadBatch {self.id} name={self.batch_name!r}>"
