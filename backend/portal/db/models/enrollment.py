"""
Enrollment — the submitted, immutable enrollment of one employee.

Premium columns hold the figures shown to the employee at submission
time; nothing recomputes them afterwards.  employee_id is unique, which
is the last line of defence against a double submission.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from portal.db.models.base import Base, generate_uuid, utcnow


class Enrollment(Base):
    """One row per employee that has submitted."""

    __tablename__ = "enrollments"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    employee_id = Column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    # ── Coverage selection ───────────────────
    parental_coverage_selected = Column(Boolean, nullable=False, default=False)
    parental_coverage_type = Column(String(20), nullable=True)   # parents | parents-in-law

    # ── Premium snapshot ─────────────────────
    main_policy_premium = Column(Numeric(12, 2), nullable=False, default=0)
    parental_policy_premium = Column(Numeric(12, 2), nullable=False, default=0)
    gst_amount = Column(Integer, nullable=False, default=0)
    total_premium = Column(Integer, nullable=False, default=0)
    monthly_deduction = Column(Integer, nullable=False, default=0)
    pro_rata_factor = Column(Float, nullable=False, default=0)
    policy_remaining_days = Column(Integer, nullable=False, default=0)

    # ── Status / timing ──────────────────────
    enrollment_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    submitted_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    employee = relationship("Employee", back_populates="enrollment")

    def __repr__(self) -> str:
        return f"<Enrollment {self.id} employee={self.employee_id} total={self.total_premium} status={self.status}>"
