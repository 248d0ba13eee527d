"""
Employee model — one row per person on an imported roster.

The premium engine reads joining_date, policy_start and policy_end.
enrollment_status moves pending → submitted (on enrollment) → approved.

Roles:
    employee — enrolls dependents
    admin    — imports rosters, reads reports
"""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.models.base import Base, generate_uuid, utcnow


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    emp_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[str] = mapped_column(String(10), nullable=False, default="Male")
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, default="")

    # ── Employment / policy dates ─────────────
    joining_date: Mapped[date] = mapped_column(Date, nullable=False)
    policy_start: Mapped[date] = mapped_column(Date, nullable=False)
    policy_end: Mapped[date] = mapped_column(Date, nullable=False)

    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    designation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    salary: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)

    # ── Enrollment tracking ───────────────────
    enrolled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enrollment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    enrollment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending | submitted | approved
    enrollment_due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    batch_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("upload_batches.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # ── Relationships ─────────────────────────
    batch = relationship("UploadBatch", back_populates="employees")
    family_members = relationship(
        "FamilyMember", back_populates="employee", cascade="all, delete-orphan"
    )
    parents = relationship("Parent", back_populates="employee", cascade="all, delete-orphan")
    enrollment = relationship(
        "Enrollment", back_populates="employee", uselist=False, cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Employee {self.emp_id} {self.email} status={self.enrollment_status}>"
