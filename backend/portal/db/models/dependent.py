"""
FamilyMember and Parent — dependents frozen into an employee's enrollment.

Both tables share the same shape; they stay separate because they belong
to different policies (employer-paid base vs. voluntary parental).
"""

from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Uuid, orm

from portal.db.models.base import Base, generate_uuid, utcnow


class FamilyMember(Base):
    """Spouse or child under the base policy."""

    __tablename__ = "family_members"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    employee_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    relationship = Column(String(20), nullable=False)     # Spouse | Child
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)
    age = Column(Integer, nullable=True)                   # age at submission

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    employee = orm.relationship("Employee", back_populates="family_members")

    def __repr__(self) -> str:
        return f"<FamilyMember {self.name!r} {self.relationship}>"


class Parent(Base):
    """Parent or parent-in-law under the voluntary parental policy."""

    __tablename__ = "parents"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    employee_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    relationship = Column(String(20), nullable=False)     # Father | Mother | Father-in-law | Mother-in-law
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)
    age = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    employee = orm.relationship("Employee", back_populates="parents")

    def __repr__(self) -> str:
        return f"<Parent {self.name!r} {self.relationship}>"
