"""
Enrollment repository — data access for enrollments, family_members and parents.

Repository rules:
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.models.dependent import FamilyMember as FamilyMemberRow
from portal.db.models.dependent import Parent as ParentRow
from portal.db.models.enrollment import Enrollment
from portal.enrollment.records import EnrollmentRecord


async def create_enrollment(
    db: AsyncSession,
    employee_id: uuid.UUID,
    record: EnrollmentRecord,
) -> Enrollment:
    """Insert the enrollment row plus one row per dependent."""
    enrollment = Enrollment(
        employee_id=employee_id,
        parental_coverage_selected=record.coverage.selected,
        parental_coverage_type=(
            record.coverage.parent_set.value if record.coverage.parent_set else None
        ),
        main_policy_premium=record.main_policy_premium,
        parental_policy_premium=record.parental_policy_premium,
        gst_amount=record.gst_amount,
        total_premium=record.total_premium,
        monthly_deduction=record.monthly_deduction,
        pro_rata_factor=record.pro_rata_factor,
        policy_remaining_days=record.policy_remaining_days,
        enrollment_date=record.enrollment_date,
        status=record.status.value,
        submitted_at=record.submitted_at,
    )
    db.add(enrollment)

    today = record.enrollment_date
    db.add_all(
        [
            FamilyMemberRow(
                employee_id=employee_id,
                name=member.name.strip(),
                relationship=member.relationship.value,
                date_of_birth=member.date_of_birth,
                gender=member.gender.value if member.gender else "",
                age=member.age_on(today),
            )
            for member in record.family_members
        ]
        + [
            ParentRow(
                employee_id=employee_id,
                name=parent.name.strip(),
                relationship=parent.relationship.value,
                date_of_birth=parent.date_of_birth,
                gender=parent.gender.value if parent.gender else "",
                age=parent.age_on(today),
            )
            for parent in record.parents
        ]
    )
    await db.flush()
    return enrollment


async def get_enrollment_by_employee(db: AsyncSession, employee_id: uuid.UUID) -> Enrollment | None:
    """Fetch the (single) enrollment for an employee."""
    result = await db.execute(select(Enrollment).where(Enrollment.employee_id == employee_id))
    return result.scalar_one_or_none()


async def list_family_members(db: AsyncSession, employee_id: uuid.UUID) -> list[FamilyMemberRow]:
    result = await db.execute(
        select(FamilyMemberRow)
        .where(FamilyMemberRow.employee_id == employee_id)
        .order_by(FamilyMemberRow.created_at)
    )
    return list(result.scalars().all())


async def list_parents(db: AsyncSession, employee_id: uuid.UUID) -> list[ParentRow]:
    result = await db.execute(
        select(ParentRow).where(ParentRow.employee_id == employee_id).order_by(ParentRow.created_at)
    )
    return list(result.scalars().all())


async def update_status(db: AsyncSession, employee_id: uuid.UUID, status: str) -> Enrollment | None:
    """Change the review status of an employee's enrollment."""
    enrollment = await get_enrollment_by_employee(db, employee_id)
    if enrollment is None:
        return None
    enrollment.status = status
    await db.flush()
    return enrollment
