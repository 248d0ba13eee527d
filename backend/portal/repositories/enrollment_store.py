"""
SqlEnrollmentStore — EnrollmentStore backed by the async SQLAlchemy session.

Maps ORM rows to the plain records in portal.enrollment.records so the
service never sees a mapped object.

Usage:
    async with async_session() as db:
        service = EnrollmentService(store=SqlEnrollmentStore(db))
        record = await service.submit(employee_id, submission)
        await db.commit()
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import replace

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.constants import (
    EmployeeEnrollmentStatus,
    EnrollmentStatus,
    Gender,
    ParentSet,
    Relationship,
)
from portal.core.logging import get_logger
from portal.db.models.dependent import FamilyMember as FamilyMemberRow
from portal.db.models.dependent import Parent as ParentRow
from portal.db.models.employee import Employee
from portal.db.models.enrollment import Enrollment
from portal.db.session import after_commit
from portal.enrollment.errors import EmployeeNotFoundError, EnrollmentAlreadySubmittedError
from portal.enrollment.records import EmployeeProfile, EnrollmentRecord
from portal.repositories import employees as employee_repo
from portal.repositories import enrollments as enrollment_repo
from portal.validation.models import FamilyMember, Parent, ParentalCoverageSelection

logger = get_logger(__name__)


def _gender(value: str | None) -> Gender | None:
    try:
        return Gender(value) if value else None
    except ValueError:
        return None


def to_profile(row: Employee) -> EmployeeProfile:
    """Map an Employee row to the profile the enrollment flow uses."""
    return EmployeeProfile(
        id=str(row.id),
        emp_id=row.emp_id,
        name=row.name,
        email=row.email,
        joining_date=row.joining_date,
        policy_start=row.policy_start,
        policy_end=row.policy_end,
        date_of_birth=row.date_of_birth,
        gender=_gender(row.gender),
        enrollment_status=EmployeeEnrollmentStatus(row.enrollment_status),
    )


def to_family_member(row: FamilyMemberRow) -> FamilyMember:
    return FamilyMember(
        name=row.name,
        relationship=Relationship(row.relationship),
        date_of_birth=row.date_of_birth,
        gender=_gender(row.gender),
    )


def to_parent(row: ParentRow) -> Parent:
    return Parent(
        name=row.name,
        relationship=Relationship(row.relationship),
        date_of_birth=row.date_of_birth,
        gender=_gender(row.gender),
    )


def to_record(
    row: Enrollment,
    family_members: list[FamilyMemberRow],
    parents: list[ParentRow],
) -> EnrollmentRecord:
    """Rebuild the submission snapshot from its stored rows."""
    coverage = ParentalCoverageSelection(
        selected=row.parental_coverage_selected,
        parent_set=ParentSet(row.parental_coverage_type) if row.parental_coverage_type else None,
    )
    # Numeric columns come back as Decimal
    return EnrollmentRecord(
        id=str(row.id),
        employee_id=str(row.employee_id),
        family_members=[to_family_member(m) for m in family_members],
        parents=[to_parent(p) for p in parents],
        coverage=coverage,
        main_policy_premium=float(row.main_policy_premium or 0),
        parental_policy_premium=float(row.parental_policy_premium or 0),
        gst_amount=int(row.gst_amount),
        total_premium=int(row.total_premium),
        monthly_deduction=int(row.monthly_deduction),
        pro_rata_factor=float(row.pro_rata_factor),
        policy_remaining_days=int(row.policy_remaining_days),
        enrollment_date=row.enrollment_date,
        submitted_at=row.submitted_at,
        status=EnrollmentStatus(row.status),
    )


class SqlEnrollmentStore:
    """EnrollmentStore over one AsyncSession. Flushes, never commits."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_employee(self, employee_id: str) -> EmployeeProfile | None:
        row = await employee_repo.get_employee_by_id(self.db, employee_id)
        return to_profile(row) if row is not None else None

    async def get_enrollment(self, employee_id: str) -> EnrollmentRecord | None:
        employee = await employee_repo.get_employee_by_id(self.db, employee_id)
        if employee is None:
            return None
        row = await enrollment_repo.get_enrollment_by_employee(self.db, employee.id)
        if row is None:
            return None
        return to_record(
            row,
            await enrollment_repo.list_family_members(self.db, employee.id),
            await enrollment_repo.list_parents(self.db, employee.id),
        )

    async def save_enrollment(self, record: EnrollmentRecord) -> EnrollmentRecord:
        """Insert the snapshot and flip the employee to submitted, atomically."""
        log = logger.bind(employee_id=record.employee_id)

        employee = await employee_repo.get_employee_by_id(
            self.db, record.employee_id, for_update=True
        )
        if employee is None:
            raise EmployeeNotFoundError("Employee not found", employee_id=record.employee_id)
        if employee.enrollment_status != EmployeeEnrollmentStatus.PENDING.value:
            raise EnrollmentAlreadySubmittedError(
                "Enrollment has already been submitted",
                employee_id=record.employee_id,
            )

        try:
            row = await enrollment_repo.create_enrollment(self.db, employee.id, record)
            await employee_repo.mark_submitted(self.db, employee, record.enrollment_date)
        except IntegrityError as exc:
            log.warning("Concurrent enrollment submission lost the race", error=str(exc.orig))
            raise EnrollmentAlreadySubmittedError(
                "Enrollment has already been submitted",
                employee_id=record.employee_id,
            ) from exc

        log.debug("Enrollment rows flushed", enrollment_id=str(row.id))
        return replace(record, id=str(row.id))

    async def on_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Defer `callback` until the request's `session_scope` commits."""
        after_commit(self.db, callback)
