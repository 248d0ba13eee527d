"""
Employee repository containing all data-access operations for the employees table.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.constants import EmployeeEnrollmentStatus
from portal.db.models.employee import Employee

MUTABLE_FIELDS = {
    "name",
    "email",
    "date_of_birth",
    "gender",
    "mobile",
    "joining_date",
    "policy_start",
    "policy_end",
    "department",
    "designation",
    "salary",
    "enrollment_due_date",
    "role",
}


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


async def create_employee(db: AsyncSession, **fields: object) -> Employee:
    """Create a new employee row."""
    if isinstance(fields.get("email"), str):
        fields["email"] = fields["email"].lower().strip()
    employee = Employee(**fields)
    db.add(employee)
    await db.flush()
    return employee


async def bulk_create_employees(
    db: AsyncSession,
    rows: list[dict[str, object]],
    *,
    batch_id: uuid.UUID | None = None,
) -> list[Employee]:
    """Insert many employees in one flush, stamping them with `batch_id`."""
    employees = []
    for fields in rows:
        fields = dict(fields)
        if isinstance(fields.get("email"), str):
            fields["email"] = fields["email"].lower().strip()
        employees.append(Employee(batch_id=batch_id, **fields))
    db.add_all(employees)
    await db.flush()
    return employees


async def get_employee_by_id(
    db: AsyncSession,
    employee_id: uuid.UUID | str,
    *,
    for_update: bool = False,
) -> Employee | None:
    """Fetch an employee by primary key (optionally row-locked)."""
    key = _as_uuid(employee_id)
    if key is None:
        return None
    stmt = select(Employee).where(Employee.id == key)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_employee_by_emp_id(db: AsyncSession, emp_id: str) -> Employee | None:
    """Fetch an employee by roster employee code."""
    stmt = select(Employee).where(Employee.emp_id == emp_id.strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def find_existing_emp_ids(db: AsyncSession, emp_ids: list[str]) -> set[str]:
    """Return the subset of `emp_ids` already present."""
    if not emp_ids:
        return set()
    stmt = select(Employee.emp_id).where(Employee.emp_id.in_(emp_ids))
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def list_employees(
    db: AsyncSession,
    *,
    batch_id: uuid.UUID | str | None = None,
    enrollment_status: str | None = None,
    with_dependents: bool = False,
    offset: int = 0,
    limit: int | None = None,
) -> list[Employee]:
    """List employees ordered by name, with optional filters."""
    stmt = select(Employee).order_by(Employee.name)
    if batch_id is not None:
        stmt = stmt.where(Employee.batch_id == _as_uuid(batch_id))
    if enrollment_status is not None:
        stmt = stmt.where(Employee.enrollment_status == enrollment_status)
    if with_dependents:
        stmt = stmt.options(
            selectinload(Employee.family_members),
            selectinload(Employee.parents),
            selectinload(Employee.enrollment),
        )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_by_batch(db: AsyncSession) -> dict[uuid.UUID, int]:
    """Employee count per batch ID."""
    stmt = (
        select(Employee.batch_id, func.count(Employee.id))
        .where(Employee.batch_id.is_not(None))
        .group_by(Employee.batch_id)
    )
    result = await db.execute(stmt)
    return {batch_id: count for batch_id, count in result.all()}


async def update_employee(
    db: AsyncSession,
    employee_id: uuid.UUID | str,
    **fields: object,
) -> Employee | None:
    """Update mutable employee fields and return updated row."""
    employee = await get_employee_by_id(db, employee_id)
    if employee is None:
        return None

    for key, value in fields.items():
        if key not in MUTABLE_FIELDS or value is None:
            continue
        if key == "email" and isinstance(value, str):
            value = value.lower().strip()
        setattr(employee, key, value)

    await db.flush()
    return employee


async def mark_submitted(db: AsyncSession, employee: Employee, enrollment_date: date) -> None:
    """Flag the employee as enrolled after a successful submission."""
    employee.enrolled = True
    employee.enrollment_status = EmployeeEnrollmentStatus.SUBMITTED.value
    employee.enrollment_date = enrollment_date
    await db.flush()


async def delete_employee(db: AsyncSession, employee_id: uuid.UUID | str) -> bool:
    """Hard-delete an employee. Returns True if a row was deleted."""
    employee = await get_employee_by_id(db, employee_id)
    if employee is None:
        return False
    await db.delete(employee)
    await db.flush()
    return True
