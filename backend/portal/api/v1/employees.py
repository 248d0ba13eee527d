"""Admin employee management endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db, get_notifier
from portal.api.schemas.admin import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ReminderResponse,
)
from portal.core.config import settings
from portal.core.constants import EmployeeEnrollmentStatus
from portal.core.dates import parse_date
from portal.core.logging import get_logger
from portal.notifications.notifier import CeleryNotifier
from portal.repositories import batches as batch_repository
from portal.repositories import employees as employee_repository
from portal.repositories.enrollment_store import to_profile

logger = get_logger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("/", response_model=list[EmployeeResponse])
async def list_employees(
    batch_id: UUID | None = None,
    enrollment_status: EmployeeEnrollmentStatus | None = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> list[EmployeeResponse]:
    """List employees, optionally filtered by batch or enrollment status."""
    employees = await employee_repository.list_employees(
        db,
        batch_id=batch_id,
        enrollment_status=enrollment_status.value if enrollment_status else None,
        offset=offset,
        limit=limit,
    )
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(payload: EmployeeCreate, db: AsyncSession = Depends(get_db)) -> EmployeeResponse:
    """Add a single employee to the roster."""
    if await employee_repository.get_employee_by_emp_id(db, payload.emp_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Employee {payload.emp_id} already exists",
        )
    if payload.batch_id is not None and await batch_repository.get_batch_by_id(db, payload.batch_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")

    fields = payload.model_dump()
    fields["policy_start"] = fields["policy_start"] or parse_date(settings.DEFAULT_POLICY_START)
    fields["policy_end"] = fields["policy_end"] or parse_date(settings.DEFAULT_POLICY_END)
    fields["enrollment_due_date"] = fields["enrollment_due_date"] or parse_date(
        settings.DEFAULT_ENROLLMENT_DUE_DATE
    )
    fields["gender"] = payload.gender.value
    fields["role"] = payload.role.value

    employee = await employee_repository.create_employee(db, **fields)
    logger.info("Employee created", employee_id=str(employee.id), emp_id=employee.emp_id)
    return EmployeeResponse.model_validate(employee)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(employee_id: UUID, db: AsyncSession = Depends(get_db)) -> EmployeeResponse:
    """Get one employee."""
    employee = await employee_repository.get_employee_by_id(db, employee_id)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return EmployeeResponse.model_validate(employee)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: UUID,
    payload: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
) -> EmployeeResponse:
    """Update roster fields of an employee."""
    fields = payload.model_dump(exclude_unset=True, mode="json")
    # Dates are stored as date objects, not their JSON text
    for key in ("date_of_birth", "joining_date", "policy_start", "policy_end", "enrollment_due_date"):
        if key in fields:
            fields[key] = getattr(payload, key)

    employee = await employee_repository.update_employee(db, employee_id, **fields)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    logger.info("Employee updated", employee_id=str(employee_id), fields=sorted(fields))
    return EmployeeResponse.model_validate(employee)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    """Remove an employee together with their dependents and enrollment."""
    if not await employee_repository.delete_employee(db, employee_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    logger.info("Employee deleted", employee_id=str(employee_id))


@router.post("/{employee_id}/reminder", response_model=ReminderResponse, status_code=status.HTTP_202_ACCEPTED)
async def send_reminder(
    employee_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: CeleryNotifier = Depends(get_notifier),
) -> ReminderResponse:
    """Queue an enrollment reminder e-mail for a pending employee."""
    employee = await employee_repository.get_employee_by_id(db, employee_id)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    if employee.enrollment_status != EmployeeEnrollmentStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Employee has already enrolled",
        )

    task_id = await notifier.send_reminder(to_profile(employee), employee.enrollment_due_date)
    return ReminderResponse(employee_id=employee_id, task_id=task_id)
