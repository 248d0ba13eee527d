"""Admin request/response schemas: employees, upload batches, roster import."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portal.core.constants import EmployeeRole, Gender
from portal.core.dates import parse_date

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
MOBILE_PATTERN = r"^\d{10}$"


class _DateParsingModel(BaseModel):
    @field_validator(
        "date_of_birth",
        "joining_date",
        "policy_start",
        "policy_end",
        "enrollment_due_date",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _parse_dates(cls, value: object) -> date | None:
        return parse_date(value)


class EmployeeCreate(_DateParsingModel):
    emp_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    date_of_birth: date | None = None
    gender: Gender = Gender.MALE
    mobile: str = Field(..., pattern=MOBILE_PATTERN)
    joining_date: date
    policy_start: date | None = None
    policy_end: date | None = None
    department: str | None = None
    designation: str | None = None
    salary: float | None = Field(default=None, ge=0)
    enrollment_due_date: date | None = None
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    batch_id: uuid.UUID | None = None


class EmployeeUpdate(_DateParsingModel):
    # Enrollment status and the enrolled flag change only through submission.
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    date_of_birth: date | None = None
    gender: Gender | None = None
    mobile: str | None = Field(default=None, pattern=MOBILE_PATTERN)
    joining_date: date | None = None
    policy_start: date | None = None
    policy_end: date | None = None
    department: str | None = None
    designation: str | None = None
    salary: float | None = Field(default=None, ge=0)
    enrollment_due_date: date | None = None
    role: EmployeeRole | None = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    emp_id: str
    name: str
    email: str
    date_of_birth: date | None
    gender: str
    mobile: str
    joining_date: date
    policy_start: date
    policy_end: date
    department: str | None
    designation: str | None
    salary: float | None
    enrolled: bool
    enrollment_date: date | None
    enrollment_status: str
    enrollment_due_date: date | None
    role: str
    batch_id: uuid.UUID | None
    created_at: datetime


class BatchCreate(BaseModel):
    batch_name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    uploaded_by: str | None = None


class BatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    batch_name: str
    description: str | None
    uploaded_by: str | None
    uploaded_at: datetime
    employee_count: int = 0


class RosterImportResponse(BaseModel):
    batch_id: uuid.UUID
    created: int
    message: str


class ReminderResponse(BaseModel):
    employee_id: uuid.UUID
    task_id: str
    message: str = "Reminder queued"
