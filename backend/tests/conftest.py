"""Shared fixtures: fixed clock, in-memory collaborators, SQLite sessions."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal.core.constants import EmployeeEnrollmentStatus, Gender, Relationship
from portal.db.models import Base
from portal.enrollment.errors import EnrollmentAlreadySubmittedError
from portal.enrollment.records import EmployeeProfile, EnrollmentRecord
from portal.validation.models import FamilyMember, Parent

TODAY = date(2024, 6, 15)
POLICY_START = date(2024, 4, 1)
POLICY_END = date(2025, 3, 31)


def born(age: int, today: date = TODAY) -> date:
    """Date of birth that makes someone exactly `age` on `today`."""
    return date(today.year - age, today.month, today.day)


def spouse(age: int = 30, name: str = "Priya") -> FamilyMember:
    return FamilyMember(name, Relationship.SPOUSE, born(age), Gender.FEMALE)


def child(age: int = 5, name: str = "Aarav") -> FamilyMember:
    return FamilyMember(name, Relationship.CHILD, born(age), Gender.MALE)


def parent(relationship: Relationship, age: int = 60, name: str | None = None) -> Parent:
    gender = Gender.FEMALE if "Mother" in relationship.value else Gender.MALE
    return Parent(name or relationship.value, relationship, born(age), gender)


# ═══════════════════════════════════════════════════════════
#  In-memory collaborators
# ═══════════════════════════════════════════════════════════

class FakeStore:
    """EnrollmentStore keeping everything in dicts."""

    def __init__(self, *employees: EmployeeProfile) -> None:
        self.employees = {e.id: e for e in employees}
        self.enrollments: dict[str, EnrollmentRecord] = {}

    async def get_employee(self, employee_id: str) -> EmployeeProfile | None:
        return self.employees.get(employee_id)

    async def get_enrollment(self, employee_id: str) -> EnrollmentRecord | None:
        return self.enrollments.get(employee_id)

    async def save_enrollment(self, record: EnrollmentRecord) -> EnrollmentRecord:
        if record.employee_id in self.enrollments:
            raise EnrollmentAlreadySubmittedError("duplicate", employee_id=record.employee_id)
        saved = replace(record, id=str(uuid.uuid4()))
        self.enrollments[record.employee_id] = saved
        self.employees[record.employee_id] = replace(
            self.employees[record.employee_id],
            enrollment_status=EmployeeEnrollmentStatus.SUBMITTED,
        )
        return saved

    async def on_commit(self, callback) -> None:
        await callback()


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.confirmations: list[tuple[EmployeeProfile, EnrollmentRecord]] = []
        self.reminders: list[tuple[EmployeeProfile, date | None]] = []

    async def send_confirmation(self, employee: EmployeeProfile, record: EnrollmentRecord) -> None:
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.confirmations.append((employee, record))

    async def send_reminder(self, employee: EmployeeProfile, due_date: date | None) -> str:
        self.reminders.append((employee, due_date))
        return "task-123"


@pytest.fixture
def employee() -> EmployeeProfile:
    return EmployeeProfile(
        id=str(uuid.uuid4()),
        emp_id="EMP001",
        name="John Doe",
        email="john.doe@company.com",
        joining_date=date(2024, 6, 15),
        policy_start=POLICY_START,
        policy_end=POLICY_END,
        date_of_birth=date(1985, 1, 15),
        gender=Gender.MALE,
    )


@pytest.fixture
def store(employee: EmployeeProfile) -> FakeStore:
    return FakeStore(employee)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


# ═══════════════════════════════════════════════════════════
#  SQLite database
# ═══════════════════════════════════════════════════════════

@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session
