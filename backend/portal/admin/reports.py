"""
Admin reporting — dashboard statistics, the detailed enrollment report
and its CSV / XLSX exports.

The builders are pure functions over loaded Employee rows (with
family_members, parents and enrollment eager-loaded); the async
wrappers fetch through the repositories.

Export layout: one "Employee" row per employee followed by one
"Dependent" row per covered dependent, IDs `<emp_id>-DEP<n>`.
"""

from __future__ import annotations

import csv
import io
import uuid
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.constants import DependentType, EmployeeEnrollmentStatus, ExportFormat
from portal.core.dates import calculate_age, format_date_with_month_name
from portal.core.logging import get_logger
from portal.db.models.employee import Employee
from portal.premium.engine import calculate_monthly_deduction
from portal.repositories import employees as employee_repo

logger = get_logger(__name__)

NOT_SPECIFIED = "Not Specified"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

DETAILED_REPORT_HEADERS = (
    "Record Type", "Employee ID", "Enrollment ID", "Name", "Email", "Date of Birth",
    "Gender", "Mobile", "Joining Date", "Enrollment Due Date", "Enrollment Status",
    "Relationship", "Age", "Coverage Type", "Annual Premium", "Monthly Deduction",
    "Main Policy Premium", "Parental Policy Premium", "GST Amount", "Pro-rata Factor (%)",
)

EMPLOYEE_EXPORT_HEADERS = (
    "Employee ID", "Name", "Email", "Date of Birth", "Gender", "Mobile",
    "Joining Date", "Enrollment Due Date", "Enrollment Status", "Enrolled",
)


# ═══════════════════════════════════════════════════════════
#  Data structures
# ═══════════════════════════════════════════════════════════

@dataclass
class DepartmentStats:
    department: str
    total: int = 0
    enrolled: int = 0
    pending: int = 0

    @property
    def enrollment_rate(self) -> float:
        return (self.enrolled / self.total) * 100 if self.total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "enrollment_rate": self.enrollment_rate}


@dataclass
class DashboardStats:
    total_employees: int
    enrolled_employees: int
    pending_employees: int
    department_breakdown: list[DepartmentStats] = field(default_factory=list)

    @property
    def enrollment_rate(self) -> float:
        if not self.total_employees:
            return 0.0
        return (self.enrolled_employees / self.total_employees) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_employees": self.total_employees,
            "enrolled_employees": self.enrolled_employees,
            "pending_employees": self.pending_employees,
            "enrollment_rate": self.enrollment_rate,
            "department_breakdown": [d.to_dict() for d in self.department_breakdown],
        }


@dataclass
class ReportDependent:
    name: str
    relationship: str
    type: DependentType
    date_of_birth: date | None
    gender: str
    age: int | None


@dataclass
class EnrollmentReportRow:
    """One employee in the detailed enrollment report."""

    employee_id: str
    emp_id: str
    name: str
    email: str
    date_of_birth: date | None
    gender: str
    mobile: str
    joining_date: date
    department: str
    designation: str
    salary: float
    enrollment_status: str
    enrollment_id: str | None
    policy_start: date
    policy_end: date
    enrollment_due_date: date | None
    batch_id: str | None
    total_premium: int
    monthly_deduction: int
    main_policy_premium: float
    parental_policy_premium: float
    gst_amount: int
    pro_rata_factor: float
    parental_coverage_selected: bool
    parental_coverage_type: str
    dependents: list[ReportDependent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for dependent in data["dependents"]:
            dependent["type"] = dependent["type"].value
        return data


# ═══════════════════════════════════════════════════════════
#  Builders
# ═══════════════════════════════════════════════════════════

def build_dashboard_stats(employees: Sequence[Employee]) -> DashboardStats:
    """Enrollment totals plus a per-department breakdown (first-seen order)."""
    departments: dict[str, DepartmentStats] = {}
    enrolled = 0

    for emp in employees:
        dept = departments.setdefault(
            emp.department or NOT_SPECIFIED, DepartmentStats(emp.department or NOT_SPECIFIED)
        )
        dept.total += 1
        if emp.enrolled:
            dept.enrolled += 1
            enrolled += 1
        else:
            dept.pending += 1

    return DashboardStats(
        total_employees=len(employees),
        enrolled_employees=enrolled,
        pending_employees=len(employees) - enrolled,
        department_breakdown=list(departments.values()),
    )


def _age(dob: date | None, today: date) -> int | None:
    return calculate_age(dob, today) if dob else None


def build_report_row(emp: Employee, today: date | None = None) -> EnrollmentReportRow:
    today = today or date.today()
    enrollment = emp.enrollment

    dependents = [
        ReportDependent(
            name=m.name,
            relationship=m.relationship,
            type=DependentType.FAMILY,
            date_of_birth=m.date_of_birth,
            gender=m.gender,
            age=_age(m.date_of_birth, today),
        )
        for m in emp.family_members or []
    ] + [
        ReportDependent(
            name=p.name,
            relationship=p.relationship,
            type=DependentType.PARENT,
            date_of_birth=p.date_of_birth,
            gender=p.gender,
            age=_age(p.date_of_birth, today),
        )
        for p in emp.parents or []
    ]

    total = int(enrollment.total_premium) if enrollment else 0
    return EnrollmentReportRow(
        employee_id=str(emp.id),
        emp_id=emp.emp_id,
        name=emp.name,
        email=emp.email,
        date_of_birth=emp.date_of_birth,
        gender=emp.gender,
        mobile=emp.mobile,
        joining_date=emp.joining_date,
        department=emp.department or NOT_SPECIFIED,
        designation=emp.designation or "",
        salary=float(emp.salary or 0),
        enrollment_status=emp.enrollment_status or EmployeeEnrollmentStatus.PENDING.value,
        enrollment_id=str(enrollment.id) if enrollment else None,
        policy_start=emp.policy_start,
        policy_end=emp.policy_end,
        enrollment_due_date=emp.enrollment_due_date,
        batch_id=str(emp.batch_id) if emp.batch_id else None,
        total_premium=total,
        monthly_deduction=calculate_monthly_deduction(total) if total > 0 else 0,
        main_policy_premium=float(enrollment.main_policy_premium or 0) if enrollment else 0.0,
        parental_policy_premium=float(enrollment.parental_policy_premium or 0) if enrollment else 0.0,
        gst_amount=int(enrollment.gst_amount) if enrollment else 0,
        pro_rata_factor=float(enrollment.pro_rata_factor) if enrollment else 0.0,
        parental_coverage_selected=enrollment.parental_coverage_selected if enrollment else False,
        parental_coverage_type=(enrollment.parental_coverage_type or "") if enrollment else "",
        dependents=dependents,
    )


def build_detailed_report(employees: Sequence[Employee], today: date | None = None) -> list[EnrollmentReportRow]:
    return [build_report_row(emp, today) for emp in employees]


def detailed_report_table(report: Sequence[EnrollmentReportRow], today: date | None = None) -> list[list[Any]]:
    """Flatten the report into export rows (headers not included)."""
    today = today or date.today()
    rows: list[list[Any]] = []

    for emp in report:
        rows.append([
            "Employee",
            emp.emp_id,
            emp.enrollment_id or "",
            emp.name,
            emp.email,
            format_date_with_month_name(emp.date_of_birth),
            emp.gender,
            emp.mobile,
            format_date_with_month_name(emp.joining_date),
            format_date_with_month_name(emp.enrollment_due_date),
            emp.enrollment_status,
            "Self",
            _age(emp.date_of_birth, today) if emp.date_of_birth else "",
            "Base Coverage",
            emp.total_premium,
            emp.monthly_deduction,
            emp.main_policy_premium,
            emp.parental_policy_premium,
            emp.gst_amount,
            f"{emp.pro_rata_factor * 100:.2f}" if emp.pro_rata_factor else "",
        ])

        for index, dep in enumerate(emp.dependents, start=1):
            family = dep.type == DependentType.FAMILY
            rows.append([
                "Dependent",
                f"{emp.emp_id}-DEP{index}",
                emp.enrollment_id or "",
                dep.name,
                "",
                format_date_with_month_name(dep.date_of_birth),
                dep.gender,
                "",
                "",
                "",
                emp.enrollment_status,
                dep.relationship,
                dep.age if dep.age is not None else "",
                "Base Coverage" if family else "Parental Coverage",
                "Included in Base" if family else "Premium Applied",
                "",
                "",
                "",
                "",
                "",
            ])

    return rows


def employee_table(employees: Sequence[Employee]) -> list[list[Any]]:
    return [
        [
            emp.emp_id,
            emp.name,
            emp.email,
            format_date_with_month_name(emp.date_of_birth),
            emp.gender,
            emp.mobile,
            format_date_with_month_name(emp.joining_date),
            format_date_with_month_name(emp.enrollment_due_date),
            emp.enrollment_status or EmployeeEnrollmentStatus.PENDING.value,
            "Yes" if emp.enrolled else "No",
        ]
        for emp in employees
    ]


# ═══════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════

def render_csv(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def render_xlsx(headers: Sequence[str], rows: Sequence[Sequence[Any]], sheet_title: str) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    # Excel caps sheet titles at 31 characters
    sheet.title = sheet_title[:31]
    sheet.append(list(headers))
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for row in rows:
        sheet.append(list(row))
    sheet.freeze_panes = "A2"

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@dataclass(frozen=True)
class ExportFile:
    filename: str
    media_type: str
    content: bytes


def _render(
    fmt: ExportFormat,
    stem: str,
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    sheet_title: str,
    today: date,
) -> ExportFile:
    if fmt == ExportFormat.XLSX:
        return ExportFile(
            filename=f"{stem}-{today.isoformat()}.xlsx",
            media_type=XLSX_MEDIA_TYPE,
            content=render_xlsx(headers, rows, sheet_title),
        )
    return ExportFile(
        filename=f"{stem}-{today.isoformat()}.csv",
        media_type=CSV_MEDIA_TYPE,
        content=render_csv(headers, rows).encode("utf-8"),
    )


# ═══════════════════════════════════════════════════════════
#  Async entry points
# ═══════════════════════════════════════════════════════════

async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    return build_dashboard_stats(await employee_repo.list_employees(db))


async def get_detailed_report(
    db: AsyncSession,
    batch_id: uuid.UUID | str | None = None,
) -> list[EnrollmentReportRow]:
    employees = await employee_repo.list_employees(db, batch_id=batch_id, with_dependents=True)
    return build_detailed_report(employees)


async def export_detailed_report(
    db: AsyncSession,
    fmt: ExportFormat = ExportFormat.CSV,
    batch_id: uuid.UUID | str | None = None,
) -> ExportFile:
    today = date.today()
    report = await get_detailed_report(db, batch_id)
    stem = f"detailed-enrollment-report-batch-{batch_id}" if batch_id else "detailed-enrollment-report"
    logger.info("Exporting enrollment report", format=fmt.value, batch_id=str(batch_id), employees=len(report))
    return _render(
        fmt, stem, DETAILED_REPORT_HEADERS, detailed_report_table(report, today),
        "Detailed Enrollment Report", today,
    )


async def export_employees(db: AsyncSession, fmt: ExportFormat = ExportFormat.CSV) -> ExportFile:
    today = date.today()
    employees = await employee_repo.list_employees(db)
    logger.info("Exporting employee data", format=fmt.value, employees=len(employees))
    return _render(fmt, "employee-data", EMPLOYEE_EXPORT_HEADERS, employee_table(employees), "Employee Data", today)
