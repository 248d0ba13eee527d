"""
Roster import — turns an uploaded CSV or XLSX employee roster into
employee rows attached to an upload batch.

Import is all-or-nothing: every row is checked first, and a single bad
row aborts the whole file with the full list of row errors.

Usage:
    rows = read_roster("roster.xlsx", content)
    parsed = parse_roster(rows)
    employees = await import_roster(db, batch.id, "roster.xlsx", content)
"""

from __future__ import annotations

import csv
import io
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any
from zipfile import BadZipFile

from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.constants import EmployeeEnrollmentStatus, EmployeeRole, Gender
from portal.core.dates import parse_date, to_display
from portal.core.logging import get_logger
from portal.db.models.employee import Employee
from portal.enrollment.errors import RosterImportError
from portal.repositories import employees as employee_repo

logger = get_logger(__name__)

REQUIRED_COLUMNS = (
    "emp_id",
    "name",
    "email",
    "date_of_birth",
    "gender",
    "mobile",
    "joining_date",
)
OPTIONAL_COLUMNS = (
    "department",
    "designation",
    "salary",
    "policy_start",
    "policy_end",
    "role",
    "enrollment_due_date",
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_RE = re.compile(r"^\d{10}$")

TEMPLATE_ROWS = (
    ("EMP001", "John Doe", "john.doe@company.com", "15/01/1985", "Male", "9876543210",
     "01/01/2024", "Engineering", "Developer", "75000", "01/04/2024", "31/03/2025", "employee"),
    ("EMP002", "Jane Smith", "jane.smith@company.com", "22/03/1990", "Female", "9876543211",
     "15/02/2024", "HR", "Manager", "65000", "01/04/2024", "31/03/2025", "employee"),
    ("EMP003", "Admin User", "admin@company.com", "01/01/1980", "Male", "9999999999",
     "01/01/2020", "IT", "Administrator", "100000", "01/04/2024", "31/03/2025", "admin"),
)


@dataclass
class RosterParseResult:
    employees: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


# ═══════════════════════════════════════════════════════════
#  Reading
# ═══════════════════════════════════════════════════════════

def _cell_text(value: Any) -> Any:
    """Normalise a spreadsheet cell: keep dates, stringify everything else."""
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value
    # Excel stores mobile numbers and IDs as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_csv(filename: str, content: bytes) -> tuple[list[str], list[list[Any]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise RosterImportError(
            "Could not read file: CSV rosters must be UTF-8 encoded.",
            details={"filename": filename},
        ) from exc
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if not rows:
        return [], []
    return rows[0], [[cell.strip() for cell in row] for row in rows[1:]]


def _read_xlsx(filename: str, content: bytes) -> tuple[list[str], list[list[Any]]]:
    from openpyxl import load_workbook
    from openpyxl.utils.exceptions import InvalidFileException

    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError) as exc:
        raise RosterImportError(
            "Could not read file: not a valid XLSX workbook.",
            details={"filename": filename},
        ) from exc
    try:
        sheet = workbook.active
        rows = [
            [_cell_text(value) for value in row]
            for row in sheet.iter_rows(values_only=True)
            if any(value not in (None, "") for value in row)
        ]
    finally:
        workbook.close()
    if not rows:
        return [], []
    return [str(h) for h in rows[0]], rows[1:]


def read_roster(filename: str, content: bytes) -> list[dict[str, Any]]:
    """
    Read a roster into header → value dicts.

    Headers are matched case-insensitively.  Raises RosterImportError for
    an unsupported extension, an empty file or missing required columns.
    """
    lowered = filename.lower()
    if lowered.endswith(".csv"):
        headers, rows = _read_csv(filename, content)
    elif lowered.endswith(".xlsx"):
        headers, rows = _read_xlsx(filename, content)
    else:
        raise RosterImportError("Please upload a CSV or XLSX file.", details={"filename": filename})

    if not headers or not rows:
        raise RosterImportError("File appears to be empty or has no data rows.")

    headers = [h.strip().lower() for h in headers]
    missing = [column for column in REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise RosterImportError(
            f"Missing required columns: {', '.join(missing)}",
            details={"missing_columns": missing},
        )

    records = []
    for row in rows:
        padded = list(row) + [""] * (len(headers) - len(row))
        records.append(dict(zip(headers, padded)))
    return records


# ═══════════════════════════════════════════════════════════
#  Row checks
# ═══════════════════════════════════════════════════════════

def _text(record: dict[str, Any], column: str) -> str:
    value = record.get(column, "")
    if isinstance(value, (date, datetime)):
        return to_display(parse_date(value))
    return str(value or "").strip()


def parse_roster(records: list[dict[str, Any]]) -> RosterParseResult:
    """Check every row; collect employee field dicts and `Row N: ...` errors."""
    result = RosterParseResult()
    default_start = parse_date(settings.DEFAULT_POLICY_START)
    default_end = parse_date(settings.DEFAULT_POLICY_END)
    default_due = parse_date(settings.DEFAULT_ENROLLMENT_DUE_DATE)
    seen: set[str] = set()

    for index, record in enumerate(records):
        row_num = index + 2  # header is row 1
        emp_id = _text(record, "emp_id")
        name = _text(record, "name")
        email = _text(record, "email")
        mobile = _text(record, "mobile")

        if not (emp_id and name and email and mobile and _text(record, "joining_date")):
            result.errors.append(f"Row {row_num}: Missing required data")
            continue
        if not EMAIL_RE.match(email):
            result.errors.append(f"Row {row_num}: Invalid email format")
            continue
        if not MOBILE_RE.match(mobile):
            result.errors.append(f"Row {row_num}: Invalid mobile number (must be 10 digits)")
            continue
        if emp_id in seen:
            result.errors.append(f"Row {row_num}: Duplicate emp_id {emp_id}")
            continue

        dates: dict[str, date | None] = {}
        bad_dates = []
        for column in ("date_of_birth", "joining_date", "policy_start", "policy_end", "enrollment_due_date"):
            try:
                dates[column] = parse_date(record.get(column))
            except ValueError:
                bad_dates.append(column)
        if bad_dates:
            result.errors.append(f"Row {row_num}: Invalid date in {', '.join(bad_dates)}")
            continue

        salary_text = _text(record, "salary")
        try:
            salary = float(salary_text) if salary_text else None
        except ValueError:
            result.errors.append(f"Row {row_num}: Invalid salary")
            continue

        seen.add(emp_id)
        result.employees.append({
            "emp_id": emp_id,
            "name": name,
            "email": email,
            "date_of_birth": dates["date_of_birth"],
            "gender": (Gender.FEMALE if _text(record, "gender") == Gender.FEMALE else Gender.MALE).value,
            "mobile": mobile,
            "joining_date": dates["joining_date"],
            "policy_start": dates["policy_start"] or default_start,
            "policy_end": dates["policy_end"] or default_end,
            "enrollment_due_date": dates["enrollment_due_date"] or default_due,
            "department": _text(record, "department") or None,
            "designation": _text(record, "designation") or None,
            "salary": salary,
            "role": (EmployeeRole.ADMIN if _text(record, "role") == EmployeeRole.ADMIN else EmployeeRole.EMPLOYEE).value,
            "enrolled": False,
            "enrollment_status": EmployeeEnrollmentStatus.PENDING.value,
        })

    return result


# ═══════════════════════════════════════════════════════════
#  Import
# ═══════════════════════════════════════════════════════════

async def import_roster(
    db: AsyncSession,
    batch_id: uuid.UUID,
    filename: str,
    content: bytes,
) -> list[Employee]:
    """
    Read, check and insert a roster under `batch_id`.

    Raises:
        RosterImportError: unreadable file, row errors, or emp_ids that
            already exist.  Nothing is written in that case.
    """
    log = logger.bind(batch_id=str(batch_id), filename=filename)

    parsed = parse_roster(read_roster(filename, content))
    if not parsed.valid:
        log.warning("Roster rejected", error_count=len(parsed.errors))
        raise RosterImportError(
            f"Found {len(parsed.errors)} errors",
            row_errors=parsed.errors,
        )
    if not parsed.employees:
        raise RosterImportError("No valid employee records found in the file.")

    existing = await employee_repo.find_existing_emp_ids(
        db, [row["emp_id"] for row in parsed.employees]
    )
    if existing:
        raise RosterImportError(
            "Roster contains employees that already exist",
            row_errors=[f"emp_id {emp_id} already exists" for emp_id in sorted(existing)],
        )

    employees = await employee_repo.bulk_create_employees(db, parsed.employees, batch_id=batch_id)
    log.info("Roster imported", employee_count=len(employees))
    return employees


def template_csv() -> str:
    """Sample roster with every supported column."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(REQUIRED_COLUMNS + OPTIONAL_COLUMNS[:-1])
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue()
