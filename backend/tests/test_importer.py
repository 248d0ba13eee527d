import io
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from portal.admin.importer import (
    REQUIRED_COLUMNS,
    import_roster,
    parse_roster,
    read_roster,
    template_csv,
)
from portal.enrollment.errors import RosterImportError
from portal.repositories import batches as batch_repo
from portal.repositories import employees as employee_repo

HEADER = "emp_id,name,email,date_of_birth,gender,mobile,joining_date"


def csv_bytes(*lines: str, header: str = HEADER) -> bytes:
    return "\n".join((header, *lines)).encode("utf-8")


def record(**overrides) -> dict:
    row = {
        "emp_id": "EMP001",
        "name": "John Doe",
        "email": "john.doe@company.com",
        "date_of_birth": "15/01/1985",
        "gender": "Male",
        "mobile": "9876543210",
        "joining_date": "15/06/2024",
    }
    row.update(overrides)
    return row


class TestReadRoster:
    def test_csv_headers_are_case_insensitive(self):
        content = csv_bytes(
            "EMP001,John Doe,john@company.com,15/01/1985,Male,9876543210,01/01/2024",
            header="EMP_ID,Name,Email,Date_Of_Birth,Gender,Mobile,Joining_Date",
        )
        rows = read_roster("roster.CSV", content)
        assert rows[0]["emp_id"] == "EMP001"
        assert rows[0]["joining_date"] == "01/01/2024"

    def test_short_rows_are_padded(self):
        rows = read_roster("roster.csv", csv_bytes("EMP001,John Doe"))
        assert rows[0]["joining_date"] == ""

    def test_blank_lines_ignored(self):
        content = csv_bytes("", "EMP001,John,john@company.com,,Male,9876543210,01/01/2024", ",,,")
        assert len(read_roster("roster.csv", content)) == 1

    def test_xlsx(self):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(list(REQUIRED_COLUMNS) + ["salary"])
        sheet.append(
            ["EMP001", "John Doe", "john@company.com", datetime(1985, 1, 15), "Male",
             9876543210.0, datetime(2024, 6, 15), 75000]
        )
        buffer = io.BytesIO()
        workbook.save(buffer)

        rows = read_roster("roster.xlsx", buffer.getvalue())

        assert rows[0]["mobile"] == "9876543210"
        assert rows[0]["salary"] == "75000"
        parsed = parse_roster(rows)
        assert parsed.valid
        assert parsed.employees[0]["joining_date"] == date(2024, 6, 15)
        assert parsed.employees[0]["salary"] == 75000.0

    def test_unsupported_extension(self):
        with pytest.raises(RosterImportError, match="Please upload a CSV or XLSX file."):
            read_roster("roster.xls", b"")

    def test_csv_not_utf8(self):
        content = (HEADER + "\nEMP001,José,jose@company.com,15/01/1985,Male,9876543210,01/01/2024").encode("cp1252")
        with pytest.raises(RosterImportError, match="Could not read file") as excinfo:
            read_roster("roster.csv", content)
        assert excinfo.value.details == {"filename": "roster.csv"}

    def test_corrupt_xlsx(self):
        with pytest.raises(RosterImportError, match="Could not read file") as excinfo:
            read_roster("roster.xlsx", b"not a zip file")
        assert excinfo.value.details == {"filename": "roster.xlsx"}

    def test_header_only(self):
        with pytest.raises(RosterImportError, match="File appears to be empty"):
            read_roster("roster.csv", csv_bytes())

    def test_missing_columns(self):
        content = csv_bytes("EMP001,John", header="emp_id,name")
        with pytest.raises(RosterImportError) as excinfo:
            read_roster("roster.csv", content)
        assert str(excinfo.value) == (
            "Missing required columns: email, date_of_birth, gender, mobile, joining_date"
        )


class TestParseRoster:
    def test_defaults(self):
        parsed = parse_roster([record(gender="female", role="Admin")])
        employee = parsed.employees[0]

        assert employee["policy_start"] == date(2024, 4, 1)
        assert employee["policy_end"] == date(2025, 3, 31)
        assert employee["enrollment_due_date"] == date(2025, 3, 31)
        assert employee["gender"] == "Male"
        assert employee["role"] == "employee"
        assert employee["enrollment_status"] == "pending"
        assert employee["department"] is None
        assert employee["salary"] is None

    def test_explicit_values(self):
        parsed = parse_roster(
            [record(gender="Female", role="admin", policy_start="2024-01-01", department="HR")]
        )
        employee = parsed.employees[0]
        assert employee["gender"] == "Female"
        assert employee["role"] == "admin"
        assert employee["policy_start"] == date(2024, 1, 1)
        assert employee["department"] == "HR"

    def test_row_errors_are_numbered_from_two(self):
        parsed = parse_roster(
            [
                record(),
                record(emp_id="EMP002", name=""),
                record(emp_id="EMP003", email="not-an-email"),
                record(emp_id="EMP004", mobile="12345"),
                record(),
                record(emp_id="EMP006", date_of_birth="31/02/1985", joining_date="soon"),
                record(emp_id="EMP007", salary="lots"),
            ]
        )
        assert parsed.errors == [
            "Row 3: Missing required data",
            "Row 4: Invalid email format",
            "Row 5: Invalid mobile number (must be 10 digits)",
            "Row 6: Duplicate emp_id EMP001",
            "Row 7: Invalid date in date_of_birth, joining_date",
            "Row 8: Invalid salary",
        ]
        assert [e["emp_id"] for e in parsed.employees] == ["EMP001"]


class TestImportRoster:
    async def test_imports_into_batch(self, db):
        batch = await batch_repo.create_batch(db, batch_name="Template")

        employees = await import_roster(db, batch.id, "template.csv", template_csv().encode())

        assert [e.emp_id for e in employees] == ["EMP001", "EMP002", "EMP003"]
        assert all(e.batch_id == batch.id for e in employees)
        admin = await employee_repo.get_employee_by_emp_id(db, "EMP003")
        assert admin.role == "admin"

    async def test_any_bad_row_aborts_the_file(self, db):
        batch = await batch_repo.create_batch(db, batch_name="Broken")
        content = csv_bytes(
            "EMP001,John,john@company.com,15/01/1985,Male,9876543210,01/01/2024",
            "EMP002,Jane,jane@company.com,22/03/1990,Female,98765,15/02/2024",
        )

        with pytest.raises(RosterImportError) as excinfo:
            await import_roster(db, batch.id, "roster.csv", content)

        assert excinfo.value.row_errors == ["Row 3: Invalid mobile number (must be 10 digits)"]
        assert await employee_repo.list_employees(db) == []

    async def test_existing_emp_ids_rejected(self, db):
        batch = await batch_repo.create_batch(db, batch_name="Again")
        await import_roster(db, batch.id, "template.csv", template_csv().encode())

        with pytest.raises(RosterImportError) as excinfo:
            await import_roster(db, batch.id, "template.csv", template_csv().encode())

        assert excinfo.value.row_errors == [
            "emp_id EMP001 already exists",
            "emp_id EMP002 already exists",
            "emp_id EMP003 already exists",
        ]


def test_template_has_every_column():
    header, *rows = template_csv().splitlines()
    columns = header.split(",")
    assert columns[: len(REQUIRED_COLUMNS)] == list(REQUIRED_COLUMNS)
    assert len(columns) == 13
    assert len(rows) == 3
