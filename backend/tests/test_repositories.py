from datetime import date

import pytest

from conftest import POLICY_END, POLICY_START, TODAY, FakeNotifier, child, parent, spouse
from portal.core.constants import EmployeeEnrollmentStatus, ParentSet, Relationship
from portal.db.session import session_scope
from portal.enrollment.errors import EmployeeNotFoundError, EnrollmentAlreadySubmittedError
from portal.enrollment.records import EnrollmentRecord, EnrollmentSubmission
from portal.enrollment.service import EnrollmentService
from portal.premium.engine import get_premium_breakdown
from portal.repositories import batches as batch_repo
from portal.repositories import employees as employee_repo
from portal.repositories.enrollment_store import SqlEnrollmentStore
from portal.validation.models import ParentalCoverageSelection


def roster_row(emp_id: str, name: str, **overrides) -> dict:
    row = {
        "emp_id": emp_id,
        "name": name,
        "email": f"{emp_id.lower()}@Company.com ",
        "mobile": "9876543210",
        "joining_date": TODAY,
        "policy_start": POLICY_START,
        "policy_end": POLICY_END,
    }
    row.update(overrides)
    return row


def submission() -> EnrollmentSubmission:
    return EnrollmentSubmission(
        family_members=[spouse(), child()],
        parents=[parent(Relationship.FATHER_IN_LAW), parent(Relationship.MOTHER_IN_LAW)],
        coverage=ParentalCoverageSelection(selected=True, parent_set=ParentSet.PARENTS_IN_LAW),
    )


class TestEmployeeRepository:
    async def test_create_normalises_email(self, db):
        employee = await employee_repo.create_employee(db, **roster_row("EMP001", "John Doe"))

        assert employee.email == "emp001@company.com"
        assert employee.enrollment_status == "pending"
        assert await employee_repo.get_employee_by_emp_id(db, " EMP001 ") is employee

    async def test_lookup_with_malformed_id(self, db):
        assert await employee_repo.get_employee_by_id(db, "not-a-uuid") is None

    async def test_find_existing_emp_ids(self, db):
        await employee_repo.bulk_create_employees(
            db, [roster_row("EMP001", "John"), roster_row("EMP002", "Jane")]
        )
        assert await employee_repo.find_existing_emp_ids(db, ["EMP002", "EMP009"]) == {"EMP002"}
        assert await employee_repo.find_existing_emp_ids(db, []) == set()

    async def test_update_skips_unknown_and_empty_fields(self, db):
        employee = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))

        updated = await employee_repo.update_employee(
            db, employee.id, department="Finance", name=None, emp_id="HACKED"
        )

        assert updated.department == "Finance"
        assert updated.name == "John"
        assert updated.emp_id == "EMP001"

    async def test_list_filters(self, db):
        batch = await batch_repo.create_batch(db, batch_name="Q1 hires")
        await employee_repo.bulk_create_employees(
            db, [roster_row("EMP001", "Zara"), roster_row("EMP002", "Amit")], batch_id=batch.id
        )
        await employee_repo.create_employee(
            db, **roster_row("EMP003", "Kiran", enrollment_status="submitted")
        )

        in_batch = await employee_repo.list_employees(db, batch_id=batch.id)
        pending = await employee_repo.list_employees(db, enrollment_status="pending")

        assert [e.name for e in in_batch] == ["Amit", "Zara"]
        assert {e.emp_id for e in pending} == {"EMP001", "EMP002"}
        assert len(await employee_repo.list_employees(db, limit=1)) == 1

    async def test_delete(self, db):
        employee = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))
        assert await employee_repo.delete_employee(db, employee.id) is True
        assert await employee_repo.delete_employee(db, employee.id) is False


async def test_batches_listed_with_counts(db):
    empty = await batch_repo.create_batch(db, batch_name="  Empty  ")
    full = await batch_repo.create_batch(db, batch_name="March roster", uploaded_by="hr@company.com")
    await employee_repo.bulk_create_employees(
        db, [roster_row("EMP001", "John"), roster_row("EMP002", "Jane")], batch_id=full.id
    )

    counts = {batch.batch_name: count for batch, count in await batch_repo.list_batches_with_counts(db)}

    assert empty.batch_name == "Empty"
    assert counts == {"Empty": 0, "March roster": 2}
    assert await batch_repo.get_batch_by_id(db, "nope") is None
    assert await batch_repo.get_batch_by_id(db, str(full.id)) is full


class TestSqlEnrollmentStore:
    async def test_profile_mapping(self, db):
        row = await employee_repo.create_employee(
            db, **roster_row("EMP001", "John", gender="Male", date_of_birth=date(1985, 1, 15))
        )
        profile = await SqlEnrollmentStore(db).get_employee(str(row.id))

        assert profile.emp_id == "EMP001"
        assert profile.policy_dates.joining_date == TODAY
        assert profile.enrollment_status == EmployeeEnrollmentStatus.PENDING

    async def test_save_and_reload(self, db):
        row = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))
        store = SqlEnrollmentStore(db)
        breakdown = get_premium_breakdown(2, TODAY, POLICY_START, POLICY_END)

        saved = await store.save_enrollment(
            EnrollmentRecord.capture(str(row.id), submission(), breakdown)
        )
        loaded = await store.get_enrollment(str(row.id))

        assert saved.id == loaded.id
        assert loaded.total_premium == 67884
        assert loaded.gst_amount == 10355
        assert loaded.parental_policy_premium == pytest.approx(breakdown.pro_rated_premium, abs=0.01)
        assert loaded.coverage.parent_set == ParentSet.PARENTS_IN_LAW
        assert {m.relationship for m in loaded.family_members} == {
            Relationship.SPOUSE,
            Relationship.CHILD,
        }
        assert {p.name for p in loaded.parents} == {"Father-in-law", "Mother-in-law"}

        assert row.enrolled is True
        assert row.enrollment_status == "submitted"
        assert row.enrollment_date == saved.enrollment_date

    async def test_second_save_refused(self, db):
        row = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))
        store = SqlEnrollmentStore(db)
        breakdown = get_premium_breakdown(0, TODAY, POLICY_START, POLICY_END)
        record = EnrollmentRecord.capture(str(row.id), EnrollmentSubmission(), breakdown)

        await store.save_enrollment(record)
        with pytest.raises(EnrollmentAlreadySubmittedError):
            await store.save_enrollment(record)

    async def test_save_for_unknown_employee(self, db):
        breakdown = get_premium_breakdown(0, TODAY, POLICY_START, POLICY_END)
        record = EnrollmentRecord.capture(
            "00000000-0000-0000-0000-000000000000", EnrollmentSubmission(), breakdown
        )
        with pytest.raises(EmployeeNotFoundError):
            await SqlEnrollmentStore(db).save_enrollment(record)

    async def test_missing_enrollment(self, db):
        row = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))
        store = SqlEnrollmentStore(db)
        assert await store.get_enrollment(str(row.id)) is None
        assert await store.get_enrollment("not-a-uuid") is None

    async def test_service_over_sql_store(self, db):
        row = await employee_repo.create_employee(db, **roster_row("EMP001", "John"))
        service = EnrollmentService(store=SqlEnrollmentStore(db), clock=lambda: TODAY)

        record = await service.submit(str(row.id), submission())
        await db.commit()

        assert (await service.get_enrollment(str(row.id))).id == record.id
        with pytest.raises(EnrollmentAlreadySubmittedError):
            await service.submit(str(row.id), submission())


class TestConfirmationAfterCommit:
    async def test_queued_only_once_committed(self, session_factory):
        notifier = FakeNotifier()
        async with session_scope(session_factory) as session:
            row = await employee_repo.create_employee(session, **roster_row("EMP001", "John"))
            employee_id = str(row.id)

        async with session_scope(session_factory) as session:
            service = EnrollmentService(
                store=SqlEnrollmentStore(session), notifier=notifier, clock=lambda: TODAY
            )
            record = await service.submit(employee_id, submission())
            assert notifier.confirmations == []

        ((employee, confirmed),) = notifier.confirmations
        assert employee.emp_id == "EMP001"
        assert confirmed.id == record.id

    async def test_dropped_when_transaction_rolls_back(self, session_factory):
        notifier = FakeNotifier()
        async with session_scope(session_factory) as session:
            row = await employee_repo.create_employee(session, **roster_row("EMP001", "John"))
            employee_id = str(row.id)

        with pytest.raises(RuntimeError):
            async with session_scope(session_factory) as session:
                service = EnrollmentService(
                    store=SqlEnrollmentStore(session), notifier=notifier, clock=lambda: TODAY
                )
                await service.submit(employee_id, submission())
                raise RuntimeError("commit failed")

        assert notifier.confirmations == []
        async with session_scope(session_factory) as session:
            assert await SqlEnrollmentStore(session).get_enrollment(employee_id) is None
