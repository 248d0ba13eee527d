import pytest

from conftest import TODAY, FakeNotifier, FakeStore, child, parent, spouse
from portal.core.constants import EmployeeEnrollmentStatus, ParentSet, Relationship
from portal.enrollment.errors import (
    EmployeeNotFoundError,
    EnrollmentAlreadySubmittedError,
    EnrollmentNotFoundError,
    EnrollmentValidationError,
)
from portal.enrollment.records import EnrollmentSubmission
from portal.enrollment.service import EnrollmentService
from portal.validation.models import ParentalCoverageSelection


@pytest.fixture
def service(store, notifier) -> EnrollmentService:
    return EnrollmentService(store=store, notifier=notifier, clock=lambda: TODAY)


def full_submission() -> EnrollmentSubmission:
    return EnrollmentSubmission(
        family_members=[spouse(), child()],
        parents=[parent(Relationship.FATHER), parent(Relationship.MOTHER)],
        coverage=ParentalCoverageSelection(selected=True, parent_set=ParentSet.PARENTS),
    )


async def test_quote(service, employee):
    breakdown, policy_year = await service.quote(employee.id, 2)

    assert policy_year == "2024-25"
    assert breakdown.total == 67884
    assert breakdown.monthly_deduction == 5657


async def test_quote_unknown_employee(service):
    with pytest.raises(EmployeeNotFoundError):
        await service.quote("missing", 1)


async def test_submit_persists_priced_snapshot(service, store, notifier, employee):
    record = await service.submit(employee.id, full_submission())

    assert record.id is not None
    assert record.total_premium == 67884
    assert record.gst_amount == 10355
    assert record.monthly_deduction == 5657
    assert record.policy_remaining_days == 290
    assert record.main_policy_premium == 0
    assert len(record.family_members) == 2
    assert len(record.parents) == 2

    assert store.enrollments[employee.id] is record
    assert store.employees[employee.id].enrollment_status == EmployeeEnrollmentStatus.SUBMITTED
    assert notifier.confirmations == [(employee, record)]


async def test_family_only_submission_costs_nothing(service, employee):
    record = await service.submit(employee.id, EnrollmentSubmission(family_members=[spouse()]))

    assert record.total_premium == 0
    assert record.parents == []
    assert not record.coverage.selected


async def test_second_submission_refused(service, employee):
    await service.submit(employee.id, full_submission())

    with pytest.raises(EnrollmentAlreadySubmittedError):
        await service.submit(employee.id, full_submission())


async def test_invalid_submission_is_not_persisted(service, store, notifier, employee):
    submission = EnrollmentSubmission(
        family_members=[spouse(), spouse(35, "Meera")],
        coverage=ParentalCoverageSelection(selected=True, parent_set=ParentSet.PARENTS),
    )

    with pytest.raises(EnrollmentValidationError) as excinfo:
        await service.submit(employee.id, submission)

    assert excinfo.value.errors == [
        "Only one spouse can be covered.",
        "Please add at least one parent for parental coverage",
    ]
    assert store.enrollments == {}
    assert notifier.confirmations == []


async def test_notifier_failure_does_not_undo_submission(store, employee):
    service = EnrollmentService(store=store, notifier=FakeNotifier(fail=True), clock=lambda: TODAY)

    record = await service.submit(employee.id, full_submission())

    assert store.enrollments[employee.id] is record


async def test_submit_without_notifier(employee):
    service = EnrollmentService(store=FakeStore(employee), clock=lambda: TODAY)
    record = await service.submit(employee.id, full_submission())
    assert record.total_premium == 67884


async def test_preview_does_not_persist(service, store, employee):
    result, breakdown = await service.preview(employee.id, full_submission())

    assert result.valid
    assert breakdown.total == 67884
    assert store.enrollments == {}


async def test_get_enrollment(service, employee):
    with pytest.raises(EnrollmentNotFoundError):
        await service.get_enrollment(employee.id)

    submitted = await service.submit(employee.id, full_submission())
    assert await service.get_enrollment(employee.id) is submitted


def test_candidate_checks_use_clock(service):
    assert service.check_family_candidate([], child(25)).valid
    result = service.check_parent_candidate(
        [], parent(Relationship.FATHER, 81), ParentalCoverageSelection(selected=True)
    )
    assert result.errors == ["Father must be between 18-80 years."]
