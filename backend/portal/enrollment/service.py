"""
EnrollmentService — orchestrates quote, per-add checks and submission.

The service owns no I/O of its own.  Persistence and e-mail are injected
collaborators so the same flow runs against Postgres + Celery in
production and in-memory fakes in tests::

    service = EnrollmentService(
        store=SqlEnrollmentStore(session),
        notifier=CeleryNotifier(),
    )
    record = await service.submit(employee_id, submission)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from datetime import date
from functools import partial
from typing import Protocol

from portal.core.logging import get_logger
from portal.enrollment.errors import (
    EmployeeNotFoundError,
    EnrollmentAlreadySubmittedError,
    EnrollmentNotFoundError,
    EnrollmentValidationError,
)
from portal.enrollment.records import (
    EmployeeProfile,
    EnrollmentRecord,
    EnrollmentSubmission,
)
from portal.premium.engine import PremiumBreakdown, get_policy_year, get_premium_breakdown
from portal.validation.enrollment_rules import (
    check_family_candidate,
    check_parent_candidate,
    validate_enrollment,
)
from portal.validation.models import (
    FamilyMember,
    Parent,
    ParentalCoverageSelection,
    ValidationResult,
)

logger = get_logger(__name__)


class EnrollmentStore(Protocol):
    """Persistence collaborator."""

    async def get_employee(self, employee_id: str) -> EmployeeProfile | None: ...

    async def get_enrollment(self, employee_id: str) -> EnrollmentRecord | None: ...

    async def save_enrollment(self, record: EnrollmentRecord) -> EnrollmentRecord:
        """Persist the snapshot and mark the employee submitted.

        Must raise EnrollmentAlreadySubmittedError if another submission
        for the same employee got there first.
        """
        ...

    async def on_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Run `callback` once the saved enrollment is durable."""
        ...


class EnrollmentNotifier(Protocol):
    """Fire-and-forget confirmation collaborator."""

    async def send_confirmation(self, employee: EmployeeProfile, record: EnrollmentRecord) -> None: ...


class EnrollmentService:
    """Employee-facing enrollment operations."""

    def __init__(
        self,
        store: EnrollmentStore,
        notifier: EnrollmentNotifier | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.clock = clock

    # ─── Premium ──────────────────────────────────────────
    async def quote(self, employee_id: str, parent_count: int) -> tuple[PremiumBreakdown, str]:
        """Breakdown for `parent_count` parents plus the policy-year label."""
        employee = await self._require_employee(employee_id)
        dates = employee.policy_dates
        breakdown = get_premium_breakdown(
            parent_count, dates.joining_date, dates.policy_start, dates.policy_end
        )
        return breakdown, get_policy_year(dates.policy_start, dates.policy_end)

    # ─── Per-add checks ───────────────────────────────────
    def check_family_candidate(
        self,
        existing: Sequence[FamilyMember],
        candidate: FamilyMember,
    ) -> ValidationResult:
        return check_family_candidate(existing, candidate, self.clock())

    def check_parent_candidate(
        self,
        existing: Sequence[Parent],
        candidate: Parent,
        selection: ParentalCoverageSelection,
    ) -> ValidationResult:
        return check_parent_candidate(existing, candidate, selection, self.clock())

    # ─── Submission ───────────────────────────────────────
    async def preview(
        self,
        employee_id: str,
        submission: EnrollmentSubmission,
    ) -> tuple[ValidationResult, PremiumBreakdown]:
        """Run the submission checks and price it, without persisting."""
        employee = await self._require_employee(employee_id)
        result = self._validate(submission)
        return result, self._breakdown(employee, submission)

    async def submit(self, employee_id: str, submission: EnrollmentSubmission) -> EnrollmentRecord:
        """
        Validate, price, persist once, then notify after commit.

        Raises:
            EmployeeNotFoundError: unknown employee.
            EnrollmentAlreadySubmittedError: employee already enrolled.
            EnrollmentValidationError: submission breaks a business rule.
        """
        log = logger.bind(employee_id=employee_id)
        employee = await self._require_employee(employee_id)

        if employee.has_submitted:
            log.warning("Duplicate enrollment submission refused", status=employee.enrollment_status)
            raise EnrollmentAlreadySubmittedError(
                "Enrollment has already been submitted",
                employee_id=employee_id,
            )

        result = self._validate(submission)
        if not result.valid:
            log.info("Enrollment submission rejected", errors=result.errors)
            raise EnrollmentValidationError(
                "Enrollment failed validation",
                employee_id=employee_id,
                errors=result.errors,
            )

        breakdown = self._breakdown(employee, submission)
        record = await self.store.save_enrollment(
            EnrollmentRecord.capture(employee_id, submission, breakdown)
        )

        log.info(
            "Enrollment submitted",
            enrollment_id=record.id,
            family_members=len(record.family_members),
            parents=len(record.parents),
            total_premium=record.total_premium,
        )

        await self.store.on_commit(partial(self._notify, employee, record))
        return record

    async def get_enrollment(self, employee_id: str) -> EnrollmentRecord:
        await self._require_employee(employee_id)
        record = await self.store.get_enrollment(employee_id)
        if record is None:
            raise EnrollmentNotFoundError("No enrollment submitted", employee_id=employee_id)
        return record

    # ─── Helpers ──────────────────────────────────────────
    async def _require_employee(self, employee_id: str) -> EmployeeProfile:
        employee = await self.store.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError("Employee not found", employee_id=employee_id)
        return employee

    def _validate(self, submission: EnrollmentSubmission) -> ValidationResult:
        return validate_enrollment(
            submission.family_members,
            submission.parents,
            submission.coverage,
            self.clock(),
        )

    @staticmethod
    def _breakdown(employee: EmployeeProfile, submission: EnrollmentSubmission) -> PremiumBreakdown:
        dates = employee.policy_dates
        return get_premium_breakdown(
            submission.covered_parent_count,
            dates.joining_date,
            dates.policy_start,
            dates.policy_end,
        )

    async def _notify(self, employee: EmployeeProfile, record: EnrollmentRecord) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.send_confirmation(employee, record)
        except Exception as exc:
            # The enrollment is already stored; e-mail failure is non-fatal
            logger.warning(
                "Confirmation e-mail dispatch failed (non-fatal)",
                employee_id=employee.id,
                error=str(exc),
            )
