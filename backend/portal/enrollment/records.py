"""
Plain records exchanged between the enrollment service and its
collaborators (store, notifier).  The ORM models never leave the
repository layer; stores map rows to these dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from portal.core.constants import (
    EmployeeEnrollmentStatus,
    EnrollmentStatus,
    Gender,
)
from portal.enrollment.draft import PolicyDates
from portal.premium.engine import PremiumBreakdown
from portal.validation.models import FamilyMember, Parent, ParentalCoverageSelection


@dataclass(frozen=True)
class EmployeeProfile:
    """The slice of an employee the enrollment flow needs."""

    id: str
    emp_id: str
    name: str
    email: str
    joining_date: date
    policy_start: date
    policy_end: date
    date_of_birth: date | None = None
    gender: Gender | None = None
    enrollment_status: EmployeeEnrollmentStatus = EmployeeEnrollmentStatus.PENDING

    @property
    def policy_dates(self) -> PolicyDates:
        return PolicyDates(self.joining_date, self.policy_start, self.policy_end)

    @property
    def has_submitted(self) -> bool:
        return self.enrollment_status != EmployeeEnrollmentStatus.PENDING


@dataclass(frozen=True)
class EnrollmentSubmission:
    """What the employee sends when submitting."""

    family_members: list[FamilyMember] = field(default_factory=list)
    parents: list[Parent] = field(default_factory=list)
    coverage: ParentalCoverageSelection = field(default_factory=ParentalCoverageSelection)

    @property
    def covered_parent_count(self) -> int:
        return len(self.parents) if self.coverage.selected else 0


@dataclass(frozen=True)
class EnrollmentRecord:
    """
    Immutable snapshot of a submitted enrollment.

    Premium figures are captured at submission and never recomputed.
    The base policy is employer-paid, so main_policy_premium stays 0.
    """

    employee_id: str
    family_members: list[FamilyMember]
    parents: list[Parent]
    coverage: ParentalCoverageSelection
    parental_policy_premium: float
    gst_amount: int
    total_premium: int
    monthly_deduction: int
    pro_rata_factor: float
    policy_remaining_days: int
    enrollment_date: date
    submitted_at: datetime
    main_policy_premium: float = 0
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    id: str | None = None

    @classmethod
    def capture(
        cls,
        employee_id: str,
        submission: EnrollmentSubmission,
        breakdown: PremiumBreakdown,
        submitted_at: datetime | None = None,
    ) -> "EnrollmentRecord":
        """Freeze a submission together with the breakdown shown to the employee."""
        submitted_at = submitted_at or datetime.now(timezone.utc)
        return cls(
            employee_id=employee_id,
            family_members=list(submission.family_members),
            parents=list(submission.parents) if submission.coverage.selected else [],
            coverage=submission.coverage,
            parental_policy_premium=breakdown.pro_rated_premium,
            gst_amount=breakdown.gst,
            total_premium=breakdown.total,
            monthly_deduction=breakdown.monthly_deduction,
            pro_rata_factor=breakdown.factor,
            policy_remaining_days=breakdown.remaining_days,
            enrollment_date=submitted_at.date(),
            submitted_at=submitted_at,
        )

    @property
    def premiums(self) -> dict[str, float]:
        return {
            "main_policy": self.main_policy_premium,
            "parental_policy": self.parental_policy_premium,
            "gst": self.gst_amount,
            "total": self.total_premium,
        }

    def to_dict(self, today: date | None = None) -> dict[str, Any]:
        """Serialise for API responses; dependent ages are computed as of `today`."""
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "family_members": [m.to_dict(today) for m in self.family_members],
            "parents": [p.to_dict(today) for p in self.parents],
            "parental_coverage": {
                "selected": self.coverage.selected,
                "parent_set": self.coverage.parent_set.value if self.coverage.parent_set else None,
            },
            "premiums": self.premiums,
            "monthly_deduction": self.monthly_deduction,
            "pro_rata_factor": self.pro_rata_factor,
            "policy_remaining_days": self.policy_remaining_days,
            "enrollment_date": self.enrollment_date.isoformat(),
            "submitted_at": self.submitted_at.isoformat(),
            "status": self.status.value,
        }
