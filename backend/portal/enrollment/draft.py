"""
EnrollmentDraft — an employee's enrollment while it is still being edited.

Holds the family members, parents and parental-coverage selection, runs
the per-add checks before accepting a dependent, and recomputes the
premium breakdown from the current parent count on every read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from portal.core.constants import ParentSet
from portal.premium.engine import PremiumBreakdown, get_premium_breakdown
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


@dataclass(frozen=True)
class PolicyDates:
    """The three Employee dates the premium engine reads."""

    joining_date: date
    policy_start: date
    policy_end: date


@dataclass
class EnrollmentDraft:
    """
    Mutable enrollment-in-progress for one employee.

    `add_*` methods return the validation result and only change the
    draft when it is valid.  `remove_*` methods take a list index.
    """

    dates: PolicyDates
    family_members: list[FamilyMember] = field(default_factory=list)
    parents: list[Parent] = field(default_factory=list)
    coverage: ParentalCoverageSelection = field(default_factory=ParentalCoverageSelection)
    today: date | None = None

    # ─── Family members ───────────────────────────────────
    def add_family_member(self, member: FamilyMember) -> ValidationResult:
        result = check_family_candidate(self.family_members, member, self.today)
        if result.valid:
            self.family_members.append(member)
        return result

    def remove_family_member(self, index: int) -> FamilyMember:
        return self.family_members.pop(self._check_index(self.family_members, index))

    # ─── Parents ──────────────────────────────────────────
    def add_parent(self, parent: Parent) -> ValidationResult:
        result = check_parent_candidate(self.parents, parent, self.coverage, self.today)
        if result.valid:
            self.parents.append(parent)
        return result

    def remove_parent(self, index: int) -> Parent:
        return self.parents.pop(self._check_index(self.parents, index))

    def set_parental_coverage(self, selected: bool, parent_set: ParentSet | None = None) -> None:
        """Change the selection.  Deselecting drops every parent."""
        self.coverage = ParentalCoverageSelection(selected=selected, parent_set=parent_set)
        if not selected:
            self.parents.clear()

    # ─── Derived state ────────────────────────────────────
    @property
    def covered_parent_count(self) -> int:
        return len(self.parents) if self.coverage.selected else 0

    def premium_breakdown(self) -> PremiumBreakdown:
        return get_premium_breakdown(
            self.covered_parent_count,
            self.dates.joining_date,
            self.dates.policy_start,
            self.dates.policy_end,
        )

    def validate(self) -> ValidationResult:
        return validate_enrollment(self.family_members, self.parents, self.coverage, self.today)

    @staticmethod
    def _check_index(items: list, index: int) -> int:
        if index < 0 or index >= len(items):
            raise IndexError(f"No dependent at index {index}")
        return index
