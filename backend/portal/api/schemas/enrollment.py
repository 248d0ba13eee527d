"""Enrollment request/response schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from portal.core.constants import EnrollmentStatus, Gender, ParentSet, Relationship
from portal.core.dates import parse_date
from portal.enrollment.records import EnrollmentRecord, EnrollmentSubmission
from portal.premium.engine import PremiumBreakdown
from portal.validation.models import FamilyMember, Parent, ParentalCoverageSelection


class DependentIn(BaseModel):
    """One dependent as entered on the form. Dates accept YYYY-MM-DD or DD/MM/YYYY."""

    name: str = ""
    relationship: Relationship | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _parse_dob(cls, value: object) -> date | None:
        return parse_date(value)

    def to_family_member(self) -> FamilyMember:
        return FamilyMember(self.name, self.relationship, self.date_of_birth, self.gender)

    def to_parent(self) -> Parent:
        return Parent(self.name, self.relationship, self.date_of_birth, self.gender)


class ParentalCoverageIn(BaseModel):
    selected: bool = False
    parent_set: ParentSet | None = None

    def to_selection(self) -> ParentalCoverageSelection:
        return ParentalCoverageSelection(self.selected, self.parent_set)


class FamilyMemberCheckRequest(BaseModel):
    """Candidate family member checked against those already added."""

    existing: list[DependentIn] = Field(default_factory=list)
    candidate: DependentIn


class ParentCheckRequest(BaseModel):
    """Candidate parent checked against those already added and the selection."""

    existing: list[DependentIn] = Field(default_factory=list)
    candidate: DependentIn
    parental_coverage: ParentalCoverageIn = Field(default_factory=ParentalCoverageIn)


class EnrollmentSubmissionRequest(BaseModel):
    family_members: list[DependentIn] = Field(default_factory=list)
    parents: list[DependentIn] = Field(default_factory=list)
    parental_coverage: ParentalCoverageIn = Field(default_factory=ParentalCoverageIn)

    def to_submission(self) -> EnrollmentSubmission:
        return EnrollmentSubmission(
            family_members=[m.to_family_member() for m in self.family_members],
            parents=[p.to_parent() for p in self.parents],
            coverage=self.parental_coverage.to_selection(),
        )


class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str]


class PremiumBreakdownResponse(BaseModel):
    description: str
    base_premium: int
    pro_rated_premium: float
    gst: int
    total: int
    monthly_deduction: int
    factor: float
    remaining_days: int
    policy_year: str | None = None

    @classmethod
    def from_breakdown(cls, breakdown: PremiumBreakdown, policy_year: str | None = None) -> "PremiumBreakdownResponse":
        return cls(**breakdown.to_dict(), policy_year=policy_year)


class SubmissionPreviewResponse(ValidationResponse):
    premium: PremiumBreakdownResponse


class DependentOut(BaseModel):
    name: str
    relationship: Relationship | None
    date_of_birth: date | None
    gender: Gender | None
    age: int | None


class ParentalCoverageOut(BaseModel):
    selected: bool
    parent_set: ParentSet | None


class PremiumsOut(BaseModel):
    main_policy: float
    parental_policy: float
    gst: int
    total: int


class EnrollmentRecordResponse(BaseModel):
    """A submitted enrollment with the premium figures captured at submission."""

    id: str | None
    employee_id: str
    family_members: list[DependentOut]
    parents: list[DependentOut]
    parental_coverage: ParentalCoverageOut
    premiums: PremiumsOut
    monthly_deduction: int
    pro_rata_factor: float
    policy_remaining_days: int
    enrollment_date: date
    submitted_at: datetime
    status: EnrollmentStatus

    @classmethod
    def from_record(cls, record: EnrollmentRecord) -> "EnrollmentRecordResponse":
        return cls.model_validate(record.to_dict(today=record.enrollment_date))
