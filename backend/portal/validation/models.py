"""
Dependent and coverage-selection value objects shared by the validator,
the premium engine callers and the enrollment service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from portal.core.constants import (
    FAMILY_RELATIONSHIPS,
    PARENT_RELATIONSHIPS,
    PARENT_SET_RELATIONSHIPS,
    Gender,
    ParentSet,
    Relationship,
)
from portal.core.dates import calculate_age


@dataclass(frozen=True)
class Dependent:
    """
    A person covered through the employee.

    Fields are optional so that incomplete form input can still be
    represented and reported field by field.
    """

    name: str = ""
    relationship: Relationship | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None

    @property
    def age(self) -> int | None:
        """Whole years as of today."""
        return self.age_on(date.today())

    def age_on(self, today: date) -> int | None:
        if self.date_of_birth is None:
            return None
        return calculate_age(self.date_of_birth, today)

    def to_dict(self, today: date | None = None) -> dict[str, Any]:
        return {
            "name": self.name,
            "relationship": self.relationship.value if self.relationship else None,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender.value if self.gender else None,
            "age": self.age_on(today or date.today()),
        }


@dataclass(frozen=True)
class FamilyMember(Dependent):
    """Spouse or child, covered under the employer-paid base policy."""

    @property
    def in_domain(self) -> bool:
        return self.relationship in FAMILY_RELATIONSHIPS


@dataclass(frozen=True)
class Parent(Dependent):
    """Parent or parent-in-law, covered under the voluntary policy."""

    @property
    def in_domain(self) -> bool:
        return self.relationship in PARENT_RELATIONSHIPS


@dataclass(frozen=True)
class ParentalCoverageSelection:
    """Whether the employee buys parental cover, and for which set of parents."""

    selected: bool = False
    parent_set: ParentSet | None = None

    def __post_init__(self) -> None:
        # A parent set only means something while cover is selected
        if not self.selected and self.parent_set is not None:
            object.__setattr__(self, "parent_set", None)

    @property
    def allowed_relationships(self) -> frozenset[Relationship]:
        if self.parent_set is None:
            return PARENT_RELATIONSHIPS
        return PARENT_SET_RELATIONSHIPS[self.parent_set]


@dataclass
class ValidationResult:
    """Outcome of a rule set: valid iff there are no error strings."""

    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}
