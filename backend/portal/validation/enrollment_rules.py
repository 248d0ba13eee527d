"""
Enrollment-level checks built on the business rules.

Two entry points mirror the two moments a dependent is validated:

    check_family_candidate / check_parent_candidate
        Run when the employee adds one person.  Checks that record and
        the hypothetical list (existing + candidate).

    validate_enrollment
        Run before submission.  Re-derives every composition check from
        the final lists and adds the coverage-selection checks that only
        make sense for a finished enrollment.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from portal.core.constants import (
    FAMILY_RELATIONSHIPS,
    PARENT_RELATIONSHIPS,
    ParentSet,
    Relationship,
)
from portal.validation.business_rules import (
    validate_age_range,
    validate_family_composition,
    validate_parent_composition,
)
from portal.validation.models import (
    Dependent,
    FamilyMember,
    Parent,
    ParentalCoverageSelection,
    ValidationResult,
)

_SET_LABELS = {
    ParentSet.PARENTS: "Parents",
    ParentSet.PARENTS_IN_LAW: "Parents-in-law",
}

_SET_MEMBERS = {
    ParentSet.PARENTS: "Father and Mother",
    ParentSet.PARENTS_IN_LAW: "Father-in-law and Mother-in-law",
}


def _field_errors(
    dependent: Dependent,
    allowed: frozenset[Relationship],
    prefix: str = "",
) -> list[str]:
    """Per-record completeness: name, relationship and date of birth."""
    errors = []
    if not dependent.name or not dependent.name.strip():
        errors.append(f"{prefix}Name is required")
    if dependent.relationship is None:
        errors.append(f"{prefix}Relationship is required")
    elif dependent.relationship not in allowed:
        errors.append(f"{prefix}Invalid relationship: {dependent.relationship}")
    if dependent.date_of_birth is None:
        errors.append(f"{prefix}Date of birth is required")
    return errors


def _age_error(dependent: Dependent, today: date, prefix: str = "") -> str | None:
    if dependent.date_of_birth is None or dependent.relationship is None:
        return None
    error = validate_age_range(dependent.age_on(today), dependent.relationship)
    return f"{prefix}{error}" if error else None


# ═══════════════════════════════════════════════════════════
#  Incremental (per add)
# ═══════════════════════════════════════════════════════════

def check_family_candidate(
    existing: Sequence[FamilyMember],
    candidate: FamilyMember,
    today: date | None = None,
) -> ValidationResult:
    """Errors that block adding `candidate` to `existing` family members."""
    today = today or date.today()
    result = ValidationResult(_field_errors(candidate, FAMILY_RELATIONSHIPS))
    if result.errors:
        return result

    age_error = _age_error(candidate, today)
    if age_error:
        result.errors.append(age_error)

    if candidate.relationship == Relationship.SPOUSE and any(
        m.relationship == Relationship.SPOUSE for m in existing
    ):
        result.errors.append("You've already added a Spouse")

    result.errors.extend(validate_family_composition([*existing, candidate]).errors)
    return result


def check_parent_candidate(
    existing: Sequence[Parent],
    candidate: Parent,
    selection: ParentalCoverageSelection,
    today: date | None = None,
) -> ValidationResult:
    """Errors that block adding `candidate` to `existing` parents under `selection`."""
    today = today or date.today()
    if not selection.selected:
        return ValidationResult(["Select parental coverage before adding parents"])

    result = ValidationResult(_field_errors(candidate, PARENT_RELATIONSHIPS))
    if result.errors:
        return result

    if selection.parent_set is not None and candidate.relationship not in selection.allowed_relationships:
        label = _SET_LABELS[selection.parent_set]
        result.errors.append(
            f"{candidate.relationship.value} cannot be added under {label} coverage"
        )

    age_error = _age_error(candidate, today)
    if age_error:
        result.errors.append(age_error)

    if any(p.relationship == candidate.relationship for p in existing):
        result.errors.append(f"You've already added a {candidate.relationship.value}")

    result.errors.extend(validate_parent_composition([*existing, candidate]).errors)
    return result


# ═══════════════════════════════════════════════════════════
#  Exhaustive (pre-submission)
# ═══════════════════════════════════════════════════════════

def validate_enrollment(
    family_members: Sequence[FamilyMember],
    parents: Sequence[Parent],
    selection: ParentalCoverageSelection,
    today: date | None = None,
) -> ValidationResult:
    """All errors that block submitting this enrollment."""
    today = today or date.today()
    result = ValidationResult()

    for index, member in enumerate(family_members, start=1):
        prefix = f"Family member {index}: "
        result.errors.extend(_field_errors(member, FAMILY_RELATIONSHIPS, prefix))
        age_error = _age_error(member, today, prefix)
        if age_error:
            result.errors.append(age_error)

    result.errors.extend(validate_family_composition(family_members).errors)

    if not selection.selected:
        if parents:
            result.errors.append("Parents can only be added when parental coverage is selected")
        return result

    if selection.parent_set is None:
        result.errors.append("Please select which parents to cover (Parents or Parents-in-law)")
    if not parents:
        result.errors.append("Please add at least one parent for parental coverage")

    for index, parent in enumerate(parents, start=1):
        prefix = f"Parent {index}: "
        result.errors.extend(_field_errors(parent, PARENT_RELATIONSHIPS, prefix))
        age_error = _age_error(parent, today, prefix)
        if age_error:
            result.errors.append(age_error)

    if selection.parent_set is not None:
        allowed = selection.allowed_relationships
        if any(p.relationship is not None and p.relationship not in allowed for p in parents):
            result.errors.append(
                f'For "{_SET_LABELS[selection.parent_set]}" coverage, '
                f"only {_SET_MEMBERS[selection.parent_set]} relationships are allowed"
            )

    result.errors.extend(validate_parent_composition(parents).errors)
    return result
