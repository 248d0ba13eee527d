"""
Enrollment business rules — composition limits, age bands and gender lookup.

Every rule set here works on a complete candidate list (existing members
plus the one being added) and returns plain-text errors.  Nothing raises;
the caller decides whether an error blocks an add or a submit.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from portal.core.constants import (
    PARENT_SET_RELATIONSHIPS,
    Gender,
    ParentSet,
    Relationship,
)
from portal.validation.models import Dependent, ValidationResult

MAX_SPOUSES = 1
MAX_CHILDREN = 2
MAX_PARENTS = 2

# Inclusive (min_age, max_age) per relationship
AGE_BANDS: dict[Relationship, tuple[int, int]] = {
    Relationship.CHILD: (0, 25),
    Relationship.SPOUSE: (18, 80),
    Relationship.FATHER: (18, 80),
    Relationship.MOTHER: (18, 80),
    Relationship.FATHER_IN_LAW: (18, 80),
    Relationship.MOTHER_IN_LAW: (18, 80),
}

_GENDER_BY_RELATIONSHIP: dict[Relationship, Gender] = {
    Relationship.FATHER: Gender.MALE,
    Relationship.FATHER_IN_LAW: Gender.MALE,
    Relationship.MOTHER: Gender.FEMALE,
    Relationship.MOTHER_IN_LAW: Gender.FEMALE,
}


def validate_family_composition(members: Iterable[Dependent]) -> ValidationResult:
    """At most one spouse and two children."""
    counts = Counter(m.relationship for m in members)
    result = ValidationResult()

    if counts[Relationship.SPOUSE] > MAX_SPOUSES:
        result.errors.append("Only one spouse can be covered.")
    if counts[Relationship.CHILD] > MAX_CHILDREN:
        result.errors.append(f"Maximum {MAX_CHILDREN} children allowed.")

    return result


def validate_parent_composition(parents: Iterable[Dependent]) -> ValidationResult:
    """
    No repeated relationship, no mixing of parents with parents-in-law,
    and no more than two parents in total.
    """
    parents = list(parents)
    counts = Counter(p.relationship for p in parents)
    result = ValidationResult()

    for relationship in (
        Relationship.FATHER,
        Relationship.MOTHER,
        Relationship.FATHER_IN_LAW,
        Relationship.MOTHER_IN_LAW,
    ):
        if counts[relationship] > 1:
            result.errors.append(f"Cannot add more than one {relationship.value}.")

    has_parents = any(counts[r] for r in PARENT_SET_RELATIONSHIPS[ParentSet.PARENTS])
    has_in_laws = any(counts[r] for r in PARENT_SET_RELATIONSHIPS[ParentSet.PARENTS_IN_LAW])
    if has_parents and has_in_laws:
        result.errors.append(
            "Cannot add both parents and parents-in-law. Please select only one set."
        )

    if len(parents) > MAX_PARENTS:
        result.errors.append(f"Maximum {MAX_PARENTS} parents can be added.")

    return result


def validate_age_range(age: int, relationship: Relationship | str) -> str | None:
    """Return an error naming the allowed band, or None when `age` fits."""
    try:
        relationship = Relationship(relationship)
    except ValueError:
        return "Invalid relationship type."

    min_age, max_age = AGE_BANDS[relationship]
    if age < min_age or age > max_age:
        return f"{relationship.value} must be between {min_age}-{max_age} years."
    return None


def gender_for_relationship(relationship: Relationship | str) -> Gender | None:
    """Implied gender for parent relationships; None where the user must choose."""
    try:
        return _GENDER_BY_RELATIONSHIP.get(Relationship(relationship))
    except ValueError:
        return None


def relationships_for_parent_set(parent_set: ParentSet | str) -> frozenset[Relationship]:
    """Relationships a parent set permits."""
    return PARENT_SET_RELATIONSHIPS[ParentSet(parent_set)]
