"""Shared constants and enums used across the application."""

from enum import StrEnum


class EmployeeRole(StrEnum):
    """Portal roles stored on the employee record."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class Gender(StrEnum):
    """Gender values accepted for employees and dependents."""

    MALE = "Male"
    FEMALE = "Female"


class Relationship(StrEnum):
    """Dependent relationship to the employee.

    Spouse and Child belong to the family domain (base policy).
    The remaining four belong to the parent domain (voluntary policy).
    """

    SPOUSE = "Spouse"
    CHILD = "Child"
    FATHER = "Father"
    MOTHER = "Mother"
    FATHER_IN_LAW = "Father-in-law"
    MOTHER_IN_LAW = "Mother-in-law"


class ParentSet(StrEnum):
    """Which set of parents the voluntary parental policy covers."""

    PARENTS = "parents"
    PARENTS_IN_LAW = "parents-in-law"


class EmployeeEnrollmentStatus(StrEnum):
    """Enrollment progress tracked on the employee row."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class EnrollmentStatus(StrEnum):
    """Review status of a submitted enrollment record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DependentType(StrEnum):
    """Coverage bucket a dependent falls into on reports."""

    FAMILY = "family"
    PARENT = "parent"


class ExportFormat(StrEnum):
    """Downloadable report formats."""

    CSV = "csv"
    XLSX = "xlsx"


FAMILY_RELATIONSHIPS: frozenset[Relationship] = frozenset(
    {Relationship.SPOUSE, Relationship.CHILD}
)

PARENT_SET_RELATIONSHIPS: dict[ParentSet, frozenset[Relationship]] = {
    ParentSet.PARENTS: frozenset({Relationship.FATHER, Relationship.MOTHER}),
    ParentSet.PARENTS_IN_LAW: frozenset(
        {Relationship.FATHER_IN_LAW, Relationship.MOTHER_IN_LAW}
    ),
}

PARENT_RELATIONSHIPS: frozenset[Relationship] = (
    PARENT_SET_RELATIONSHIPS[ParentSet.PARENTS]
    | PARENT_SET_RELATIONSHIPS[ParentSet.PARENTS_IN_LAW]
)
