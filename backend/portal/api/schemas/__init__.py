"""API schema package."""

from portal.api.schemas.admin import (
    BatchCreate,
    BatchResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ReminderResponse,
    RosterImportResponse,
)
from portal.api.schemas.enrollment import (
    DependentIn,
    EnrollmentRecordResponse,
    EnrollmentSubmissionRequest,
    FamilyMemberCheckRequest,
    ParentalCoverageIn,
    ParentCheckRequest,
    PremiumBreakdownResponse,
    SubmissionPreviewResponse,
    ValidationResponse,
)

__all__ = [
    "BatchCreate",
    "BatchResponse",
    "DependentIn",
    "EmployeeCreate",
    "EmployeeResponse",
    "EmployeeUpdate",
    "EnrollmentRecordResponse",
    "EnrollmentSubmissionRequest",
    "FamilyMemberCheckRequest",
    "ParentCheckRequest",
    "ParentalCoverageIn",
    "PremiumBreakdownResponse",
    "ReminderResponse",
    "RosterImportResponse",
    "SubmissionPreviewResponse",
    "ValidationResponse",
]
