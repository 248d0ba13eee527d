"""
Enrollment — the in-progress draft, submission records and the service
that validates, prices, persists and confirms an enrollment.
"""

from portal.enrollment.draft import EnrollmentDraft, PolicyDates
from portal.enrollment.records import EmployeeProfile, EnrollmentRecord, EnrollmentSubmission
from portal.enrollment.service import EnrollmentNotifier, EnrollmentService, EnrollmentStore

__all__ = [
    "EmployeeProfile",
    "EnrollmentDraft",
    "EnrollmentNotifier",
    "EnrollmentRecord",
    "EnrollmentService",
    "EnrollmentStore",
    "EnrollmentSubmission",
    "PolicyDates",
]
