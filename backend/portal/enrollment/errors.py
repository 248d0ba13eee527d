"""
Domain-specific exception hierarchy for enrollment and admin operations.

All exceptions inherit from EnrollmentError so API routes can catch
broadly or narrowly as needed.  Each exception carries structured
context (employee ID, details) for logging.

Validation rule failures are NOT exceptions; the rule sets return error
lists.  EnrollmentValidationError only wraps such a list when a
submission is refused.
"""

from __future__ import annotations


class EnrollmentError(Exception):
    """Base exception for all enrollment errors."""

    def __init__(
        self,
        message: str,
        *,
        employee_id: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.employee_id = employee_id
        self.details = details or {}
        super().__init__(message)


class EmployeeNotFoundError(EnrollmentError):
    """No employee with the requested ID."""
    pass


class BatchNotFoundError(EnrollmentError):
    """No upload batch with the requested ID."""
    pass


class EnrollmentNotFoundError(EnrollmentError):
    """The employee has not submitted an enrollment."""
    pass


class EnrollmentAlreadySubmittedError(EnrollmentError):
    """The employee already has a submitted enrollment."""
    pass


class EnrollmentValidationError(EnrollmentError):
    """A submission failed the enrollment business rules."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(message, **kwargs)


class RosterImportError(EnrollmentError):
    """A roster file could not be imported."""

    def __init__(
        self,
        message: str,
        *,
        row_errors: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.row_errors = list(row_errors or [])
        super().__init__(message, **kwargs)


class NotificationError(EnrollmentError):
    """An e-mail could not be delivered to the provider."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, **kwargs)
