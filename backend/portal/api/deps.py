"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.session import session_scope
from portal.enrollment.errors import (
    BatchNotFoundError,
    EmployeeNotFoundError,
    EnrollmentAlreadySubmittedError,
    EnrollmentError,
    EnrollmentNotFoundError,
    EnrollmentValidationError,
    RosterImportError,
)
from portal.enrollment.service import EnrollmentService
from portal.notifications.notifier import CeleryNotifier
from portal.repositories.enrollment_store import SqlEnrollmentStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; committed after the handler returns, then after-commit hooks run."""
    async with session_scope() as session:
        yield session


def get_notifier() -> CeleryNotifier:
    """Queue-backed notifier for confirmation and reminder e-mails."""
    return CeleryNotifier()


async def get_enrollment_service(
    db: AsyncSession = Depends(get_db),
    notifier: CeleryNotifier = Depends(get_notifier),
) -> EnrollmentService:
    """Enrollment service bound to this request's session."""
    return EnrollmentService(store=SqlEnrollmentStore(db), notifier=notifier)


def http_error(exc: EnrollmentError) -> HTTPException:
    """Translate a domain exception into the matching HTTP error."""
    if isinstance(exc, (EmployeeNotFoundError, BatchNotFoundError, EnrollmentNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, EnrollmentAlreadySubmittedError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, EnrollmentValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "errors": exc.errors},
        )
    if isinstance(exc, RosterImportError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "row_errors": exc.row_errors},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
