"""Employee-facing enrollment endpoints: premium quote, dependent checks, submission."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from portal.api.deps import get_enrollment_service, http_error
from portal.api.schemas.enrollment import (
    EnrollmentRecordResponse,
    EnrollmentSubmissionRequest,
    FamilyMemberCheckRequest,
    ParentCheckRequest,
    PremiumBreakdownResponse,
    SubmissionPreviewResponse,
    ValidationResponse,
)
from portal.enrollment.errors import EnrollmentError
from portal.enrollment.service import EnrollmentService

router = APIRouter(prefix="/employees/{employee_id}", tags=["Enrollment"])


@router.get("/premium", response_model=PremiumBreakdownResponse)
async def get_premium(
    employee_id: UUID,
    parent_count: int = Query(0, ge=0),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> PremiumBreakdownResponse:
    """Premium breakdown for covering `parent_count` parents."""
    try:
        breakdown, policy_year = await service.quote(str(employee_id), parent_count)
    except EnrollmentError as exc:
        raise http_error(exc) from exc
    return PremiumBreakdownResponse.from_breakdown(breakdown, policy_year)


@router.post("/enrollment/family-members/check", response_model=ValidationResponse)
async def check_family_member(
    employee_id: UUID,
    payload: FamilyMemberCheckRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ValidationResponse:
    """Check a spouse/child before it is added to the form."""
    result = service.check_family_candidate(
        [m.to_family_member() for m in payload.existing],
        payload.candidate.to_family_member(),
    )
    return ValidationResponse(**result.to_dict())


@router.post("/enrollment/parents/check", response_model=ValidationResponse)
async def check_parent(
    employee_id: UUID,
    payload: ParentCheckRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ValidationResponse:
    """Check a parent/parent-in-law before it is added to the form."""
    result = service.check_parent_candidate(
        [p.to_parent() for p in payload.existing],
        payload.candidate.to_parent(),
        payload.parental_coverage.to_selection(),
    )
    return ValidationResponse(**result.to_dict())


@router.post("/enrollment/validate", response_model=SubmissionPreviewResponse)
async def validate_enrollment(
    employee_id: UUID,
    payload: EnrollmentSubmissionRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> SubmissionPreviewResponse:
    """Run the submission checks and price the enrollment without saving it."""
    try:
        result, breakdown = await service.preview(str(employee_id), payload.to_submission())
    except EnrollmentError as exc:
        raise http_error(exc) from exc
    return SubmissionPreviewResponse(
        **result.to_dict(),
        premium=PremiumBreakdownResponse.from_breakdown(breakdown),
    )


@router.post("/enrollment", response_model=EnrollmentRecordResponse, status_code=status.HTTP_201_CREATED)
async def submit_enrollment(
    employee_id: UUID,
    payload: EnrollmentSubmissionRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentRecordResponse:
    """Submit the enrollment. Only one submission per employee is accepted."""
    try:
        record = await service.submit(str(employee_id), payload.to_submission())
    except EnrollmentError as exc:
        raise http_error(exc) from exc
    return EnrollmentRecordResponse.from_record(record)


@router.get("/enrollment", response_model=EnrollmentRecordResponse)
async def get_enrollment(
    employee_id: UUID,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentRecordResponse:
    """The stored enrollment for an employee."""
    try:
        record = await service.get_enrollment(str(employee_id))
    except EnrollmentError as exc:
        raise http_error(exc) from exc
    return EnrollmentRecordResponse.from_record(record)
