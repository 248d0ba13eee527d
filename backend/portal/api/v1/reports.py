"""Admin reporting endpoints: dashboard, enrollment report and exports."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from portal.admin import reports
from portal.api.deps import get_db
from portal.core.constants import ExportFormat

router = APIRouter(prefix="/reports", tags=["Reports"])


def _download(export: reports.ExportFile) -> Response:
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/dashboard")
async def dashboard(db: AsyncSession = Depends(get_db)) -> dict[str, object]:
    """Enrollment totals, rate and per-department breakdown."""
    stats = await reports.get_dashboard_stats(db)
    return stats.to_dict()


@router.get("/enrollments")
async def enrollment_report(
    batch_id: UUID | None = None,
    db: AsyncSession = Depends(get_db),
) -> dict[str, object]:
    """Per-employee enrollment detail, optionally for one batch."""
    report = await reports.get_detailed_report(db, batch_id)
    return {"data": [row.to_dict() for row in report], "count": len(report)}


@router.get("/enrollments/export")
async def export_enrollment_report(
    format: ExportFormat = Query(ExportFormat.CSV),
    batch_id: UUID | None = None,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download the detailed enrollment report as CSV or XLSX."""
    return _download(await reports.export_detailed_report(db, format, batch_id))


@router.get("/employees/export")
async def export_employees(
    format: ExportFormat = Query(ExportFormat.CSV),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download the employee list as CSV or XLSX."""
    return _download(await reports.export_employees(db, format))
