"""Upload batch endpoints: create, list and roster import."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portal.admin.importer import import_roster, template_csv
from portal.api.deps import get_db, http_error
from portal.api.schemas.admin import BatchCreate, BatchResponse, RosterImportResponse
from portal.core.logging import get_logger
from portal.enrollment.errors import RosterImportError
from portal.repositories import batches as batch_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/batches", tags=["Batches"])


@router.post("/", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def create_batch(payload: BatchCreate, db: AsyncSession = Depends(get_db)) -> BatchResponse:
    """Create an upload batch to attach an imported roster to."""
    batch = await batch_repository.create_batch(
        db,
        batch_name=payload.batch_name,
        description=payload.description,
        uploaded_by=payload.uploaded_by,
    )
    logger.info("Upload batch created", batch_id=str(batch.id), batch_name=batch.batch_name)
    return BatchResponse.model_validate(batch)


@router.get("/", response_model=list[BatchResponse])
async def list_batches(db: AsyncSession = Depends(get_db)) -> list[BatchResponse]:
    """List batches, newest first, with their employee counts."""
    return [
        BatchResponse.model_validate(batch).model_copy(update={"employee_count": count})
        for batch, count in await batch_repository.list_batches_with_counts(db)
    ]


@router.get("/template", response_class=PlainTextResponse)
async def download_template() -> PlainTextResponse:
    """Sample roster CSV."""
    return PlainTextResponse(
        template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="employee_template.csv"'},
    )


@router.post("/{batch_id}/import", response_model=RosterImportResponse, status_code=status.HTTP_201_CREATED)
async def import_batch_roster(
    batch_id: UUID,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
) -> RosterImportResponse:
    """Import a CSV/XLSX roster into a batch. Any bad row rejects the whole file."""
    batch = await batch_repository.get_batch_by_id(db, batch_id)
    if batch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")

    content = await file.read()
    try:
        employees = await import_roster(db, batch.id, file.filename or "", content)
    except RosterImportError as exc:
        raise http_error(exc) from exc

    return RosterImportResponse(
        batch_id=batch.id,
        created=len(employees),
        message=f"Successfully uploaded {len(employees)} employees!",
    )
