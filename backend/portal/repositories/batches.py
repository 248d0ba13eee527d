"""
Upload batch repository — data access for the upload_batches table.

Repository rules:
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.models.upload_batch import UploadBatch
from portal.repositories.employees import count_by_batch


async def create_batch(
    db: AsyncSession,
    *,
    batch_name: str,
    description: str | None = None,
    uploaded_by: str | None = None,
) -> UploadBatch:
    """Create a new upload batch."""
    batch = UploadBatch(
        batch_name=batch_name.strip(),
        description=description,
        uploaded_by=uploaded_by,
    )
    db.add(batch)
    await db.flush()
    return batch


async def get_batch_by_id(db: AsyncSession, batch_id: uuid.UUID | str) -> UploadBatch | None:
    """Fetch a batch by primary key."""
    try:
        key = batch_id if isinstance(batch_id, uuid.UUID) else uuid.UUID(str(batch_id))
    except ValueError:
        return None
    return await db.get(UploadBatch, key)


async def list_batches_with_counts(db: AsyncSession) -> list[tuple[UploadBatch, int]]:
    """All batches, newest first, each paired with its employee count."""
    result = await db.execute(select(UploadBatch).order_by(UploadBatch.uploaded_at.desc()))
    batches = list(result.scalars().all())
    counts = await count_by_batch(db)
    return [(batch, counts.get(batch.id, 0)) for batch in batches]
