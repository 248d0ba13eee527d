"""
Models package — re-exports Base and all models.

Import models here so Alembic's `target_metadata = Base.metadata`
picks up every table automatically.

When adding a new model:
    1. Create `portal/db/models/<table_name>.py`
    2. Import it here
"""

from portal.db.models.base import Base
from portal.db.models.dependent import FamilyMember, Parent
from portal.db.models.employee import Employee
from portal.db.models.enrollment import Enrollment
from portal.db.models.upload_batch import UploadBatch

__all__ = [
    "Base",
    "Employee",
    "Enrollment",
    "FamilyMember",
    "Parent",
    "UploadBatch",
]
