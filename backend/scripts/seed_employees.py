"""
Seed a development upload batch with the sample roster.
Run: python -m scripts.seed_employees  (from backend/)
"""

import asyncio

from portal.admin.importer import import_roster, template_csv
from portal.db.session import session_scope
from portal.repositories.batches import create_batch


async def seed():
    """Create a batch and import the template roster into it."""
    async with session_scope() as session:
        batch = await create_batch(
            session,
            batch_name="Development seed",
            description="Sample employees from the roster template",
            uploaded_by="seed script",
        )
        employees = await import_roster(
            session, batch.id, "employee_template.csv", template_csv().encode("utf-8")
        )
        for employee in employees:
            print(f"  Created employee: {employee.emp_id} {employee.email} ({employee.role})")
    print(f"Seeded {len(employees)} employees into batch {batch.id}.")


if __name__ == "__main__":
    asyncio.run(seed())
