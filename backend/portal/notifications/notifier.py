"""
CeleryNotifier — EnrollmentNotifier that queues e-mails on the
notifications queue instead of sending them inline.
"""

from __future__ import annotations

from datetime import date

from portal.core.logging import get_logger
from portal.enrollment.records import EmployeeProfile, EnrollmentRecord
from portal.notifications.email_service import (
    build_confirmation_template_data,
    build_reminder_template_data,
)

logger = get_logger(__name__)


class CeleryNotifier:
    async def send_confirmation(self, employee: EmployeeProfile, record: EnrollmentRecord) -> None:
        from portal.tasks.notification_tasks import send_enrollment_confirmation

        result = send_enrollment_confirmation.delay(
            employee.email,
            employee.name,
            build_confirmation_template_data(employee, record),
        )
        logger.info("Confirmation e-mail queued", employee_id=employee.id, task_id=result.id)

    async def send_reminder(self, employee: EmployeeProfile, due_date: date | None) -> str:
        """Queue a reminder and return the task ID."""
        from portal.tasks.notification_tasks import send_enrollment_reminder

        result = send_enrollment_reminder.delay(
            employee.email,
            employee.name,
            build_reminder_template_data(employee, due_date),
        )
        logger.info("Reminder e-mail queued", employee_id=employee.id, task_id=result.id)
        return result.id
