"""
Celery tasks — enrollment confirmation and reminder e-mails with retry logic.

Task arguments are JSON only: callers render the template data before
queueing, so the worker never touches the database.
"""

from __future__ import annotations

from typing import Any

import httpx

from portal.core.logging import get_logger
from portal.enrollment.errors import NotificationError
from portal.notifications.email_service import EmailConfig, EmailResult, EmailService
from portal.tasks import celery_app

logger = get_logger(__name__)

MAX_RETRIES = 5


def should_retry(result: EmailResult) -> bool:
    """Only provider-side failures are worth another attempt."""
    return result.status_code is not None and (
        result.status_code >= 500 or result.status_code == 429
    )


def _deliver(kind: str, result: EmailResult) -> dict[str, Any]:
    if not result.success and should_retry(result):
        raise NotificationError(
            f"{kind} e-mail failed with status {result.status_code}",
            status_code=result.status_code,
            response_body=result.error,
        )
    if not result.success:
        logger.warning(f"{kind} e-mail not sent", recipient=result.recipient, error=result.error)
    return result.to_dict()


@celery_app.task(
    bind=True,
    name="portal.tasks.notification_tasks.send_enrollment_confirmation",
    max_retries=MAX_RETRIES,
    default_retry_delay=60,
    autoretry_for=(httpx.TransportError, NotificationError),
    retry_backoff=True,
    retry_backoff_max=3600,
    retry_jitter=True,
)
def send_enrollment_confirmation(self, to_email: str, to_name: str, template_data: dict):
    """
    Send the confirmation e-mail for a stored enrollment:
    1. Post the SendGrid dynamic template
    2. Retry transport errors and 5xx/429 answers with exponential backoff
    3. Give up quietly on anything else (bad template, unconfigured key)
    """
    logger.info(
        "Sending enrollment confirmation",
        recipient=to_email,
        attempt=self.request.retries + 1,
    )
    service = EmailService(EmailConfig.from_settings())
    return _deliver("Confirmation", service.send_confirmation(to_email, to_name, template_data))


@celery_app.task(
    bind=True,
    name="portal.tasks.notification_tasks.send_enrollment_reminder",
    max_retries=MAX_RETRIES,
    default_retry_delay=60,
    autoretry_for=(httpx.TransportError, NotificationError),
    retry_backoff=True,
    retry_backoff_max=3600,
    retry_jitter=True,
)
def send_enrollment_reminder(self, to_email: str, to_name: str, template_data: dict):
    """Send a pending-enrollment reminder."""
    logger.info(
        "Sending enrollment reminder",
        recipient=to_email,
        attempt=self.request.retries + 1,
    )
    service = EmailService(EmailConfig.from_settings())
    return _deliver("Reminder", service.send_reminder(to_email, to_name, template_data))
