"""
Transactional e-mail through SendGrid dynamic templates.

The service is synchronous (it runs inside Celery workers) and never
raises for delivery problems it can describe: an unconfigured service or
a non-2xx answer comes back as a failed EmailResult.  Transport errors
(timeouts, refused connections) propagate so the calling task can retry.

Usage:
    service = EmailService(EmailConfig.from_settings())
    data = build_confirmation_template_data(employee, record)
    result = service.send_template(
        to_email=employee.email,
        to_name=employee.name,
        template_id=service.config.confirmation_template_id,
        template_data=data,
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from portal.core.config import settings
from portal.core.dates import calculate_age, format_date_with_month_name
from portal.core.logging import get_logger
from portal.enrollment.records import EmployeeProfile, EnrollmentRecord
from portal.premium.engine import format_premium, round_amount
from portal.validation.models import Dependent

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Configuration & result
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EmailConfig:
    api_key: str
    api_url: str
    from_email: str
    from_name: str
    confirmation_template_id: str
    reminder_template_id: str
    timeout_seconds: float = 15.0

    @classmethod
    def from_settings(cls) -> "EmailConfig":
        return cls(
            api_key=settings.SENDGRID_API_KEY,
            api_url=settings.SENDGRID_API_URL,
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
            confirmation_template_id=settings.SENDGRID_CONFIRMATION_TEMPLATE_ID,
            reminder_template_id=settings.SENDGRID_REMINDER_TEMPLATE_ID,
            timeout_seconds=settings.EMAIL_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class EmailResult:
    success: bool
    recipient: str
    status_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "recipient": self.recipient,
            "status_code": self.status_code,
            "error": self.error,
        }


# ═══════════════════════════════════════════════════════════
#  Template data
# ═══════════════════════════════════════════════════════════

def _amount(value: float) -> str:
    return f"{round_amount(value):,}" if value > 0 else "0"


def _dependent_data(person: Dependent, today: date) -> dict[str, Any]:
    return {
        "name": person.name,
        "relationship": person.relationship.value if person.relationship else "",
        "date_of_birth": person.date_of_birth.isoformat() if person.date_of_birth else "",
        "gender": person.gender.value if person.gender else "",
        "age": person.age_on(today) or 0,
        "date_of_birth_formatted": format_date_with_month_name(person.date_of_birth),
    }


def build_confirmation_template_data(
    employee: EmployeeProfile,
    record: EnrollmentRecord,
) -> dict[str, Any]:
    """Dynamic template data for the enrollment confirmation e-mail."""
    today = record.enrollment_date
    total = record.total_premium

    return {
        "employee_name": employee.name,
        "employee_id": employee.emp_id,
        "enrollment_date": record.enrollment_date.isoformat(),
        "sum_insured_lakhs": str(settings.SUM_INSURED_LAKHS),
        "joining_date": format_date_with_month_name(employee.joining_date),
        "employee_share": format_premium(total) if total > 0 else "₹0",
        "employee": {
            "name": employee.name,
            "emp_id": employee.emp_id,
            "date_of_birth_formatted": format_date_with_month_name(employee.date_of_birth),
            "gender": employee.gender.value if employee.gender else "",
            "age": calculate_age(employee.date_of_birth, today) if employee.date_of_birth else 0,
        },
        "family_members": [_dependent_data(m, today) for m in record.family_members],
        "parents": [_dependent_data(p, today) for p in record.parents],
        "has_parental_coverage": record.coverage.selected and bool(record.parents),
        "parental_coverage_type": (
            record.coverage.parent_set.value if record.coverage.parent_set else None
        ),
        "parental_premium": _amount(record.parental_policy_premium),
        "gst_amount": _amount(record.gst_amount),
        "total_premium": _amount(total),
        "monthly_deduction": _amount(record.monthly_deduction),
        "year": str(today.year),
    }


def build_reminder_template_data(
    employee: EmployeeProfile,
    due_date: date | None,
) -> dict[str, Any]:
    """Dynamic template data for the pending-enrollment reminder."""
    return {
        "employee_name": employee.name,
        "employee_id": employee.emp_id,
        "due_date": format_date_with_month_name(due_date),
        "sum_insured_lakhs": str(settings.SUM_INSURED_LAKHS),
    }


def build_payload(
    config: EmailConfig,
    *,
    to_email: str,
    to_name: str,
    template_id: str,
    template_data: dict[str, Any],
) -> dict[str, Any]:
    """SendGrid v3 mail/send body for one recipient."""
    return {
        "personalizations": [
            {
                "to": [{"email": to_email, "name": to_name}],
                "dynamic_template_data": template_data,
            }
        ],
        "from": {"email": config.from_email, "name": config.from_name},
        "template_id": template_id,
    }


# ═══════════════════════════════════════════════════════════
#  Service
# ═══════════════════════════════════════════════════════════

class EmailService:
    """Posts dynamic-template e-mails to SendGrid."""

    def __init__(self, config: EmailConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    def send_template(
        self,
        *,
        to_email: str,
        to_name: str,
        template_id: str,
        template_data: dict[str, Any],
    ) -> EmailResult:
        log = logger.bind(recipient=to_email, template_id=template_id)

        if not self.config.configured or not template_id:
            log.warning("E-mail service not configured, skipping send")
            return EmailResult(success=False, recipient=to_email, error="Email service not configured")

        payload = build_payload(
            self.config,
            to_email=to_email,
            to_name=to_name,
            template_id=template_id,
            template_data=template_data,
        )
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        with httpx.Client(timeout=self.config.timeout_seconds, transport=self._transport) as client:
            response = client.post(self.config.api_url, json=payload, headers=headers)

        if response.is_success:
            log.info("E-mail accepted by provider", status_code=response.status_code)
            return EmailResult(success=True, recipient=to_email, status_code=response.status_code)

        log.error(
            "E-mail provider rejected request",
            status_code=response.status_code,
            response_body=response.text[:500],
        )
        return EmailResult(
            success=False,
            recipient=to_email,
            status_code=response.status_code,
            error=f"SendGrid API error: {response.status_code}",
        )

    def send_confirmation(self, to_email: str, to_name: str, template_data: dict[str, Any]) -> EmailResult:
        return self.send_template(
            to_email=to_email,
            to_name=to_name,
            template_id=self.config.confirmation_template_id,
            template_data=template_data,
        )

    def send_reminder(self, to_email: str, to_name: str, template_data: dict[str, Any]) -> EmailResult:
        return self.send_template(
            to_email=to_email,
            to_name=to_name,
            template_id=self.config.reminder_template_id,
            template_data=template_data,
        )
