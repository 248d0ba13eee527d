"""
Premium Engine — pro-rata pricing for the voluntary parental policy.

The base policy (employee, spouse, children) is employer-paid.  Parents or
parents-in-law are covered under a voluntary policy whose annual rate is
charged only for the part of the policy year the employee is actually on
the rolls, measured from the joining date to the policy end date.

All functions are pure: no I/O, no validation, no exceptions for odd
dates.  Callers pass dates already loaded from the Employee record.

Usage::

    from portal.premium import get_premium_breakdown

    breakdown = get_premium_breakdown(
        parent_count=2,
        joining_date=date(2024, 6, 15),
        policy_start_date=date(2024, 4, 1),
        policy_end_date=date(2025, 3, 31),
    )
    breakdown.total             # 67884
    breakdown.monthly_deduction # 5657
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

# ─── Business-configured rates ───────────────────────────
RATE_SINGLE_PARENT = 36203
RATE_DOUBLE_PARENT = 72407
TAX_RATE = 0.18

# Fixed pro-rata denominator.  Deliberately not derived from the
# policy_start → policy_end span; insurers quote on a 365-day year.
POLICY_YEAR_DAYS = 365

NO_COVERAGE_DESCRIPTION = "No parental coverage selected"


# ═══════════════════════════════════════════════════════════
#  Result types
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProRataCalculation:
    """Intermediate pro-rata figures for one base premium."""

    base_premium: float
    pro_rated_premium: float
    factor: float
    remaining_days: int
    total_policy_days: int          # informational only
    joining_date: date
    policy_end_date: date


@dataclass(frozen=True)
class PremiumBreakdown:
    """What the employee pays for parental coverage, as displayed and persisted."""

    description: str
    base_premium: int
    pro_rated_premium: float
    gst: int
    total: int
    monthly_deduction: int
    factor: float
    remaining_days: int

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API responses and e-mail payloads."""
        return asdict(self)


# ═══════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════

def round_amount(value: float) -> int:
    """Round half-up to a whole currency unit (2.5 → 3, not banker's 2)."""
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _days_between(start: date, end: date) -> int:
    """Whole days from `start` to `end` (negative when end precedes start)."""
    return math.ceil((end - start).total_seconds() / 86400)


def base_premium_for(parent_count: int) -> int:
    """Annual rate for the number of covered parents (0 → 0, 1 → single, ≥2 → double)."""
    if parent_count <= 0:
        return 0
    if parent_count == 1:
        return RATE_SINGLE_PARENT
    return RATE_DOUBLE_PARENT


# ═══════════════════════════════════════════════════════════
#  Operations
# ═══════════════════════════════════════════════════════════

def compute_pro_rata_factor(joining_date: date, policy_end_date: date) -> tuple[float, int]:
    """
    Share of the 365-day policy year left from joining to policy end.

    Both ends are inclusive, so joining on the last policy day still
    counts one day.  Negative spans clamp to zero; there is no upper
    clamp, so an employee who joined more than a year before policy end
    gets a factor above 1.

    Returns:
        (factor, remaining_days)
    """
    remaining_days = max(0, _days_between(joining_date, policy_end_date) + 1)
    factor = remaining_days / POLICY_YEAR_DAYS
    return factor, remaining_days


def compute_pro_rata_premium(
    base_premium: float,
    joining_date: date,
    policy_start_date: date,
    policy_end_date: date,
) -> ProRataCalculation:
    """Scale `base_premium` by the pro-rata factor.  No rounding at this stage."""
    factor, remaining_days = compute_pro_rata_factor(joining_date, policy_end_date)
    return ProRataCalculation(
        base_premium=base_premium,
        pro_rated_premium=base_premium * factor,
        factor=factor,
        remaining_days=remaining_days,
        total_policy_days=_days_between(policy_start_date, policy_end_date),
        joining_date=joining_date,
        policy_end_date=policy_end_date,
    )


def calculate_monthly_deduction(annual_premium: float) -> int:
    """Salary deduction per month for an annual amount."""
    return round_amount(annual_premium / 12)


def get_premium_breakdown(
    parent_count: int,
    joining_date: date,
    policy_start_date: date,
    policy_end_date: date,
) -> PremiumBreakdown:
    """
    Full premium breakdown for `parent_count` covered parents.

    GST is applied to the unrounded pro-rated premium; only the reported
    `gst`, `total` and `monthly_deduction` are rounded.  Counts above two
    are priced at the double-parent rate.
    """
    if parent_count <= 0:
        return PremiumBreakdown(
            description=NO_COVERAGE_DESCRIPTION,
            base_premium=0,
            pro_rated_premium=0,
            gst=0,
            total=0,
            monthly_deduction=0,
            factor=0,
            remaining_days=0,
        )

    base_premium = base_premium_for(parent_count)
    calc = compute_pro_rata_premium(base_premium, joining_date, policy_start_date, policy_end_date)

    gst = calc.pro_rated_premium * TAX_RATE
    total = round_amount(calc.pro_rated_premium + gst)

    return PremiumBreakdown(
        description=f"{parent_count} parent{'s' if parent_count > 1 else ''} coverage",
        base_premium=base_premium,
        pro_rated_premium=calc.pro_rated_premium,
        gst=round_amount(gst),
        total=total,
        monthly_deduction=calculate_monthly_deduction(total),
        factor=calc.factor,
        remaining_days=calc.remaining_days,
    )


def get_policy_year(policy_start_date: date, policy_end_date: date) -> str:
    """'2024' for a calendar-year policy, '2024-25' for one spanning two years."""
    start_year = policy_start_date.year
    end_year = policy_end_date.year
    if start_year == end_year:
        return str(start_year)
    return f"{start_year}-{str(end_year)[-2:]}"


def format_premium(amount: float) -> str:
    """Display an amount in rupees with thousands separators, e.g. ₹67,884."""
    return f"₹{round_amount(amount):,}"
