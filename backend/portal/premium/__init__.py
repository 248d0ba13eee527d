"""
Premium Engine — pro-rata parental premium, GST and monthly deduction.
"""

from portal.premium.engine import (
    POLICY_YEAR_DAYS,
    RATE_DOUBLE_PARENT,
    RATE_SINGLE_PARENT,
    TAX_RATE,
    PremiumBreakdown,
    ProRataCalculation,
    calculate_monthly_deduction,
    compute_pro_rata_factor,
    compute_pro_rata_premium,
    format_premium,
    get_policy_year,
    get_premium_breakdown,
)

__all__ = [
    "POLICY_YEAR_DAYS",
    "RATE_DOUBLE_PARENT",
    "RATE_SINGLE_PARENT",
    "TAX_RATE",
    "PremiumBreakdown",
    "ProRataCalculation",
    "calculate_monthly_deduction",
    "compute_pro_rata_factor",
    "compute_pro_rata_premium",
    "format_premium",
    "get_policy_year",
    "get_premium_breakdown",
]
