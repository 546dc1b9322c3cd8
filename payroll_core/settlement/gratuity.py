"""
Gratuity Calculator - Payment of Gratuity Act, 1972, plus the per-day
settlement components (leave encashment, notice-period recovery).

Formula: (last drawn basic + DA) × 15/26 × rounded years of service,
capped at the statutory maximum.

Two documented simplifications:
  - Rounding: a final-year fraction >= 0.5 counts as a full year. Some
    employers instead apply the "240 days worked in the final year" test.
  - Eligibility: exact service >= 4.8 years, a tolerance below the nominal
    5-year minimum that absorbs date-entry noise.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Optional

from payroll_core.config import settings
from payroll_core.numbers import format_inr, round_half_up
from payroll_core.settlement.schemas import (
    GratuityCalculationInput,
    GratuityCalculationResult,
    ServiceDuration,
)

logger = logging.getLogger(__name__)

GRATUITY_DAYS_PER_YEAR = 15     # 15 days' wages per completed year
GRATUITY_WAGE_DAYS     = 26     # Wage-month divisor in the Act
NOMINAL_MIN_YEARS      = 5


# ===========================================================================
# SERVICE DURATION
# ===========================================================================

def _parse_iso_date(value: str) -> date:
    return datetime.fromisoformat(value.strip()).date()


def _add_years(start: date, years: int) -> date:
    """Same month/day `years` later; 29 Feb lands on 1 Mar in non-leap years."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return date(start.year + years, 3, 1)


def calculate_years_of_service(joining_date: str, exit_date: str) -> ServiceDuration:
    """
    Whole anniversary years between the two dates, plus the elapsed fraction of
    the anniversary year in progress. The fraction's denominator is the real
    length of that anniversary year (365 or 366), so leap years are exact.

    Unparseable dates return zero service rather than raising. This keeps a
    settlement run going but hides data-entry errors, so it is logged.
    """
    try:
        start = _parse_iso_date(joining_date)
        end = _parse_iso_date(exit_date)
    except (TypeError, ValueError):
        logger.warning(
            "Unparseable service dates joining=%r exit=%r; treating as zero service",
            joining_date, exit_date,
        )
        return ServiceDuration(years=0, exact_years=0.0, days=0)

    days = (end - start).days

    years = end.year - start.year
    anniversary = _add_years(start, years)
    if anniversary > end:
        years -= 1
        anniversary = _add_years(start, years)

    next_anniversary = _add_years(anniversary, 1)
    days_in_year = (next_anniversary - anniversary).days
    remaining_days = (end - anniversary).days

    return ServiceDuration(
        years=years,
        exact_years=years + remaining_days / days_in_year,
        days=days,
    )


def round_years_for_gratuity(exact_years: float, round_up_fraction: Optional[float] = None) -> int:
    """floor(exact_years), plus one if the fractional part reaches the threshold (0.5)."""
    threshold = settings.gratuity_round_up_fraction if round_up_fraction is None else round_up_fraction
    whole = math.floor(exact_years)
    fraction = exact_years - whole
    return whole + 1 if fraction >= threshold else whole


# ===========================================================================
# GRATUITY
# ===========================================================================

def calculate_gratuity(
    gratuity_input: GratuityCalculationInput,
    *,
    statutory_cap: Optional[float] = None,
    min_service_years: Optional[float] = None,
) -> GratuityCalculationResult:
    """Statutory gratuity for an exiting employee."""
    cap = settings.gratuity_statutory_cap if statutory_cap is None else statutory_cap
    min_years = settings.gratuity_min_service_years if min_service_years is None else min_service_years

    service = calculate_years_of_service(gratuity_input.joining_date, gratuity_input.exit_date)
    years_of_service = round_years_for_gratuity(service.exact_years)
    last_drawn_salary = gratuity_input.last_drawn_basic_salary + gratuity_input.last_drawn_da

    if service.exact_years < min_years:
        return GratuityCalculationResult(
            years_of_service=years_of_service,
            exact_years=service.exact_years,
            actual_days=service.days,
            eligible_for_gratuity=False,
            last_drawn_salary=last_drawn_salary,
            gratuity_amount=0,
            capped_amount=0,
            is_capped=False,
            statutory_cap=cap,
            formula=(
                f"Not eligible - Service period: {service.exact_years:.2f} years "
                f"(minimum {NOMINAL_MIN_YEARS} years continuous service required)"
            ),
        )

    gratuity_amount = round_half_up(
        last_drawn_salary * GRATUITY_DAYS_PER_YEAR / GRATUITY_WAGE_DAYS * years_of_service
    )
    is_capped = gratuity_amount > cap
    capped_amount = min(gratuity_amount, cap)

    formula = (
        f"(₹{format_inr(last_drawn_salary)} × {GRATUITY_DAYS_PER_YEAR}/{GRATUITY_WAGE_DAYS}) "
        f"× {years_of_service} years = ₹{format_inr(gratuity_amount)}"
    )
    if is_capped:
        formula += f" (capped to ₹{format_inr(cap)})"

    return GratuityCalculationResult(
        years_of_service=years_of_service,
        exact_years=service.exact_years,
        actual_days=service.days,
        eligible_for_gratuity=True,
        last_drawn_salary=last_drawn_salary,
        gratuity_amount=gratuity_amount,
        capped_amount=capped_amount,
        is_capped=is_capped,
        statutory_cap=cap,
        formula=formula,
    )


# ===========================================================================
# PER-DAY SETTLEMENT COMPONENTS
# ===========================================================================

def calculate_leave_encashment(
    leave_balance: float,
    monthly_basic_salary: float,
    working_days_per_month: Optional[float] = None,
) -> float:
    """Leave balance × daily wage (monthly basic / working days)."""
    divisor = settings.working_days_per_month if working_days_per_month is None else working_days_per_month
    return leave_balance * (monthly_basic_salary / divisor)


def calculate_notice_period_recovery(
    monthly_ctc: float,
    notice_period_days: float,
    actual_notice_days: float,
    working_days_per_month: Optional[float] = None,
) -> float:
    """
    Shortfall days × daily CTC. Returned as a positive amount to deduct;
    serving more than the required notice never produces a refund.
    """
    divisor = settings.working_days_per_month if working_days_per_month is None else working_days_per_month
    shortfall_days = max(0.0, notice_period_days - actual_notice_days)
    return shortfall_days * (monthly_ctc / divisor)
