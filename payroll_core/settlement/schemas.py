"""
schemas.py - gratuity and full & final settlement data contracts (pydantic v2).

Dates are ISO-8601 strings as stored on the employee record. They are parsed by
the calculator, not validated here: a malformed date degrades to zero service
instead of rejecting the whole settlement.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SettlementStatus(str, Enum):
    draft = "draft"
    finalized = "finalized"


# ---------------------------------------------------------------------------
# Gratuity
# ---------------------------------------------------------------------------

class GratuityCalculationInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    last_drawn_basic_salary: float = Field(..., ge=0)   # Monthly
    last_drawn_da: float = Field(default=0, ge=0)        # Monthly Dearness Allowance
    joining_date: str
    exit_date: str
    # Pay-cycle divisor carried on the record (12 monthly, 26 biweekly).
    # The statutory 15/26 formula does not depend on it.
    months_in_year: Optional[int] = Field(default=None, gt=0)


class ServiceDuration(BaseModel):
    """Calendar-accurate length of service."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    years: int              # Completed anniversary years
    exact_years: float      # years + fraction of the current anniversary year
    days: int               # Calendar days between joining and exit


class GratuityCalculationResult(BaseModel):
    """
    years_of_service is the statutory rounded figure (fraction >= 0.5 rounds up);
    exact_years is the unrounded calendar figure eligibility is judged on.
    Ineligible results carry zero monetary amounts and an explanatory formula.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    years_of_service: int
    exact_years: float
    actual_days: int
    eligible_for_gratuity: bool
    last_drawn_salary: float
    gratuity_amount: float
    capped_amount: float
    is_capped: bool
    statutory_cap: float
    formula: str            # Audit trace, Indian digit grouping


# ---------------------------------------------------------------------------
# Full & final settlement
# ---------------------------------------------------------------------------

class SettlementInput(BaseModel):
    """Everything needed to settle one exiting employee. Monetary inputs are monthly."""
    model_config = ConfigDict(extra="forbid")

    employee_id: str
    employee_name: str = ""
    settlement_date: str

    monthly_basic: float = Field(..., ge=0)
    monthly_da: float = Field(default=0, ge=0)
    monthly_ctc: float = Field(..., ge=0)

    joining_date: str
    exit_date: str

    days_payable: float = Field(default=0, ge=0)        # Days worked in the exit month
    leave_balance: float = Field(default=0, ge=0)
    notice_period_days: float = Field(default=0, ge=0)  # Required
    notice_days_served: float = Field(default=0, ge=0)

    other_earnings: float = Field(default=0, ge=0)
    other_deductions: float = Field(default=0, ge=0)


class Settlement(BaseModel):
    """
    net_payable = salary_pro_rata + leave_encashment + gratuity + other_earnings
                  - notice_period_recovery - other_deductions
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    employee_id: str
    employee_name: str
    settlement_date: str
    status: SettlementStatus = SettlementStatus.draft

    salary_pro_rata: float
    leave_encashment: float
    notice_period_recovery: float
    gratuity: float
    other_earnings: float
    other_deductions: float
    net_payable: float

    gratuity_detail: GratuityCalculationResult
    finalized_at: Optional[datetime] = None


__all__ = [
    "SettlementStatus",
    "GratuityCalculationInput",
    "ServiceDuration",
    "GratuityCalculationResult",
    "SettlementInput",
    "Settlement",
]
