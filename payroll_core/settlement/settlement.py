"""
Full & final settlement assembly for one exiting employee.

Combines the exit-month salary pro-rata, leave encashment, notice-period
recovery and capped gratuity into a draft Settlement. Persisting it and the
approval around it belong to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from payroll_core.config import settings
from payroll_core.exceptions import SettlementStateError
from payroll_core.settlement.gratuity import (
    calculate_gratuity,
    calculate_leave_encashment,
    calculate_notice_period_recovery,
)
from payroll_core.settlement.schemas import (
    GratuityCalculationInput,
    Settlement,
    SettlementInput,
    SettlementStatus,
)

logger = logging.getLogger(__name__)


def calculate_salary_pro_rata(
    monthly_ctc: float,
    days_payable: float,
    days_per_month: Optional[float] = None,
) -> float:
    """Exit-month salary on the flat 30-day month the monthly payroll run uses."""
    divisor = settings.settlement_days_per_month if days_per_month is None else days_per_month
    return monthly_ctc / divisor * days_payable


def calculate_settlement(
    settlement_input: SettlementInput,
    *,
    working_days_per_month: Optional[float] = None,
    statutory_cap: Optional[float] = None,
) -> Settlement:
    gratuity = calculate_gratuity(
        GratuityCalculationInput(
            last_drawn_basic_salary=settlement_input.monthly_basic,
            last_drawn_da=settlement_input.monthly_da,
            joining_date=settlement_input.joining_date,
            exit_date=settlement_input.exit_date,
        ),
        statutory_cap=statutory_cap,
    )

    salary_pro_rata = calculate_salary_pro_rata(
        settlement_input.monthly_ctc, settlement_input.days_payable,
    )
    leave_encashment = calculate_leave_encashment(
        settlement_input.leave_balance,
        settlement_input.monthly_basic,
        working_days_per_month,
    )
    notice_recovery = calculate_notice_period_recovery(
        settlement_input.monthly_ctc,
        settlement_input.notice_period_days,
        settlement_input.notice_days_served,
        working_days_per_month,
    )

    net_payable = (
        salary_pro_rata
        + leave_encashment
        + gratuity.capped_amount
        + settlement_input.other_earnings
        - notice_recovery
        - settlement_input.other_deductions
    )

    logger.info(
        "Settlement drafted employee_id=%s gratuity=%.2f net_payable=%.2f",
        settlement_input.employee_id, gratuity.capped_amount, net_payable,
    )
    return Settlement(
        id=f"settlement-{settlement_input.employee_id}-{settlement_input.settlement_date}",
        employee_id=settlement_input.employee_id,
        employee_name=settlement_input.employee_name,
        settlement_date=settlement_input.settlement_date,
        status=SettlementStatus.draft,
        salary_pro_rata=salary_pro_rata,
        leave_encashment=leave_encashment,
        notice_period_recovery=notice_recovery,
        gratuity=gratuity.capped_amount,
        other_earnings=settlement_input.other_earnings,
        other_deductions=settlement_input.other_deductions,
        net_payable=net_payable,
        gratuity_detail=gratuity,
    )


def finalize_settlement(settlement: Settlement, finalized_at: datetime) -> Settlement:
    """Return a finalized copy. A finalized settlement cannot be finalized again."""
    if settlement.status != SettlementStatus.draft:
        raise SettlementStateError(f"Settlement {settlement.id} is already {settlement.status.value}")
    logger.info("Settlement finalized id=%s", settlement.id)
    return settlement.model_copy(
        update={"status": SettlementStatus.finalized, "finalized_at": finalized_at},
    )
