from payroll_core.settlement.gratuity import (
    calculate_gratuity,
    calculate_leave_encashment,
    calculate_notice_period_recovery,
    calculate_years_of_service,
    round_years_for_gratuity,
)
from payroll_core.settlement.schemas import (
    GratuityCalculationInput,
    GratuityCalculationResult,
    Settlement,
    SettlementInput,
    SettlementStatus,
)
from payroll_core.settlement.settlement import calculate_settlement, finalize_settlement

__all__ = [
    "calculate_gratuity",
    "calculate_leave_encashment",
    "calculate_notice_period_recovery",
    "calculate_years_of_service",
    "round_years_for_gratuity",
    "GratuityCalculationInput",
    "GratuityCalculationResult",
    "Settlement",
    "SettlementInput",
    "SettlementStatus",
    "calculate_settlement",
    "finalize_settlement",
]
