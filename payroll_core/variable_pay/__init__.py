from payroll_core.variable_pay.engine import (
    allocate_for_employees,
    build_formula_context,
    create_allocation,
    evaluate_incentive_amount,
    generate_recurring_allocations,
)
from payroll_core.variable_pay.formula import evaluate_formula, parse_formula, validate_formula
from payroll_core.variable_pay.schemas import (
    AllocationBatch,
    AllocationStatus,
    Employee,
    FormulaContext,
    IncentiveAllocation,
    IncentiveRule,
)
from payroll_core.variable_pay.workflow import amend_rule, transition_allocation

__all__ = [
    "allocate_for_employees",
    "build_formula_context",
    "create_allocation",
    "evaluate_incentive_amount",
    "generate_recurring_allocations",
    "evaluate_formula",
    "parse_formula",
    "validate_formula",
    "AllocationBatch",
    "AllocationStatus",
    "Employee",
    "FormulaContext",
    "IncentiveAllocation",
    "IncentiveRule",
    "amend_rule",
    "transition_allocation",
]
