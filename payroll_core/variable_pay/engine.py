"""
Variable Pay Engine - deterministic incentive evaluation and allocation generation.

Recurring rules: each installment is a FULL, independent evaluation of the
formula. A rule yielding X with recurrence_count N pays N × X in total; the
amount is not split across installments.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Iterator, Optional

from payroll_core.config import settings
from payroll_core.exceptions import FormulaSyntaxError, InvalidFormulaError
from payroll_core.numbers import round_half_up
from payroll_core.variable_pay.formula import parse_formula
from payroll_core.variable_pay.schemas import (
    AllocationBatch,
    AllocationFailure,
    AllocationStatus,
    Employee,
    FormulaContext,
    IncentiveAllocation,
    IncentiveRule,
)

logger = logging.getLogger(__name__)


def build_formula_context(
    employee: Employee,
    fixed_value: float = 0.0,
    basic_to_ctc_ratio: Optional[float] = None,
) -> FormulaContext:
    ratio = settings.basic_to_ctc_ratio if basic_to_ctc_ratio is None else basic_to_ctc_ratio
    return FormulaContext(
        monthly_basic=employee.annual_ctc * ratio / 12,
        monthly_ctc=employee.annual_ctc / 12,
        fixed_value=fixed_value,
    )


def evaluate_incentive_amount(rule: IncentiveRule, context: FormulaContext) -> float:
    """
    Evaluate `rule.formula_expression` against `context`, apply the cap, and
    round to paisa.

    The cap only clamps upwards: negative amounts are deliberate recoveries.

    Raises:
        InvalidFormulaError: the expression does not parse, references an
            unknown name, divides by zero, or yields a non-finite number.
    """
    try:
        amount = parse_formula(rule.formula_expression).evaluate(context.as_variables())
    except FormulaSyntaxError as exc:
        logger.error(
            "Formula evaluation failed for rule %s (%s): %s",
            rule.name, rule.id, exc,
        )
        raise InvalidFormulaError(rule.id, rule.name, rule.formula_expression, str(exc)) from exc

    if not math.isfinite(amount):
        logger.error(
            "Formula for rule %s (%s) produced a non-finite amount: %r",
            rule.name, rule.id, amount,
        )
        raise InvalidFormulaError(
            rule.id, rule.name, rule.formula_expression,
            "calculated amount is not a valid number",
        )

    if rule.cap_amount and amount > rule.cap_amount:
        amount = rule.cap_amount

    return round_half_up(amount, 2)


def _allocation_id(
    rule: IncentiveRule,
    employee: Employee,
    payroll_month: int,
    payroll_year: int,
    installment_number: Optional[int],
) -> str:
    base = f"alloc-{rule.id}-{employee.id}-{payroll_year}{payroll_month:02d}"
    return f"{base}-{installment_number}" if installment_number is not None else base


def create_allocation(
    rule: IncentiveRule,
    employee: Employee,
    payroll_month: int,
    payroll_year: int,
    installment_number: Optional[int] = None,
    total_installments: Optional[int] = None,
    *,
    fixed_value: float = 0.0,
) -> IncentiveAllocation:
    """Evaluate `rule` for `employee` and return a Draft allocation for one payroll month."""
    context = build_formula_context(employee, fixed_value=fixed_value)
    amount = evaluate_incentive_amount(rule, context)

    return IncentiveAllocation(
        id=_allocation_id(rule, employee, payroll_month, payroll_year, installment_number),
        rule_id=rule.id,
        employee_id=employee.id,
        department_id=employee.department,
        calculated_amount=amount,
        payroll_month=payroll_month,
        payroll_year=payroll_year,
        status=AllocationStatus.draft,
        is_recovery=amount < 0,
        source_rule_version=rule.version,
        installment_number=installment_number,
        total_installments=total_installments,
    )


def _months_from(start_month: int, start_year: int, count: int) -> Iterator[tuple[int, int]]:
    month, year = start_month, start_year
    for _ in range(count):
        yield month, year
        month += 1
        if month > 12:
            month = 1
            year += 1


def generate_recurring_allocations(
    rule: IncentiveRule,
    employee: Employee,
    start_month: int,
    start_year: int,
    *,
    fixed_value: float = 0.0,
) -> list[IncentiveAllocation]:
    """One allocation per calendar month for rule.recurrence_count months, numbered 1..N."""
    total = rule.recurrence_count
    return [
        create_allocation(
            rule, employee, month, year,
            installment_number=i,
            total_installments=total,
            fixed_value=fixed_value,
        )
        for i, (month, year) in enumerate(_months_from(start_month, start_year, total), start=1)
    ]


def allocate_for_employees(
    rule: IncentiveRule,
    employees: Iterable[Employee],
    payroll_month: int,
    payroll_year: int,
) -> AllocationBatch:
    """
    Generate allocations for many employees. A formula failure is recorded
    against that employee and the batch carries on with the rest.
    """
    allocations: list[IncentiveAllocation] = []
    errors: list[AllocationFailure] = []

    for employee in employees:
        try:
            allocations.extend(
                generate_recurring_allocations(rule, employee, payroll_month, payroll_year)
            )
        except InvalidFormulaError as exc:
            errors.append(AllocationFailure(
                employee_id=employee.id, rule_id=rule.id, message=str(exc),
            ))

    logger.info(
        "Allocated rule %s v%d for %d/%d: %d allocations, %d failures",
        rule.id, rule.version, payroll_month, payroll_year, len(allocations), len(errors),
    )
    return AllocationBatch(allocations=allocations, errors=errors)
