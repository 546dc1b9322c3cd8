"""
exceptions.py - typed business errors.

Everything derives from ValueError so callers that already treat bad business
input as ValueError keep working; the subclasses carry the detail a UI needs
(rule name, expression text, offending status) to render an actionable message.
"""
from __future__ import annotations

from typing import Optional


class PayrollError(ValueError):
    """Base class for payroll calculation errors."""


class FormulaSyntaxError(PayrollError):
    """A formula expression could not be tokenized, parsed or evaluated."""

    def __init__(self, message: str, expression: str, position: Optional[int] = None) -> None:
        self.expression = expression
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"{message}{where} in {expression!r}")


class InvalidFormulaError(PayrollError):
    """An incentive rule's formula failed to produce a finite amount."""

    def __init__(self, rule_id: str, rule_name: str, expression: str, reason: str) -> None:
        self.rule_id = rule_id
        self.rule_name = rule_name
        self.expression = expression
        self.reason = reason
        super().__init__(
            f"Invalid formula expression for rule {rule_name!r} ({rule_id}): "
            f"{expression!r} - {reason}"
        )


class InvalidStatusTransitionError(PayrollError):
    """An allocation status change not permitted by the approval state machine."""

    def __init__(self, allocation_id: str, current: str, requested: str) -> None:
        self.allocation_id = allocation_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Allocation {allocation_id}: cannot move from {current} to {requested}"
        )


class RuleLockedError(PayrollError):
    """A locked incentive rule version was edited in place or mismatched."""


class SettlementStateError(PayrollError):
    """A settlement status change not permitted (e.g. finalizing twice)."""


__all__ = [
    "PayrollError",
    "FormulaSyntaxError",
    "InvalidFormulaError",
    "InvalidStatusTransitionError",
    "RuleLockedError",
    "SettlementStateError",
]
