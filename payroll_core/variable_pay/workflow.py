"""
Allocation approval state machine and incentive rule locking.

    Draft → PendingApproval → Approved

Approved is terminal. Approving an allocation locks the rule version it was
generated from; a locked rule is amended by issuing version + 1, so approved
payouts always point at the exact formula that produced them.

Lock enforcement lives here, in the core, as pure functions returning new
objects. Persisting the returned rule/allocation/log is the caller's job.
Rejection and cancellation are not modelled.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from payroll_core.exceptions import InvalidStatusTransitionError, RuleLockedError
from payroll_core.variable_pay.schemas import (
    AllocationStatus,
    IncentiveAllocation,
    IncentiveApprovalLog,
    IncentiveRule,
    TransitionOutcome,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[AllocationStatus, frozenset[AllocationStatus]] = {
    AllocationStatus.draft:            frozenset({AllocationStatus.pending_approval}),
    AllocationStatus.pending_approval: frozenset({AllocationStatus.approved}),
    AllocationStatus.approved:         frozenset(),
}

_IDENTITY_FIELDS = frozenset({"id", "version", "is_locked"})

# Changing any of these changes what an allocation pays
AMOUNT_FIELDS = frozenset({
    "formula_expression",
    "cap_amount",
    "base_component",
    "recurrence_type",
    "recurrence_count",
})


def ensure_allocation_source(allocation: IncentiveAllocation, rule: IncentiveRule) -> None:
    """Raise RuleLockedError unless `allocation` came from exactly this rule version."""
    if allocation.rule_id != rule.id or allocation.source_rule_version != rule.version:
        raise RuleLockedError(
            f"Allocation {allocation.id} was generated from rule {allocation.rule_id} "
            f"v{allocation.source_rule_version}, not {rule.id} v{rule.version}"
        )


def transition_allocation(
    allocation: IncentiveAllocation,
    new_status: AllocationStatus,
    *,
    actor: str,
    rule: Optional[IncentiveRule] = None,
    comments: Optional[str] = None,
    acted_at: Optional[datetime] = None,
) -> TransitionOutcome:
    """
    Move `allocation` to `new_status`.

    When the new status is Approved and `rule` is given, the returned rule is
    locked (unchanged if it already was).

    Raises:
        InvalidStatusTransitionError: transition not allowed from the current status.
        RuleLockedError: `rule` is not the version the allocation came from.
    """
    current = allocation.status
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(allocation.id, current.value, new_status.value)
    if rule is not None:
        ensure_allocation_source(allocation, rule)

    update: dict[str, Any] = {"status": new_status}
    if acted_at is not None:
        update["updated_at"] = acted_at
    updated = allocation.model_copy(update=update)

    if new_status == AllocationStatus.approved and rule is not None and not rule.is_locked:
        rule = rule.model_copy(update={"is_locked": True})
        logger.info("Rule %s v%d locked by approval of %s", rule.id, rule.version, allocation.id)

    logger.info(
        "Allocation %s %s → %s by %s",
        allocation.id, current.value, new_status.value, actor,
    )
    return TransitionOutcome(
        allocation=updated,
        rule=rule,
        log=IncentiveApprovalLog(
            allocation_id=allocation.id,
            actor=actor,
            acted_at=acted_at,
            status_before=current,
            status_after=new_status,
            comments=comments,
        ),
    )


def amend_rule(rule: IncentiveRule, **changes: Any) -> IncentiveRule:
    """
    Apply `changes` to a rule.

    Locked rule, or a change to any AMOUNT_FIELDS value: a new, unlocked
    version (version + 1). Allocations generated from the previous version
    then no longer match the rule, so they cannot be approved against a
    formula that did not produce them.
    Otherwise (name, category, dates...): an edited copy at the same version.
    """
    forbidden = _IDENTITY_FIELDS & changes.keys()
    if forbidden:
        raise RuleLockedError(f"Cannot amend {', '.join(sorted(forbidden))} of rule {rule.id}")

    # Round-trip through validation so bad values are rejected like on creation
    data = {**rule.model_dump(), **changes}
    amount_changed = sorted(
        name for name in AMOUNT_FIELDS & changes.keys() if changes[name] != getattr(rule, name)
    )
    if rule.is_locked or amount_changed:
        data.update(version=rule.version + 1, is_locked=False)
        logger.info(
            "Rule %s amended as v%d (locked=%s, changed=%s)",
            rule.id, rule.version + 1, rule.is_locked, ", ".join(amount_changed) or "-",
        )
    return IncentiveRule.model_validate(data)
