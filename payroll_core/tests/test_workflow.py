"""
Allocation approval workflow and rule locking tests.
"""
from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from payroll_core.exceptions import InvalidStatusTransitionError, RuleLockedError
from payroll_core.variable_pay.engine import create_allocation
from payroll_core.variable_pay.schemas import AllocationStatus
from payroll_core.variable_pay.workflow import (
    amend_rule,
    ensure_allocation_source,
    transition_allocation,
)

APPROVED_AT = datetime(2024, 4, 25, 11, 30)


@pytest.fixture
def rule(make_rule):
    return make_rule()


@pytest.fixture
def draft(rule, employee):
    return create_allocation(rule, employee, 4, 2024)


@pytest.fixture
def pending(draft):
    return transition_allocation(draft, AllocationStatus.pending_approval, actor="hr-ops").allocation


# ===========================================================================
# State machine
# ===========================================================================

def test_submit_for_approval(draft) -> None:
    outcome = transition_allocation(
        draft, AllocationStatus.pending_approval, actor="hr-ops", comments="Q1 sales",
    )

    assert outcome.allocation.status == AllocationStatus.pending_approval
    assert outcome.rule is None
    assert outcome.log.allocation_id == draft.id
    assert outcome.log.actor == "hr-ops"
    assert outcome.log.status_before == AllocationStatus.draft
    assert outcome.log.status_after == AllocationStatus.pending_approval
    assert outcome.log.comments == "Q1 sales"
    # Input is never mutated
    assert draft.status == AllocationStatus.draft


def test_approve_locks_rule(pending, rule) -> None:
    outcome = transition_allocation(
        pending, AllocationStatus.approved, actor="finance-head", rule=rule, acted_at=APPROVED_AT,
    )

    assert outcome.allocation.status == AllocationStatus.approved
    assert outcome.allocation.updated_at == APPROVED_AT
    assert outcome.log.acted_at == APPROVED_AT
    assert outcome.rule.is_locked is True
    assert outcome.rule.version == rule.version
    assert rule.is_locked is False


def test_approving_with_already_locked_rule(pending, rule) -> None:
    locked = rule.model_copy(update={"is_locked": True})
    outcome = transition_allocation(pending, AllocationStatus.approved, actor="finance-head", rule=locked)
    assert outcome.rule == locked


def test_approve_without_rule_leaves_rule_out(pending) -> None:
    outcome = transition_allocation(pending, AllocationStatus.approved, actor="finance-head")
    assert outcome.allocation.status == AllocationStatus.approved
    assert outcome.rule is None


def test_submission_does_not_lock_rule(draft, rule) -> None:
    outcome = transition_allocation(draft, AllocationStatus.pending_approval, actor="hr-ops", rule=rule)
    assert outcome.rule.is_locked is False


@pytest.mark.parametrize("start, target", [
    (AllocationStatus.draft, AllocationStatus.approved),
    (AllocationStatus.draft, AllocationStatus.draft),
    (AllocationStatus.pending_approval, AllocationStatus.draft),
    (AllocationStatus.pending_approval, AllocationStatus.pending_approval),
    (AllocationStatus.approved, AllocationStatus.draft),
    (AllocationStatus.approved, AllocationStatus.pending_approval),
    (AllocationStatus.approved, AllocationStatus.approved),
])
def test_disallowed_transitions(draft, start, target) -> None:
    allocation = draft.model_copy(update={"status": start})
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        transition_allocation(allocation, target, actor="hr-ops")
    assert exc_info.value.current == start.value
    assert exc_info.value.requested == target.value


# ===========================================================================
# Rule locking + versioning
# ===========================================================================

def test_approval_with_wrong_rule_version_raises(pending, rule) -> None:
    newer = rule.model_copy(update={"version": 2})
    with pytest.raises(RuleLockedError):
        transition_allocation(pending, AllocationStatus.approved, actor="finance-head", rule=newer)


def test_ensure_allocation_source(draft, rule, make_rule) -> None:
    ensure_allocation_source(draft, rule)
    with pytest.raises(RuleLockedError, match="rule-1 v1"):
        ensure_allocation_source(draft, make_rule(id="rule-2"))


def test_amend_unlocked_rule_cosmetic_change_keeps_version(rule) -> None:
    amended = amend_rule(rule, name="Q1 Sales Bonus", effective_to="2025-03-31")
    assert amended.version == 1
    assert amended.name == "Q1 Sales Bonus"
    assert amended.is_locked is False


def test_amend_unchanged_amount_field_keeps_version(rule) -> None:
    amended = amend_rule(rule, formula_expression=rule.formula_expression, recurrence_type="OneTime")
    assert amended.version == 1


@pytest.mark.parametrize("changes", [
    {"formula_expression": "monthlyBasic * 0.12"},
    {"cap_amount": 3_000},
    {"base_component": "CTC"},
    {"recurrence_type": "Monthly", "recurrence_count": 3},
])
def test_amend_unlocked_amount_field_issues_new_version(rule, changes) -> None:
    amended = amend_rule(rule, **changes)
    assert amended.version == 2
    assert amended.is_locked is False
    assert rule.version == 1
    assert rule.formula_expression == "monthlyBasic * 0.1"


def test_pending_allocation_cannot_be_approved_after_formula_change(pending, rule, employee) -> None:
    amended = amend_rule(rule, formula_expression="monthlyBasic * 0.2")

    with pytest.raises(RuleLockedError, match="v1"):
        transition_allocation(pending, AllocationStatus.approved, actor="finance-head", rule=amended)

    # The allocation is regenerated from the new version instead
    regenerated = create_allocation(amended, employee, 4, 2024)
    resubmitted = transition_allocation(
        regenerated, AllocationStatus.pending_approval, actor="hr-ops", rule=amended,
    ).allocation
    outcome = transition_allocation(resubmitted, AllocationStatus.approved, actor="finance-head", rule=amended)
    assert outcome.rule.version == 2
    assert outcome.rule.is_locked is True
    assert outcome.allocation.calculated_amount == pytest.approx(8_000)


def test_amend_locked_rule_issues_new_version(pending, rule, employee) -> None:
    locked = transition_allocation(
        pending, AllocationStatus.approved, actor="finance-head", rule=rule,
    ).rule

    amended = amend_rule(locked, formula_expression="monthlyBasic * 0.2", cap_amount=5_000)

    assert amended.id == locked.id
    assert amended.version == 2
    assert amended.is_locked is False
    assert amended.cap_amount == 5_000
    # The locked version still describes what was paid
    assert locked.version == 1
    assert locked.formula_expression == "monthlyBasic * 0.1"
    assert pending.source_rule_version == 1

    fresh = create_allocation(amended, employee, 5, 2024)
    assert fresh.source_rule_version == 2
    assert fresh.calculated_amount == 5_000


@pytest.mark.parametrize("field", ["id", "version", "is_locked"])
def test_amend_cannot_touch_identity(rule, field) -> None:
    with pytest.raises(RuleLockedError, match=field):
        amend_rule(rule, **{field: 9})


def test_amend_validates_changes(rule) -> None:
    with pytest.raises(ValidationError):
        amend_rule(rule, recurrence_count=0)
