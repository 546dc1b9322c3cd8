"""
schemas.py - variable pay data contracts (pydantic v2).

Defines:
  - IncentiveCategory, BaseComponent, RecurrenceType, TaxTreatmentType, AllocationStatus
  - IncentiveRule        (versioned formula definition)
  - Employee             (the compensation facts the engine reads)
  - FormulaContext       (variables a formula may reference)
  - IncentiveAllocation  (one computed payout, one employee, one payroll month)
  - IncentiveApprovalLog, TransitionOutcome  (approval workflow audit)
  - AllocationFailure, AllocationBatch  (batch generation report)
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class IncentiveCategory(str, Enum):
    sales = "Sales"
    retention = "Retention"
    performance = "Performance"
    adhoc = "Adhoc"


class BaseComponent(str, Enum):
    ctc = "CTC"
    basic = "Basic"
    fixed = "Fixed"


class RecurrenceType(str, Enum):
    one_time = "OneTime"
    monthly = "Monthly"
    quarterly = "Quarterly"


class TaxTreatmentType(str, Enum):
    fully_taxable = "FullyTaxable"
    partially_taxable = "PartiallyTaxable"
    exempt = "Exempt"


class AllocationStatus(str, Enum):
    draft = "Draft"
    pending_approval = "PendingApproval"
    approved = "Approved"


# ---------------------------------------------------------------------------
# Rule + employee
# ---------------------------------------------------------------------------

class IncentiveRule(BaseModel):
    """
    A named, versioned formula. Once an allocation generated from a version is
    approved the version is locked: later changes produce version + 1
    (see workflow.amend_rule), never an in-place edit.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    category: IncentiveCategory = IncentiveCategory.adhoc
    formula_expression: str             # e.g. "monthlyBasic * 0.1"
    base_component: BaseComponent = BaseComponent.basic
    cap_amount: Optional[float] = None
    recurrence_type: RecurrenceType = RecurrenceType.one_time
    recurrence_count: int = Field(default=1, ge=1)
    tax_treatment_type: TaxTreatmentType = TaxTreatmentType.fully_taxable
    pf_applicable: bool = False
    esi_applicable: bool = False
    effective_from: str
    effective_to: Optional[str] = None
    version: int = Field(default=1, ge=1)
    created_by: Optional[str] = None
    is_locked: bool = False


class Employee(BaseModel):
    """The slice of the employee record the variable-pay engine needs."""
    model_config = ConfigDict(extra="ignore")

    id: str
    annual_ctc: float = Field(..., ge=0)
    department: Optional[str] = None


class FormulaContext(BaseModel):
    """
    Variables exposed to formulas, under the names formulas use.

    monthly_basic is annual_ctc × basic_to_ctc_ratio / 12, an assumed ratio,
    NOT the employee's configured salary structure.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    monthly_basic: float
    monthly_ctc: float
    fixed_value: float = 0

    def as_variables(self) -> dict[str, float]:
        return {
            "monthlyBasic": self.monthly_basic,
            "monthlyCTC": self.monthly_ctc,
            "fixedValue": self.fixed_value,
        }


# ---------------------------------------------------------------------------
# Allocation + workflow
# ---------------------------------------------------------------------------

class IncentiveAllocation(BaseModel):
    """
    Created in Draft by the engine and never recomputed afterwards; a
    correction is a new allocation. is_recovery marks negative amounts (clawbacks).
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    rule_id: str
    employee_id: str
    department_id: Optional[str] = None
    calculated_amount: float
    payroll_month: int = Field(..., ge=1, le=12)
    payroll_year: int
    status: AllocationStatus = AllocationStatus.draft
    is_recovery: bool
    source_rule_version: int
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IncentiveApprovalLog(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    allocation_id: str
    actor: str
    acted_at: Optional[datetime] = None
    status_before: AllocationStatus
    status_after: AllocationStatus
    comments: Optional[str] = None


class TransitionOutcome(BaseModel):
    """Updated allocation, the (possibly newly locked) rule, and the audit entry."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    allocation: IncentiveAllocation
    rule: Optional[IncentiveRule] = None
    log: IncentiveApprovalLog


class AllocationFailure(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_id: str
    rule_id: str
    message: str


class AllocationBatch(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    allocations: List[IncentiveAllocation] = Field(default_factory=list)
    errors: List[AllocationFailure] = Field(default_factory=list)


__all__ = [
    "IncentiveCategory",
    "BaseComponent",
    "RecurrenceType",
    "TaxTreatmentType",
    "AllocationStatus",
    "IncentiveRule",
    "Employee",
    "FormulaContext",
    "IncentiveAllocation",
    "IncentiveApprovalLog",
    "TransitionOutcome",
    "AllocationFailure",
    "AllocationBatch",
]
