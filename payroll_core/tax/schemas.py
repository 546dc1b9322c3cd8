"""
schemas.py - tax calculator and regime optimizer data contracts (pydantic v2).

Defines:
  - TaxRegime, SuggestionType  enums
  - TaxSlab, YearlyTaxConfig, TaxSettings  (versioned slab configuration)
  - InvestmentDeclarations, TaxCalculationInput, OptimizerInput  (per-call inputs)
  - SlabBreakdownRow, TaxCalculationResult  (calculator output)
  - OldRegimeSummary, NewRegimeSummary, Suggestion, OptimizerResult  (optimizer output)

Salary inputs (basic_salary, hra, rent_paid) are MONTHLY figures; the
calculator annualises them (×12) for the HRA exemption. gross_income is ANNUAL.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaxRegime(str, Enum):
    old = "old"
    new = "new"


class SuggestionType(str, Enum):
    info = "info"
    warning = "warning"
    tip = "tip"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Top slab's max_income sentinel ("no upper bound")
UNBOUNDED_INCOME = 99_999_999


class TaxSlab(BaseModel):
    """One income bracket taxed at a fixed marginal rate (percent)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = None
    regime: TaxRegime
    fiscal_year: str
    min_income: float = Field(..., ge=0)
    max_income: float
    tax_rate_percent: float = Field(..., ge=0, le=100)


class YearlyTaxConfig(BaseModel):
    """
    One fiscal year's full rule set. Looked up by fiscal_year, never mutated by
    the calculator.

    Slabs for each regime must be contiguous and non-overlapping once sorted
    by min_income. Both boundary conventions are accepted: the next slab may
    start at the previous max_income or one rupee above it (300000 / 300001).
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: str
    standard_deduction: float = Field(..., ge=0)
    section_80c_limit: float = Field(..., ge=0)
    hra_exemption_limit: float = Field(..., ge=0)
    section_87a_rebate_limit: float = Field(..., ge=0)
    cess_rate_percent: float = Field(default=4, ge=0, le=100)
    slabs: List[TaxSlab] = Field(default_factory=list)

    @model_validator(mode="after")
    def _slabs_are_contiguous(self) -> "YearlyTaxConfig":
        for regime in TaxRegime:
            ordered = sorted(
                (s for s in self.slabs if s.regime == regime and s.fiscal_year == self.fiscal_year),
                key=lambda s: s.min_income,
            )
            for slab in ordered:
                if slab.max_income < slab.min_income:
                    raise ValueError(
                        f"{regime.value} regime slab {slab.min_income:,.0f} has "
                        f"max_income {slab.max_income:,.0f} below its min_income"
                    )
            for prev, nxt in zip(ordered, ordered[1:]):
                if not prev.max_income <= nxt.min_income <= prev.max_income + 1:
                    raise ValueError(
                        f"{regime.value} regime slabs for {self.fiscal_year} are not contiguous: "
                        f"{prev.min_income:,.0f}-{prev.max_income:,.0f} followed by "
                        f"{nxt.min_income:,.0f}-{nxt.max_income:,.0f}"
                    )
        return self

    def slabs_for(self, regime: TaxRegime) -> List[TaxSlab]:
        """Slabs of one regime for this fiscal year, ascending by min_income."""
        return sorted(
            (s for s in self.slabs if s.regime == regime and s.fiscal_year == self.fiscal_year),
            key=lambda s: s.min_income,
        )


class TaxSettings(BaseModel):
    """Versioned configuration root: every configured fiscal year plus the active one."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    active_fiscal_year: str
    yearly_configs: List[YearlyTaxConfig] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Per-call inputs
# ---------------------------------------------------------------------------

class InvestmentDeclarations(BaseModel):
    """Annual declared investments. Caps are applied by the calculator, not here."""
    model_config = ConfigDict(extra="forbid")

    section_80c: float = 0          # PPF, ELSS, LIC... capped at config.section_80c_limit
    section_80d: float = 0          # Health insurance, capped at ₹25,000
    nps_80ccd1b: float = 0          # Additional NPS, capped at ₹50,000
    home_loan_interest: float = 0   # Section 24(b), capped at ₹2,00,000


class TaxCalculationInput(BaseModel):
    """
    Financial facts for one employee for one fiscal year.

    Negative or absurd gross_income is accepted on purpose: the calculator
    clamps taxable income at zero so a payslip can always be produced.
    """
    model_config = ConfigDict(extra="forbid")

    gross_income: float                 # Annual
    regime: TaxRegime
    basic_salary: float = Field(default=0, ge=0)    # Monthly
    hra: float = Field(default=0, ge=0)             # Monthly HRA received
    rent_paid: float = Field(default=0, ge=0)       # Monthly rent paid
    is_metro: bool = False
    investments: InvestmentDeclarations = Field(default_factory=InvestmentDeclarations)
    fiscal_year: Optional[str] = None   # Overrides TaxSettings.active_fiscal_year


class OptimizerInput(BaseModel):
    """Same financial facts as TaxCalculationInput, without a chosen regime."""
    model_config = ConfigDict(extra="forbid")

    gross_income: float
    basic_salary: float = Field(default=0, ge=0)
    hra: float = Field(default=0, ge=0)
    rent_paid: float = Field(default=0, ge=0)
    is_metro: bool = False
    investments: InvestmentDeclarations = Field(default_factory=InvestmentDeclarations)
    fiscal_year: Optional[str] = None

    def for_regime(self, regime: TaxRegime) -> TaxCalculationInput:
        return TaxCalculationInput(regime=regime, **self.model_dump())


# ---------------------------------------------------------------------------
# Calculator output
# ---------------------------------------------------------------------------

class SlabBreakdownRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    slab: str           # Display label, e.g. "₹3.0L - ₹6.0L"
    income: float       # Income taxed inside this slab
    rate: float         # Percent
    tax: float          # Rounded independently per slab


class TaxCalculationResult(BaseModel):
    """
    Fully derived result of one regime calculation.

    Computation sequence:
      1. taxable_income = max(0, gross_income - sum(deductions))
      2. tax_payable    = sum of per-slab rounded tax (0 if 87A rebate applied)
      3. cess           = round(tax_payable × cess_rate / 100)
      4. total_tax      = tax_payable + cess
      5. monthly_tds    = total_tax / 12   (not rounded, informational)
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    regime: TaxRegime
    fiscal_year: str
    gross_income: float
    deductions: Dict[str, float]
    taxable_income: float
    tax_payable: float
    cess: float
    total_tax: float
    monthly_tds: float
    rebate_applied: bool
    slab_breakdown: List[SlabBreakdownRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Optimizer output
# ---------------------------------------------------------------------------

class OldRegimeSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    taxable_income: float
    tax_payable: float
    cess: float
    total_tax: float
    monthly_tds: float
    deductions_applied: Dict[str, float]


class NewRegimeSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    taxable_income: float
    tax_payable: float
    cess: float
    total_tax: float
    monthly_tds: float
    rebate_applied: bool


class Suggestion(BaseModel):
    """One rule-generated recommendation. potential_saving is only set for tips."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: SuggestionType
    title: str
    description: str
    potential_saving: Optional[float] = None


class OptimizerResult(BaseModel):
    """
    Output of optimize_tax_regime().

    recommendation: "old" when old total <= new total (ties favour old).
    savings_percentage is relative to the HIGHER of the two totals, 0 when both are 0.
    suggestions are in rule declaration order.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    fiscal_year: str
    old_regime: OldRegimeSummary
    new_regime: NewRegimeSummary
    recommendation: TaxRegime
    savings_amount: float
    savings_percentage: float
    suggestions: List[Suggestion] = Field(default_factory=list)


__all__ = [
    "UNBOUNDED_INCOME",
    "TaxRegime",
    "SuggestionType",
    "TaxSlab",
    "YearlyTaxConfig",
    "TaxSettings",
    "InvestmentDeclarations",
    "TaxCalculationInput",
    "OptimizerInput",
    "SlabBreakdownRow",
    "TaxCalculationResult",
    "OldRegimeSummary",
    "NewRegimeSummary",
    "Suggestion",
    "OptimizerResult",
]
