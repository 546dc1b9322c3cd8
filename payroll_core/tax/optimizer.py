"""
Tax Regime Optimizer - runs both regimes on the same facts and recommends one.
Pure functions. No I/O.

Suggestions come from a fixed, ordered set of rules (_SUGGESTION_RULES). Each
rule looks at the comparison and the declared investments and returns at most
one Suggestion; output order is rule declaration order.

Potential savings for 80C / NPS / 80D tips use a flat 30% rate
(FLAT_SAVING_RATE). That is a deliberate simplification: it is the top-slab
rate, not the employee's true marginal rate, so it overstates the saving for
anyone below the 30% slab.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from payroll_core.numbers import format_inr, format_lakhs
from payroll_core.tax.schemas import (
    NewRegimeSummary,
    OldRegimeSummary,
    OptimizerInput,
    OptimizerResult,
    Suggestion,
    SuggestionType,
    TaxCalculationResult,
    TaxRegime,
    TaxSettings,
    YearlyTaxConfig,
)
from payroll_core.tax.tax_engine import (
    CAP_80CCD1B,
    CAP_80D,
    calculate_new_regime_tax,
    calculate_old_regime_tax,
    get_tax_config,
)

logger = logging.getLogger(__name__)

FLAT_SAVING_RATE          = 0.30
MIN_80C_HEADROOM          = 10_000      # Only suggest 80C when more than this is unused
HIGH_INCOME_THRESHOLD     = 1_500_000
HRA_RENT_BASIC_PCT        = 0.10


@dataclass(frozen=True)
class _Comparison:
    """Everything a suggestion rule may inspect."""
    facts: OptimizerInput
    config: YearlyTaxConfig
    old: TaxCalculationResult
    new: TaxCalculationResult
    recommendation: TaxRegime


SuggestionRule = Callable[[_Comparison], Optional[Suggestion]]


# ===========================================================================
# SUGGESTION RULES (declaration order == output order)
# ===========================================================================

def suggest_recommendation(c: _Comparison) -> Optional[Suggestion]:
    """Rule 1: explain the headline recommendation and the saving."""
    if c.recommendation == TaxRegime.new:
        return Suggestion(
            type=SuggestionType.info,
            title="New Regime Recommended",
            description=(
                f"You'll save ₹{format_inr(c.old.total_tax - c.new.total_tax)} "
                "by choosing the New Tax Regime."
            ),
        )
    return Suggestion(
        type=SuggestionType.info,
        title="Old Regime Recommended",
        description=(
            f"You'll save ₹{format_inr(c.new.total_tax - c.old.total_tax)} "
            "by choosing the Old Tax Regime with deductions."
        ),
    )


def suggest_rebate(c: _Comparison) -> Optional[Suggestion]:
    """Rule 2: new regime recommended and the 87A rebate zeroed the tax."""
    if c.recommendation != TaxRegime.new or not c.new.rebate_applied:
        return None
    return Suggestion(
        type=SuggestionType.info,
        title="Section 87A Rebate Applied",
        description=(
            f"Your taxable income is ≤ ₹{format_lakhs(c.config.section_87a_rebate_limit)}L, "
            "so you pay zero tax under New Regime!"
        ),
    )


def suggest_80c(c: _Comparison) -> Optional[Suggestion]:
    """Rule 3: more than ₹10,000 of 80C headroom left (old regime only)."""
    if c.recommendation != TaxRegime.old:
        return None
    shortfall = c.config.section_80c_limit - c.facts.investments.section_80c
    if shortfall <= MIN_80C_HEADROOM:
        return None
    potential_saving = shortfall * FLAT_SAVING_RATE
    return Suggestion(
        type=SuggestionType.tip,
        title="Maximize 80C Deductions",
        description=(
            f"You can invest ₹{format_inr(shortfall)} more in 80C instruments (PPF, ELSS, etc.) "
            f"to save up to ₹{format_inr(potential_saving)} in taxes."
        ),
        potential_saving=potential_saving,
    )


def suggest_hra(c: _Comparison) -> Optional[Suggestion]:
    """Rule 4: rent too low for a useful HRA exemption, or HRA with no rent declared."""
    if c.recommendation != TaxRegime.old:
        return None
    facts = c.facts
    if facts.rent_paid > 0:
        annual_rent = facts.rent_paid * 12
        ten_percent_basic = facts.basic_salary * 12 * HRA_RENT_BASIC_PCT
        if annual_rent < ten_percent_basic:
            return Suggestion(
                type=SuggestionType.warning,
                title="Low Rent Claimed",
                description=(
                    f"Your annual rent (₹{format_inr(annual_rent)}) is less than 10% of basic "
                    "salary. HRA exemption might be minimal."
                ),
            )
        return None
    if facts.hra > 0:
        return Suggestion(
            type=SuggestionType.warning,
            title="Declare Rent for HRA Exemption",
            description=(
                "You receive HRA but haven't declared rent. Submit rent receipts to claim "
                "HRA exemption and save taxes."
            ),
        )
    return None


def suggest_nps(c: _Comparison) -> Optional[Suggestion]:
    """Rule 5: unused 80CCD(1B) NPS headroom (old regime only)."""
    if c.recommendation != TaxRegime.old:
        return None
    current = c.facts.investments.nps_80ccd1b
    if current >= CAP_80CCD1B:
        return None
    shortfall = CAP_80CCD1B - current
    potential_saving = shortfall * FLAT_SAVING_RATE
    return Suggestion(
        type=SuggestionType.tip,
        title="Additional NPS Contribution",
        description=(
            f"Invest ₹{format_inr(shortfall)} in NPS Tier-1 under Section 80CCD(1B) "
            f"to save ₹{format_inr(potential_saving)}."
        ),
        potential_saving=potential_saving,
    )


def suggest_80d(c: _Comparison) -> Optional[Suggestion]:
    """Rule 6: unused 80D health-insurance headroom (old regime only)."""
    if c.recommendation != TaxRegime.old:
        return None
    current = c.facts.investments.section_80d
    if current >= CAP_80D:
        return None
    shortfall = CAP_80D - current
    potential_saving = shortfall * FLAT_SAVING_RATE
    return Suggestion(
        type=SuggestionType.tip,
        title="Health Insurance Premium",
        description=(
            f"Pay ₹{format_inr(shortfall)} more for health insurance to claim 80D deduction "
            f"and save ₹{format_inr(potential_saving)}."
        ),
        potential_saving=potential_saving,
    )


def suggest_high_income(c: _Comparison) -> Optional[Suggestion]:
    """Rule 7: high earner on the new regime."""
    if c.recommendation != TaxRegime.new or c.facts.gross_income <= HIGH_INCOME_THRESHOLD:
        return None
    return Suggestion(
        type=SuggestionType.info,
        title="New Regime Beneficial for High Income",
        description=(
            "The New Regime often benefits high earners without long-term investments "
            "due to lower slab rates."
        ),
    )


_SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    suggest_recommendation,
    suggest_rebate,
    suggest_80c,
    suggest_hra,
    suggest_nps,
    suggest_80d,
    suggest_high_income,
)


def generate_suggestions(comparison: _Comparison) -> list[Suggestion]:
    suggestions = []
    for rule in _SUGGESTION_RULES:
        suggestion = rule(comparison)
        if suggestion is not None:
            suggestions.append(suggestion)
    return suggestions


# ===========================================================================
# COMPARE REGIMES - public API
# ===========================================================================

def optimize_tax_regime(facts: OptimizerInput, tax_settings: TaxSettings) -> OptimizerResult:
    """
    Compare old and new regime tax for the same financial facts.

    Ties go to the OLD regime: its deductions are already declared and
    evidenced, which is what an audit looks at.
    """
    config = get_tax_config(tax_settings, facts.fiscal_year)

    old = calculate_old_regime_tax(facts.for_regime(TaxRegime.old), tax_settings)
    new = calculate_new_regime_tax(facts.gross_income, tax_settings, facts.fiscal_year)

    recommendation = TaxRegime.old if old.total_tax <= new.total_tax else TaxRegime.new
    savings_amount = abs(old.total_tax - new.total_tax)
    higher_tax = max(old.total_tax, new.total_tax)
    savings_percentage = savings_amount / higher_tax * 100 if higher_tax > 0 else 0.0

    comparison = _Comparison(
        facts=facts, config=config, old=old, new=new, recommendation=recommendation,
    )
    suggestions = generate_suggestions(comparison)

    logger.debug(
        "Regime comparison FY%s: old=%.2f new=%.2f → %s (%d suggestions)",
        config.fiscal_year, old.total_tax, new.total_tax, recommendation.value, len(suggestions),
    )
    return OptimizerResult(
        fiscal_year=config.fiscal_year,
        old_regime=OldRegimeSummary(
            taxable_income=old.taxable_income,
            tax_payable=old.tax_payable,
            cess=old.cess,
            total_tax=old.total_tax,
            monthly_tds=old.monthly_tds,
            deductions_applied=old.deductions,
        ),
        new_regime=NewRegimeSummary(
            taxable_income=new.taxable_income,
            tax_payable=new.tax_payable,
            cess=new.cess,
            total_tax=new.total_tax,
            monthly_tds=new.monthly_tds,
            rebate_applied=new.rebate_applied,
        ),
        recommendation=recommendation,
        savings_amount=savings_amount,
        savings_percentage=savings_percentage,
        suggestions=suggestions,
    )
