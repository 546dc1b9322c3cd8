"""
Tax Calculation Engine - old and new regime income tax for one employee, one fiscal year.
Pure Python, deterministic. Same input → same output.

All rates, limits and slabs come from the TaxSettings passed in; the only
values fixed here are the statutory ceilings the configuration does not carry
(80D, 80CCD(1B), 24(b)).
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from payroll_core.numbers import format_lakhs, round_half_up
from payroll_core.tax.schemas import (
    UNBOUNDED_INCOME,
    SlabBreakdownRow,
    TaxCalculationInput,
    TaxCalculationResult,
    TaxRegime,
    TaxSettings,
    TaxSlab,
    YearlyTaxConfig,
)

logger = logging.getLogger(__name__)

# ===========================================================================
# DEDUCTION CAP CONSTANTS (not part of YearlyTaxConfig)
# ===========================================================================

# 80D is the non-senior ceiling regardless of age; senior citizens statutorily
# get ₹50,000. Known simplification, kept as-is.
CAP_80D       = 25_000
CAP_80CCD1B   = 50_000     # Additional NPS, old regime only
CAP_24B       = 200_000    # Self-occupied home loan interest, old regime only

HRA_RENT_BASIC_PCT = 0.10  # Rent in excess of 10% of basic
HRA_METRO_PCT      = 0.50
HRA_NON_METRO_PCT  = 0.40


# ===========================================================================
# CONFIGURATION LOOKUP
# ===========================================================================

def get_tax_config(tax_settings: TaxSettings, fiscal_year: Optional[str] = None) -> YearlyTaxConfig:
    """
    Resolve the YearlyTaxConfig for `fiscal_year` (default: the active year).

    An unknown year falls back to the first configured year rather than
    failing, so payroll can still run; the fallback is logged as a warning.
    """
    target = fiscal_year or tax_settings.active_fiscal_year
    for config in tax_settings.yearly_configs:
        if config.fiscal_year == target:
            return config
    fallback = tax_settings.yearly_configs[0]
    logger.warning(
        "No tax configuration for fiscal year %s; falling back to %s",
        target, fallback.fiscal_year,
    )
    return fallback


# ===========================================================================
# INTERNAL HELPERS (pure functions, no side effects, no I/O)
# ===========================================================================

def calculate_hra_exemption(
    annual_hra: float,
    annual_basic: float,
    annual_rent: float,
    is_metro: bool,
) -> float:
    """
    HRA exemption, Section 10(13A) / Rule 2A, on ANNUAL figures.

    Minimum of:
      1. HRA actually received
      2. Rent paid minus 10% of basic
      3. 50% of basic (metro) or 40% (non-metro)
    Floored at 0. Returns 0 when no rent is paid.
    """
    if annual_rent <= 0:
        return 0.0
    component_1 = annual_hra
    component_2 = annual_rent - HRA_RENT_BASIC_PCT * annual_basic
    component_3 = (HRA_METRO_PCT if is_metro else HRA_NON_METRO_PCT) * annual_basic
    return max(0.0, min(component_1, component_2, component_3))


def _slab_label(slab: TaxSlab) -> str:
    upper = "∞" if slab.max_income >= UNBOUNDED_INCOME else f"₹{format_lakhs(slab.max_income)}L"
    return f"₹{format_lakhs(slab.min_income)}L - {upper}"


def calculate_slab_tax(
    taxable_income: float,
    slabs: list[TaxSlab],
) -> tuple[float, list[SlabBreakdownRow]]:
    """
    Progressive slab-wise tax over slabs sorted ascending by min_income.

    Each slab's tax is rounded on its own before summing; rounding once at
    the end gives different totals and does not reconcile with issued payslips.
    """
    tax_payable = 0.0
    breakdown: list[SlabBreakdownRow] = []

    for slab in slabs:
        if taxable_income <= slab.min_income:
            break

        applicable = min(
            taxable_income - slab.min_income,
            slab.max_income - slab.min_income,
        )
        if applicable > 0:
            slab_tax = round_half_up(applicable * slab.tax_rate_percent / 100)
            tax_payable += slab_tax
            breakdown.append(SlabBreakdownRow(
                slab=_slab_label(slab),
                income=applicable,
                rate=slab.tax_rate_percent,
                tax=slab_tax,
            ))

        if taxable_income <= slab.max_income:
            break

    return tax_payable, breakdown


def _cess(tax: float, config: YearlyTaxConfig) -> float:
    return round_half_up(tax * config.cess_rate_percent / 100)


# ===========================================================================
# NEW REGIME CALCULATOR
# ===========================================================================

def calculate_new_regime_tax(
    gross_income: float,
    tax_settings: TaxSettings,
    fiscal_year: Optional[str] = None,
) -> TaxCalculationResult:
    """
    New regime (Section 115BAC): standard deduction only.

    87A: if taxable income <= section_87a_rebate_limit the whole pre-cess tax
    is waived (full rebate, not a partial credit).
    """
    config = get_tax_config(tax_settings, fiscal_year)

    standard_deduction = config.standard_deduction
    taxable_income = max(0.0, gross_income - standard_deduction)

    slab_tax, breakdown = calculate_slab_tax(taxable_income, config.slabs_for(TaxRegime.new))

    rebate_applied = taxable_income <= config.section_87a_rebate_limit
    final_tax = 0.0 if rebate_applied else slab_tax

    cess = _cess(final_tax, config)
    total_tax = final_tax + cess

    logger.debug(
        "New regime FY%s: taxable=%.2f tax=%.2f rebate=%s total=%.2f",
        config.fiscal_year, taxable_income, final_tax, rebate_applied, total_tax,
    )
    return TaxCalculationResult(
        regime=TaxRegime.new,
        fiscal_year=config.fiscal_year,
        gross_income=gross_income,
        deductions={"standard_deduction": standard_deduction},
        taxable_income=taxable_income,
        tax_payable=final_tax,
        cess=cess,
        total_tax=total_tax,
        monthly_tds=total_tax / 12,
        rebate_applied=rebate_applied,
        slab_breakdown=breakdown,
    )


# ===========================================================================
# OLD REGIME CALCULATOR
# ===========================================================================

def calculate_old_regime_tax(
    tax_input: TaxCalculationInput,
    tax_settings: TaxSettings,
) -> TaxCalculationResult:
    """
    Old regime with itemised deductions: standard deduction, HRA (Rule 2A,
    capped at hra_exemption_limit), 80C, 80D, 80CCD(1B), 24(b).
    No 87A rebate path.
    """
    config = get_tax_config(tax_settings, tax_input.fiscal_year)
    investments = tax_input.investments

    # Step 1: Deductions, each capped independently
    deductions: dict[str, float] = {}
    deductions["standard_deduction"] = config.standard_deduction

    if tax_input.rent_paid > 0:
        deductions["hra_exemption"] = min(
            calculate_hra_exemption(
                annual_hra=tax_input.hra * 12,
                annual_basic=tax_input.basic_salary * 12,
                annual_rent=tax_input.rent_paid * 12,
                is_metro=tax_input.is_metro,
            ),
            config.hra_exemption_limit,
        )
    else:
        deductions["hra_exemption"] = 0.0

    deductions["section_80c"]        = max(0.0, min(investments.section_80c, config.section_80c_limit))
    deductions["section_80d"]        = max(0.0, min(investments.section_80d, CAP_80D))
    deductions["nps_80ccd1b"]        = max(0.0, min(investments.nps_80ccd1b, CAP_80CCD1B))
    deductions["home_loan_interest"] = max(0.0, min(investments.home_loan_interest, CAP_24B))

    # Step 2: Taxable income (never negative)
    taxable_income = max(0.0, tax_input.gross_income - sum(deductions.values()))

    # Step 3: Slab tax
    slab_tax, breakdown = calculate_slab_tax(taxable_income, config.slabs_for(TaxRegime.old))

    # Step 4: Cess + total
    cess = _cess(slab_tax, config)
    total_tax = slab_tax + cess

    logger.debug(
        "Old regime FY%s: deductions=%.2f taxable=%.2f total=%.2f",
        config.fiscal_year, sum(deductions.values()), taxable_income, total_tax,
    )
    return TaxCalculationResult(
        regime=TaxRegime.old,
        fiscal_year=config.fiscal_year,
        gross_income=tax_input.gross_income,
        deductions=deductions,
        taxable_income=taxable_income,
        tax_payable=slab_tax,
        cess=cess,
        total_tax=total_tax,
        monthly_tds=total_tax / 12,
        rebate_applied=False,
        slab_breakdown=breakdown,
    )


# ===========================================================================
# PUBLIC API
# ===========================================================================

def calculate_employee_tax(
    tax_input: TaxCalculationInput,
    tax_settings: TaxSettings,
) -> TaxCalculationResult:
    """Calculate tax under the regime the employee selected."""
    if tax_input.regime == TaxRegime.new:
        return calculate_new_regime_tax(tax_input.gross_income, tax_settings, tax_input.fiscal_year)
    return calculate_old_regime_tax(tax_input, tax_settings)


def calculate_tax_for_employees(
    inputs: Mapping[str, TaxCalculationInput],
    tax_settings: TaxSettings,
) -> dict[str, TaxCalculationResult]:
    """
    Calculate tax for many employees keyed by employee id.

    Each employee is an independent unit of work with no shared state, so
    callers are free to split `inputs` across workers. Output order follows
    input order.
    """
    results = {
        employee_id: calculate_employee_tax(tax_input, tax_settings)
        for employee_id, tax_input in inputs.items()
    }
    logger.info("Calculated tax for %d employees", len(results))
    return results
