"""
Shared fixtures for payroll_core tests.

FY 2024-25 is the default configuration (new-regime 3L/6L/9L/12L/15L slabs,
₹50K standard deduction, ₹7L 87A limit). FY 2025-26 (Budget 2025: 4L/8L/12L/
16L/20L/24L slabs, ₹75K standard deduction, ₹12L 87A limit) is used to check
fiscal-year resolution.
"""
from __future__ import annotations

import pytest

from payroll_core.tax.defaults import default_tax_settings, default_yearly_config_2024_25
from payroll_core.tax.schemas import (
    UNBOUNDED_INCOME, TaxRegime, TaxSettings, TaxSlab, YearlyTaxConfig,
)
from payroll_core.variable_pay.schemas import Employee, IncentiveRule


def _slabs(fiscal_year: str, regime: TaxRegime, rows: list[tuple[float, float, float]]) -> list[TaxSlab]:
    return [
        TaxSlab(regime=regime, fiscal_year=fiscal_year, min_income=lo, max_income=hi, tax_rate_percent=rate)
        for lo, hi, rate in rows
    ]


@pytest.fixture
def tax_settings() -> TaxSettings:
    return default_tax_settings()


@pytest.fixture
def config_2025_26() -> YearlyTaxConfig:
    fy = "2025-26"
    return YearlyTaxConfig(
        fiscal_year=fy,
        standard_deduction=75_000,
        section_80c_limit=150_000,
        hra_exemption_limit=100_000,
        section_87a_rebate_limit=1_200_000,
        cess_rate_percent=4,
        slabs=_slabs(fy, TaxRegime.new, [
            (0,         400_000,          0),
            (400_001,   800_000,          5),
            (800_001,   1_200_000,        10),
            (1_200_001, 1_600_000,        15),
            (1_600_001, 2_000_000,        20),
            (2_000_001, 2_400_000,        25),
            (2_400_001, UNBOUNDED_INCOME, 30),
        ]) + _slabs(fy, TaxRegime.old, [
            (0,         250_000,          0),
            (250_001,   500_000,          5),
            (500_001,   1_000_000,        20),
            (1_000_001, UNBOUNDED_INCOME, 30),
        ]),
    )


@pytest.fixture
def multi_year_settings(config_2025_26: YearlyTaxConfig) -> TaxSettings:
    return TaxSettings(
        active_fiscal_year="2024-25",
        yearly_configs=[default_yearly_config_2024_25(), config_2025_26],
    )


@pytest.fixture
def employee() -> Employee:
    # monthlyBasic = 12,00,000 × 0.4 / 12 = 40,000; monthlyCTC = 1,00,000
    return Employee(id="emp-1", annual_ctc=1_200_000, department="Engineering")


@pytest.fixture
def make_rule():
    def _make(formula: str = "monthlyBasic * 0.1", **overrides) -> IncentiveRule:
        data = dict(
            id="rule-1",
            name="Quarterly Sales Bonus",
            category="Sales",
            formula_expression=formula,
            effective_from="2024-04-01",
        )
        data.update(overrides)
        return IncentiveRule(**data)
    return _make
