"""
Default tax configuration - FY 2024-25 (Budget 2023 new-regime slabs).

Slab minimums use the "+1 rupee" convention (3L-6L is stored as 300001-600000);
the top slab is open-ended via UNBOUNDED_INCOME.
"""
from __future__ import annotations

from payroll_core.tax.schemas import (
    UNBOUNDED_INCOME, TaxRegime, TaxSettings, TaxSlab, YearlyTaxConfig,
)

FY_2024_25 = "2024-25"

# (min_income, max_income, rate_percent)
NEW_REGIME_SLABS_2024_25: list[tuple[float, float, float]] = [
    (0,         300_000,          0),
    (300_001,   600_000,          5),
    (600_001,   900_000,          10),
    (900_001,   1_200_000,        15),
    (1_200_001, 1_500_000,        20),
    (1_500_001, UNBOUNDED_INCOME, 30),
]

OLD_REGIME_SLABS_2024_25: list[tuple[float, float, float]] = [
    (0,         250_000,          0),
    (250_001,   500_000,          5),
    (500_001,   1_000_000,        20),
    (1_000_001, UNBOUNDED_INCOME, 30),
]


def _build_slabs(
    fiscal_year: str,
    regime: TaxRegime,
    rows: list[tuple[float, float, float]],
    id_offset: int = 0,
) -> list[TaxSlab]:
    return [
        TaxSlab(
            id=f"tax-{id_offset + i}",
            regime=regime,
            fiscal_year=fiscal_year,
            min_income=lo,
            max_income=hi,
            tax_rate_percent=rate,
        )
        for i, (lo, hi, rate) in enumerate(rows, start=1)
    ]


def default_yearly_config_2024_25() -> YearlyTaxConfig:
    new = _build_slabs(FY_2024_25, TaxRegime.new, NEW_REGIME_SLABS_2024_25)
    old = _build_slabs(FY_2024_25, TaxRegime.old, OLD_REGIME_SLABS_2024_25, id_offset=len(new))
    return YearlyTaxConfig(
        fiscal_year=FY_2024_25,
        standard_deduction=50_000,
        section_80c_limit=150_000,
        hra_exemption_limit=100_000,
        section_87a_rebate_limit=700_000,
        cess_rate_percent=4,
        slabs=new + old,
    )


def default_tax_settings() -> TaxSettings:
    """Settings used when an administrator has not authored any configuration yet."""
    return TaxSettings(
        active_fiscal_year=FY_2024_25,
        yearly_configs=[default_yearly_config_2024_25()],
    )
