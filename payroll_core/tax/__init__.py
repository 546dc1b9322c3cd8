from payroll_core.tax.defaults import default_tax_settings
from payroll_core.tax.optimizer import optimize_tax_regime
from payroll_core.tax.schemas import (
    InvestmentDeclarations,
    OptimizerInput,
    OptimizerResult,
    TaxCalculationInput,
    TaxCalculationResult,
    TaxRegime,
    TaxSettings,
    TaxSlab,
    YearlyTaxConfig,
)
from payroll_core.tax.tax_engine import (
    calculate_employee_tax,
    calculate_new_regime_tax,
    calculate_old_regime_tax,
    calculate_tax_for_employees,
    get_tax_config,
)

__all__ = [
    "default_tax_settings",
    "optimize_tax_regime",
    "InvestmentDeclarations",
    "OptimizerInput",
    "OptimizerResult",
    "TaxCalculationInput",
    "TaxCalculationResult",
    "TaxRegime",
    "TaxSettings",
    "TaxSlab",
    "YearlyTaxConfig",
    "calculate_employee_tax",
    "calculate_new_regime_tax",
    "calculate_old_regime_tax",
    "calculate_tax_for_employees",
    "get_tax_config",
]
