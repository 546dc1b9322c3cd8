"""
payroll_core - statutory payroll calculators for Indian payroll.

Pure, synchronous functions over explicit pydantic inputs:
  - payroll_core.tax           income tax (old/new regime) + regime optimizer
  - payroll_core.settlement    gratuity, leave encashment, notice recovery, F&F
  - payroll_core.variable_pay  incentive formulas, allocations, approval workflow
"""
__version__ = "0.1.0"
