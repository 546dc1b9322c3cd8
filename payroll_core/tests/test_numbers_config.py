"""
Rounding, INR formatting and settings tests.
"""
from __future__ import annotations

import pytest

from payroll_core.config import Settings, settings
from payroll_core.numbers import format_inr, format_lakhs, round_half_up


@pytest.mark.parametrize("value, ndigits, expected", [
    (2.5, 0, 3),
    (3.5, 0, 4),
    (-2.5, 0, -2),
    (14_999.95, 0, 15_000),
    (0.125, 2, 0.13),
    (27_777.777, 2, 27_777.78),
    (-2_000.004, 2, -2_000.0),
])
def test_round_half_up(value: float, ndigits: int, expected: float) -> None:
    assert round_half_up(value, ndigits) == pytest.approx(expected)


def test_round_half_up_differs_from_builtin_round() -> None:
    assert round(2.5) == 2
    assert round_half_up(2.5) == 3


@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (999, "999"),
    (50_000, "50,000"),
    (173_077, "1,73,077"),
    (2_000_000, "20,00,000"),
    (1_234_567.5, "12,34,567.5"),
    (123_456_789, "12,34,56,789"),
    (-45_500, "-45,500"),
    (15_000.000000000002, "15,000"),
])
def test_format_inr(value: float, expected: str) -> None:
    assert format_inr(value) == expected


@pytest.mark.parametrize("value, expected", [
    (0, "0.0"),
    (300_001, "3.0"),
    (700_000, "7.0"),
    (1_200_000, "12.0"),
])
def test_format_lakhs(value: float, expected: str) -> None:
    assert format_lakhs(value) == expected


# ===========================================================================
# Settings
# ===========================================================================

def test_default_settings() -> None:
    assert settings.gratuity_statutory_cap == 2_000_000
    assert settings.gratuity_min_service_years == 4.8
    assert settings.gratuity_round_up_fraction == 0.5
    assert settings.working_days_per_month == 26
    assert settings.settlement_days_per_month == 30
    assert settings.basic_to_ctc_ratio == 0.40


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("PAYROLL_GRATUITY_STATUTORY_CAP", "2500000")
    monkeypatch.setenv("PAYROLL_BASIC_TO_CTC_RATIO", "0.5")
    fresh = Settings()
    assert fresh.gratuity_statutory_cap == 2_500_000
    assert fresh.basic_to_ctc_ratio == 0.5


def test_module_settings_drive_calculators(monkeypatch, employee) -> None:
    from payroll_core.variable_pay.engine import build_formula_context

    monkeypatch.setattr(settings, "basic_to_ctc_ratio", 0.5)
    assert build_formula_context(employee).monthly_basic == pytest.approx(50_000)


def test_package_version_has_one_source() -> None:
    import payroll_core

    assert payroll_core.__version__ == "0.1.0"
    assert "app_version" not in Settings.model_fields
    assert "debug" not in Settings.model_fields
