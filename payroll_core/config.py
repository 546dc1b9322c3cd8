"""
config.py - payroll policy settings.

Usage:
    from payroll_core.config import settings
    print(settings.gratuity_statutory_cap)

Values are defaults only: every calculator accepts the same value as an
explicit keyword argument, so callers can pin policy per call.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYROLL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- Gratuity (Payment of Gratuity Act, 1972) ---
    # ₹20L ceiling as per the 2018 amendment
    gratuity_statutory_cap: float = 2_000_000
    # Nominal minimum is 5 years; 4.8 absorbs date-rounding noise
    gratuity_min_service_years: float = 4.8
    # "More than 6 months" of the final year counts as a full year
    gratuity_round_up_fraction: float = 0.5

    # --- Daily-rate divisors ---
    working_days_per_month: float = 26
    settlement_days_per_month: float = 30

    # --- Variable pay ---
    # Assumed basic-to-CTC ratio for monthlyBasic; NOT the employee's salary structure
    basic_to_ctc_ratio: float = 0.40


# Module-level singleton - import this throughout the codebase
settings = Settings()
