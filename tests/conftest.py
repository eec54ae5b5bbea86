"""Pytest fixtures for payroll engine tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from jm_payroll.calculators.engine import PayrollEngine
from jm_payroll.calculators.rate_table import (
    JAMAICA_2024,
    RateTableRegistry,
    StatutoryRateTable,
)
from jm_payroll.calculators.types import CompensationProfile, PeriodInputs
from jm_payroll.config import Settings

PERIOD_START = date(2024, 1, 1)
PERIOD_END = date(2024, 1, 31)


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the process environment."""
    return Settings(
        engine_version="1.0.0",
        rate_table_path=None,
        batch_max_workers=2,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
    )


@pytest.fixture
def rate_table() -> StatutoryRateTable:
    """Jamaica 2024: 1.5M threshold, 25% to 6M, 30% above."""
    return JAMAICA_2024


@pytest.fixture
def engine(settings: Settings) -> PayrollEngine:
    return PayrollEngine(registry=RateTableRegistry([JAMAICA_2024]), settings=settings)


def make_profile(base_salary: str, **kwargs) -> CompensationProfile:
    """Build a monthly JMD profile."""
    return CompensationProfile(base_salary=Decimal(base_salary), **kwargs)


def make_inputs(**kwargs: str) -> PeriodInputs:
    """Build period inputs from string amounts."""
    return PeriodInputs(**{k: Decimal(v) for k, v in kwargs.items()})
