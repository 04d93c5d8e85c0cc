"""Pytest configuration and fixtures."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from amort_calc.data_models import LoanParameters


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by setup_logging during a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def reference_params() -> LoanParameters:
    """2,000,000 at 3 % over 5 years, monthly, no extra payment."""
    return LoanParameters(
        principal=Decimal("2000000"),
        annual_rate_percent=Decimal("3.0"),
        term_years=5,
        payments_per_year=12,
        start_date=date(2024, 1, 1),
        extra_payment=Decimal("0"),
    )


@pytest.fixture
def extra_params(reference_params: LoanParameters) -> LoanParameters:
    """The reference loan with 5,000 of extra principal every month."""
    return LoanParameters(
        principal=reference_params.principal,
        annual_rate_percent=reference_params.annual_rate_percent,
        term_years=reference_params.term_years,
        payments_per_year=reference_params.payments_per_year,
        start_date=reference_params.start_date,
        extra_payment=Decimal("5000"),
    )


@pytest.fixture
def loan_args() -> list:
    """CLI arguments describing the reference loan."""
    return ["-p", "2m", "-r", "3", "-y", "5", "-n", "12", "-s", "2024-01-01"]
