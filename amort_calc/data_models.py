"""Data models for the amortization calculator.

This module defines dataclasses representing the input of a calculation run
(the loan parameters) and its output (one entry per payment period). Using
dataclasses makes it easy to construct, inspect and serialize these
structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class LoanParameters:
    """Inputs of a single schedule calculation.

    Attributes
    ----------
    principal: Decimal
        The loan amount at period 0.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``Decimal("3.0")`` is 3 %).
    term_years: int
        Nominal loan duration in years.
    payments_per_year: int
        Payment frequency, e.g. 12 for monthly payments.
    start_date: date or str
        Date of the first payment. An ISO ``YYYY-MM-DD`` string is accepted
        and parsed by the engine; an unparseable value yields an empty
        schedule.
    extra_payment: Decimal
        Constant additional principal paid every period.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    term_years: int
    payments_per_year: int
    start_date: Union[date, str]
    extra_payment: Decimal = Decimal("0")

    @property
    def total_periods(self) -> int:
        # nominal; extra payments may retire the loan earlier
        return self.term_years * self.payments_per_year


@dataclass
class AmortizationEntry:
    """An entry in the amortization schedule.

    Each entry corresponds to one payment period. ``scheduled_payment`` is
    always the nominal level payment of the run, even on a final entry whose
    ``total_payment`` was reduced to the remaining balance.
    """

    period: int
    payment_date: date
    starting_balance: Decimal
    scheduled_payment: Decimal
    extra_payment: Decimal
    total_payment: Decimal
    principal: Decimal
    interest: Decimal
    ending_balance: Decimal
    cumulative_interest: Decimal
