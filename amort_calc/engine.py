"""Core calculation engine for the amortization calculator.

This module implements the financial logic required to build a level-payment
amortization schedule with an optional constant extra payment per period.
Every monetary quantity is rounded to cents as soon as it is computed, and the
final period is corrected so the balance lands exactly at zero without
overpayment. Results are returned as a list of ``AmortizationEntry`` objects;
``compute_schedule`` additionally returns a summary dictionary.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from .data_models import AmortizationEntry, LoanParameters
from .logging import get_logger
from .utils import ZERO_TOLERANCE, parse_iso_date, round2, step_date

logger = get_logger(__name__)

ZERO = Decimal("0")


def calculate_scheduled_payment(principal: Decimal, periodic_rate: Decimal, periods: int) -> Decimal:
    """Return the level payment for a loan, rounded to cents.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the periodic interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if periods <= 0:
        raise ValueError("Number of periods must be positive")
    if periodic_rate == 0:
        return round2(principal / Decimal(periods))
    factor = (1 + periodic_rate) ** periods
    return round2(principal * (periodic_rate * factor) / (factor - 1))


def _as_decimal(value: Any) -> Optional[Decimal]:
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return result if result.is_finite() else None


def _validated_inputs(params: LoanParameters) -> Optional[Tuple[Decimal, Decimal, Decimal, date]]:
    """Return (principal, annual rate, extra, start date) or None if unusable."""
    principal = _as_decimal(params.principal)
    rate = _as_decimal(params.annual_rate_percent)
    extra = _as_decimal(params.extra_payment)
    start = parse_iso_date(params.start_date)
    if principal is None or principal <= 0:
        logger.warning("Rejected loan parameters: principal must be positive (%s)", params.principal)
        return None
    if rate is None or rate < 0:
        logger.warning("Rejected loan parameters: annual rate must not be negative (%s)", params.annual_rate_percent)
        return None
    if not isinstance(params.term_years, int) or params.term_years <= 0:
        logger.warning("Rejected loan parameters: term must be a positive number of years (%s)", params.term_years)
        return None
    if not isinstance(params.payments_per_year, int) or params.payments_per_year <= 0:
        logger.warning(
            "Rejected loan parameters: payments per year must be positive (%s)", params.payments_per_year
        )
        return None
    if start is None:
        logger.warning("Rejected loan parameters: invalid start date %r", params.start_date)
        return None
    return principal, rate, extra if extra is not None else ZERO, start


def generate_schedule(params: LoanParameters) -> List[AmortizationEntry]:
    """Compute the amortization schedule for a loan.

    Parameters
    ----------
    params: LoanParameters
        The loan parameters. Invalid parameters (non-positive principal, term
        or frequency, negative rate, unparseable start date) produce an empty
        list rather than an exception.

    Returns
    -------
    List[AmortizationEntry]
        One entry per payment period, ending in the period where the balance
        reaches zero. With a positive extra payment this can be earlier than
        ``params.total_periods``.
    """
    inputs = _validated_inputs(params)
    if inputs is None:
        return []
    principal, annual_rate, extra_payment, start_date = inputs

    periodic_rate = (annual_rate / Decimal(100)) / Decimal(params.payments_per_year)
    total_periods = params.total_periods
    scheduled_payment = calculate_scheduled_payment(principal, periodic_rate, total_periods)
    extra = round2(extra_payment) if extra_payment > 0 else ZERO

    schedule: List[AmortizationEntry] = []
    balance = principal
    cumulative_interest = ZERO

    for period in range(1, total_periods + 1):
        if balance <= ZERO_TOLERANCE:
            break
        interest = round2(balance * periodic_rate)
        principal_paid = round2(scheduled_payment - interest)
        total_payment = scheduled_payment + extra

        # The level payment plus extra would retire more principal than remains
        if balance < total_payment - interest:
            principal_paid = balance
            total_payment = principal_paid + interest
        else:
            principal_paid += extra

        # Rounding can still leave principal_paid just above the balance
        if principal_paid > balance:
            principal_paid = balance
            total_payment = principal_paid + interest

        # The last nominal period settles whatever the rounded level payment left
        if period == total_periods and principal_paid < balance:
            principal_paid = balance
            total_payment = principal_paid + interest

        ending_balance = max(ZERO, round2(balance - principal_paid))
        cumulative_interest = round2(cumulative_interest + interest)

        schedule.append(
            AmortizationEntry(
                period=period,
                payment_date=step_date(start_date, period - 1, params.payments_per_year),
                starting_balance=round2(balance),
                scheduled_payment=scheduled_payment,
                extra_payment=extra,
                total_payment=round2(total_payment),
                principal=round2(principal_paid),
                interest=interest,
                ending_balance=ending_balance,
                cumulative_interest=cumulative_interest,
            )
        )

        balance = ending_balance
        if balance <= ZERO_TOLERANCE:
            _correct_final_entry(schedule[-1])
            break

    logger.debug(
        "Generated %d of %d nominal periods (scheduled payment %s)",
        len(schedule),
        total_periods,
        scheduled_payment,
        extra={"rows": len(schedule), "nominal_periods": total_periods},
    )
    return schedule


def _correct_final_entry(entry: AmortizationEntry) -> None:
    """Trim a rounding residue from the last payment of a schedule.

    Applied once, to the final entry only. ``scheduled_payment`` keeps its
    nominal value even though the cash actually paid is reduced.
    """
    if entry.starting_balance + entry.interest < entry.total_payment:
        entry.total_payment = round2(entry.starting_balance + entry.interest)
        entry.principal = entry.starting_balance


def summarize_schedule(params: LoanParameters, schedule: List[AmortizationEntry]) -> Dict[str, object]:
    """Aggregate a generated schedule into summary metrics.

    When the loan carries an extra payment, the summary also contains a
    ``comparison`` block measured against the same loan without it.
    """
    if not schedule:
        return {}
    start_date = schedule[0].payment_date
    total_interest = schedule[-1].cumulative_interest
    total_principal = sum((e.principal for e in schedule), ZERO)
    total_extra = sum((e.extra_payment for e in schedule), ZERO)
    total_paid = sum((e.total_payment for e in schedule), ZERO)
    nominal_periods = params.total_periods

    summary: Dict[str, object] = {
        "principal": schedule[0].starting_balance,
        "scheduled_payment": schedule[0].scheduled_payment,
        "total_interest": total_interest,
        "total_principal": total_principal,
        "total_extra": total_extra,
        "total_paid": total_paid,
        "payments_made": len(schedule),
        "nominal_periods": nominal_periods,
        "first_payment_date": start_date,
        "payoff_date": schedule[-1].payment_date,
        "original_end_date": step_date(start_date, nominal_periods - 1, params.payments_per_year),
    }

    if schedule[0].extra_payment > 0:
        baseline = generate_schedule(replace(params, extra_payment=ZERO))
        if baseline:
            baseline_interest = baseline[-1].cumulative_interest
            summary["comparison"] = {
                "baseline_total_interest": baseline_interest,
                "interest_saved": baseline_interest - total_interest,
                "baseline_payments": len(baseline),
                "periods_saved": len(baseline) - len(schedule),
            }
    return summary


def compute_schedule(params: LoanParameters) -> Tuple[List[AmortizationEntry], Dict[str, object]]:
    """Return the schedule and its summary; invalid input yields ``([], {})``."""
    schedule = generate_schedule(params)
    return schedule, summarize_schedule(params, schedule)
