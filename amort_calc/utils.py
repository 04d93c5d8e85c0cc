"""Utility functions for the amortization calculator.

This module provides the shared rounding primitive, helpers for parsing user
input into Python data types and for handling dates, including stepping a
payment date forward by a (possibly fractional) number of months.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
import calendar
import math
from typing import Optional, Union

from .exceptions import InvalidInputError

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")
# Balances at or below half a cent count as paid off.
ZERO_TOLERANCE = Decimal("0.005")
AVERAGE_DAYS_PER_MONTH = 365.25 / 12


def round2(value: Union[Decimal, int]) -> Decimal:
    """Round a monetary amount to cents, half away from zero.

    Every monetary quantity in a schedule goes through this function right
    after it is computed, so accumulated rounding matches a conventional
    amortization table rather than a high-precision one.
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_iso_date(value: Union[date, str, None]) -> Optional[date]:
    """Return ``value`` as a ``date`` or ``None`` if it is not a valid date.

    Accepts ``date`` instances (a ``datetime`` is truncated to its date) and
    ``YYYY-MM-DD`` strings. Impossible dates such as ``2023-02-30`` are
    rejected.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def step_date(start: date, offset: int, payments_per_year: int) -> date:
    """Return the payment date ``offset`` periods after ``start``.

    Each period lasts ``12 / payments_per_year`` months. Dates are always
    derived from ``start`` so a month-end start date stays on the month end
    (Jan 31, Feb 29, Mar 31) instead of drifting to the 28th/29th. When the
    frequency does not divide 12 the fractional month is converted to days
    of an average month.
    """
    months = offset * 12 / payments_per_year
    whole = math.floor(months)
    stepped = add_months(start, whole)
    fraction = months - whole
    if fraction:
        stepped += timedelta(days=round(fraction * AVERAGE_DAYS_PER_MONTH))
    return stepped


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``InvalidInputError`` if conversion fails.
    """
    try:
        cleaned = value.strip().replace(",", "")
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise InvalidInputError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise InvalidInputError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a monetary string with optional suffixes.

    Accepts plain numbers ("500000", "1,000,000") and shorthand with
    ``k``/``m`` suffixes (e.g., "500k" meaning 500_000).
    """
    text = str(value).strip().lower()
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return decimal_from_str(text) * factor


def parse_percent(value: str) -> Decimal:
    """Parse an annual rate such as "3", "3.25" or "3.25%" (always percent)."""
    text = str(value).strip()
    if text.endswith("%"):
        text = text[:-1]
    return decimal_from_str(text)


def parse_positive_int(value: Union[str, int], name: str) -> int:
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be a whole number; got {value!r}") from exc
    if number <= 0:
        raise InvalidInputError(f"{name} must be greater than 0")
    return number
