"""Output helpers for the amortization calculator.

This module renders schedules and summaries for people: currency values with
thousands separators, payment dates in a chosen locale and simple
tab-separated tables for the terminal. Values are displayed exactly as the
engine produced them; nothing here recomputes or re-rounds a monetary field.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List

from .data_models import AmortizationEntry

THAI_MONTHS = [
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
]

ENGLISH_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Thai calendar years count from 543 BCE
BUDDHIST_ERA_OFFSET = 543

SCHEDULE_HEADERS = {
    "iso": [
        "Period",
        "Payment Date",
        "Starting Balance",
        "Scheduled Payment",
        "Extra Payment",
        "Total Payment",
        "Principal",
        "Interest",
        "Ending Balance",
        "Cumulative Interest",
    ],
    "th": [
        "งวด",
        "วันที่จ่าย",
        "เงินต้นคงเหลือยกมา",
        "จ่ายตามกำหนด",
        "จ่ายเพิ่ม",
        "จ่ายรวม",
        "ตัดเงินต้น",
        "ดอกเบี้ย",
        "เงินต้นคงเหลือ",
        "ดอกเบี้ยสะสม",
    ],
}


def format_currency(value: Decimal) -> str:
    """Return ``value`` with thousands separators and two decimals."""
    return f"{value:,.2f}"


def format_payment_date(value: date, locale: str = "iso") -> str:
    """Render a payment date for display.

    ``"iso"`` gives ``2024-01-01``, ``"en"`` gives ``1 January 2024`` and
    ``"th"`` gives ``1 มกราคม 2567`` (Buddhist-era year). Unknown locales fall
    back to ISO.
    """
    if locale == "th":
        return f"{value.day} {THAI_MONTHS[value.month - 1]} {value.year + BUDDHIST_ERA_OFFSET}"
    if locale == "en":
        return f"{value.day} {ENGLISH_MONTHS[value.month - 1]} {value.year}"
    return value.isoformat()


def schedule_headers(locale: str = "iso") -> List[str]:
    return list(SCHEDULE_HEADERS.get(locale, SCHEDULE_HEADERS["iso"]))


def entry_to_row(entry: AmortizationEntry, locale: str = "iso") -> List[str]:
    """Display strings for one schedule entry, in header order."""
    return [
        str(entry.period),
        format_payment_date(entry.payment_date, locale),
        format_currency(entry.starting_balance),
        format_currency(entry.scheduled_payment),
        format_currency(entry.extra_payment),
        format_currency(entry.total_payment),
        format_currency(entry.principal),
        format_currency(entry.interest),
        format_currency(entry.ending_balance),
        format_currency(entry.cumulative_interest),
    ]


def print_summary(summary: Dict[str, object], locale: str = "iso") -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Principal           : {format_currency(summary['principal'])}")
    print(f"Scheduled payment   : {format_currency(summary['scheduled_payment'])}")
    print(f"Total interest      : {format_currency(summary['total_interest'])}")
    if summary.get("total_extra"):
        print(f"Total extra         : {format_currency(summary['total_extra'])}")
    print(f"Total paid          : {format_currency(summary['total_paid'])}")
    print(f"First payment       : {format_payment_date(summary['first_payment_date'], locale)}")
    print(f"Original end date   : {format_payment_date(summary['original_end_date'], locale)}")
    print(f"Payoff date         : {format_payment_date(summary['payoff_date'], locale)}")
    print(f"Payments made       : {summary['payments_made']} of {summary['nominal_periods']}")
    comparison = summary.get("comparison")
    if comparison:
        print(f"Baseline interest   : {format_currency(comparison['baseline_total_interest'])}")
        print(f"Interest saved      : {format_currency(comparison['interest_saved'])}")
        if comparison.get("periods_saved"):
            print(f"Term reduction      : {comparison['periods_saved']} payments")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationEntry], locale: str = "iso") -> None:
    """Print the amortization schedule as a simple tab-separated table."""
    print("\t".join(schedule_headers(locale)))
    for entry in schedule:
        print("\t".join(entry_to_row(entry, locale)))
