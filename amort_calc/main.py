"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries or
prepare an email hand-off link. Results can be printed to the terminal or
exported to JSON, CSV, Excel or PDF files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from .config import SUPPORTED_LOCALES, CalculatorConfig
from .data_models import LoanParameters
from .engine import compute_schedule
from .exceptions import AmortCalcError, ConfigurationError, InvalidInputError
from .export import build_email_link, export_schedule, serialize_summary
from .formatter import print_schedule, print_summary
from .logging import get_logger, setup_logging
from .utils import ZERO_TOLERANCE, parse_amount, parse_iso_date, parse_percent, parse_positive_int

logger = get_logger(__name__)


def build_params_from_options(
    principal: str,
    rate: str,
    years: str,
    payments_per_year: str,
    start_date: Optional[str],
    extra: Optional[str] = None,
) -> LoanParameters:
    """Validate raw option/form strings and build ``LoanParameters``.

    Raises ``InvalidInputError`` with a message suitable for the user. Besides
    the engine preconditions, amounts the engine would treat as already paid
    off (half a cent or less) are rejected, so parameters built here yield a
    non-empty schedule.
    """
    principal_value = parse_amount(principal)
    if principal_value <= 0:
        raise InvalidInputError("Loan amount must be greater than 0")
    if principal_value <= ZERO_TOLERANCE:
        raise InvalidInputError("Loan amount is too small to amortize")
    rate_value = parse_percent(rate)
    if rate_value < 0:
        raise InvalidInputError("Annual interest rate must not be negative")
    years_value = parse_positive_int(years, "Loan term (years)")
    frequency = parse_positive_int(payments_per_year, "Payments per year")
    if not start_date or not start_date.strip():
        raise InvalidInputError("Please provide the first payment date")
    start = parse_iso_date(start_date)
    if start is None:
        raise InvalidInputError(f"Invalid start date {start_date!r}; use YYYY-MM-DD")
    extra_value = parse_amount(extra) if extra and extra.strip() else parse_amount("0")
    if extra_value < 0:
        raise InvalidInputError("Extra payment must not be negative")
    return LoanParameters(
        principal=principal_value,
        annual_rate_percent=rate_value,
        term_years=years_value,
        payments_per_year=frequency,
        start_date=start,
        extra_payment=extra_value,
    )


def _loan_options(func):
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", help="Loan amount (accepts 500k, 2m)"),
        click.option("--rate", "-r", "rate", help="Annual interest rate in percent"),
        click.option("--years", "-y", "years", help="Loan term in years"),
        click.option("--payments-per-year", "-n", "payments_per_year", help="Payments per year (12 = monthly)"),
        click.option("--start-date", "-s", "start_date", help="First payment date (YYYY-MM-DD)"),
        click.option("--extra", "-e", "extra", help="Extra principal paid every period"),
        click.option(
            "--locale",
            "locale",
            type=click.Choice(SUPPORTED_LOCALES),
            help="Date display locale (iso, en, th)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _params_from_context(
    config: CalculatorConfig,
    principal: Optional[str],
    rate: Optional[str],
    years: Optional[str],
    payments_per_year: Optional[str],
    start_date: Optional[str],
    extra: Optional[str],
) -> LoanParameters:
    defaults = config.defaults
    try:
        return build_params_from_options(
            principal if principal is not None else str(defaults.principal),
            rate if rate is not None else str(defaults.annual_rate_percent),
            years if years is not None else str(defaults.term_years),
            payments_per_year if payments_per_year is not None else str(defaults.payments_per_year),
            start_date if start_date is not None else defaults.start_date.isoformat(),
            extra if extra is not None else str(defaults.extra_payment),
        )
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))


def _compute_or_fail(params: LoanParameters):
    schedule_entries, summary_data = compute_schedule(params)
    if not schedule_entries:
        raise click.ClickException("These loan parameters produce no payments")
    return schedule_entries, summary_data


@click.group()
@click.option("--log-level", "log_level", help="Logging level (overrides AMORT_LOG_LEVEL)")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """A command-line loan amortization calculator."""
    try:
        config = CalculatorConfig.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    setup_logging(log_level or config.log_level, config.log_format)
    logger.debug("Using locale %s with a %d-row preview", config.locale, config.preview_rows)
    ctx.obj = config


@cli.command()
@_loan_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.json, .csv, .xlsx or .pdf)")
@click.option("--pdf-font", "pdf_font", type=click.Path(exists=True, dir_okay=False), help="TrueType font for PDF export (overrides AMORT_PDF_FONT)")
@click.option("--full", "full", is_flag=True, help="Print every row instead of a preview")
@click.pass_obj
def schedule(
    config: CalculatorConfig,
    principal: Optional[str],
    rate: Optional[str],
    years: Optional[str],
    payments_per_year: Optional[str],
    start_date: Optional[str],
    extra: Optional[str],
    locale: Optional[str],
    output: Optional[str],
    pdf_font: Optional[str],
    full: bool,
) -> None:
    """Compute and print the full amortization schedule."""
    params = _params_from_context(config, principal, rate, years, payments_per_year, start_date, extra)
    locale = locale or config.locale
    schedule_entries, summary_data = _compute_or_fail(params)
    if output:
        path = Path(output)
        try:
            export_schedule(path, schedule_entries, summary_data, locale, pdf_font or config.pdf_font)
        except AmortCalcError as exc:
            raise click.BadParameter(str(exc), param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary_data, locale)
    max_rows = config.preview_rows
    if not full and len(schedule_entries) > max_rows:
        click.echo(f"Schedule has {len(schedule_entries)} rows; showing first {max_rows} rows.")
        print_schedule(schedule_entries[:max_rows], locale)
    else:
        print_schedule(schedule_entries, locale)


@cli.command()
@_loan_options
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.pass_obj
def summary(
    config: CalculatorConfig,
    principal: Optional[str],
    rate: Optional[str],
    years: Optional[str],
    payments_per_year: Optional[str],
    start_date: Optional[str],
    extra: Optional[str],
    locale: Optional[str],
    as_json: bool,
) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = _params_from_context(config, principal, rate, years, payments_per_year, start_date, extra)
    _, summary_data = _compute_or_fail(params)
    if as_json:
        click.echo(json.dumps(serialize_summary(summary_data), indent=2))
    else:
        print_summary(summary_data, locale or config.locale)


@cli.command("email-link")
@click.option("--to", "to", default="", help="Recipient address")
@click.option("--subject", "subject", help="Email subject")
def email_link(to: str, subject: Optional[str]) -> None:
    """Print a mailto: link for sending an exported schedule."""
    if subject:
        click.echo(build_email_link(subject=subject, to=to))
    else:
        click.echo(build_email_link(to=to))


if __name__ == "__main__":
    cli()
