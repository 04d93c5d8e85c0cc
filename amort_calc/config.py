"""Configuration management for amort-calc."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from .exceptions import ConfigurationError
from .utils import add_months

SUPPORTED_LOCALES = ("iso", "en", "th")


def first_of_next_month(today: Optional[date] = None) -> date:
    """Default first payment date: the first day of the coming month."""
    today = today or date.today()
    return add_months(today.replace(day=1), 1)


@dataclass
class LoanDefaults:
    """Values pre-filled in the input form and used as CLI defaults."""

    principal: Decimal = Decimal("2000000")
    annual_rate_percent: Decimal = Decimal("3.0")
    term_years: int = 5
    payments_per_year: int = 12
    extra_payment: Decimal = Decimal("0")
    start_date: date = field(default_factory=first_of_next_month)


@dataclass
class CalculatorConfig:
    """Main configuration for amort-calc."""

    defaults: LoanDefaults = field(default_factory=LoanDefaults)
    locale: str = "iso"
    preview_rows: int = 120
    log_level: str = "INFO"
    log_format: str = "standard"
    secret_key: str = "dev-secret-key"
    pdf_font: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CalculatorConfig":
        """Create config from ``AMORT_*`` environment variables."""
        defaults = LoanDefaults(
            principal=_env_decimal("AMORT_DEFAULT_PRINCIPAL", "2000000"),
            annual_rate_percent=_env_decimal("AMORT_DEFAULT_RATE", "3.0"),
            term_years=_env_int("AMORT_DEFAULT_YEARS", "5"),
            payments_per_year=_env_int("AMORT_DEFAULT_PAYMENTS_PER_YEAR", "12"),
            extra_payment=_env_decimal("AMORT_DEFAULT_EXTRA", "0"),
        )

        locale = os.getenv("AMORT_LOCALE", "iso").lower()
        if locale not in SUPPORTED_LOCALES:
            raise ConfigurationError(
                f"AMORT_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}; got {locale!r}"
            )

        return cls(
            defaults=defaults,
            locale=locale,
            preview_rows=_env_int("AMORT_PREVIEW_ROWS", "120"),
            log_level=os.getenv("AMORT_LOG_LEVEL", "INFO"),
            log_format=os.getenv("AMORT_LOG_FORMAT", "standard"),
            secret_key=os.getenv("AMORT_SECRET_KEY", "dev-secret-key"),
            pdf_font=_env_font("AMORT_PDF_FONT"),
        )


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer; got {raw!r}") from exc


def _env_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a number; got {raw!r}") from exc


def _env_font(name: str) -> Optional[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    if not os.path.isfile(raw):
        raise ConfigurationError(f"{name} must point to a TrueType font file; got {raw!r}")
    return raw
