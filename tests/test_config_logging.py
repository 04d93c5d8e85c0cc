"""Tests for configuration and logging."""

import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from amort_calc.config import CalculatorConfig, LoanDefaults, first_of_next_month
from amort_calc.exceptions import AmortCalcError, ConfigurationError, InvalidInputError
from amort_calc.logging import JsonFormatter, get_logger, setup_logging


class TestLoanDefaults:
    """Tests for LoanDefaults."""

    def test_default_values(self) -> None:
        defaults = LoanDefaults()

        assert defaults.principal == Decimal("2000000")
        assert defaults.annual_rate_percent == Decimal("3.0")
        assert defaults.term_years == 5
        assert defaults.payments_per_year == 12
        assert defaults.extra_payment == 0
        assert defaults.start_date.day == 1

    def test_first_of_next_month(self) -> None:
        assert first_of_next_month(date(2024, 1, 31)) == date(2024, 2, 1)
        assert first_of_next_month(date(2024, 12, 15)) == date(2025, 1, 1)


class TestCalculatorConfig:
    """Tests for CalculatorConfig."""

    def test_default_values(self) -> None:
        config = CalculatorConfig()

        assert config.locale == "iso"
        assert config.preview_rows == 120
        assert config.log_level == "INFO"

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("AMORT_LOCALE", "TH")
        monkeypatch.setenv("AMORT_PREVIEW_ROWS", "24")
        monkeypatch.setenv("AMORT_DEFAULT_PRINCIPAL", "500000")
        monkeypatch.setenv("AMORT_DEFAULT_YEARS", "30")
        monkeypatch.setenv("AMORT_LOG_LEVEL", "DEBUG")

        config = CalculatorConfig.from_env()

        assert config.locale == "th"
        assert config.preview_rows == 24
        assert config.defaults.principal == Decimal("500000")
        assert config.defaults.term_years == 30
        assert config.log_level == "DEBUG"

    def test_pdf_font_from_env(self, monkeypatch, tmp_path) -> None:
        font = tmp_path / "Sarabun.ttf"
        font.write_bytes(b"")
        monkeypatch.setenv("AMORT_PDF_FONT", str(font))

        assert CalculatorConfig.from_env().pdf_font == str(font)

    def test_pdf_font_unset(self, monkeypatch) -> None:
        monkeypatch.delenv("AMORT_PDF_FONT", raising=False)

        assert CalculatorConfig.from_env().pdf_font is None

    @pytest.mark.parametrize(
        "name, value",
        [
            ("AMORT_PREVIEW_ROWS", "ten"),
            ("AMORT_DEFAULT_RATE", "three"),
            ("AMORT_LOCALE", "fr"),
            ("AMORT_PDF_FONT", "/nonexistent/Sarabun.ttf"),
        ],
    )
    def test_from_env_rejects_malformed_values(self, monkeypatch, name: str, value: str) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError, match=name):
            CalculatorConfig.from_env()


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self) -> None:
        assert issubclass(InvalidInputError, AmortCalcError)
        assert issubclass(InvalidInputError, ValueError)
        assert issubclass(ConfigurationError, AmortCalcError)


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging_standard(self) -> None:
        setup_logging("DEBUG")
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("amort_calc").level == logging.DEBUG

    def test_setup_logging_json(self) -> None:
        setup_logging("WARNING", "json")

        assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging("chatty")

        assert logging.getLogger().level == logging.INFO

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("amort_calc.engine", logging.WARNING, __file__, 1, "rejected %s", ("x",), None)
        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "amort_calc.engine"
        assert data["message"] == "rejected x"

    def test_json_formatter_includes_schedule_context(self) -> None:
        record = logging.LogRecord("amort_calc_web.app", logging.INFO, __file__, 1, "served", (), None)
        record.export_format = "pdf"
        record.rows = 60
        data = json.loads(JsonFormatter().format(record))

        assert data["export_format"] == "pdf"
        assert data["rows"] == 60
        assert "nominal_periods" not in data

    def test_quiet_loggers_stay_at_warning(self) -> None:
        setup_logging("DEBUG")

        assert logging.getLogger("werkzeug").level == logging.WARNING
        assert logging.getLogger("amort_calc_web").level == logging.DEBUG

    def test_get_logger(self) -> None:
        assert get_logger("amort_calc.test").name == "amort_calc.test"
