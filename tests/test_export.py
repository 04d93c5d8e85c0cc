"""Tests for schedule exports and the email hand-off."""

import csv
import io
import json
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest
from openpyxl import load_workbook

from amort_calc.engine import compute_schedule
from amort_calc.exceptions import ExportError
from amort_calc.export import (
    DEFAULT_EMAIL_SUBJECT,
    build_email_link,
    export_schedule,
    schedule_to_csv_text,
    schedule_to_pdf_bytes,
    schedule_to_xlsx_bytes,
)


@pytest.fixture
def computed(extra_params):
    return compute_schedule(extra_params)


class TestTextExports:
    """Tests for JSON and CSV output."""

    def test_json(self, tmp_path: Path, computed) -> None:
        schedule, summary = computed
        path = tmp_path / "schedule.json"
        export_schedule(path, schedule, summary)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert len(data["schedule"]) == len(schedule)
        assert data["schedule"][0]["scheduled_payment"] == 35937.38
        assert data["schedule"][0]["payment_date"] == "2024-01-01"
        assert data["summary"]["payments_made"] == len(schedule)
        assert data["summary"]["comparison"]["periods_saved"] > 0

    def test_csv(self, tmp_path: Path, computed) -> None:
        schedule, summary = computed
        path = tmp_path / "schedule.csv"
        export_schedule(path, schedule, summary)
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[0][0] == "Period"
        assert len(rows) == len(schedule) + 1
        assert rows[1][3] == "35937.38"
        assert rows[-1][8] == "0.00"

    def test_csv_thai_dates(self, computed) -> None:
        schedule, _ = computed
        rows = list(csv.reader(io.StringIO(schedule_to_csv_text(schedule, "th"))))

        assert rows[1][1] == "1 มกราคม 2567"

    def test_unsupported_suffix(self, tmp_path: Path, computed) -> None:
        schedule, summary = computed
        with pytest.raises(ExportError):
            export_schedule(tmp_path / "schedule.txt", schedule, summary)


class TestBinaryExports:
    """Tests for Excel and PDF output."""

    def test_xlsx(self, computed) -> None:
        schedule, _ = computed
        workbook = load_workbook(io.BytesIO(schedule_to_xlsx_bytes(schedule)))
        sheet = workbook.active
        rows = list(sheet.iter_rows(values_only=True))

        assert sheet.title == "Amortization Schedule"
        assert rows[0][0] == "Period"
        assert len(rows) == len(schedule) + 1
        assert rows[1][0] == 1
        assert float(rows[1][3]) == 35937.38
        assert sheet["C2"].number_format == "#,##0.00"
        assert sheet["A1"].font.bold

    def test_xlsx_to_path(self, tmp_path: Path, computed) -> None:
        schedule, summary = computed
        path = tmp_path / "schedule.xlsx"
        export_schedule(path, schedule, summary)

        assert load_workbook(path).active.max_row == len(schedule) + 1

    def test_pdf(self, tmp_path: Path, computed) -> None:
        schedule, summary = computed
        assert schedule_to_pdf_bytes(schedule).startswith(b"%PDF")

        path = tmp_path / "schedule.pdf"
        export_schedule(path, schedule, summary)
        assert path.read_bytes().startswith(b"%PDF")


class TestEmailLink:
    """Tests for the mailto hand-off."""

    def test_default_link(self) -> None:
        link = build_email_link()
        parts = urlsplit(link)
        query = parse_qs(parts.query)

        assert parts.scheme == "mailto"
        assert query["subject"] == [DEFAULT_EMAIL_SUBJECT]
        assert "attach it to this email yourself" in query["body"][0]

    def test_recipient_and_unicode_subject(self) -> None:
        link = build_email_link(subject="ตารางผ่อนชำระเงินกู้", body="hi", to="a@example.com")

        assert link.startswith("mailto:a@example.com?subject=")
        assert parse_qs(urlsplit(link).query)["subject"] == ["ตารางผ่อนชำระเงินกู้"]
