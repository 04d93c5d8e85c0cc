import json
import logging

from flask import Flask, Response, abort, redirect, render_template, request

from amort_calc.config import SUPPORTED_LOCALES, CalculatorConfig
from amort_calc.engine import compute_schedule
from amort_calc.exceptions import InvalidInputError
from amort_calc.export import (
    build_email_link,
    schedule_to_csv_text,
    schedule_to_pdf_bytes,
    schedule_to_xlsx_bytes,
    serialize_schedule,
    serialize_summary,
)
from amort_calc.formatter import format_currency, format_payment_date, schedule_headers
from amort_calc.logging import setup_logging
from amort_calc.main import build_params_from_options

config = CalculatorConfig.from_env()
setup_logging(config.log_level, config.log_format)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.secret_key
app.jinja_env.filters["currency"] = format_currency

DOWNLOADS = {
    "csv": ("text/csv", "AmortizationSchedule.csv"),
    "json": ("application/json", "AmortizationSchedule.json"),
    "xlsx": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "AmortizationSchedule.xlsx",
    ),
    "pdf": ("application/pdf", "AmortizationSchedule.pdf"),
}


def _default_form() -> dict:
    defaults = config.defaults
    return {
        "principal": str(defaults.principal),
        "rate": str(defaults.annual_rate_percent),
        "years": str(defaults.term_years),
        "payments_per_year": str(defaults.payments_per_year),
        "start_date": defaults.start_date.isoformat(),
        "extra": str(defaults.extra_payment),
        "locale": config.locale,
    }


def _normalized_locale(form) -> str:
    locale = form.get("locale", config.locale).lower()
    return locale if locale in SUPPORTED_LOCALES else config.locale


def _form_to_params(form):
    return build_params_from_options(
        form.get("principal", "").strip(),
        form.get("rate", "").strip(),
        form.get("years", "").strip(),
        form.get("payments_per_year", "").strip(),
        form.get("start_date", "").strip(),
        form.get("extra", "").strip() or None,
    )


def _preview(schedule: list, show_full_schedule: bool):
    """Return the rows to display and how many were left out."""
    if show_full_schedule or len(schedule) <= config.preview_rows:
        return schedule, 0
    return schedule[: config.preview_rows], len(schedule) - config.preview_rows


@app.route("/", methods=["GET", "POST"])
def index():
    summary = None
    schedule = None
    truncated = 0
    error = None
    form = _default_form()
    show_full_schedule = False

    if request.method == "POST":
        form = {key: request.form.get(key, "") for key in _default_form()}
        form["locale"] = _normalized_locale(request.form)
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        try:
            full_schedule, summary = compute_schedule(_form_to_params(request.form))
            schedule, truncated = _preview(full_schedule, show_full_schedule)
        except InvalidInputError as exc:
            error = str(exc)

    return render_template(
        "index.html",
        form=form,
        summary=summary,
        schedule=schedule,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        error=error,
        headers=schedule_headers(form["locale"]),
        format_date=lambda d: format_payment_date(d, form["locale"]),
        locales=SUPPORTED_LOCALES,
        export_formats=list(DOWNLOADS),
    )


@app.post("/export/<fmt>")
def export(fmt: str):
    if fmt not in DOWNLOADS:
        abort(404)
    locale = _normalized_locale(request.form)
    try:
        schedule, summary = compute_schedule(_form_to_params(request.form))
    except InvalidInputError as exc:
        return Response(str(exc), status=400, mimetype="text/plain")

    if fmt == "csv":
        payload = schedule_to_csv_text(schedule, locale).encode("utf-8")
    elif fmt == "json":
        payload = json.dumps(
            {"summary": serialize_summary(summary), "schedule": serialize_schedule(schedule)},
            ensure_ascii=False,
        ).encode("utf-8")
    elif fmt == "xlsx":
        payload = schedule_to_xlsx_bytes(schedule, locale)
    else:
        payload = schedule_to_pdf_bytes(schedule, locale, font_path=config.pdf_font)

    mimetype, filename = DOWNLOADS[fmt]
    logger.info(
        "Serving %s export with %d rows", fmt, len(schedule), extra={"export_format": fmt, "rows": len(schedule)}
    )
    return Response(
        payload,
        mimetype=mimetype,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.get("/email")
def email():
    return redirect(build_email_link(to=request.args.get("to", "")))


if __name__ == "__main__":
    print("Starting amortization calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
