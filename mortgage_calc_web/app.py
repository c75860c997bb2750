import io
import logging
import os

import click
from flask import Flask, Response, render_template, request

from mortgage_calc.data_models import VariableLinearCapital
from mortgage_calc.engine import summarize
from mortgage_calc.main import (
    build_loan_from_options,
    build_scheme_from_options,
    run_schedule,
    write_schedule_csv,
)
from mortgage_calc.utils import SCHEME_TOKENS

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["PREVIEW_ROWS"] = int(os.environ.get("MORTGAGE_CALC_PREVIEW_ROWS", "120"))

# Machine names only; the Dutch labels are still accepted when posted.
SCHEME_CHOICES = ["FixedCapital", "FixedMensualities", "VariableLinearCapital"]


def _optional_float(form, name: str):
    value = form.get(name, "").strip()
    return float(value) if value else None


def _optional_int(form, name: str):
    value = form.get(name, "").strip()
    return int(value) if value else None


def _form_to_inputs(form):
    principal = form.get("principal", "").strip()
    years = int(form.get("years", 0))
    rate = float(form.get("rate", 0.0))
    max_rate = None
    revision_month = None
    if form.get("rate_kind", "fixed") == "variable":
        max_rate = _optional_float(form, "max_rate")
        revision_month = _optional_int(form, "revision_month")
    scheme_name = form.get("scheme", "FixedMensualities")
    initial_payment = None
    if SCHEME_TOKENS.get(scheme_name) is VariableLinearCapital:
        initial_payment = _optional_float(form, "initial_payment")

    loan = build_loan_from_options(principal, years, rate, max_rate, revision_month)
    scheme = build_scheme_from_options(scheme_name, initial_payment)
    return loan, scheme


def _summaries_for_view(summary: dict, schedule, show_full_schedule: bool):
    if show_full_schedule:
        return summary, list(schedule)
    limit = app.config["PREVIEW_ROWS"]
    preview = list(schedule[:limit])
    if len(schedule) > limit:
        summary["truncated"] = len(schedule) - len(preview)
    return summary, preview


def _run_analysis(form, show_full_schedule: bool):
    loan, scheme = _form_to_inputs(form)
    full_schedule = run_schedule(loan, scheme)
    summary = summarize(loan, full_schedule)
    summary["scheme"] = str(scheme)
    return _summaries_for_view(summary, full_schedule, show_full_schedule)


@app.route("/", methods=["GET", "POST"])
def index():
    summary = None
    schedule = None
    error = None
    show_full_schedule = False

    if request.method == "POST":
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        try:
            summary, schedule = _run_analysis(request.form, show_full_schedule)
        except (ValueError, click.ClickException) as exc:
            logger.info("Rejected mortgage input: %s", exc)
            error = str(exc)

    return render_template(
        "index.html",
        form=request.form,
        summary=summary,
        schedule=schedule,
        show_full_schedule=show_full_schedule,
        error=error,
        scheme_choices=SCHEME_CHOICES,
    )


@app.post("/export.csv")
def export_csv():
    try:
        loan, scheme = _form_to_inputs(request.form)
        schedule = run_schedule(loan, scheme)
    except (ValueError, click.ClickException) as exc:
        logger.info("Rejected mortgage input: %s", exc)
        return Response(str(exc), status=400, mimetype="text/plain")

    buffer = io.StringIO()
    write_schedule_csv(buffer, schedule)
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=mortgage_schedule.csv"},
    )


if __name__ == "__main__":
    print("Starting Mortgage Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
