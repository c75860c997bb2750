"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries,
compare payment schemes for the same loan, or answer a series of prompts in
an interactive session. Results can be printed to the terminal or exported
to CSV/JSON files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO, Tuple

import click

from .data_models import LoanDefinition, PaymentScheme, Schedule, VariableLinearCapital
from .engine import compute_schedule, summarize
from .errors import LoanValidationError, SchemeParseError
from .formatter import print_comparison, print_schedule, print_summary
from .utils import (
    SCHEME_TOKENS,
    fixed_rate_path,
    parse_amount,
    parse_payment_scheme,
    parse_percent,
    worst_case_rate_path,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FILENAME = "mortgage_schedule.csv"
MAX_PRINTED_ROWS = 120

CSV_HEADER = [
    "Month",
    "Annual_Rate",
    "Payment",
    "Principal",
    "Interest",
    "Balance",
]


def build_loan_from_options(
    principal: str,
    years: int,
    rate: float,
    max_rate: Optional[float] = None,
    revision_month: Optional[int] = None,
) -> LoanDefinition:
    """Build a ``LoanDefinition`` from raw option values.

    ``rate`` and ``max_rate`` are annual percentages. Giving ``max_rate`` and
    ``revision_month`` switches to a variable rate, simulated in the worst
    case: the rate jumps to ``max_rate`` at the first revision and stays there.
    """
    try:
        principal_value = parse_amount(principal)
        annual_rate = parse_percent(rate)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if years <= 0:
        raise click.BadParameter(f"Term must be at least one year; got {years}")
    period_count = years * 12

    if (max_rate is None) != (revision_month is None):
        raise click.BadParameter("A variable rate needs both --max-rate and --revision-month")
    if max_rate is None:
        rates = fixed_rate_path(annual_rate, period_count)
    else:
        try:
            rates = worst_case_rate_path(
                annual_rate, parse_percent(max_rate), revision_month, period_count
            )
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    return LoanDefinition(principal_value, period_count, tuple(rates))


def build_scheme_from_options(scheme: str, initial_payment: Optional[float] = None) -> PaymentScheme:
    """Parse the ``--scheme`` option, appending ``--initial-payment`` when given."""
    text = scheme if initial_payment is None else f"{scheme} {initial_payment}"
    try:
        return parse_payment_scheme(text)
    except SchemeParseError as exc:
        raise click.BadParameter(str(exc))


def run_schedule(loan: LoanDefinition, scheme: PaymentScheme) -> Schedule:
    """Compute a schedule, reporting validation failures as click errors."""
    try:
        return compute_schedule(loan, scheme)
    except LoanValidationError as exc:
        raise click.BadParameter(str(exc))


def schedule_rows(schedule: Iterable) -> List[List[Any]]:
    """Return one row per period in ``CSV_HEADER`` order."""
    return [
        [
            r.period,
            r.annual_rate,
            r.payment,
            r.principal_paid,
            r.interest_paid,
            r.balance,
        ]
        for r in schedule
    ]


def write_schedule_csv(stream: TextIO, schedule: Schedule) -> None:
    """Write the schedule as CSV (header plus one row per period) to ``stream``."""
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    writer.writerows(schedule_rows(schedule))


def export_to_csv(path: Path, schedule: Schedule) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_schedule_csv(f, schedule)
    logger.info("Wrote %d rows to %s", len(schedule), path)


def export_to_json(path: Path, schedule: Schedule, summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    keys = [h.lower() for h in CSV_HEADER]
    data = {
        "summary": summary,
        "schedule": [dict(zip(keys, row)) for row in schedule_rows(schedule)],
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("Wrote %d rows to %s", len(schedule), path)


def loan_options(func: Callable) -> Callable:
    """Attach the options describing the loan and its payment scheme."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Amount borrowed (e.g. 250000 or 250k)"),
        click.option("--years", "-y", "years", required=True, type=int, help="Loan term in years"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent); the initial rate for a variable loan"),
        click.option("--max-rate", "max_rate", type=float, help="Maximum annual rate (percent) of a variable-rate loan"),
        click.option("--revision-month", "revision_month", type=int, help="Month in which a variable rate is first revised"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug information to stderr")
def cli(verbose: bool) -> None:
    """A command-line mortgage calculator for fixed and worst-case variable rates."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    if verbose:
        logging.getLogger("mortgage_calc").setLevel(logging.DEBUG)


@cli.command()
@loan_options
@click.option("--scheme", "-s", "scheme", default="FixedMensualities", show_default=True, help="Payment scheme (FixedCapital, FixedMensualities, VariableLinearCapital or their Dutch labels)")
@click.option("--initial-payment", "initial_payment", type=float, help="First monthly payment, for VariableLinearCapital")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    years: int,
    rate: float,
    max_rate: Optional[float],
    revision_month: Optional[int],
    scheme: str,
    initial_payment: Optional[float],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    loan = build_loan_from_options(principal, years, rate, max_rate, revision_month)
    payment_scheme = build_scheme_from_options(scheme, initial_payment)
    result = run_schedule(loan, payment_scheme)
    summary_data = summarize(loan, result)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, summary_data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(summary_data, payment_scheme)
        # Limit schedule length printed to avoid flooding the terminal
        if len(result) > MAX_PRINTED_ROWS:
            click.echo(f"Schedule has {len(result)} rows; showing first {MAX_PRINTED_ROWS} rows.")
            print_schedule(result[:MAX_PRINTED_ROWS])
        else:
            print_schedule(result)


@cli.command()
@loan_options
@click.option("--scheme", "-s", "scheme", default="FixedMensualities", show_default=True, help="Payment scheme")
@click.option("--initial-payment", "initial_payment", type=float, help="First monthly payment, for VariableLinearCapital")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    years: int,
    rate: float,
    max_rate: Optional[float],
    revision_month: Optional[int],
    scheme: str,
    initial_payment: Optional[float],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    loan = build_loan_from_options(principal, years, rate, max_rate, revision_month)
    payment_scheme = build_scheme_from_options(scheme, initial_payment)
    summary_data = summarize(loan, run_schedule(loan, payment_scheme))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"scheme": str(payment_scheme), "summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data, payment_scheme)


@cli.command()
@loan_options
@click.option("--scheme", "-s", "schemes", multiple=True, required=True, help="Payment scheme to compare; repeat for each scheme, e.g. -s FixedCapital -s \"VariableLinearCapital 900\"")
def compare(
    principal: str,
    years: int,
    rate: float,
    max_rate: Optional[float],
    revision_month: Optional[int],
    schemes: Tuple[str, ...],
) -> None:
    """Compare several payment schemes for the same loan.

    For example:

        mortgage-calc compare -p 200k -y 25 -r 3.2 -s FixedCapital -s FixedMensualities
    """
    if len(schemes) < 2:
        raise click.BadParameter("Give at least two --scheme options to compare")
    loan = build_loan_from_options(principal, years, rate, max_rate, revision_month)
    results: List[Tuple[str, Dict[str, object]]] = []
    for text in schemes:
        payment_scheme = build_scheme_from_options(text)
        results.append((str(payment_scheme), summarize(loan, run_schedule(loan, payment_scheme))))
    print_comparison(results)


@cli.command()
def interactive() -> None:
    """Ask for the loan details one by one, then show and optionally save the schedule."""
    principal = click.prompt("Principal (amount to borrow)", type=click.FloatRange(min=0, min_open=True))
    years = click.prompt("Term in years", type=click.IntRange(min=1))
    period_count = years * 12

    rate_kind = click.prompt(
        "Fixed or variable rate? A variable rate is simulated in the worst case",
        type=click.Choice(["fixed", "variable"]),
        default="fixed",
    )
    if rate_kind == "fixed":
        rate = click.prompt("Annual interest rate (%)", type=float)
        rates = fixed_rate_path(parse_percent(rate), period_count)
    else:
        rate = click.prompt("Initial annual interest rate (%)", type=float)
        revision_month = click.prompt(
            "Month in which the rate is first revised", type=click.IntRange(1, period_count)
        )
        max_rate = click.prompt("Maximum annual interest rate (%)", type=float)
        rates = worst_case_rate_path(
            parse_percent(rate), parse_percent(max_rate), revision_month, period_count
        )
    loan = LoanDefinition(principal, period_count, tuple(rates))

    scheme_name = click.prompt(
        "Payment scheme",
        type=click.Choice(list(SCHEME_TOKENS)),
        default="FixedMensualities",
    )
    if SCHEME_TOKENS[scheme_name] is VariableLinearCapital:
        initial_payment = click.prompt("Initial payment", type=float)
        payment_scheme = build_scheme_from_options(scheme_name, initial_payment)
    else:
        payment_scheme = build_scheme_from_options(scheme_name)

    result = run_schedule(loan, payment_scheme)
    click.echo(f"Total repayment: {result.total_repaid:.2f}")
    print_schedule(result)

    if click.confirm("Save the schedule to a file?", default=True):
        filename = click.prompt("File name", default=DEFAULT_EXPORT_FILENAME)
        path = Path(filename)
        export_to_csv(path, result)
        click.echo(f"Schedule exported to {path}")


if __name__ == "__main__":
    cli()
