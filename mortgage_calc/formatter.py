"""Output helpers for the mortgage calculator.

This module provides simple functions to render amortization schedules and
summaries in a tabular text format using built-in printing and string
formatting.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .data_models import PeriodRecord


def print_summary(summary: Dict[str, object], scheme: object = None) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    if scheme is not None:
        print(f"Payment scheme     : {scheme}")
    print(f"Principal          : {summary['principal']:.2f}")
    print(f"Periods (months)   : {summary['period_count']}")
    print(f"Total repayment    : {summary['total_repaid']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"First payment      : {summary['first_payment']:.2f}")
    print(f"Last payment       : {summary['last_payment']:.2f}")
    # Highest and lowest differ only for the capital schemes or a variable rate.
    if summary["max_payment"] != summary["min_payment"]:
        print(f"Highest payment    : {summary['max_payment']:.2f}")
        print(f"Lowest payment     : {summary['min_payment']:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[PeriodRecord]) -> None:
    """Print the amortization schedule as a simple table.

    The rate column shows the annual rate in percent; ``Balance`` is the
    outstanding principal the month's interest is charged on.
    """
    headers = [
        "Month",
        "Rate%",
        "Payment",
        "Principal",
        "Interest",
        "Balance",
    ]
    print("\t".join(headers))
    for record in schedule:
        row = [
            str(record.period),
            f"{record.annual_rate * 100:.3f}",
            f"{record.payment:.2f}",
            f"{record.principal_paid:.2f}",
            f"{record.interest_paid:.2f}",
            f"{record.balance:.2f}",
        ]
        print("\t".join(row))


def print_comparison(results: List[Tuple[str, Dict[str, object]]]) -> None:
    """Print the summaries of several payment schemes side by side.

    The difference column is taken against the first scheme; a negative
    value means the scheme is cheaper than the first one.
    """
    print("Comparison")
    print("=" * 72)
    keys = [
        "total_repaid",
        "total_interest",
        "first_payment",
        "max_payment",
    ]
    base_name, base = results[0]
    for name, summary in results[1:]:
        print(f"{'Metric':20s} {base_name[:15]:>15s} {name[:15]:>15s} {'Difference':>15s}")
        for key in keys:
            v1 = base[key]
            v2 = summary[key]
            print(f"{key:20s} {v1:15.2f} {v2:15.2f} {v2 - v1:15.2f}")
        print("=" * 72)
