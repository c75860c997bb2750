"""Utility functions for the mortgage calculator.

This module provides helpers for turning user input into the values the
engine works with: amounts and percentages typed by a user, the per-period
interest-rate path of a fixed or (worst-case) variable rate loan, and the
payment-scheme selector string.
"""

from __future__ import annotations

from typing import Dict, List, Type

from .data_models import (
    FixedCapital,
    FixedMensualities,
    PaymentScheme,
    VariableLinearCapital,
)
from .errors import SchemeParseError

# Machine name and the Dutch label used by the interactive prompt.
SCHEME_TOKENS: Dict[str, Type] = {
    "FixedCapital": FixedCapital,
    "VasteKapitaalaflossing": FixedCapital,
    "FixedMensualities": FixedMensualities,
    "VasteMensualiteiten": FixedMensualities,
    "VariableLinearCapital": VariableLinearCapital,
    "VariabeleLineaireKapitaalaflossing": VariableLinearCapital,
}


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("250000"), thousands separators ("250,000") and
    shorthand with ``k``/``m`` suffixes (e.g., "250k" meaning 250_000).
    """
    cleaned = value.strip().lower().replace(",", "")
    factor = 1.0
    if cleaned.endswith("k"):
        factor = 1_000.0
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = 1_000_000.0
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_percent(value) -> float:
    """Convert a percentage ("1.8", "1.8%" or 1.8) to a fraction (0.018)."""
    text = str(value).strip()
    if text.endswith("%"):
        text = text[:-1]
    try:
        return float(text) / 100.0
    except ValueError as exc:
        raise ValueError(f"Invalid percentage: {value}") from exc


def fixed_rate_path(annual_rate: float, period_count: int) -> List[float]:
    """Return the same annual rate for every one of ``period_count`` periods."""
    return [annual_rate] * period_count


def worst_case_rate_path(
    initial_rate: float,
    max_rate: float,
    first_revision_month: int,
    period_count: int,
) -> List[float]:
    """Return the rate path of a variable-rate loan in the worst case.

    The loan keeps ``initial_rate`` until the month before
    ``first_revision_month`` and jumps to ``max_rate`` from that month up to
    the end of the term.

    Raises
    ------
    ValueError
        If the revision month falls outside the term.
    """
    if not 1 <= first_revision_month <= period_count:
        raise ValueError(
            f"Revision month must be between 1 and {period_count}; got {first_revision_month}"
        )
    before = [initial_rate] * (first_revision_month - 1)
    after = [max_rate] * (period_count - first_revision_month + 1)
    return before + after


def parse_payment_scheme(text: str) -> PaymentScheme:
    """Parse a payment-scheme selector into a scheme value.

    Accepted forms (tokens are matched exactly, separated by whitespace)::

        FixedCapital | VasteKapitaalaflossing
        FixedMensualities | VasteMensualiteiten
        VariableLinearCapital <initial payment>
        VariabeleLineaireKapitaalaflossing <initial payment>

    Raises
    ------
    SchemeParseError
        On an unknown name, a wrong number of tokens or an initial payment
        that is not a number.
    """
    parts = text.split()
    scheme_cls = SCHEME_TOKENS.get(parts[0]) if parts else None
    if scheme_cls is None:
        raise SchemeParseError(f"Invalid payment scheme: '{text.strip()}'")
    if scheme_cls is VariableLinearCapital:
        if len(parts) != 2:
            raise SchemeParseError(
                f"{parts[0]} takes exactly one initial payment, e.g. '{parts[0]} 850'; got '{text.strip()}'"
            )
        # float() also takes digit separators ("1_000"); a selector must not.
        if "_" in parts[1]:
            raise SchemeParseError(f"Invalid initial payment: '{parts[1]}'")
        try:
            initial_payment = float(parts[1])
        except ValueError as exc:
            raise SchemeParseError(f"Invalid initial payment: '{parts[1]}'") from exc
        return VariableLinearCapital(initial_payment)
    if len(parts) != 1:
        raise SchemeParseError(f"{parts[0]} takes no parameters; got '{text.strip()}'")
    return scheme_cls()
