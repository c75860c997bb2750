"""Exceptions raised by the mortgage calculator.

Both exceptions derive from ``ValueError`` so callers that only care about
"bad input" can catch that, while the CLI and web front end can tell a
malformed scheme selector apart from a loan the engine refuses to compute.
"""


class SchemeParseError(ValueError):
    """Raised when a payment-scheme selector string cannot be parsed."""


class LoanValidationError(ValueError):
    """Raised when a loan (or loan/scheme pair) cannot produce a valid schedule."""
