"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan definition, the three payment schemes, individual
schedule records and the schedule that groups them. All of them are frozen;
a schedule is computed once and only read afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

from .errors import LoanValidationError


def year_to_monthly_interest(annual_rate: float) -> float:
    """Return the monthly rate whose 12-fold compounding equals ``annual_rate``.

    This is the exact equivalent rate, not ``annual_rate / 12``. Rates below
    -100 % have no real equivalent and give NaN.
    """
    if 1.0 + annual_rate < 0:
        return math.nan
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


@dataclass(frozen=True)
class LoanDefinition:
    """A mortgage to be repaid in monthly periods.

    Attributes
    ----------
    principal: float
        The borrowed amount.
    period_count: int
        Total number of monthly periods.
    annual_rate_by_period: Tuple[float, ...]
        The nominal annual rate (as a fraction, 0.018 for 1.8 %) in effect
        for each period. Must contain exactly ``period_count`` entries.

    Construction performs no checks; call :meth:`validate` before handing the
    loan to the engine (``compute_schedule`` does this for you).
    """

    principal: float
    period_count: int
    annual_rate_by_period: Tuple[float, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but keep an immutable copy.
        object.__setattr__(self, "annual_rate_by_period", tuple(self.annual_rate_by_period))

    def __str__(self) -> str:
        return f"Mortgage(capital={self.principal}, nperiods={self.period_count})"

    def monthly_rate_by_period(self) -> List[float]:
        """Return the compounding-equivalent monthly rate for every period."""
        return [year_to_monthly_interest(rate) for rate in self.annual_rate_by_period]

    def validate(self) -> None:
        """Raise ``LoanValidationError`` if the loan cannot be amortized."""
        if not math.isfinite(self.principal) or self.principal <= 0:
            raise LoanValidationError(f"Principal must be a positive amount; got {self.principal}")
        if self.period_count <= 0:
            raise LoanValidationError(f"Number of periods must be positive; got {self.period_count}")
        if len(self.annual_rate_by_period) != self.period_count:
            raise LoanValidationError(
                f"Expected {self.period_count} interest rates (one per period); "
                f"got {len(self.annual_rate_by_period)}"
            )
        for period, rate in enumerate(self.annual_rate_by_period, start=1):
            if not math.isfinite(rate) or rate <= -1:
                raise LoanValidationError(f"Invalid annual interest rate {rate} in period {period}")


@dataclass(frozen=True)
class FixedCapital:
    """Equal principal portion every period (decreasing payments)."""

    def __str__(self) -> str:
        return "FixedCapital"


@dataclass(frozen=True)
class FixedMensualities:
    """Equal total payment every period (annuity)."""

    def __str__(self) -> str:
        return "FixedMensualities"


@dataclass(frozen=True)
class VariableLinearCapital:
    """Principal portion growing linearly from the one implied by ``initial_payment``."""

    initial_payment: float

    def __str__(self) -> str:
        return f"VariableLinearCapital {self.initial_payment}"


PaymentScheme = Union[FixedCapital, FixedMensualities, VariableLinearCapital]


@dataclass(frozen=True)
class PeriodRecord:
    """One row of the amortization schedule.

    ``balance`` is the outstanding principal the period's interest was charged
    on, i.e. *before* ``principal_paid`` is deducted. ``ending_balance`` gives
    the value after deduction.
    """

    period: int
    annual_rate: float
    payment: float
    principal_paid: float
    balance: float

    @property
    def interest_paid(self) -> float:
        return self.payment - self.principal_paid

    @property
    def ending_balance(self) -> float:
        return self.balance - self.principal_paid


@dataclass(frozen=True)
class Schedule:
    """The ordered list of period records produced by the engine."""

    records: Tuple[PeriodRecord, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PeriodRecord]:
        return iter(self.records)

    def __getitem__(self, index):
        return self.records[index]

    def payments(self) -> List[float]:
        return [r.payment for r in self.records]

    def principal_paid(self) -> List[float]:
        return [r.principal_paid for r in self.records]

    @property
    def total_repaid(self) -> float:
        return sum(self.payments())
