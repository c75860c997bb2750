"""Core calculation engine for the mortgage calculator.

This module builds amortization schedules for the three supported payment
schemes: fixed capital (equal principal portions), fixed mensualities (equal
payments, annuity) and variable linear capital (principal portions growing by
a constant step). Inputs are validated up front; an invalid loan raises
``LoanValidationError`` instead of producing a schedule full of NaN.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List

from .data_models import (
    FixedCapital,
    FixedMensualities,
    LoanDefinition,
    PaymentScheme,
    PeriodRecord,
    Schedule,
    VariableLinearCapital,
)
from .errors import LoanValidationError

logger = logging.getLogger(__name__)


def _calculate_annuity_payment(principal: float, rate_per_month: float, term: int) -> float:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if rate_per_month == 0:
        return principal / term
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def validate_inputs(loan: LoanDefinition, scheme: PaymentScheme) -> None:
    """Raise ``LoanValidationError`` if ``scheme`` cannot be applied to ``loan``."""
    loan.validate()
    if isinstance(scheme, VariableLinearCapital):
        if loan.period_count < 2:
            raise LoanValidationError(
                "Variable linear capital repayment needs at least 2 periods; "
                f"got {loan.period_count}"
            )
        if not math.isfinite(scheme.initial_payment):
            raise LoanValidationError(f"Invalid initial payment: {scheme.initial_payment}")
    elif not isinstance(scheme, (FixedCapital, FixedMensualities)):
        raise LoanValidationError(f"Unsupported payment scheme: {scheme!r}")


def fixed_capital_payments(loan: LoanDefinition) -> List[PeriodRecord]:
    """Equal principal portion each month; interest on the balance before it."""
    principal = loan.principal
    fixed_capital = principal / loan.period_count
    monthly_rates = loan.monthly_rate_by_period()

    records: List[PeriodRecord] = []
    for index in range(loan.period_count):
        balance = principal - index * fixed_capital
        payment = fixed_capital + monthly_rates[index] * balance
        records.append(
            PeriodRecord(
                period=index + 1,
                annual_rate=loan.annual_rate_by_period[index],
                payment=payment,
                principal_paid=fixed_capital,
                balance=balance,
            )
        )
    return records


def fixed_mensualities(loan: LoanDefinition) -> List[PeriodRecord]:
    """Annuity payments, each evaluated with that month's own rate.

    Every month the annuity formula is applied to the original principal over
    the full term, using the rate of that month. With a constant rate this is
    the ordinary annuity schedule. With a variable rate it is an approximation
    that overstates the payments after a rate increase (the worst case the
    variable-rate simulation is meant to show); it is not a re-amortization of
    the remaining balance over the remaining term.
    """
    principal = loan.principal
    monthly_rates = loan.monthly_rate_by_period()

    records: List[PeriodRecord] = []
    balance = principal
    for index in range(loan.period_count):
        rate = monthly_rates[index]
        payment = _calculate_annuity_payment(principal, rate, loan.period_count)
        principal_portion = payment - balance * rate
        records.append(
            PeriodRecord(
                period=index + 1,
                annual_rate=loan.annual_rate_by_period[index],
                payment=payment,
                principal_paid=principal_portion,
                balance=balance,
            )
        )
        balance -= principal_portion
    return records


def variable_linear_capital_payments(loan: LoanDefinition, initial_payment: float) -> List[PeriodRecord]:
    """Principal portions in arithmetic progression summing to the principal.

    The first principal portion is whatever remains of ``initial_payment``
    after the first month's interest. The step ``delta`` follows from the sum
    of an arithmetic sequence::

        N * x1 + delta * N * (N - 1) / 2 == principal
    """
    principal = loan.principal
    nperiods = loan.period_count
    monthly_rates = loan.monthly_rate_by_period()

    capital = initial_payment - monthly_rates[0] * principal
    delta = 2 * (principal - nperiods * capital) / ((nperiods - 1) * nperiods)
    logger.debug("Linear capital step: first portion %.6f, delta %.6f", capital, delta)

    records: List[PeriodRecord] = []
    repaid = 0.0
    for index in range(nperiods):
        balance = principal - repaid
        payment = capital + monthly_rates[index] * balance
        records.append(
            PeriodRecord(
                period=index + 1,
                annual_rate=loan.annual_rate_by_period[index],
                payment=payment,
                principal_paid=capital,
                balance=balance,
            )
        )
        repaid += capital
        capital += delta
    return records


def compute_schedule(loan: LoanDefinition, scheme: PaymentScheme) -> Schedule:
    """Compute the amortization schedule of ``loan`` under ``scheme``.

    Parameters
    ----------
    loan: LoanDefinition
        Principal, number of monthly periods and the annual rate per period.
    scheme: PaymentScheme
        One of ``FixedCapital()``, ``FixedMensualities()`` or
        ``VariableLinearCapital(initial_payment)``.

    Returns
    -------
    Schedule
        One record per period, in period order.

    Raises
    ------
    LoanValidationError
        If the loan is malformed or the scheme cannot be applied to it.
    """
    validate_inputs(loan, scheme)
    logger.debug("Computing %s schedule for %s", scheme, loan)

    if isinstance(scheme, FixedCapital):
        records = fixed_capital_payments(loan)
    elif isinstance(scheme, FixedMensualities):
        records = fixed_mensualities(loan)
    else:
        records = variable_linear_capital_payments(loan, scheme.initial_payment)

    return Schedule(records=tuple(records))


def summarize(loan: LoanDefinition, schedule: Schedule) -> Dict[str, object]:
    """Return aggregate metrics of a computed schedule."""
    payments = schedule.payments()
    total_repaid = schedule.total_repaid
    return {
        "principal": loan.principal,
        "period_count": loan.period_count,
        "total_repaid": total_repaid,
        "total_interest": total_repaid - loan.principal,
        "first_payment": payments[0],
        "last_payment": payments[-1],
        "max_payment": max(payments),
        "min_payment": min(payments),
    }
