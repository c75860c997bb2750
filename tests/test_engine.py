import logging

import pytest

from mortgage_calc.data_models import (
    FixedCapital,
    FixedMensualities,
    LoanDefinition,
    VariableLinearCapital,
    year_to_monthly_interest,
)
from mortgage_calc.engine import (
    _calculate_annuity_payment,
    compute_schedule,
    summarize,
    validate_inputs,
)
from mortgage_calc.errors import LoanValidationError
from mortgage_calc.utils import fixed_rate_path, worst_case_rate_path


def make_loan(principal, periods, annual_rate):
    return LoanDefinition(principal, periods, tuple(fixed_rate_path(annual_rate, periods)))


class TestSinglePeriod:
    def test_fixed_capital_pays_everything_plus_one_month_interest(self):
        loan = make_loan(92000.0, 1, 0.018)
        schedule = compute_schedule(loan, FixedCapital())
        expected = 92000.0 * (1 + year_to_monthly_interest(0.018))
        assert len(schedule) == 1
        assert schedule[0].payment == pytest.approx(expected, abs=1e-9)

    def test_fixed_mensualities_degenerates_to_full_payoff(self):
        loan = make_loan(92000.0, 1, 0.018)
        schedule = compute_schedule(loan, FixedMensualities())
        expected = 92000.0 * (1 + year_to_monthly_interest(0.018))
        assert schedule[0].payment == pytest.approx(expected, abs=1e-6)

    def test_variable_linear_capital_rejected(self):
        loan = make_loan(92000.0, 1, 0.018)
        with pytest.raises(LoanValidationError, match="at least 2 periods"):
            compute_schedule(loan, VariableLinearCapital(95000.0))


class TestFixedCapital:
    def test_equal_principal_portions(self):
        loan = make_loan(120000.0, 240, 0.03)
        schedule = compute_schedule(loan, FixedCapital())
        assert all(r.principal_paid == 500.0 for r in schedule)
        assert sum(schedule.principal_paid()) == pytest.approx(120000.0)

    def test_balance_decreases_to_zero(self):
        loan = make_loan(120000.0, 240, 0.03)
        schedule = compute_schedule(loan, FixedCapital())
        balances = [r.balance for r in schedule]
        assert balances[0] == 120000.0
        assert all(later < earlier for earlier, later in zip(balances, balances[1:]))
        assert schedule[-1].period == 240
        assert schedule[-1].ending_balance == pytest.approx(0.0, abs=1e-6)

    def test_interest_charged_on_balance_before_repayment(self):
        loan = make_loan(120000.0, 240, 0.03)
        monthly = year_to_monthly_interest(0.03)
        schedule = compute_schedule(loan, FixedCapital())
        second = schedule[1]
        assert second.balance == pytest.approx(119500.0)
        assert second.interest_paid == pytest.approx(119500.0 * monthly)

    def test_payments_decrease(self):
        schedule = compute_schedule(make_loan(120000.0, 240, 0.03), FixedCapital())
        payments = schedule.payments()
        assert payments == sorted(payments, reverse=True)


class TestFixedMensualities:
    def test_constant_rate_gives_constant_payment(self):
        loan = make_loan(200000.0, 300, 0.025)
        schedule = compute_schedule(loan, FixedMensualities())
        first = schedule[0].payment
        assert all(r.payment == pytest.approx(first) for r in schedule)

    def test_constant_rate_fully_amortizes(self):
        loan = make_loan(200000.0, 300, 0.025)
        schedule = compute_schedule(loan, FixedMensualities())
        assert sum(schedule.principal_paid()) == pytest.approx(200000.0, abs=1e-6)
        assert schedule[-1].ending_balance == pytest.approx(0.0, abs=1e-6)

    def test_principal_share_grows(self):
        schedule = compute_schedule(make_loan(200000.0, 300, 0.025), FixedMensualities())
        principal_paid = schedule.principal_paid()
        assert principal_paid == sorted(principal_paid)

    def test_zero_rate_divides_principal_evenly(self):
        schedule = compute_schedule(make_loan(12000.0, 12, 0.0), FixedMensualities())
        assert all(r.payment == pytest.approx(1000.0) for r in schedule)
        assert all(r.interest_paid == pytest.approx(0.0) for r in schedule)

    def test_each_month_uses_full_term_annuity_at_its_own_rate(self):
        rates = worst_case_rate_path(0.02, 0.05, 61, 240)
        loan = LoanDefinition(150000.0, 240, tuple(rates))
        schedule = compute_schedule(loan, FixedMensualities())
        low = _calculate_annuity_payment(150000.0, year_to_monthly_interest(0.02), 240)
        high = _calculate_annuity_payment(150000.0, year_to_monthly_interest(0.05), 240)
        assert schedule[59].payment == pytest.approx(low)
        assert schedule[60].payment == pytest.approx(high)
        assert schedule[60].annual_rate == 0.05

    def test_balance_is_carried_from_previous_period(self):
        rates = worst_case_rate_path(0.02, 0.05, 13, 120)
        schedule = compute_schedule(LoanDefinition(80000.0, 120, tuple(rates)), FixedMensualities())
        for previous, current in zip(schedule, schedule[1:]):
            assert current.balance == pytest.approx(previous.ending_balance)


class TestVariableLinearCapital:
    def test_principal_portions_sum_to_principal(self):
        loan = make_loan(100000.0, 120, 0.02)
        schedule = compute_schedule(loan, VariableLinearCapital(900.0))
        assert sum(schedule.principal_paid()) == pytest.approx(100000.0, abs=1e-6)

    def test_principal_portions_grow_by_constant_step(self):
        loan = make_loan(100000.0, 120, 0.02)
        schedule = compute_schedule(loan, VariableLinearCapital(900.0))
        paid = schedule.principal_paid()
        steps = [b - a for a, b in zip(paid, paid[1:])]
        assert steps[0] > 0
        assert all(step == pytest.approx(steps[0], abs=1e-9) for step in steps)

    def test_step_matches_closed_form(self):
        loan = make_loan(100000.0, 120, 0.02)
        monthly = year_to_monthly_interest(0.02)
        first_portion = 900.0 - monthly * 100000.0
        delta = 2 * (100000.0 - 120 * first_portion) / (119 * 120)
        schedule = compute_schedule(loan, VariableLinearCapital(900.0))
        assert schedule[0].principal_paid == pytest.approx(first_portion)
        assert schedule[1].principal_paid - schedule[0].principal_paid == pytest.approx(delta)

    def test_first_payment_is_initial_payment(self):
        schedule = compute_schedule(make_loan(100000.0, 120, 0.02), VariableLinearCapital(900.0))
        assert schedule[0].payment == pytest.approx(900.0)
        assert schedule[0].balance == 100000.0

    def test_high_initial_payment_gives_decreasing_portions(self):
        schedule = compute_schedule(make_loan(100000.0, 120, 0.02), VariableLinearCapital(1000.0))
        paid = schedule.principal_paid()
        assert paid[1] < paid[0]
        assert sum(paid) == pytest.approx(100000.0, abs=1e-6)
        assert schedule[-1].ending_balance == pytest.approx(0.0, abs=1e-6)

    def test_step_logged_at_debug(self, caplog):
        caplog.set_level(logging.DEBUG, logger="mortgage_calc.engine")
        compute_schedule(make_loan(100000.0, 120, 0.02), VariableLinearCapital(900.0))
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("delta 1.655" in m for m in messages)

    def test_non_finite_initial_payment_rejected(self):
        with pytest.raises(LoanValidationError, match="initial payment"):
            compute_schedule(make_loan(100000.0, 120, 0.02), VariableLinearCapital(float("nan")))


class TestValidation:
    @pytest.mark.parametrize(
        "loan, message",
        [
            (LoanDefinition(0.0, 12, (0.02,) * 12), "Principal"),
            (LoanDefinition(-5.0, 12, (0.02,) * 12), "Principal"),
            (LoanDefinition(1000.0, 0, ()), "periods"),
            (LoanDefinition(1000.0, 12, (0.02,) * 11), "Expected 12 interest rates"),
            (LoanDefinition(1000.0, 2, (0.02, float("inf"))), "period 2"),
            (LoanDefinition(1000.0, 2, (-1.0, 0.02)), "period 1"),
        ],
    )
    def test_malformed_loans_fail_fast(self, loan, message):
        with pytest.raises(LoanValidationError, match=message):
            compute_schedule(loan, FixedCapital())

    def test_unknown_scheme_rejected(self):
        with pytest.raises(LoanValidationError, match="Unsupported payment scheme"):
            validate_inputs(make_loan(1000.0, 12, 0.02), "FixedCapital")


class TestScheduleTotals:
    @pytest.mark.parametrize(
        "scheme",
        [FixedCapital(), FixedMensualities(), VariableLinearCapital(1200.0)],
    )
    def test_total_repaid_is_sum_of_payments(self, scheme):
        rates = worst_case_rate_path(0.015, 0.04, 37, 180)
        schedule = compute_schedule(LoanDefinition(150000.0, 180, tuple(rates)), scheme)
        assert len(schedule) == 180
        assert [r.period for r in schedule] == list(range(1, 181))
        assert schedule.total_repaid == sum(r.payment for r in schedule)
        for record in schedule:
            assert record.interest_paid == record.payment - record.principal_paid

    def test_summarize(self):
        loan = make_loan(120000.0, 240, 0.03)
        schedule = compute_schedule(loan, FixedCapital())
        summary = summarize(loan, schedule)
        assert summary["period_count"] == 240
        assert summary["total_repaid"] == schedule.total_repaid
        assert summary["total_interest"] == pytest.approx(schedule.total_repaid - 120000.0)
        assert summary["first_payment"] == summary["max_payment"]
        assert summary["last_payment"] == summary["min_payment"]

    def test_fixed_capital_cheaper_than_annuity(self):
        loan = make_loan(200000.0, 300, 0.03)
        capital = compute_schedule(loan, FixedCapital()).total_repaid
        annuity = compute_schedule(loan, FixedMensualities()).total_repaid
        assert capital < annuity
