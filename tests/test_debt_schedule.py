# tests/test_debt_schedule.py
import pytest

from financial_projection import FinancialModel, RecordingDiagnostics
from financial_projection.models import DebtSchedule


@pytest.fixture
def debt(base_assumptions, recorder):
    schedule = DebtSchedule(base_assumptions, recorder)
    schedule.initialize()
    schedule.roll_term_debt(1)
    return schedule


class TestTermDebt:
    def test_historical_period(self, debt):
        assert debt.term_debt_ending[0] == 200.0
        assert debt.total_interest_expense[0] == 12.0
        assert debt.current_portion_debt[0] == 20.0
        assert debt.revolver_available[0] == 50.0
        assert debt.interest_income_on_cash[0] == pytest.approx(1.6)

    def test_amortization(self, debt):
        assert debt.term_debt_amortization[1] == 20.0
        assert debt.term_debt_ending[1] == 180.0
        assert debt.term_debt_interest[1] == pytest.approx(190.0 * 0.06)
        assert debt.long_term_debt(1) == pytest.approx(160.0)

    def test_amortization_capped_at_balance(self, make_assumptions):
        schedule = DebtSchedule(
            make_assumptions(existing_debt_balance=30.0, historical_total_debt=30.0),
            RecordingDiagnostics()
        )
        schedule.initialize()
        schedule.roll_term_debt(1)
        schedule.roll_term_debt(2)

        assert schedule.term_debt_amortization[2] == pytest.approx(10.0)
        assert schedule.term_debt_ending[2] == 0.0
        assert schedule.current_portion_debt[2] == 0.0


class TestRevolver:
    def test_interest_on_estimate(self, debt):
        total = debt.estimate_interest(1, revolver_estimate=20.0)

        assert debt.revolver_average[1] == pytest.approx(10.0)
        assert debt.revolver_interest[1] == pytest.approx(0.7)
        # fee on capacity left undrawn at the estimated closing balance
        assert debt.revolver_commitment_fee[1] == pytest.approx(30.0 * 0.005)
        assert total == pytest.approx(11.4 + 0.7 + 0.15)

    def test_draw_on_shortfall(self, debt, recorder):
        resolution = debt.resolve_revolver(1, preliminary_cash=30.0)

        assert resolution.draw == pytest.approx(20.0)
        assert resolution.ending_cash == pytest.approx(50.0)
        assert resolution.floor_top_up == 0.0
        assert debt.revolver_ending[1] == pytest.approx(20.0)
        assert debt.revolver_available[1] == pytest.approx(30.0)

        debt.report_revolver_activity(1, resolution)
        assert recorder.codes() == ['revolver_draw']

    def test_draw_capped_and_cash_floored(self, debt, recorder):
        resolution = debt.resolve_revolver(1, preliminary_cash=-20.0)

        assert resolution.draw == pytest.approx(50.0)
        assert resolution.ending_cash == pytest.approx(50.0)
        assert resolution.floor_top_up == pytest.approx(20.0)
        assert debt.revolver_available[1] == 0.0

        debt.report_revolver_activity(1, resolution)
        assert set(recorder.codes()) == {
            'revolver_draw', 'minimum_cash_floor', 'revolver_capacity'
        }

    def test_paydown_from_excess_cash(self, debt):
        debt.resolve_revolver(1, preliminary_cash=30.0)
        debt.roll_term_debt(2)

        resolution = debt.resolve_revolver(2, preliminary_cash=58.0)

        assert resolution.paydown == pytest.approx(8.0)
        assert resolution.ending_cash == pytest.approx(50.0)
        assert debt.revolver_ending[2] == pytest.approx(12.0)

    def test_paydown_limited_to_balance(self, debt):
        debt.resolve_revolver(1, preliminary_cash=30.0)
        debt.roll_term_debt(2)

        resolution = debt.resolve_revolver(2, preliminary_cash=200.0)

        assert resolution.paydown == pytest.approx(20.0)
        assert resolution.ending_cash == pytest.approx(180.0)
        assert debt.revolver_ending[2] == 0.0

    def test_no_activity_above_minimum(self, debt):
        resolution = debt.resolve_revolver(1, preliminary_cash=120.0)
        assert resolution.draw == 0.0
        assert resolution.paydown == 0.0
        assert resolution.ending_cash == 120.0

    def test_cash_yield(self, debt):
        income = debt.record_cash_yield(1, beginning_cash=80.0, ending_cash=120.0)
        assert debt.average_cash[1] == 100.0
        assert income == pytest.approx(2.0)


class TestRevolverInModel:
    def test_bounds_hold(self, borrowing_assumptions):
        result = FinancialModel(borrowing_assumptions).build()
        debt = result.debt_schedule

        assert max(debt.revolver_ending) > 0
        for i in range(debt.periods):
            assert 0.0 <= debt.revolver_ending[i] <= 500.0
            assert debt.revolver_available[i] == pytest.approx(500.0 - debt.revolver_ending[i])

    def test_borrowing_keeps_minimum_cash(self, borrowing_assumptions):
        result = FinancialModel(borrowing_assumptions).build()
        debt = result.debt_schedule
        cash_flow = result.cash_flow

        assert debt.revolver_draws[1] > 0
        for i in range(1, cash_flow.periods):
            if debt.revolver_draws[i] > 0:
                assert cash_flow.ending_cash[i] == pytest.approx(50.0)
            assert cash_flow.revolver_change[i] == pytest.approx(
                debt.revolver_draws[i] - debt.revolver_paydowns[i]
            )

        assert result.summary.is_balanced
        assert result.summary.cash_flow_reconciled

    def test_interest_uses_opening_revolver_in_single_pass(self, borrowing_assumptions):
        result = FinancialModel(borrowing_assumptions).build()
        debt = result.debt_schedule

        for i in range(1, debt.periods):
            assert debt.revolver_average[i] == pytest.approx(debt.revolver_beginning[i])
            assert debt.revolver_interest[i] == pytest.approx(debt.revolver_beginning[i] * 0.07)
