# tests/test_financial_model.py
import logging

import pandas as pd
import pytest

from financial_projection import (
    FinancialModel,
    LoggingDiagnostics,
    PreconditionError,
    ProjectionConfig,
    RecordingDiagnostics,
    project,
)


class TestEndToEnd:
    def test_base_case(self, base_result):
        summary = base_result.summary
        inc = base_result.income_statement

        assert summary.is_balanced
        assert summary.cash_flow_reconciled

        base_margin = 0.35 - 0.20 - 0.02
        assert base_margin < inc.ebitda_margin[5] < 0.38
        assert inc.ebitda_margin[5] == pytest.approx(0.38 - 0.18 - 0.02)

    def test_revenue_cagr(self, make_assumptions):
        result = project(
            make_assumptions(revenue_growth_rates=[0.10] * 5),
            diagnostics=RecordingDiagnostics()
        )
        assert result.income_statement.revenue[5] == pytest.approx(1610.51)
        assert result.summary.revenue_cagr == pytest.approx(0.10)

    def test_revenue_cagr_from_hundred(self, make_assumptions):
        assumptions = make_assumptions(
            historical_revenue=100.0,
            revenue_growth_rates=[0.10] * 5,
        )
        result = project(assumptions, diagnostics=RecordingDiagnostics())

        assert result.income_statement.revenue[5] == pytest.approx(161.051)
        assert result.summary.revenue_cagr == pytest.approx(0.10)
        assert result.summary.is_balanced

    def test_single_year_horizon(self, make_assumptions):
        result = project(
            make_assumptions(
                projection_years=1,
                revenue_growth_rates=[0.05],
                capex_percent=[0.04],
            ),
            diagnostics=RecordingDiagnostics()
        )
        assert result.years == ('Historical', 'Year 1')
        assert result.summary.is_balanced

    def test_accepts_mapping(self, base_inputs):
        result = FinancialModel(base_inputs, diagnostics=RecordingDiagnostics()).build()
        assert result.income_statement.revenue[1] == pytest.approx(1050.0)

    def test_invalid_mapping_fails_before_build(self, base_inputs):
        base_inputs['dso'] = -5
        with pytest.raises(PreconditionError):
            FinancialModel(base_inputs)

    def test_build_is_cached(self, base_assumptions):
        model = FinancialModel(base_assumptions, diagnostics=RecordingDiagnostics())
        assert model.build() is model.build()


class TestIdempotence:
    def test_same_input_same_output(self, base_assumptions):
        first = project(base_assumptions, diagnostics=RecordingDiagnostics())
        second = project(base_assumptions, diagnostics=RecordingDiagnostics())

        pd.testing.assert_frame_equal(first.to_dataframe(), second.to_dataframe())
        assert first.summary == second.summary


class TestIterativeMode:
    def test_matches_single_pass_without_revolver(self, base_assumptions, iterative_config):
        single = project(base_assumptions, diagnostics=RecordingDiagnostics())
        iterative = project(base_assumptions, iterative_config, RecordingDiagnostics())

        pd.testing.assert_frame_equal(single.to_dataframe(), iterative.to_dataframe())

    def test_converges_with_revolver(self, borrowing_assumptions, iterative_config):
        recorder = RecordingDiagnostics()
        result = project(borrowing_assumptions, iterative_config, recorder)
        debt = result.debt_schedule

        assert result.summary.is_balanced
        assert result.summary.cash_flow_reconciled
        assert not recorder.by_code('circularity_unconverged')
        assert len(recorder.by_code('circularity_converged')) == 5

        for i in range(1, debt.periods):
            assert debt.revolver_average[i] == pytest.approx(
                (debt.revolver_beginning[i] + debt.revolver_ending[i]) / 2, abs=1e-4
            )

    def test_charges_more_interest_while_drawing(self, borrowing_assumptions, iterative_config):
        single = project(borrowing_assumptions, diagnostics=RecordingDiagnostics())
        iterative = project(borrowing_assumptions, iterative_config, RecordingDiagnostics())

        assert single.debt_schedule.revolver_draws[1] > 0
        assert (
            iterative.income_statement.interest_expense[1]
            > single.income_statement.interest_expense[1]
        )

    def test_default_cap_reports_each_period(self, borrowing_assumptions):
        recorder = RecordingDiagnostics()
        project(borrowing_assumptions, ProjectionConfig(circularity_mode='iterative'), recorder)

        reported = recorder.by_code('circularity_converged') + recorder.by_code('circularity_unconverged')
        assert sorted(event.period for event in reported) == [1, 2, 3, 4, 5]


class TestDiagnostics:
    def test_reconciliation_events(self, base_result, recorder):
        codes = recorder.codes()
        assert 'asset_anchor' in codes
        assert 'equity_backsolve' in codes
        assert 'equity_propagation' in codes
        assert codes[-1] == 'reconciliation_complete'
        assert 'historical_tie_out' not in codes

        plugs = recorder.by_code('balance_plug')
        assert [event.period for event in plugs] == [1, 2, 3, 4, 5]
        assert all(event.level == logging.WARNING for event in plugs)

    def test_single_pass_reports_each_period(self, base_result, recorder):
        events = recorder.by_code('circularity_converged')
        assert [event.period for event in events] == [1, 2, 3, 4, 5]
        for event in events:
            assert event.amount == pytest.approx(
                base_result.income_statement.interest_expense[event.period]
            )

    def test_anchor_event_amount(self, base_result, recorder):
        event = recorder.by_code('asset_anchor')[0]
        assert event.period == 0
        assert event.amount == pytest.approx(base_result.balance_sheet.other_ca_adjustment[0])

    def test_historical_tie_out_warning(self, make_assumptions):
        recorder = RecordingDiagnostics()
        project(make_assumptions(historical_net_income=40.0), diagnostics=recorder)

        warnings = recorder.by_code('historical_tie_out')
        assert len(warnings) == 1
        assert 'net income' in warnings[0].message
        assert warnings[0].level == logging.WARNING

    def test_logging_sink(self, base_assumptions, caplog):
        with caplog.at_level(logging.INFO, logger='financial_projection'):
            FinancialModel(base_assumptions, diagnostics=LoggingDiagnostics()).build()

        assert '[asset_anchor] period 0:' in caplog.text
        assert '[reconciliation_complete]' in caplog.text

    def test_recording_forwards(self, base_assumptions):
        inner = RecordingDiagnostics()
        outer = RecordingDiagnostics(forward_to=inner)
        project(base_assumptions, diagnostics=outer)
        assert outer.codes() == inner.codes()


class TestProjectionResult:
    def test_statement_lookup(self, base_result):
        assert base_result.statement('balance_sheet') is base_result.balance_sheet
        with pytest.raises(KeyError):
            base_result.statement('valuation')

    def test_eight_schedules(self, base_result):
        assert set(base_result.schedules) == {
            'income_statement', 'balance_sheet', 'cash_flow', 'debt_schedule',
            'working_capital', 'ppe_schedule', 'equity_schedule', 'ratio_analysis',
        }

    def test_to_dict(self, base_result):
        data = base_result.to_dict()
        assert data['summary']['is_balanced'] is True
        assert data['assumptions']['historical_revenue'] == 1000.0
        assert len(data['balance_sheet']['total_assets']) == 6

    def test_to_dataframe(self, base_result):
        df = base_result.to_dataframe()
        assert df.shape[0] == 6
        assert 'is_revenue' in df.columns
        assert 'bs_cash' in df.columns
        assert 'ratio_roic' in df.columns
