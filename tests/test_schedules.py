# tests/test_schedules.py
import pandas as pd
import pytest

from financial_projection.models import (
    EquitySchedule,
    PPESchedule,
    Schedule,
    WorkingCapitalSchedule,
)


class TestSchedule:
    def test_series_are_aligned(self, base_result):
        for name, schedule in base_result.schedules.items():
            for series in schedule.SERIES:
                assert len(getattr(schedule, series)) == 6, (name, series)

    def test_frozen_after_build(self, base_result):
        bs = base_result.balance_sheet
        assert bs.frozen
        assert isinstance(bs.cash, tuple)
        with pytest.raises(TypeError):
            bs.cash[1] = 0.0

    def test_to_dataframe(self, base_result):
        df = base_result.income_statement.to_dataframe()
        assert list(df.index) == list(base_result.years)
        assert df.index.name == 'period'
        assert df.loc['Year 1', 'revenue'] == pytest.approx(1050.0)

        statement = base_result.income_statement.to_dataframe(transpose=True)
        assert list(statement.columns) == list(base_result.years)

    def test_to_dict_has_years(self, base_result):
        data = base_result.cash_flow.to_dict()
        assert data['years'][0] == 'Historical'
        assert len(data['ending_cash']) == 6

    def test_unknown_series(self, base_result):
        with pytest.raises(KeyError):
            base_result.ppe_schedule.series('goodwill')

    def test_empty_schedule(self):
        schedule = Schedule(['Historical', 'Year 1'])
        assert schedule.periods == 2
        assert schedule.horizon == 1
        assert isinstance(schedule.to_dataframe(), pd.DataFrame)


class TestWorkingCapital:
    def test_day_count_balances(self, base_assumptions):
        wc = WorkingCapitalSchedule(base_assumptions)
        wc.project(0, revenue=1000.0, cogs=650.0, total_opex=220.0)

        assert wc.ar_balance[0] == pytest.approx(1000.0 * 45 / 365)
        assert wc.inventory_balance[0] == pytest.approx(650.0 * 60 / 365)
        assert wc.ap_balance[0] == pytest.approx(650.0 * 30 / 365)
        assert wc.prepaid_balance[0] == pytest.approx(10.0)
        assert wc.accrued_balance[0] == pytest.approx(11.0)
        assert wc.ar_change[0] == 0.0
        assert wc.cash_conversion_cycle[0] == 75.0

    def test_changes_and_cash_flow_signs(self, base_assumptions):
        wc = WorkingCapitalSchedule(base_assumptions)
        wc.project(0, revenue=1000.0, cogs=650.0, total_opex=220.0)
        wc.project(1, revenue=1100.0, cogs=700.0, total_opex=230.0)

        assert wc.ar_change[1] == pytest.approx(100.0 * 45 / 365)
        changes = wc.cash_flow_changes(1)
        assert changes['change_in_ar'] == pytest.approx(-wc.ar_change[1])
        assert changes['change_in_ap'] == pytest.approx(wc.ap_change[1])
        assert wc.nwc_change[1] == pytest.approx(wc.nwc[1] - wc.nwc[0])
        assert sum(changes.values()) == pytest.approx(-wc.nwc_change[1])


class TestPPE:
    def test_historical_back_estimates(self, base_assumptions):
        ppe = PPESchedule(base_assumptions)
        ppe.project(0, revenue=1000.0)

        assert ppe.ending_ppe[0] == 300.0
        assert ppe.ppe_gross[0] == pytest.approx(450.0)
        assert ppe.accumulated_depreciation[0] == pytest.approx(150.0)
        assert ppe.capex[0] == pytest.approx(30.0)

    def test_rollforward(self, base_result):
        ppe = base_result.ppe_schedule
        inc = base_result.income_statement
        for i in range(1, ppe.periods):
            assert ppe.capex[i] == pytest.approx(inc.revenue[i] * 0.04)
            assert ppe.depreciation[i] == pytest.approx(inc.da[i])
            assert ppe.ending_ppe[i] == pytest.approx(
                ppe.ending_ppe[i - 1] + ppe.capex[i] - ppe.depreciation[i]
            )
            assert ppe.ending_ppe[i] == pytest.approx(
                ppe.ppe_gross[i] - ppe.accumulated_depreciation[i]
            )


class TestEquity:
    def test_historical_split(self, base_assumptions):
        equity = EquitySchedule(base_assumptions)
        equity.initialize(revenue=1000.0, net_income=66.0)

        assert equity.common_stock[0] == 5.0
        assert equity.apic[0] == pytest.approx(160.0)
        assert equity.retained_earnings[0] == pytest.approx(235.0)
        assert equity.total_equity[0] == pytest.approx(400.0)

    def test_dividend_policy(self, make_assumptions):
        by_payout = EquitySchedule(make_assumptions())
        assert by_payout.calculate_dividends(100.0) == pytest.approx(20.0)
        assert by_payout.calculate_dividends(-50.0) == 0.0

        by_dps = EquitySchedule(make_assumptions(dividends_per_share=0.5))
        assert by_dps.calculate_dividends(100.0) == pytest.approx(50.0)
        assert by_dps.calculate_dividends(-50.0) == pytest.approx(50.0)

    def test_rollforward(self, base_result):
        eq = base_result.equity_schedule
        for i in range(1, eq.periods):
            assert eq.retained_earnings[i] == pytest.approx(
                eq.retained_earnings[i - 1] + eq.net_income[i] - eq.dividends[i]
            )
            assert eq.treasury_stock[i] == pytest.approx(10.0 * i)
            assert eq.apic[i] == pytest.approx(eq.apic[i - 1] + eq.stock_based_comp[i])

    def test_rebase_replays_rollforward(self, base_assumptions):
        equity = EquitySchedule(base_assumptions)
        equity.initialize(revenue=1000.0, net_income=66.0)
        equity.project(1, revenue=1050.0, net_income=80.0)
        equity.project(2, revenue=1102.5, net_income=90.0)
        before = list(equity.retained_earnings)

        equity.rebase_opening_retained_earnings(25.0)

        for i in range(3):
            assert equity.retained_earnings[i] == pytest.approx(before[i] + 25.0)
        assert equity.total_equity[2] == pytest.approx(
            5.0 + equity.apic[2] + equity.retained_earnings[2] - equity.treasury_stock[2]
        )
