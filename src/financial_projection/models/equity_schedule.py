# src/financial_projection/models/equity_schedule.py
"""
Equity Schedule

APIC, retained earnings and treasury stock rollforwards.

The historical split of total equity into common stock, APIC and
retained earnings is an estimate. The balance sheet reconciliation
overrides opening retained earnings so that the historical balance sheet
balances, then replays the retained earnings rollforward.
"""

from .assumptions import Assumptions
from .schedule import Schedule
from ..utils.growth import safe_divide


class EquitySchedule(Schedule):
    """Shareholders' equity rollforward."""

    NAME = 'equity_schedule'
    SERIES = (
        'common_stock_beginning',
        'common_stock',
        'apic_beginning',
        'stock_based_comp',
        'apic',
        'retained_earnings_beginning',
        'net_income',
        'dividends',
        'retained_earnings',
        'treasury_stock_beginning',
        'share_repurchases',
        'treasury_stock',
        'aoci',
        'total_equity',
        'shares_outstanding',
        'dividends_per_share',
        'payout_ratio',
    )

    def __init__(
        self,
        assumptions: Assumptions,
        common_stock_par: float = 5.0,
        apic_share: float = 0.4
    ):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.common_stock_par = common_stock_par
        self.apic_share = apic_share

    def initialize(self, revenue: float, net_income: float) -> None:
        """
        Back-estimate the historical equity accounts.

        Args:
            revenue: Historical revenue
            net_income: Historical-year net income
        """
        a = self.assumptions

        self.common_stock_beginning[0] = self.common_stock_par
        self.common_stock[0] = self.common_stock_par
        self.stock_based_comp[0] = revenue * a.stock_based_comp_percent
        self.apic[0] = a.historical_equity * self.apic_share
        self.apic_beginning[0] = self.apic[0]
        self.retained_earnings[0] = (
            a.historical_equity - self.common_stock[0] - self.apic[0]
        )
        self.retained_earnings_beginning[0] = self.retained_earnings[0]
        self.net_income[0] = net_income
        self.shares_outstanding[0] = a.historical_shares_outstanding
        self._total(0)

    def calculate_dividends(self, net_income: float) -> float:
        """
        Dividends for a period.

        A per-share dividend takes precedence. Otherwise the payout ratio
        applies to positive net income only.

        Args:
            net_income: Net income for the period

        Returns:
            Cash dividends
        """
        a = self.assumptions
        if a.dividends_per_share > 0:
            return a.dividends_per_share * a.historical_shares_outstanding
        return max(net_income, 0.0) * a.payout_ratio

    def project(self, period: int, revenue: float, net_income: float) -> None:
        """
        Roll equity forward one period.

        Args:
            period: Period index (>= 1)
            revenue: Revenue for the period (drives stock-based comp)
            net_income: Net income for the period
        """
        a = self.assumptions
        prior = period - 1

        self.common_stock_beginning[period] = self.common_stock[prior]
        self.common_stock[period] = self.common_stock[prior]

        self.apic_beginning[period] = self.apic[prior]
        self.stock_based_comp[period] = revenue * a.stock_based_comp_percent
        self.apic[period] = self.apic[prior] + self.stock_based_comp[period]

        dividends = self.calculate_dividends(net_income)
        self.net_income[period] = net_income
        self.dividends[period] = dividends
        self.retained_earnings_beginning[period] = self.retained_earnings[prior]
        self.retained_earnings[period] = (
            self.retained_earnings[prior] + net_income - dividends
        )

        self.treasury_stock_beginning[period] = self.treasury_stock[prior]
        self.share_repurchases[period] = a.share_repurchases
        self.treasury_stock[period] = self.treasury_stock[prior] + a.share_repurchases

        self.shares_outstanding[period] = a.historical_shares_outstanding
        self.dividends_per_share[period] = dividends / self.shares_outstanding[period]
        self.payout_ratio[period] = safe_divide(dividends, net_income)

        self._total(period)

    def rebase_opening_retained_earnings(self, adjustment: float) -> None:
        """
        Shift historical retained earnings and replay the rollforward.

        Every later retained earnings balance is built on the historical
        one, so the same adjustment flows through periods 1..N.

        Args:
            adjustment: Amount added to historical retained earnings
        """
        self.retained_earnings[0] += adjustment
        self.retained_earnings_beginning[0] = self.retained_earnings[0]
        self._total(0)

        for period in range(1, self.periods):
            self.retained_earnings_beginning[period] = self.retained_earnings[period - 1]
            self.retained_earnings[period] = (
                self.retained_earnings[period - 1]
                + self.net_income[period]
                - self.dividends[period]
            )
            self._total(period)

    def _total(self, period: int) -> None:
        self.total_equity[period] = (
            self.common_stock[period]
            + self.apic[period]
            + self.retained_earnings[period]
            - self.treasury_stock[period]
            + self.aoci[period]
        )
