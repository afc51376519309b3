# src/financial_projection/models/working_capital.py
"""
Working Capital Schedule

Balances are ratio drivers applied to the current period's flows:
receivables and payables through day counts, the smaller items as a
percentage of revenue or operating expenses.
"""

from typing import Dict

from .assumptions import Assumptions
from .schedule import Schedule
from ..utils.drivers import days_balance
from ..utils.growth import safe_divide


class WorkingCapitalSchedule(Schedule):
    """
    Operating working capital balances and their period changes.

    Changes are first differences (0 in the historical year). A positive
    change in an asset is a use of cash; a positive change in a liability
    is a source.
    """

    NAME = 'working_capital'
    SERIES = (
        'ar_balance',
        'ar_change',
        'inventory_balance',
        'inventory_change',
        'prepaid_balance',
        'prepaid_change',
        'other_ca_balance',
        'other_ca_change',
        'ap_balance',
        'ap_change',
        'accrued_balance',
        'accrued_change',
        'other_cl_balance',
        'other_cl_change',
        'nwc',
        'nwc_percent',
        'nwc_change',
        'cash_conversion_cycle',
    )

    # (balance, change) pairs
    CURRENT_ASSETS = (
        ('ar_balance', 'ar_change'),
        ('inventory_balance', 'inventory_change'),
        ('prepaid_balance', 'prepaid_change'),
        ('other_ca_balance', 'other_ca_change'),
    )
    CURRENT_LIABILITIES = (
        ('ap_balance', 'ap_change'),
        ('accrued_balance', 'accrued_change'),
        ('other_cl_balance', 'other_cl_change'),
    )

    def __init__(self, assumptions: Assumptions, days_in_year: int = 365):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.days_in_year = days_in_year

    def project(
        self,
        period: int,
        revenue: float,
        cogs: float,
        total_opex: float
    ) -> None:
        """
        Compute balances and changes for a period.

        Args:
            period: Period index
            revenue: Revenue for the period
            cogs: Cost of goods sold for the period
            total_opex: SG&A plus R&D for the period
        """
        a = self.assumptions
        days = self.days_in_year

        self.ar_balance[period] = days_balance(revenue, a.dso, days)
        self.inventory_balance[period] = days_balance(cogs, a.dio, days)
        self.ap_balance[period] = days_balance(cogs, a.dpo, days)
        self.prepaid_balance[period] = revenue * a.prepaid_percent
        self.other_ca_balance[period] = revenue * a.other_ca_percent
        self.accrued_balance[period] = total_opex * a.accrued_percent
        self.other_cl_balance[period] = revenue * a.other_cl_percent

        for balance, change in self.CURRENT_ASSETS + self.CURRENT_LIABILITIES:
            values = getattr(self, balance)
            getattr(self, change)[period] = (
                0.0 if period == 0 else values[period] - values[period - 1]
            )

        self.nwc[period] = self.current_assets(period) - self.current_liabilities(period)
        self.nwc_percent[period] = safe_divide(self.nwc[period], revenue)
        self.nwc_change[period] = (
            0.0 if period == 0 else self.nwc[period] - self.nwc[period - 1]
        )
        self.cash_conversion_cycle[period] = a.dso + a.dio - a.dpo

    def current_assets(self, period: int) -> float:
        return sum(getattr(self, balance)[period] for balance, _ in self.CURRENT_ASSETS)

    def current_liabilities(self, period: int) -> float:
        return sum(getattr(self, balance)[period] for balance, _ in self.CURRENT_LIABILITIES)

    def cash_flow_changes(self, period: int) -> Dict[str, float]:
        """
        Working capital lines as they appear on the cash flow statement.

        Asset increases are sign-flipped; liability increases are not.

        Args:
            period: Period index

        Returns:
            Dictionary keyed by cash flow line name
        """
        return {
            'change_in_ar': -self.ar_change[period],
            'change_in_inventory': -self.inventory_change[period],
            'change_in_prepaid': -self.prepaid_change[period],
            'change_in_other_ca': -self.other_ca_change[period],
            'change_in_ap': self.ap_change[period],
            'change_in_accrued': self.accrued_change[period],
            'change_in_other_cl': self.other_cl_change[period],
        }
