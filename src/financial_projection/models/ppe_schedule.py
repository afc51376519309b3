# src/financial_projection/models/ppe_schedule.py
"""
PP&E Schedule

Capex and depreciation rollforward of net fixed assets. Depreciation is
taken from the same D&A driver as the income statement.
"""

from .assumptions import Assumptions
from .schedule import Schedule
from ..utils.drivers import depreciation_and_amortization
from ..utils.growth import safe_divide


class PPESchedule(Schedule):
    """
    Fixed asset rollforward.

    Only net PP&E is known for the historical year. Gross PP&E is
    back-estimated as a multiple of net and the historical capex as a
    fraction of net; both are approximations and only feed the opening
    balance sheet split and period-0 ratios.
    """

    NAME = 'ppe_schedule'
    SERIES = (
        'beginning_ppe',
        'capex',
        'depreciation',
        'ending_ppe',
        'ppe_gross',
        'accumulated_depreciation',
        'capex_percent',
        'capex_to_da',
    )

    def __init__(
        self,
        assumptions: Assumptions,
        gross_ppe_multiple: float = 1.5,
        historical_capex_ratio: float = 0.1
    ):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.gross_ppe_multiple = gross_ppe_multiple
        self.historical_capex_ratio = historical_capex_ratio

    def project(self, period: int, revenue: float) -> None:
        """
        Roll PP&E forward one period.

        Args:
            period: Period index
            revenue: Revenue for the period
        """
        a = self.assumptions
        depreciation = depreciation_and_amortization(revenue, a.da_percent)

        if period == 0:
            capex = a.historical_ppe * self.historical_capex_ratio
            ending = a.historical_ppe
            gross = a.historical_ppe * self.gross_ppe_multiple
            self.beginning_ppe[0] = ending - capex + depreciation
            self.ppe_gross[0] = gross
            self.accumulated_depreciation[0] = gross - ending
        else:
            capex = revenue * a.capex_rate(period)
            self.beginning_ppe[period] = self.ending_ppe[period - 1]
            self.ppe_gross[period] = self.ppe_gross[period - 1] + capex
            self.accumulated_depreciation[period] = (
                self.accumulated_depreciation[period - 1] + depreciation
            )
            ending = self.ppe_gross[period] - self.accumulated_depreciation[period]

        self.capex[period] = capex
        self.depreciation[period] = depreciation
        self.ending_ppe[period] = ending
        self.capex_percent[period] = safe_divide(capex, revenue)
        self.capex_to_da[period] = safe_divide(capex, depreciation)
