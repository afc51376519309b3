# src/financial_projection/models/ratio_analysis.py
"""
Ratio Analysis

Profitability, liquidity, leverage, efficiency, growth and per-share
ratios read from the finished statements, plus the summary block.

Return ratios and turnovers use average balances: (opening + closing) / 2
for projected periods, the closing balance alone for the historical
year. A non-positive denominator gives 0.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .assumptions import Assumptions
from .debt_schedule import DebtSchedule
from .schedule import Schedule
from .working_capital import WorkingCapitalSchedule
from ..utils.growth import (
    average_balance,
    average_of,
    compound_growth_rate,
    period_growth,
    safe_divide,
)


@dataclass(frozen=True)
class ProjectionSummary:
    """Headline metrics of a projection run."""
    revenue_cagr: float
    ebitda_cagr: float
    net_income_cagr: float
    eps_cagr: float
    ending_net_debt_to_ebitda: float
    ending_debt_to_equity: float
    average_roic: float
    is_balanced: bool
    cash_flow_reconciled: bool
    max_balance_plug: float
    max_imbalance: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RatioAnalysis(Schedule):
    """Derived ratios. A pure read of the other schedules."""

    NAME = 'ratio_analysis'
    SERIES = (
        # Profitability
        'gross_margin',
        'ebitda_margin',
        'ebit_margin',
        'net_margin',
        'roe',
        'roa',
        'nopat',
        'invested_capital',
        'roic',

        # Liquidity
        'current_ratio',
        'quick_ratio',
        'cash_ratio',

        # Leverage
        'total_debt',
        'debt_to_equity',
        'debt_to_ebitda',
        'net_debt',
        'net_debt_to_ebitda',
        'interest_coverage',

        # Efficiency
        'asset_turnover',
        'inventory_turnover',
        'receivables_turnover',
        'payables_turnover',
        'days_sales_outstanding',
        'days_inventory_outstanding',
        'days_payables_outstanding',
        'cash_conversion_cycle',

        # Growth
        'revenue_growth',
        'ebitda_growth',
        'net_income_growth',
        'eps_growth',

        # Per share
        'eps',
        'book_value_per_share',
    )

    def __init__(self, assumptions: Assumptions, days_in_year: int = 365):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.days_in_year = days_in_year

    def calculate(
        self,
        income_statement,
        balance_sheet,
        debt_schedule: DebtSchedule,
        working_capital: WorkingCapitalSchedule
    ) -> 'RatioAnalysis':
        """
        Compute every ratio for every period.

        Args:
            income_statement: Finished IncomeStatement
            balance_sheet: Reconciled BalanceSheet
            debt_schedule: Debt schedule
            working_capital: Working capital schedule

        Returns:
            self
        """
        inc = income_statement
        bs = balance_sheet
        days = self.days_in_year

        for i in range(self.periods):
            self.gross_margin[i] = inc.gross_margin[i]
            self.ebitda_margin[i] = inc.ebitda_margin[i]
            self.ebit_margin[i] = inc.ebit_margin[i]
            self.net_margin[i] = inc.net_margin[i]

            self.nopat[i] = inc.calculate_noplat(i)
            self.invested_capital[i] = (
                bs.total_equity[i]
                + debt_schedule.term_debt_ending[i]
                + debt_schedule.revolver_ending[i]
                - bs.cash[i]
            )

            self.current_ratio[i] = safe_divide(
                bs.total_current_assets[i], bs.total_current_liabilities[i]
            )
            self.quick_ratio[i] = safe_divide(
                bs.total_current_assets[i] - bs.inventory[i],
                bs.total_current_liabilities[i]
            )
            self.cash_ratio[i] = safe_divide(bs.cash[i], bs.total_current_liabilities[i])

            total_debt = debt_schedule.total_debt(i)
            self.total_debt[i] = total_debt
            self.net_debt[i] = total_debt - bs.cash[i]
            self.debt_to_equity[i] = safe_divide(total_debt, bs.total_equity[i])
            self.debt_to_ebitda[i] = safe_divide(total_debt, inc.ebitda[i])
            self.net_debt_to_ebitda[i] = safe_divide(self.net_debt[i], inc.ebitda[i])
            self.interest_coverage[i] = safe_divide(
                inc.ebit[i], debt_schedule.total_interest_expense[i]
            )

            self.eps[i] = inc.eps[i]
            self.book_value_per_share[i] = (
                bs.total_equity[i] / inc.shares_outstanding[i]
            )

        for i in range(self.periods):
            self.roe[i] = safe_divide(inc.net_income[i], average_balance(bs.total_equity, i))
            self.roa[i] = safe_divide(inc.net_income[i], average_balance(bs.total_assets, i))
            self.roic[i] = safe_divide(
                self.nopat[i], average_balance(self.invested_capital, i)
            )

            self.asset_turnover[i] = safe_divide(
                inc.revenue[i], average_balance(bs.total_assets, i)
            )
            self.inventory_turnover[i] = safe_divide(
                inc.cogs[i], average_balance(working_capital.inventory_balance, i)
            )
            self.receivables_turnover[i] = safe_divide(
                inc.revenue[i], average_balance(working_capital.ar_balance, i)
            )
            self.payables_turnover[i] = safe_divide(
                inc.cogs[i], average_balance(working_capital.ap_balance, i)
            )

            self.days_sales_outstanding[i] = safe_divide(days, self.receivables_turnover[i])
            self.days_inventory_outstanding[i] = safe_divide(days, self.inventory_turnover[i])
            self.days_payables_outstanding[i] = safe_divide(days, self.payables_turnover[i])
            self.cash_conversion_cycle[i] = working_capital.cash_conversion_cycle[i]

        self.revenue_growth = period_growth(inc.revenue)
        self.ebitda_growth = period_growth(inc.ebitda)
        self.net_income_growth = period_growth(inc.net_income)
        self.eps_growth = period_growth(inc.eps)

        return self

    def summarize(
        self,
        income_statement,
        is_balanced: bool,
        cash_flow_reconciled: bool,
        max_balance_plug: float,
        max_imbalance: float
    ) -> ProjectionSummary:
        """
        Build the summary block.

        CAGRs run from the historical year to year N. Average ROIC is
        taken over the projected years only.

        Args:
            income_statement: Finished IncomeStatement
            is_balanced: Balance sheet post-condition result
            cash_flow_reconciled: Cash flow cross-check result
            max_balance_plug: Largest absolute cash plug
            max_imbalance: Largest absolute balance sheet imbalance

        Returns:
            ProjectionSummary
        """
        inc = income_statement
        n = self.horizon

        return ProjectionSummary(
            revenue_cagr=compound_growth_rate(inc.revenue[0], inc.revenue[n], n),
            ebitda_cagr=compound_growth_rate(inc.ebitda[0], inc.ebitda[n], n),
            net_income_cagr=compound_growth_rate(inc.net_income[0], inc.net_income[n], n),
            eps_cagr=compound_growth_rate(inc.eps[0], inc.eps[n], n),
            ending_net_debt_to_ebitda=self.net_debt_to_ebitda[n],
            ending_debt_to_equity=self.debt_to_equity[n],
            average_roic=average_of(list(self.roic[1:])),
            is_balanced=is_balanced,
            cash_flow_reconciled=cash_flow_reconciled,
            max_balance_plug=max_balance_plug,
            max_imbalance=max_imbalance,
        )
