# src/financial_projection/financial_statements/cash_flow.py
"""
Cash Flow Statement

Indirect method. Outflows are stored as negative numbers so every
section is a plain sum of its lines.

A period is built in two steps: project() records everything except the
revolver, which gives the cash available before any borrowing;
apply_revolver() then books the draw or paydown and the closing cash.
"""

from typing import Dict, List, Tuple

from ..models.assumptions import Assumptions
from ..models.schedule import Schedule


class CashFlowStatement(Schedule):
    """
    Projected cash flow statement.

    The historical year carries the historical flows for reference, but
    its opening and closing cash are both the reported historical cash.
    """

    NAME = 'cash_flow'
    SERIES = (
        'net_income',
        'depreciation',
        'stock_based_comp',
        'total_non_cash',
        'change_in_ar',
        'change_in_inventory',
        'change_in_prepaid',
        'change_in_other_ca',
        'change_in_ap',
        'change_in_accrued',
        'change_in_other_cl',
        'total_working_capital_change',
        'cfo',
        'capex',
        'cfi',
        'debt_repayments',
        'revolver_change',
        'share_repurchases',
        'dividends_paid',
        'cff',
        'net_cash_change',
        'beginning_cash',
        'ending_cash',
        'free_cash_flow',
    )

    WORKING_CAPITAL_LINES = (
        'change_in_ar',
        'change_in_inventory',
        'change_in_prepaid',
        'change_in_other_ca',
        'change_in_ap',
        'change_in_accrued',
        'change_in_other_cl',
    )

    def __init__(self, assumptions: Assumptions):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions

    def project(
        self,
        period: int,
        net_income: float,
        depreciation: float,
        stock_based_comp: float,
        working_capital_changes: Dict[str, float],
        capex: float,
        debt_repayment: float,
        share_repurchases: float,
        dividends: float
    ) -> float:
        """
        Record a period's flows before revolver activity.

        Args:
            period: Period index
            net_income: Net income
            depreciation: D&A
            stock_based_comp: Stock-based compensation
            working_capital_changes: Cash flow working capital lines,
                already signed (see WorkingCapitalSchedule.cash_flow_changes)
            capex: Capital expenditure (positive)
            debt_repayment: Scheduled term debt amortization (positive)
            share_repurchases: Buybacks (positive)
            dividends: Dividends (positive)

        Returns:
            Cash before revolver activity
        """
        self.net_income[period] = net_income
        self.depreciation[period] = depreciation
        self.stock_based_comp[period] = stock_based_comp
        self.total_non_cash[period] = depreciation + stock_based_comp

        for line in self.WORKING_CAPITAL_LINES:
            getattr(self, line)[period] = working_capital_changes.get(line, 0.0)
        self.total_working_capital_change[period] = sum(
            getattr(self, line)[period] for line in self.WORKING_CAPITAL_LINES
        )

        self.cfo[period] = (
            net_income
            + self.total_non_cash[period]
            + self.total_working_capital_change[period]
        )

        self.capex[period] = -capex
        self.cfi[period] = self.capex[period]
        self.free_cash_flow[period] = self.cfo[period] + self.capex[period]

        self.debt_repayments[period] = -debt_repayment
        self.share_repurchases[period] = -share_repurchases
        self.dividends_paid[period] = -dividends

        if period == 0:
            cash = self.assumptions.historical_cash
            self.beginning_cash[0] = cash
            self.apply_revolver(0, 0.0, 0.0, cash)
            return cash

        self.beginning_cash[period] = self.ending_cash[period - 1]
        self.apply_revolver(period, 0.0, 0.0, 0.0)
        return self.cash_before_revolver(period)

    def apply_revolver(
        self,
        period: int,
        draw: float,
        paydown: float,
        ending_cash: float
    ) -> None:
        """
        Book revolver activity and the closing cash for a period.

        Args:
            period: Period index
            draw: Revolver draw
            paydown: Revolver repayment
            ending_cash: Closing cash after the minimum-cash floor
        """
        self.revolver_change[period] = draw - paydown
        self.cff[period] = (
            self.debt_repayments[period]
            + self.revolver_change[period]
            + self.share_repurchases[period]
            + self.dividends_paid[period]
        )
        self.net_cash_change[period] = (
            self.cfo[period] + self.cfi[period] + self.cff[period]
        )
        self.ending_cash[period] = ending_cash

    def cash_before_revolver(self, period: int) -> float:
        """Opening cash plus the period's flows excluding the revolver."""
        return (
            self.beginning_cash[period]
            + self.net_cash_change[period]
            - self.revolver_change[period]
        )

    def cross_check(self, balance_sheet, tolerance: float = 1e-2) -> Tuple[bool, List[str]]:
        """
        Check the statement against itself and the balance sheet.

        - ending cash = beginning cash + net change (projected periods)
        - ending cash of one period opens the next
        - balance sheet cash net of any plug equals ending cash

        A binding minimum-cash floor fails the first check: the top-up
        has no funding line.

        Args:
            balance_sheet: Reconciled BalanceSheet
            tolerance: Absolute tolerance

        Returns:
            Tuple of (is_reconciled, list of messages)
        """
        messages = []

        for i in range(1, self.periods):
            expected = self.beginning_cash[i] + self.net_cash_change[i]
            gap = self.ending_cash[i] - expected
            if abs(gap) > tolerance:
                messages.append(
                    f"{self.years[i]}: ending cash {self.ending_cash[i]:,.2f} "
                    f"differs from beginning plus net change by {gap:,.2f}"
                )

        for i in range(self.periods - 1):
            if abs(self.ending_cash[i] - self.beginning_cash[i + 1]) > tolerance:
                messages.append(
                    f"{self.years[i + 1]}: beginning cash does not equal "
                    f"prior ending cash"
                )

        for i in range(self.periods):
            sheet_cash = balance_sheet.cash[i] - balance_sheet.balance_plug[i]
            if abs(sheet_cash - self.ending_cash[i]) > tolerance:
                messages.append(
                    f"{self.years[i]}: balance sheet cash {sheet_cash:,.2f} "
                    f"(before plug) differs from ending cash {self.ending_cash[i]:,.2f}"
                )

        return len(messages) == 0, messages
