# src/financial_projection/financial_statements/balance_sheet.py
"""
Balance Sheet Construction

Assembles assets, liabilities and equity from the supporting schedules,
then reconciles in four ordered steps:

1. Historical anchor: period 0 other current assets absorb the gap
   between the computed and the reported historical total assets.
2. Opening equity backsolve: historical retained earnings absorb the gap
   between historical assets and liabilities plus equity.
3. Forward propagation: the retained earnings adjustment is replayed
   through every projected period.
4. Cash plug: any period still out of balance has the residual added
   to cash.

Every adjustment is reported to the diagnostics sink.
"""

from typing import Dict, List, Optional, Tuple

from ..core.diagnostics import DiagnosticsSink, LoggingDiagnostics
from ..core.exceptions import ReconciliationError
from ..models.assumptions import Assumptions
from ..models.debt_schedule import DebtSchedule
from ..models.equity_schedule import EquitySchedule
from ..models.ppe_schedule import PPESchedule
from ..models.schedule import Schedule
from ..models.working_capital import WorkingCapitalSchedule


class BalanceSheet(Schedule):
    """
    Projected balance sheet.

    Intangibles, goodwill, other long-term assets, deferred tax and other
    long-term liabilities are held at their historical values. Deferred
    revenue is not modelled and stays at zero.
    """

    NAME = 'balance_sheet'
    SERIES = (
        # Assets
        'cash',
        'accounts_receivable',
        'inventory',
        'prepaid_expenses',
        'other_current_assets',
        'total_current_assets',
        'ppe_gross',
        'accumulated_depreciation',
        'ppe_net',
        'intangible_assets',
        'goodwill',
        'other_long_term_assets',
        'total_non_current_assets',
        'total_assets',

        # Liabilities
        'accounts_payable',
        'accrued_expenses',
        'deferred_revenue',
        'current_portion_debt',
        'revolver',
        'other_current_liabilities',
        'total_current_liabilities',
        'long_term_debt',
        'deferred_tax_liabilities',
        'other_long_term_liabilities',
        'total_non_current_liabilities',
        'total_liabilities',

        # Equity
        'common_stock',
        'apic',
        'retained_earnings',
        'treasury_stock',
        'aoci',
        'total_equity',
        'total_liabilities_and_equity',

        # Reconciliation
        'other_ca_adjustment',
        'balance_plug',
        'balance_check',
    )

    def __init__(
        self,
        assumptions: Assumptions,
        diagnostics: Optional[DiagnosticsSink] = None
    ):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.diagnostics = diagnostics or LoggingDiagnostics()

    def assemble(
        self,
        period: int,
        cash: float,
        working_capital: WorkingCapitalSchedule,
        ppe: PPESchedule,
        debt: DebtSchedule,
        equity: EquitySchedule
    ) -> None:
        """
        Build one period's balance sheet from the schedules.

        Args:
            period: Period index
            cash: Closing cash from the cash flow statement
            working_capital: Working capital schedule
            ppe: PP&E schedule
            debt: Debt schedule
            equity: Equity schedule
        """
        a = self.assumptions
        i = period

        self.cash[i] = cash
        self.accounts_receivable[i] = working_capital.ar_balance[i]
        self.inventory[i] = working_capital.inventory_balance[i]
        self.prepaid_expenses[i] = working_capital.prepaid_balance[i]
        self.other_current_assets[i] = working_capital.other_ca_balance[i]

        self.ppe_gross[i] = ppe.ppe_gross[i]
        self.accumulated_depreciation[i] = ppe.accumulated_depreciation[i]
        self.ppe_net[i] = ppe.ending_ppe[i]
        self.intangible_assets[i] = a.historical_intangibles
        self.goodwill[i] = a.historical_goodwill
        self.other_long_term_assets[i] = a.historical_other_lt_assets

        self.accounts_payable[i] = working_capital.ap_balance[i]
        self.accrued_expenses[i] = working_capital.accrued_balance[i]
        self.deferred_revenue[i] = 0.0
        self.current_portion_debt[i] = debt.current_portion_debt[i]
        self.revolver[i] = debt.revolver_ending[i]
        self.other_current_liabilities[i] = working_capital.other_cl_balance[i]
        self.long_term_debt[i] = debt.long_term_debt(i)
        self.deferred_tax_liabilities[i] = a.historical_deferred_tax_liability
        self.other_long_term_liabilities[i] = a.historical_other_lt_liabilities

        self._load_equity(i, equity)
        self._total(i)

    def _load_equity(self, period: int, equity: EquitySchedule) -> None:
        self.common_stock[period] = equity.common_stock[period]
        self.apic[period] = equity.apic[period]
        self.retained_earnings[period] = equity.retained_earnings[period]
        self.treasury_stock[period] = equity.treasury_stock[period]
        self.aoci[period] = equity.aoci[period]
        self.total_equity[period] = equity.total_equity[period]

    def _total(self, period: int) -> None:
        i = period

        self.total_current_assets[i] = (
            self.cash[i]
            + self.accounts_receivable[i]
            + self.inventory[i]
            + self.prepaid_expenses[i]
            + self.other_current_assets[i]
        )
        self.total_non_current_assets[i] = (
            self.ppe_net[i]
            + self.intangible_assets[i]
            + self.goodwill[i]
            + self.other_long_term_assets[i]
        )
        self.total_assets[i] = (
            self.total_current_assets[i] + self.total_non_current_assets[i]
        )

        self.total_current_liabilities[i] = (
            self.accounts_payable[i]
            + self.accrued_expenses[i]
            + self.deferred_revenue[i]
            + self.current_portion_debt[i]
            + self.revolver[i]
            + self.other_current_liabilities[i]
        )
        self.total_non_current_liabilities[i] = (
            self.long_term_debt[i]
            + self.deferred_tax_liabilities[i]
            + self.other_long_term_liabilities[i]
        )
        self.total_liabilities[i] = (
            self.total_current_liabilities[i] + self.total_non_current_liabilities[i]
        )
        self.total_liabilities_and_equity[i] = (
            self.total_liabilities[i] + self.total_equity[i]
        )
        self.balance_check[i] = (
            self.total_assets[i] - self.total_liabilities_and_equity[i]
        )

    def imbalance(self, period: int) -> float:
        """Liabilities plus equity less assets."""
        return self.total_liabilities_and_equity[period] - self.total_assets[period]

    def reconcile(
        self,
        equity: EquitySchedule,
        plug_threshold: float = 1e-3,
        tolerance: float = 1e-2,
        carry_anchor: bool = False
    ) -> float:
        """
        Run the four reconciliation steps and enforce the post-conditions.

        Args:
            equity: Equity schedule (its retained earnings are rebased)
            plug_threshold: Imbalance above which cash is plugged
            tolerance: Maximum imbalance allowed after reconciliation
            carry_anchor: Hold the historical other current assets
                adjustment in every period instead of period 0 only

        Returns:
            Largest absolute cash plug applied

        Raises:
            ReconciliationError: If the anchor or the identity does not hold
        """
        self._anchor_historical_assets(tolerance, carry_anchor)
        self._backsolve_opening_equity(equity, plug_threshold)
        max_plug = self._apply_cash_plug(plug_threshold)

        is_balanced, imbalances = self.check_balance(tolerance)
        if not is_balanced:
            raise ReconciliationError(
                "Balance sheet does not balance after reconciliation",
                imbalances
            )

        self.diagnostics.info(
            'reconciliation_complete',
            f"balance sheet reconciled; max imbalance "
            f"{self.max_imbalance():,.6f}, max plug {max_plug:,.4f}",
            amount=max_plug
        )
        return max_plug

    def _anchor_historical_assets(self, tolerance: float, carry: bool) -> None:
        target = self.assumptions.historical_total_assets
        gap = target - self.total_assets[0]

        if gap != 0.0:
            # Without carry, projected periods pick the gap up in the cash plug
            for i in range(self.periods if carry else 1):
                self.other_ca_adjustment[i] = gap
                self.other_current_assets[i] += gap
                self._total(i)

            self.diagnostics.info(
                'asset_anchor',
                f"anchored historical total assets to {target:,.2f} "
                f"(other current assets adjusted by {gap:,.2f})",
                0, gap
            )

        residual = self.total_assets[0] - target
        if abs(residual) > tolerance:
            raise ReconciliationError(
                f"Historical total assets {self.total_assets[0]:,.2f} "
                f"could not be anchored to {target:,.2f}",
                {0: residual}
            )

    def _backsolve_opening_equity(
        self,
        equity: EquitySchedule,
        plug_threshold: float
    ) -> None:
        required_equity = self.total_assets[0] - self.total_liabilities[0]
        gap = required_equity - self.total_equity[0]

        if gap == 0.0:
            return

        before = equity.retained_earnings[0]
        equity.rebase_opening_retained_earnings(gap)

        for i in range(self.periods):
            self._load_equity(i, equity)
            self._total(i)

        if abs(gap) > plug_threshold:
            self.diagnostics.info(
                'equity_backsolve',
                f"historical retained earnings adjusted by {gap:,.2f} "
                f"({before:,.2f} -> {equity.retained_earnings[0]:,.2f})",
                0, gap
            )
            self.diagnostics.info(
                'equity_propagation',
                f"retained earnings adjustment carried through periods "
                f"1-{self.horizon}",
                amount=gap
            )

    def _apply_cash_plug(self, plug_threshold: float) -> float:
        max_plug = 0.0

        for i in range(self.periods):
            imbalance = self.imbalance(i)
            if abs(imbalance) <= plug_threshold:
                continue

            self.balance_plug[i] = imbalance
            self.cash[i] += imbalance
            self._total(i)
            max_plug = max(max_plug, abs(imbalance))

            self.diagnostics.warning(
                'balance_plug',
                f"applied balance plug of {imbalance:,.4f} to cash",
                i, imbalance
            )

        return max_plug

    def check_balance(self, tolerance: float = 1e-2) -> Tuple[bool, Dict[int, float]]:
        """
        Check assets = liabilities + equity in every period and the
        historical anchor.

        Returns:
            Tuple of (is_balanced, {period: imbalance} for failing periods)
        """
        failures = {
            i: self.balance_check[i]
            for i in range(self.periods)
            if abs(self.balance_check[i]) > tolerance
        }

        anchor_gap = self.total_assets[0] - self.assumptions.historical_total_assets
        if abs(anchor_gap) > tolerance:
            failures.setdefault(0, anchor_gap)

        return len(failures) == 0, failures

    def max_imbalance(self) -> float:
        return max(abs(value) for value in self.balance_check)

    def validate(self, tolerance: float = 1e-2) -> Tuple[bool, List[str]]:
        """
        Validate the balance sheet after reconciliation.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []
        is_balanced, failures = self.check_balance(tolerance)
        if not is_balanced:
            for period, amount in sorted(failures.items()):
                errors.append(f"{self.years[period]}: imbalance of {amount:,.4f}")

        for i in range(self.periods):
            if self.revolver[i] < -tolerance:
                errors.append(f"{self.years[i]}: negative revolver balance")

        return len(errors) == 0, errors
