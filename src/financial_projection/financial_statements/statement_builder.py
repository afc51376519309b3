# src/financial_projection/financial_statements/statement_builder.py
"""
Statement Builder

Orchestrates the construction of all statements and schedules one
period at a time. Period i only ever reads values at index <= i.

Sequence per projected period:
1. Income statement down to EBIT, working capital, PP&E, term debt
2. Revolver / interest loop through the circularity solver:
   interest -> net income -> equity -> cash flow -> revolver -> cash
3. Balance sheet assembly

Once every period is built the balance sheet is reconciled and the cash
flow statement is cross-checked against it.
"""

from typing import Dict, List, Optional, Tuple

from .balance_sheet import BalanceSheet
from .cash_flow import CashFlowStatement
from .income_statement import IncomeStatement
from ..core.circularity_solver import CircularityResults, CircularitySolver
from ..core.diagnostics import DiagnosticsSink, LoggingDiagnostics
from ..core.exceptions import ReconciliationError
from ..models.assumptions import Assumptions, ProjectionConfig
from ..models.debt_schedule import DebtSchedule, RevolverResolution
from ..models.equity_schedule import EquitySchedule
from ..models.ppe_schedule import PPESchedule
from ..models.schedule import Schedule
from ..models.working_capital import WorkingCapitalSchedule


# Computed historical figures that should agree with the reported ones
HISTORICAL_TIE_OUTS = (
    ('gross margin', 'gross_margin', 'historical_gross_margin'),
    ('COGS', 'cogs', 'historical_cogs'),
    ('SG&A', 'sga', 'historical_sga'),
    ('R&D', 'rd', 'historical_rd'),
    ('D&A', 'da', 'historical_da'),
    ('net income', 'net_income', 'historical_net_income'),
)
TIE_OUT_THRESHOLD = 0.01


class StatementBuilder:
    """
    Build the integrated statements for every period.

    This class owns one instance of each schedule and fills them in the
    order their dependencies require.
    """

    def __init__(
        self,
        assumptions: Assumptions,
        config: Optional[ProjectionConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None
    ):
        """
        Initialize statement builder.

        Args:
            assumptions: Validated assumptions
            config: Engine settings (defaults if omitted)
            diagnostics: Sink for engine diagnostics
        """
        self.assumptions = assumptions
        self.config = config or ProjectionConfig()
        self.diagnostics = diagnostics or LoggingDiagnostics()

        cfg = self.config
        self.income_statement = IncomeStatement(assumptions)
        self.working_capital = WorkingCapitalSchedule(assumptions, cfg.days_in_year)
        self.ppe_schedule = PPESchedule(
            assumptions, cfg.gross_ppe_multiple, cfg.historical_capex_ratio
        )
        self.equity_schedule = EquitySchedule(
            assumptions, cfg.common_stock_par, cfg.apic_share
        )
        self.debt_schedule = DebtSchedule(assumptions, self.diagnostics)
        self.cash_flow = CashFlowStatement(assumptions)
        self.balance_sheet = BalanceSheet(assumptions, self.diagnostics)

        self.solver = CircularitySolver(
            mode=cfg.circularity_mode,
            max_iterations=cfg.max_iterations,
            tolerance=cfg.convergence_tolerance,
            diagnostics=self.diagnostics
        )

        self.circularity: List[CircularityResults] = []
        self.max_plug = 0.0
        self.cash_flow_reconciled = False
        self.cash_flow_messages: List[str] = []
        self._built = False

    @property
    def schedules(self) -> Dict[str, Schedule]:
        """All statements and schedules keyed by name."""
        return {
            schedule.NAME: schedule
            for schedule in (
                self.income_statement,
                self.balance_sheet,
                self.cash_flow,
                self.debt_schedule,
                self.working_capital,
                self.ppe_schedule,
                self.equity_schedule,
            )
        }

    def build(self) -> Dict[str, Schedule]:
        """
        Build, reconcile and validate every period.

        Returns:
            Dictionary of frozen schedules keyed by name

        Raises:
            ReconciliationError: If an accounting identity does not hold
        """
        if self._built:
            return self.schedules

        self._build_historical()
        self._tie_out_historicals()

        for period in range(1, self.assumptions.projection_years + 1):
            self._build_period(period)

        self.max_plug = self.balance_sheet.reconcile(
            self.equity_schedule,
            plug_threshold=self.config.plug_threshold,
            tolerance=self.config.tolerance,
            carry_anchor=self.config.carry_asset_anchor
        )
        self._check_cash_flow()
        self._validate_schedules()

        for schedule in self.schedules.values():
            schedule.freeze()
        self._built = True

        return self.schedules

    def _build_historical(self) -> None:
        a = self.assumptions
        income = self.income_statement

        income.project_operations(0)
        net_income = income.apply_financing(0, a.historical_interest_expense, 0.0)
        revenue = income.revenue[0]

        self.working_capital.project(0, revenue, income.cogs[0], income.total_opex[0])
        self.ppe_schedule.project(0, revenue)
        self.equity_schedule.initialize(revenue, net_income)
        self.debt_schedule.initialize()

        self.cash_flow.project(
            0,
            net_income=net_income,
            depreciation=self.ppe_schedule.depreciation[0],
            stock_based_comp=self.equity_schedule.stock_based_comp[0],
            working_capital_changes=self.working_capital.cash_flow_changes(0),
            capex=self.ppe_schedule.capex[0],
            debt_repayment=0.0,
            share_repurchases=0.0,
            dividends=0.0
        )

        self._assemble(0)

    def _tie_out_historicals(self) -> None:
        a = self.assumptions
        checks = [
            (label, getattr(self.income_statement, series)[0], getattr(a, field))
            for label, series, field in HISTORICAL_TIE_OUTS
        ]
        checks.append(
            ('total debt', self.debt_schedule.total_debt(0), a.historical_total_debt)
        )

        for label, computed, reported in checks:
            if reported == 0:
                continue
            difference = (computed - reported) / abs(reported)
            if abs(difference) > TIE_OUT_THRESHOLD:
                self.diagnostics.warning(
                    'historical_tie_out',
                    f"computed historical {label} {computed:,.4f} differs from "
                    f"reported {reported:,.4f} by {difference:.1%}",
                    0, computed - reported
                )

    def _build_period(self, period: int) -> None:
        income = self.income_statement
        debt = self.debt_schedule

        income.project_operations(period)
        revenue = income.revenue[period]
        self.working_capital.project(
            period, revenue, income.cogs[period], income.total_opex[period]
        )
        self.ppe_schedule.project(period, revenue)
        debt.roll_term_debt(period)

        def evaluate(revolver_estimate: float) -> Tuple[float, float, RevolverResolution]:
            return self._evaluate_financing(period, revolver_estimate)

        result = self.solver.solve(period, debt.revolver_beginning[period], evaluate)
        self.circularity.append(result)
        debt.report_revolver_activity(period, result.payload)

        self._assemble(period)

    def _evaluate_financing(
        self,
        period: int,
        revolver_estimate: float
    ) -> Tuple[float, float, RevolverResolution]:
        """
        Project everything downstream of interest for one revolver estimate.

        Rewrites the period in full so it can be called repeatedly.
        """
        income = self.income_statement
        debt = self.debt_schedule
        equity = self.equity_schedule
        ppe = self.ppe_schedule

        interest_expense = debt.estimate_interest(period, revolver_estimate)
        interest_income = debt.interest_income_on_cash[period - 1]
        net_income = income.apply_financing(period, interest_expense, interest_income)

        equity.project(period, income.revenue[period], net_income)

        preliminary_cash = self.cash_flow.project(
            period,
            net_income=net_income,
            depreciation=ppe.depreciation[period],
            stock_based_comp=equity.stock_based_comp[period],
            working_capital_changes=self.working_capital.cash_flow_changes(period),
            capex=ppe.capex[period],
            debt_repayment=debt.term_debt_amortization[period],
            share_repurchases=equity.share_repurchases[period],
            dividends=equity.dividends[period]
        )

        resolution = debt.resolve_revolver(period, preliminary_cash)
        self.cash_flow.apply_revolver(
            period, resolution.draw, resolution.paydown, resolution.ending_cash
        )
        debt.record_cash_yield(
            period, self.cash_flow.beginning_cash[period], resolution.ending_cash
        )

        return interest_expense, debt.revolver_ending[period], resolution

    def _assemble(self, period: int) -> None:
        self.balance_sheet.assemble(
            period,
            cash=self.cash_flow.ending_cash[period],
            working_capital=self.working_capital,
            ppe=self.ppe_schedule,
            debt=self.debt_schedule,
            equity=self.equity_schedule
        )

    def _check_cash_flow(self) -> None:
        ok, messages = self.cash_flow.cross_check(
            self.balance_sheet, self.config.tolerance
        )
        self.cash_flow_reconciled = ok
        self.cash_flow_messages = messages

        for message in messages:
            self.diagnostics.error('cash_flow_mismatch', message)

        if not ok and self.config.strict_cash_flow:
            gaps = {
                i: self.cash_flow.ending_cash[i]
                - (self.cash_flow.beginning_cash[i] + self.cash_flow.net_cash_change[i])
                for i in range(1, self.cash_flow.periods)
            }
            raise ReconciliationError(
                "Cash flow statement does not reconcile",
                {i: gap for i, gap in gaps.items() if abs(gap) > self.config.tolerance}
            )

    def _validate_schedules(self) -> None:
        """Invariants that hold regardless of the cash plug."""
        tolerance = self.config.tolerance
        errors = []
        failures: Dict[int, float] = {}

        _, income_errors = self.income_statement.validate(tolerance)
        errors.extend(income_errors)

        size = self.assumptions.revolver_size
        for i, balance in enumerate(self.debt_schedule.revolver_ending):
            if balance < -tolerance or balance > size + tolerance:
                errors.append(f"{self.debt_schedule.years[i]}: revolver outside [0, {size}]")
                failures[i] = balance

        if errors:
            raise ReconciliationError(
                "Schedule validation failed: " + "; ".join(errors), failures
            )
