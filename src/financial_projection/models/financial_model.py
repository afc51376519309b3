# src/financial_projection/models/financial_model.py
"""
Financial Model

Public entry point. Builds the integrated statements through the
StatementBuilder, derives the ratios and summary, and returns a frozen
ProjectionResult. Either the whole result is produced and validated or
an exception is raised; nothing partial is returned.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import pandas as pd

from .assumptions import Assumptions, ProjectionConfig
from .debt_schedule import DebtSchedule
from .equity_schedule import EquitySchedule
from .ppe_schedule import PPESchedule
from .ratio_analysis import ProjectionSummary, RatioAnalysis
from .schedule import Schedule
from .working_capital import WorkingCapitalSchedule
from ..core.diagnostics import DiagnosticsSink, LoggingDiagnostics
from ..financial_statements.balance_sheet import BalanceSheet
from ..financial_statements.cash_flow import CashFlowStatement
from ..financial_statements.income_statement import IncomeStatement
from ..financial_statements.statement_builder import StatementBuilder


logger = logging.getLogger(__name__)


# Column prefixes for the combined frame
STATEMENT_PREFIXES = {
    'income_statement': 'is',
    'balance_sheet': 'bs',
    'cash_flow': 'cf',
    'debt_schedule': 'debt',
    'working_capital': 'wc',
    'ppe_schedule': 'ppe',
    'equity_schedule': 'eq',
    'ratio_analysis': 'ratio',
}


@dataclass(frozen=True)
class ProjectionResult:
    """The eight schedules of a projection run and its summary."""
    assumptions: Assumptions
    income_statement: IncomeStatement
    balance_sheet: BalanceSheet
    cash_flow: CashFlowStatement
    debt_schedule: DebtSchedule
    working_capital: WorkingCapitalSchedule
    ppe_schedule: PPESchedule
    equity_schedule: EquitySchedule
    ratio_analysis: RatioAnalysis
    summary: ProjectionSummary

    @property
    def years(self):
        return self.income_statement.years

    @property
    def schedules(self) -> Dict[str, Schedule]:
        return {name: getattr(self, name) for name in STATEMENT_PREFIXES}

    def statement(self, name: str) -> Schedule:
        """
        Look up a schedule by name.

        Args:
            name: One of STATEMENT_PREFIXES

        Returns:
            The schedule
        """
        if name not in STATEMENT_PREFIXES:
            raise KeyError(
                f"Unknown statement '{name}'. "
                f"Choose from: {', '.join(STATEMENT_PREFIXES)}"
            )
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dictionary form of the whole result."""
        result: Dict[str, Any] = {
            name: schedule.to_dict() for name, schedule in self.schedules.items()
        }
        result['assumptions'] = self.assumptions.to_dict()
        result['summary'] = self.summary.to_dict()
        return result

    def to_dataframe(self) -> pd.DataFrame:
        """
        Every series side by side, one row per period.

        Columns are prefixed by statement, e.g. is_revenue, bs_cash.
        """
        frames = []
        for name, prefix in STATEMENT_PREFIXES.items():
            frame = getattr(self, name).to_dataframe()
            frames.append(frame.add_prefix(f"{prefix}_"))
        return pd.concat(frames, axis=1)


class FinancialModel:
    """
    Integrated three-statement projection model.

    Example:
        >>> model = FinancialModel(assumptions)
        >>> result = model.build()
        >>> result.summary.is_balanced
        True
    """

    def __init__(
        self,
        assumptions: Union[Assumptions, Mapping[str, Any]],
        config: Optional[ProjectionConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None
    ):
        """
        Initialize financial model.

        Args:
            assumptions: Assumptions, or a mapping accepted by
                Assumptions.from_dict
            config: Engine settings
            diagnostics: Sink for engine diagnostics
        """
        if not isinstance(assumptions, Assumptions):
            assumptions = Assumptions.from_dict(assumptions)

        self.assumptions = assumptions
        self.config = config or ProjectionConfig()
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self._result: Optional[ProjectionResult] = None

    @property
    def is_built(self) -> bool:
        return self._result is not None

    def build(self) -> ProjectionResult:
        """
        Build the complete projection.

        Returns:
            ProjectionResult

        Raises:
            ReconciliationError: If an accounting identity does not hold
        """
        if self._result is not None:
            return self._result

        a = self.assumptions
        logger.debug(
            "Projecting %s over %d years (%s)",
            a.company_name, a.projection_years, self.config.circularity_mode
        )

        builder = StatementBuilder(a, self.config, self.diagnostics)
        builder.build()

        ratios = RatioAnalysis(a, self.config.days_in_year).calculate(
            builder.income_statement,
            builder.balance_sheet,
            builder.debt_schedule,
            builder.working_capital
        )
        ratios.freeze()

        is_balanced, _ = builder.balance_sheet.check_balance(self.config.tolerance)
        summary = ratios.summarize(
            builder.income_statement,
            is_balanced=is_balanced,
            cash_flow_reconciled=builder.cash_flow_reconciled,
            max_balance_plug=builder.max_plug,
            max_imbalance=builder.balance_sheet.max_imbalance()
        )

        self._result = ProjectionResult(
            assumptions=a,
            income_statement=builder.income_statement,
            balance_sheet=builder.balance_sheet,
            cash_flow=builder.cash_flow,
            debt_schedule=builder.debt_schedule,
            working_capital=builder.working_capital,
            ppe_schedule=builder.ppe_schedule,
            equity_schedule=builder.equity_schedule,
            ratio_analysis=ratios,
            summary=summary,
        )
        return self._result


def project(
    assumptions: Union[Assumptions, Mapping[str, Any]],
    config: Optional[ProjectionConfig] = None,
    diagnostics: Optional[DiagnosticsSink] = None
) -> ProjectionResult:
    """Build a projection in one call."""
    return FinancialModel(assumptions, config, diagnostics).build()
