"""
Integrated Three-Statement Projection Engine

Projects a company's income statement, balance sheet and cash flow
statement over a multi-year horizon from a small set of assumptions,
with supporting debt, working capital, PP&E, equity and ratio schedules.

Main Components:
- Assumptions and ProjectionConfig (validated inputs)
- Supporting schedules (Working Capital, PP&E, Equity, Debt & Revolver)
- Financial Statements (Income Statement, Balance Sheet, Cash Flow)
- Circularity Solver (revolver / interest loop)
- Ratio Analysis and summary metrics
"""

__version__ = "1.0.0"

from financial_projection.models.financial_model import (
    FinancialModel,
    ProjectionResult,
    project,
)
from financial_projection.models.assumptions import (
    Assumptions,
    ProjectionConfig,
    load_assumptions,
)
from financial_projection.models.ratio_analysis import ProjectionSummary
from financial_projection.core.circularity_solver import CircularitySolver
from financial_projection.core.diagnostics import (
    DiagnosticEvent,
    DiagnosticsSink,
    LoggingDiagnostics,
    RecordingDiagnostics,
)
from financial_projection.core.exceptions import (
    ProjectionError,
    PreconditionError,
    ReconciliationError,
)

from financial_projection.financial_statements.income_statement import IncomeStatement
from financial_projection.financial_statements.balance_sheet import BalanceSheet
from financial_projection.financial_statements.cash_flow import CashFlowStatement
from financial_projection.financial_statements.statement_builder import StatementBuilder

__all__ = [
    # Main model
    'FinancialModel',
    'ProjectionResult',
    'ProjectionSummary',
    'project',

    # Inputs
    'Assumptions',
    'ProjectionConfig',
    'load_assumptions',

    # Core components
    'CircularitySolver',
    'DiagnosticEvent',
    'DiagnosticsSink',
    'LoggingDiagnostics',
    'RecordingDiagnostics',
    'ProjectionError',
    'PreconditionError',
    'ReconciliationError',

    # Financial statements
    'IncomeStatement',
    'BalanceSheet',
    'CashFlowStatement',
    'StatementBuilder',
]
