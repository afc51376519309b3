# src/financial_projection/financial_statements/__init__.py
"""
Financial Statements Module

Income statement, balance sheet and cash flow statement, and the builder
that produces them period by period.
"""

from .income_statement import IncomeStatement, apply_nol
from .balance_sheet import BalanceSheet
from .cash_flow import CashFlowStatement
from .statement_builder import StatementBuilder

__all__ = [
    'IncomeStatement',
    'apply_nol',
    'BalanceSheet',
    'CashFlowStatement',
    'StatementBuilder'
]
