# src/financial_projection/models/__init__.py
"""
Financial Models Module

Assumptions, the supporting schedules and ratio analysis. FinancialModel
is exposed from the package root.
"""

from .assumptions import Assumptions, ProjectionConfig, load_assumptions
from .schedule import Schedule
from .working_capital import WorkingCapitalSchedule
from .ppe_schedule import PPESchedule
from .equity_schedule import EquitySchedule
from .debt_schedule import DebtSchedule, RevolverResolution
from .ratio_analysis import RatioAnalysis, ProjectionSummary

__all__ = [
    'Assumptions',
    'ProjectionConfig',
    'load_assumptions',
    'Schedule',
    'WorkingCapitalSchedule',
    'PPESchedule',
    'EquitySchedule',
    'DebtSchedule',
    'RevolverResolution',
    'RatioAnalysis',
    'ProjectionSummary'
]
