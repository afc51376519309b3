# src/financial_projection/core/__init__.py
"""
Core Projection Components

Error types, the diagnostics sink and the revolver / interest
circularity solver.
"""

from .exceptions import ProjectionError, PreconditionError, ReconciliationError
from .diagnostics import (
    DiagnosticEvent,
    DiagnosticsSink,
    LoggingDiagnostics,
    RecordingDiagnostics,
)
from .circularity_solver import CircularitySolver, CircularityResults

__all__ = [
    'ProjectionError',
    'PreconditionError',
    'ReconciliationError',
    'DiagnosticEvent',
    'DiagnosticsSink',
    'LoggingDiagnostics',
    'RecordingDiagnostics',
    'CircularitySolver',
    'CircularityResults'
]
