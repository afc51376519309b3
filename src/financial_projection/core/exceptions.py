# src/financial_projection/core/exceptions.py
"""
Projection Errors

Two failure classes exist: bad input rejected at the boundary, and
accounting identities that do not hold after reconciliation.
"""

from typing import Dict, List, Optional


class ProjectionError(Exception):
    """Base class for all projection engine errors."""


class PreconditionError(ProjectionError, ValueError):
    """Raised when the assumptions violate an input contract."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


class ReconciliationError(ProjectionError):
    """
    Raised when an invariant does not hold after reconciliation.

    This is an engine defect, not a recoverable condition. The offending
    periods and the size of the gap in each are kept on the exception.
    """

    def __init__(
        self,
        message: str,
        imbalances: Optional[Dict[int, float]] = None
    ):
        self.imbalances = dict(imbalances or {})
        if self.imbalances:
            detail = ", ".join(
                f"period {period}: {amount:,.4f}"
                for period, amount in sorted(self.imbalances.items())
            )
            message = f"{message} ({detail})"
        super().__init__(message)

    @property
    def periods(self) -> List[int]:
        return sorted(self.imbalances)
