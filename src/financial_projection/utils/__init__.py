# src/financial_projection/utils/__init__.py
"""
Utility Functions Module

Driver formulas shared across schedules and guarded ratio arithmetic.
"""

from .drivers import (
    DAYS_IN_YEAR,
    glide_path,
    depreciation_and_amortization,
    days_balance,
)

from .growth import (
    safe_divide,
    compound_growth_rate,
    period_growth,
    average_balance,
    average_of,
)

__all__ = [
    # Drivers
    'DAYS_IN_YEAR',
    'glide_path',
    'depreciation_and_amortization',
    'days_balance',

    # Growth and ratio helpers
    'safe_divide',
    'compound_growth_rate',
    'period_growth',
    'average_balance',
    'average_of',
]
