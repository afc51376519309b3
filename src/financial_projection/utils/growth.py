"""
Growth and Ratio Utilities

Guarded arithmetic shared by the ratio analysis and the summary block.
Ratios are diagnostic, so a degenerate denominator yields 0 instead of
NaN or an exception.
"""

import numpy as np
from typing import List, Sequence, Union


def safe_divide(
    numerator: float,
    denominator: float,
    default: float = 0.0
) -> float:
    """
    Divide, returning a default when the denominator is not positive.

    Args:
        numerator: Dividend
        denominator: Divisor
        default: Value returned for a zero, negative or NaN divisor

    Returns:
        numerator / denominator or default
    """
    if denominator is None or np.isnan(denominator) or denominator <= 0:
        return default
    return numerator / denominator


def compound_growth_rate(
    beginning_value: float,
    ending_value: float,
    periods: int
) -> float:
    """
    Calculate compound annual growth rate (CAGR).

    Formula: CAGR = (ending_value / beginning_value)^(1/periods) - 1

    Non-positive endpoints have no real-valued CAGR; those return 0.

    Args:
        beginning_value: Starting value
        ending_value: Ending value
        periods: Number of periods

    Returns:
        Compound growth rate

    Examples:
        >>> round(compound_growth_rate(100, 161.051, 5), 6)
        0.1
    """
    if periods <= 0:
        raise ValueError("Periods must be positive")
    if beginning_value <= 0 or ending_value <= 0:
        return 0.0

    return (ending_value / beginning_value) ** (1 / periods) - 1


def period_growth(values: Sequence[float]) -> List[float]:
    """
    Period-over-period growth, 0 for the first period and after a
    non-positive base.

    Args:
        values: Per-period series

    Returns:
        Growth series aligned with the input
    """
    growth = [0.0]
    for previous, current in zip(values[:-1], values[1:]):
        growth.append(safe_divide(current - previous, previous))
    return growth


def average_balance(
    values: Sequence[float],
    period: int
) -> float:
    """
    Average of the opening and closing balance for a period.

    Period 0 has no opening balance in the model, so its closing balance
    is used on its own.
    """
    if period == 0:
        return values[0]
    return (values[period - 1] + values[period]) / 2


def average_of(values: Union[Sequence[float], np.ndarray]) -> float:
    """Arithmetic mean, 0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))
