"""
Operating Drivers

Single definitions of the driver formulas that more than one schedule
depends on. The income statement's D&A line and the PP&E schedule's
depreciation both call depreciation_and_amortization(), so the two can
never drift apart.
"""

DAYS_IN_YEAR = 365


def glide_path(
    base: float,
    target: float,
    period: int,
    horizon: int
) -> float:
    """
    Linear interpolation from a base value (period 0) to a target value
    (period horizon).

    Formula: base + (target - base) * period / horizon

    Args:
        base: Value at period 0
        target: Value at the last projected period
        period: Period index (0..horizon)
        horizon: Number of projected periods

    Returns:
        Interpolated driver value
    """
    if horizon <= 0:
        raise ValueError(f"Horizon must be positive, got {horizon}")
    return base + (target - base) * period / horizon


def depreciation_and_amortization(
    revenue: float,
    da_percent: float
) -> float:
    """D&A as a fixed percentage of revenue."""
    return revenue * da_percent


def days_balance(
    flow: float,
    days: float,
    days_in_year: int = DAYS_IN_YEAR
) -> float:
    """
    Balance implied by a day-count turnover assumption.

    Formula: balance = annual_flow * days / days_in_year

    Args:
        flow: Annual flow the balance turns over against (revenue or COGS)
        days: Days outstanding
        days_in_year: Day-count basis

    Returns:
        Period-end balance
    """
    return flow * days / days_in_year
