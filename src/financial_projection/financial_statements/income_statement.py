# src/financial_projection/financial_statements/income_statement.py
"""
Income Statement Projection

Revenue through EBIT is independent of financing and is projected first.
EBT, tax and net income need the period's net interest, which comes from
the debt schedule, so they are filled in by apply_financing() once the
revolver for the period has been resolved.
"""

from typing import List, Tuple

from ..models.assumptions import Assumptions
from ..models.schedule import Schedule
from ..utils.drivers import depreciation_and_amortization, glide_path
from ..utils.growth import safe_divide


def apply_nol(
    ebt: float,
    nol_remaining: float,
    tax_rate: float
) -> Tuple[float, float, float]:
    """
    Apply a net operating loss carryforward to one period's pre-tax income.

    The NOL is consumed dollar for dollar against positive EBT before any
    tax is levied. A loss year pays no tax and leaves the NOL untouched.

    Args:
        ebt: Earnings before tax
        nol_remaining: NOL available at the start of the period
        tax_rate: Effective tax rate

    Returns:
        Tuple of (taxable_income, tax_expense, nol_remaining_after)
    """
    if ebt <= 0:
        return 0.0, 0.0, nol_remaining

    taxable_income = max(0.0, ebt - nol_remaining)
    nol_after = max(0.0, nol_remaining - ebt)

    return taxable_income, taxable_income * tax_rate, nol_after


class IncomeStatement(Schedule):
    """
    Projected income statement.

    Gross margin and SG&A % glide linearly from their base (period 0) to
    their target (period N). Shares outstanding are held constant.
    """

    NAME = 'income_statement'
    SERIES = (
        'revenue',
        'revenue_growth',
        'cogs',
        'gross_profit',
        'gross_margin',
        'sga',
        'sga_percent',
        'rd',
        'rd_percent',
        'total_opex',
        'ebitda',
        'ebitda_margin',
        'da',
        'ebit',
        'ebit_margin',
        'interest_expense',
        'interest_income',
        'net_interest',
        'ebt',
        'taxable_income',
        'income_tax',
        'effective_tax_rate',
        'nol_remaining',
        'net_income',
        'net_margin',
        'shares_outstanding',
        'eps',
    )

    def __init__(self, assumptions: Assumptions):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions

    def project_operations(self, period: int) -> None:
        """
        Project revenue through EBIT for a period.

        Args:
            period: Period index (0 = historical)
        """
        a = self.assumptions

        if period == 0:
            self.revenue[0] = a.historical_revenue
            self.revenue_growth[0] = 0.0
        else:
            growth = a.growth_rate(period)
            self.revenue[period] = self.revenue[period - 1] * (1 + growth)
            self.revenue_growth[period] = growth

        revenue = self.revenue[period]

        gross_margin = glide_path(
            a.base_gross_margin, a.target_gross_margin, period, a.projection_years
        )
        sga_percent = glide_path(
            a.base_sga_percent, a.target_sga_percent, period, a.projection_years
        )

        self.gross_margin[period] = gross_margin
        self.sga_percent[period] = sga_percent
        self.rd_percent[period] = a.rd_percent

        self.cogs[period] = revenue * (1 - gross_margin)
        self.gross_profit[period] = revenue * gross_margin
        self.sga[period] = revenue * sga_percent
        self.rd[period] = revenue * a.rd_percent
        self.total_opex[period] = self.sga[period] + self.rd[period]

        self.ebitda[period] = self.gross_profit[period] - self.total_opex[period]
        self.da[period] = depreciation_and_amortization(revenue, a.da_percent)
        self.ebit[period] = self.ebitda[period] - self.da[period]

        self.ebitda_margin[period] = safe_divide(self.ebitda[period], revenue)
        self.ebit_margin[period] = safe_divide(self.ebit[period], revenue)
        self.shares_outstanding[period] = a.historical_shares_outstanding

    def apply_financing(
        self,
        period: int,
        interest_expense: float,
        interest_income: float
    ) -> float:
        """
        Complete the income statement below EBIT.

        Safe to call repeatedly for the same period: the NOL is always
        read from the previous period's closing balance (the assumed
        carryforward for period 0).

        Args:
            period: Period index
            interest_expense: Total interest expense incl. commitment fees
            interest_income: Interest earned on cash

        Returns:
            Net income for the period
        """
        a = self.assumptions

        net_interest = interest_expense - interest_income
        ebt = self.ebit[period] - net_interest

        self.interest_expense[period] = interest_expense
        self.interest_income[period] = interest_income
        self.net_interest[period] = net_interest
        self.ebt[period] = ebt

        # The historical year draws on the NOL first
        nol_opening = a.nol_carryforward if period == 0 else self.nol_remaining[period - 1]
        taxable_income, tax, nol_after = apply_nol(
            ebt, nol_opening, a.effective_tax_rate
        )

        self.taxable_income[period] = taxable_income
        self.income_tax[period] = tax
        self.nol_remaining[period] = nol_after
        self.effective_tax_rate[period] = tax / ebt if ebt > 0 else 0.0

        net_income = ebt - tax
        self.net_income[period] = net_income
        self.net_margin[period] = safe_divide(net_income, self.revenue[period])
        self.eps[period] = net_income / self.shares_outstanding[period]

        return net_income

    def calculate_noplat(self, period: int) -> float:
        """
        NOPLAT = EBIT * (1 - Tax Rate)

        Args:
            period: Period index

        Returns:
            NOPLAT value
        """
        return self.ebit[period] * (1 - self.assumptions.effective_tax_rate)

    def validate(self, tolerance: float = 1e-6) -> Tuple[bool, List[str]]:
        """
        Validate income statement arithmetic and NOL behaviour.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        for i in range(self.periods):
            expected_ebitda = self.gross_profit[i] - self.sga[i] - self.rd[i]
            if abs(expected_ebitda - self.ebitda[i]) > tolerance:
                errors.append(f"{self.years[i]}: EBITDA calculation error")

            expected_ni = self.ebt[i] - self.income_tax[i]
            if abs(expected_ni - self.net_income[i]) > tolerance:
                errors.append(f"{self.years[i]}: Net income calculation error")

            if self.nol_remaining[i] < 0:
                errors.append(f"{self.years[i]}: NOL is negative")

            if i > 0 and self.nol_remaining[i] > self.nol_remaining[i - 1] + tolerance:
                errors.append(f"{self.years[i]}: NOL increased")

        return len(errors) == 0, errors
