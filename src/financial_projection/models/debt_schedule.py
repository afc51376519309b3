# src/financial_projection/models/debt_schedule.py
"""
Debt Schedule Management

Term debt amortizes on a fixed schedule. The revolver is drawn to keep
cash at the minimum balance and paid down from excess cash, which makes
it the one circular piece of the model: draws depend on cash, cash on
net income, net income on interest, interest on the revolver balance.
The per-period resolution is driven by core.circularity_solver.
"""

from dataclasses import dataclass
from typing import Optional

from .assumptions import Assumptions
from .schedule import Schedule
from ..core.diagnostics import DiagnosticsSink, LoggingDiagnostics


@dataclass
class RevolverResolution:
    """Outcome of sizing the revolver for one period."""
    preliminary_cash: float
    draw: float
    paydown: float
    ending_cash: float
    floor_top_up: float = 0.0


class DebtSchedule(Schedule):
    """
    Term debt and revolver schedule.

    Term debt interest accrues on the average balance. Revolver interest
    and the commitment fee accrue on the revolver balance estimate
    supplied for the period; in single-pass mode that estimate is the
    opening balance.
    """

    NAME = 'debt_schedule'
    SERIES = (
        'term_debt_beginning',
        'term_debt_amortization',
        'term_debt_ending',
        'term_debt_average',
        'term_debt_rate',
        'term_debt_interest',
        'current_portion_debt',
        'revolver_beginning',
        'revolver_draws',
        'revolver_paydowns',
        'revolver_ending',
        'revolver_available',
        'revolver_average',
        'revolver_rate',
        'revolver_interest',
        'revolver_commitment_fee',
        'total_debt_beginning',
        'total_debt_ending',
        'total_interest_expense',
        'average_cash',
        'interest_income_on_cash',
    )

    def __init__(
        self,
        assumptions: Assumptions,
        diagnostics: Optional[DiagnosticsSink] = None
    ):
        super().__init__(assumptions.year_labels)
        self.assumptions = assumptions
        self.diagnostics = diagnostics or LoggingDiagnostics()

    def initialize(self) -> None:
        """Historical-year balances. Interest is the reported figure."""
        a = self.assumptions

        self.term_debt_beginning[0] = a.existing_debt_balance
        self.term_debt_ending[0] = a.existing_debt_balance
        self.term_debt_average[0] = a.existing_debt_balance
        self.term_debt_rate[0] = a.existing_debt_rate
        self.term_debt_interest[0] = a.historical_interest_expense
        self.current_portion_debt[0] = min(a.debt_amortization, a.existing_debt_balance)

        self.revolver_rate[0] = a.revolver_rate
        self.revolver_available[0] = a.revolver_size

        self.total_debt_beginning[0] = a.existing_debt_balance
        self.total_debt_ending[0] = a.existing_debt_balance
        self.total_interest_expense[0] = a.historical_interest_expense

        self.record_cash_yield(0, a.historical_cash, a.historical_cash)

    def roll_term_debt(self, period: int) -> None:
        """
        Amortize term debt for a period. Acyclic.

        Args:
            period: Period index (>= 1)
        """
        a = self.assumptions
        beginning = self.term_debt_ending[period - 1]
        amortization = min(a.debt_amortization, beginning)
        ending = beginning - amortization

        self.term_debt_beginning[period] = beginning
        self.term_debt_amortization[period] = amortization
        self.term_debt_ending[period] = ending
        self.term_debt_average[period] = (beginning + ending) / 2
        self.term_debt_rate[period] = a.existing_debt_rate
        self.term_debt_interest[period] = self.term_debt_average[period] * a.existing_debt_rate
        self.current_portion_debt[period] = min(a.debt_amortization, ending)

        self.revolver_beginning[period] = self.revolver_ending[period - 1]
        self.revolver_rate[period] = a.revolver_rate

    def estimate_interest(self, period: int, revolver_estimate: float) -> float:
        """
        Interest expense for a period given a revolver balance estimate.

        Args:
            period: Period index (>= 1)
            revolver_estimate: Estimated closing revolver balance

        Returns:
            Total interest expense incl. the commitment fee
        """
        a = self.assumptions
        average = (self.revolver_beginning[period] + revolver_estimate) / 2

        self.revolver_average[period] = average
        self.revolver_interest[period] = average * a.revolver_rate
        self.revolver_commitment_fee[period] = (
            max(a.revolver_size - revolver_estimate, 0.0) * a.revolver_commitment_fee
        )
        self.total_interest_expense[period] = (
            self.term_debt_interest[period]
            + self.revolver_interest[period]
            + self.revolver_commitment_fee[period]
        )
        return self.total_interest_expense[period]

    def resolve_revolver(
        self,
        period: int,
        preliminary_cash: float
    ) -> RevolverResolution:
        """
        Draw or repay the revolver against the minimum cash balance.

        A shortfall is drawn up to the remaining capacity; excess cash
        repays any outstanding balance. If the facility is exhausted the
        closing cash is still floored at the minimum balance.

        Args:
            period: Period index (>= 1)
            preliminary_cash: Opening cash plus the period's cash flow
                before any revolver activity

        Returns:
            RevolverResolution
        """
        a = self.assumptions
        minimum_cash = a.minimum_cash_balance
        beginning = self.revolver_beginning[period]
        draw = 0.0
        paydown = 0.0

        if preliminary_cash < minimum_cash:
            shortfall = minimum_cash - preliminary_cash
            draw = min(shortfall, max(a.revolver_size - beginning, 0.0))
        elif preliminary_cash > minimum_cash and beginning > 0:
            excess = preliminary_cash - minimum_cash
            paydown = min(excess, beginning)

        ending_revolver = beginning + draw - paydown
        cash_after_revolver = preliminary_cash + draw - paydown
        ending_cash = max(cash_after_revolver, minimum_cash)

        self.revolver_draws[period] = draw
        self.revolver_paydowns[period] = paydown
        self.revolver_ending[period] = ending_revolver
        self.revolver_available[period] = a.revolver_size - ending_revolver
        self.total_debt_beginning[period] = (
            self.term_debt_beginning[period] + beginning
        )
        self.total_debt_ending[period] = (
            self.term_debt_ending[period] + ending_revolver
        )

        return RevolverResolution(
            preliminary_cash=preliminary_cash,
            draw=draw,
            paydown=paydown,
            ending_cash=ending_cash,
            floor_top_up=ending_cash - cash_after_revolver,
        )

    def report_revolver_activity(self, period: int, resolution: RevolverResolution) -> None:
        """Emit diagnostics for the final revolver resolution of a period."""
        if resolution.draw > 0:
            self.diagnostics.info(
                'revolver_draw',
                f"drew {resolution.draw:,.2f} on the revolver "
                f"(balance {self.revolver_ending[period]:,.2f})",
                period, resolution.draw
            )
        if resolution.paydown > 0:
            self.diagnostics.info(
                'revolver_paydown',
                f"repaid {resolution.paydown:,.2f} of revolver "
                f"(balance {self.revolver_ending[period]:,.2f})",
                period, resolution.paydown
            )
        if resolution.floor_top_up > 0:
            self.diagnostics.warning(
                'minimum_cash_floor',
                f"revolver capacity exhausted; closing cash floored at the "
                f"minimum balance, {resolution.floor_top_up:,.2f} unfunded",
                period, resolution.floor_top_up
            )
        if self.revolver_available[period] <= 0 and self.assumptions.revolver_size > 0:
            self.diagnostics.warning(
                'revolver_capacity',
                "revolver fully drawn",
                period, self.revolver_ending[period]
            )

    def record_cash_yield(
        self,
        period: int,
        beginning_cash: float,
        ending_cash: float
    ) -> float:
        """
        Interest earned on the period's average cash balance.

        The amount is credited to the next period's income statement.

        Args:
            period: Period index
            beginning_cash: Opening cash
            ending_cash: Closing cash

        Returns:
            Interest income on cash
        """
        average = (beginning_cash + ending_cash) / 2
        self.average_cash[period] = average
        self.interest_income_on_cash[period] = average * self.assumptions.interest_on_cash
        return self.interest_income_on_cash[period]

    def total_debt(self, period: int) -> float:
        return self.term_debt_ending[period] + self.revolver_ending[period]

    def long_term_debt(self, period: int) -> float:
        """Term debt net of the portion due within a year."""
        return max(0.0, self.term_debt_ending[period] - self.current_portion_debt[period])
