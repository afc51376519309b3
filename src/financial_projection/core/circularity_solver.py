# src/financial_projection/core/circularity_solver.py
"""
Revolver / interest circularity resolution.

Interest expense depends on the revolver balance, the revolver balance
depends on cash, and cash depends on net income after interest. The
solver breaks the loop one period at a time:

- single_pass: interest is computed on the opening revolver balance and
  the period is evaluated once. No iteration, no convergence risk.
- iterative: the period is re-evaluated with the revolver estimate set to
  the previous pass's closing balance until interest expense moves by
  less than the tolerance or the iteration cap is reached.
"""

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Tuple

from .diagnostics import DiagnosticsSink, LoggingDiagnostics


# evaluate(revolver_estimate) -> (interest_expense, revolver_ending, payload)
PeriodEvaluator = Callable[[float], Tuple[float, float, Any]]


@dataclass
class CircularityResults:
    """Results from resolving one period."""
    period: int
    revolver_estimate: float
    revolver_ending: float
    interest_expense: float
    iterations: int
    converged: bool
    payload: Any = None


class CircularitySolver:
    """
    Resolves the revolver / interest loop for a single period.

    The evaluator owns all state: each call must fully (re)write the
    period's figures from the revolver estimate it is given, so the last
    evaluation is the one that stands.
    """

    MODES = ('single_pass', 'iterative')

    def __init__(
        self,
        mode: Literal['single_pass', 'iterative'] = 'single_pass',
        max_iterations: int = 3,
        tolerance: float = 1e-6,
        diagnostics: Optional[DiagnosticsSink] = None
    ):
        """
        Initialize circularity solver.

        Args:
            mode: 'single_pass' or 'iterative'
            max_iterations: Iteration cap in iterative mode
            tolerance: Convergence tolerance on interest expense
            diagnostics: Sink for convergence events
        """
        if mode not in self.MODES:
            raise ValueError(f"mode must be one of {self.MODES}, got {mode}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")

        self.mode = mode
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.diagnostics = diagnostics or LoggingDiagnostics()

    def solve(
        self,
        period: int,
        revolver_beginning: float,
        evaluate: PeriodEvaluator
    ) -> CircularityResults:
        """
        Resolve one period.

        Args:
            period: Period index (>= 1)
            revolver_beginning: Opening revolver balance
            evaluate: Callback that projects the period for a given
                revolver estimate

        Returns:
            CircularityResults for the final evaluation
        """
        estimate = revolver_beginning
        interest, ending, payload = evaluate(estimate)

        if self.mode == 'single_pass':
            self.diagnostics.info(
                'circularity_converged',
                f"single pass on opening revolver {estimate:,.2f}; "
                f"interest {interest:,.6f}",
                period, interest
            )
            return CircularityResults(
                period, estimate, ending, interest, 1, True, payload
            )

        iterations = 1
        converged = abs(ending - estimate) <= self.tolerance

        while not converged and iterations < self.max_iterations:
            previous_interest = interest
            estimate = ending
            interest, ending, payload = evaluate(estimate)
            iterations += 1
            converged = abs(interest - previous_interest) < self.tolerance

        if converged:
            self.diagnostics.info(
                'circularity_converged',
                f"interest converged after {iterations} pass(es) "
                f"at {interest:,.6f}",
                period, interest
            )
        else:
            self.diagnostics.warning(
                'circularity_unconverged',
                f"interest still moving after {iterations} passes; "
                f"keeping last estimate {interest:,.6f}",
                period, interest
            )

        return CircularityResults(
            period, estimate, ending, interest, iterations, converged, payload
        )
