# src/financial_projection/cli.py
"""
Command line entry point.

    financial-model assumptions.yaml
    financial-model assumptions.json --iterative --statement balance_sheet cash_flow
"""

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from .core.exceptions import ProjectionError
from .models.assumptions import ProjectionConfig, load_assumptions
from .models.financial_model import STATEMENT_PREFIXES, FinancialModel, ProjectionResult


def print_summary(result: ProjectionResult) -> None:
    a = result.assumptions
    s = result.summary

    print("=" * 70)
    print(f"{a.company_name.upper()} - {a.projection_years}-YEAR PROJECTION ({a.currency})")
    print("=" * 70)
    print(f"  Revenue CAGR:              {s.revenue_cagr:>10.2%}")
    print(f"  EBITDA CAGR:               {s.ebitda_cagr:>10.2%}")
    print(f"  Net Income CAGR:           {s.net_income_cagr:>10.2%}")
    print(f"  EPS CAGR:                  {s.eps_cagr:>10.2%}")
    print(f"  Ending Net Debt / EBITDA:  {s.ending_net_debt_to_ebitda:>10.2f}x")
    print(f"  Ending Debt / Equity:      {s.ending_debt_to_equity:>10.2f}x")
    print(f"  Average ROIC:              {s.average_roic:>10.2%}")
    print(f"  Balance Sheet:             {'BALANCED' if s.is_balanced else 'ERROR':>10}")
    print(f"  Cash Flow:                 {'VERIFIED' if s.cash_flow_reconciled else 'ERROR':>10}")
    print(f"  Max Balance Plug:          {s.max_balance_plug:>10.4f}")


def print_statement(result: ProjectionResult, name: str, years_only: bool = False) -> None:
    df = result.statement(name).to_dataframe(transpose=True)
    if years_only:
        df = df.drop(columns=['Historical'])

    print(f"\n{name.replace('_', ' ').upper()}")
    print("-" * 70)
    with pd.option_context('display.max_rows', None, 'display.width', 160,
                           'display.float_format', '{:,.2f}'.format):
        print(df)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Integrated three-statement financial projection'
    )
    parser.add_argument('assumptions', help='Assumptions file (.yaml, .yml or .json)')
    parser.add_argument('--iterative', action='store_true',
                        help='Iterate the revolver / interest loop to convergence')
    parser.add_argument('--statement', nargs='+', default=[],
                        choices=list(STATEMENT_PREFIXES), metavar='NAME',
                        help=f"Statements to print: {', '.join(STATEMENT_PREFIXES)}")
    parser.add_argument('--years-only', action='store_true',
                        help='Omit the historical column from printed statements')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show engine diagnostics')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    config = ProjectionConfig(
        circularity_mode='iterative' if args.iterative else 'single_pass'
    )

    try:
        assumptions = load_assumptions(args.assumptions)
        result = FinancialModel(assumptions, config).build()
    except ProjectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot read {args.assumptions}: {e}", file=sys.stderr)
        return 1

    print_summary(result)
    for name in args.statement:
        print_statement(result, name, args.years_only)

    return 0


if __name__ == '__main__':
    sys.exit(main())
