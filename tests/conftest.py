# tests/conftest.py
"""Shared fixtures: a mid-sized industrial company over five years."""

import pytest

from financial_projection import (
    Assumptions,
    FinancialModel,
    ProjectionConfig,
    RecordingDiagnostics,
)


BASE_INPUTS = {
    'company_name': 'Acme Industrial',
    'projection_years': 5,

    # Historical year
    'historical_revenue': 1000.0,
    'historical_gross_margin': 0.35,
    'historical_cogs': 650.0,
    'historical_sga': 200.0,
    'historical_rd': 20.0,
    'historical_da': 30.0,
    'historical_interest_expense': 12.0,
    'historical_net_income': 66.0,
    'historical_total_assets': 900.0,
    'historical_total_debt': 200.0,
    'historical_cash': 80.0,
    'historical_equity': 400.0,
    'historical_shares_outstanding': 100.0,
    'historical_ppe': 300.0,

    # Operating drivers
    'revenue_growth_rates': [0.05, 0.05, 0.05, 0.05, 0.05],
    'base_gross_margin': 0.35,
    'target_gross_margin': 0.38,
    'base_sga_percent': 0.20,
    'target_sga_percent': 0.18,
    'rd_percent': 0.02,
    'da_percent': 0.03,

    # Working capital
    'dso': 45.0,
    'dio': 60.0,
    'dpo': 30.0,
    'prepaid_percent': 0.01,
    'accrued_percent': 0.05,
    'other_ca_percent': 0.02,
    'other_cl_percent': 0.02,

    'capex_percent': [0.04, 0.04, 0.04, 0.04, 0.04],

    # Debt
    'existing_debt_balance': 200.0,
    'existing_debt_rate': 0.06,
    'debt_amortization': 20.0,
    'revolver_size': 50.0,
    'revolver_rate': 0.07,
    'revolver_commitment_fee': 0.005,
    'minimum_cash_balance': 50.0,
    'interest_on_cash': 0.02,

    # Tax and equity
    'effective_tax_rate': 0.25,
    'nol_carryforward': 0.0,
    'stock_based_comp_percent': 0.01,
    'dividends_per_share': 0.0,
    'payout_ratio': 0.2,
    'share_repurchases': 10.0,
}


@pytest.fixture
def base_inputs():
    inputs = dict(BASE_INPUTS)
    inputs['revenue_growth_rates'] = list(BASE_INPUTS['revenue_growth_rates'])
    inputs['capex_percent'] = list(BASE_INPUTS['capex_percent'])
    return inputs


@pytest.fixture
def make_assumptions(base_inputs):
    """Build assumptions from the base case with selected overrides."""
    def _make(**overrides):
        inputs = dict(base_inputs)
        inputs.update(overrides)
        return Assumptions(**inputs)
    return _make


@pytest.fixture
def base_assumptions(make_assumptions):
    return make_assumptions()


@pytest.fixture
def recorder():
    return RecordingDiagnostics()


@pytest.fixture
def base_result(base_assumptions, recorder):
    return FinancialModel(base_assumptions, diagnostics=recorder).build()


@pytest.fixture
def distressed_assumptions(make_assumptions):
    """Deep operating losses that exhaust the revolver in year 1."""
    return make_assumptions(
        base_gross_margin=0.10,
        target_gross_margin=0.10,
        base_sga_percent=0.30,
        target_sga_percent=0.30,
    )


@pytest.fixture
def borrowing_assumptions(make_assumptions):
    """Buybacks larger than free cash flow, funded by a large revolver."""
    return make_assumptions(share_repurchases=80.0, revolver_size=500.0)


@pytest.fixture
def iterative_config():
    return ProjectionConfig(circularity_mode='iterative', max_iterations=10)
