# src/financial_projection/models/assumptions.py
"""
Projection Assumptions

The engine consumes one immutable, fully-populated Assumptions record.
It is validated once, when constructed, and never mutated afterwards.
Default-filling belongs to whoever builds the record; here a missing
required field is an error.
"""

import json
import logging
import re
from dataclasses import dataclass, fields, MISSING
from pathlib import Path
from collections.abc import Iterable, Mapping
from typing import Any, Dict, Tuple, Union

import numpy as np
import yaml

from ..core.exceptions import PreconditionError


logger = logging.getLogger(__name__)

MAX_PROJECTION_YEARS = 30

# Fields that must lie in [0, 1]
_UNIT_INTERVAL_FIELDS = (
    'historical_gross_margin',
    'base_gross_margin',
    'target_gross_margin',
    'base_sga_percent',
    'target_sga_percent',
    'rd_percent',
    'da_percent',
    'prepaid_percent',
    'accrued_percent',
    'other_ca_percent',
    'other_cl_percent',
    'existing_debt_rate',
    'revolver_rate',
    'revolver_commitment_fee',
    'interest_on_cash',
    'effective_tax_rate',
    'stock_based_comp_percent',
    'payout_ratio',
)

# Balances and day counts that may not be negative
_NON_NEGATIVE_FIELDS = (
    'historical_cogs',
    'historical_sga',
    'historical_rd',
    'historical_da',
    'historical_interest_expense',
    'historical_total_debt',
    'historical_cash',
    'historical_ppe',
    'historical_intangibles',
    'historical_goodwill',
    'historical_other_lt_assets',
    'historical_deferred_tax_liability',
    'historical_other_lt_liabilities',
    'dso',
    'dio',
    'dpo',
    'existing_debt_balance',
    'debt_amortization',
    'revolver_size',
    'minimum_cash_balance',
    'nol_carryforward',
    'dividends_per_share',
    'share_repurchases',
)

_STRICTLY_POSITIVE_FIELDS = (
    'historical_revenue',
    'historical_total_assets',
    'historical_shares_outstanding',
)

_TEXT_FIELDS = ('company_name', 'industry', 'fiscal_year_end', 'currency')
_SEQUENCE_FIELDS = ('revenue_growth_rates', 'capex_percent')


def _is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def _to_snake_case(key: str) -> str:
    """historicalOtherLTAssets -> historical_other_lt_assets"""
    key = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', key)
    key = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', key)
    return key.lower()


@dataclass(frozen=True)
class Assumptions:
    """
    Immutable input to the projection engine.

    Currency amounts are in millions, rates are decimals, day counts are
    days. Per-year sequences hold one entry per projected year.
    """
    # Horizon
    projection_years: int

    # Historical year
    historical_revenue: float
    historical_gross_margin: float
    historical_cogs: float
    historical_sga: float
    historical_rd: float
    historical_da: float
    historical_interest_expense: float
    historical_net_income: float
    historical_total_assets: float
    historical_total_debt: float
    historical_cash: float
    historical_equity: float
    historical_shares_outstanding: float
    historical_ppe: float

    # Revenue and cost structure
    revenue_growth_rates: Tuple[float, ...]
    base_gross_margin: float
    target_gross_margin: float
    base_sga_percent: float
    target_sga_percent: float
    rd_percent: float
    da_percent: float

    # Working capital
    dso: float
    dio: float
    dpo: float
    prepaid_percent: float
    accrued_percent: float
    other_ca_percent: float
    other_cl_percent: float

    # Capital expenditure
    capex_percent: Tuple[float, ...]

    # Debt
    existing_debt_balance: float
    existing_debt_rate: float
    debt_amortization: float
    revolver_size: float
    revolver_rate: float
    revolver_commitment_fee: float
    minimum_cash_balance: float
    interest_on_cash: float

    # Tax
    effective_tax_rate: float
    nol_carryforward: float

    # Equity
    stock_based_comp_percent: float
    dividends_per_share: float
    payout_ratio: float
    share_repurchases: float

    # Optional historical balances, held constant through the projection
    historical_intangibles: float = 0.0
    historical_goodwill: float = 0.0
    historical_other_lt_assets: float = 0.0
    historical_deferred_tax_liability: float = 0.0
    historical_other_lt_liabilities: float = 0.0

    # Labels
    company_name: str = "Target Company"
    industry: str = "General"
    fiscal_year_end: str = "December"
    currency: str = "USD"

    def __post_init__(self):
        """Freeze per-year sequences and validate every field."""
        for name in _SEQUENCE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise PreconditionError(
                    f"{name} must be a sequence of numbers, got {value!r}",
                    name
                )
            object.__setattr__(self, name, tuple(value))

        self._validate()

    def _validate(self) -> None:
        years = self.projection_years
        if isinstance(years, bool) or not isinstance(years, (int, np.integer)):
            raise PreconditionError(
                f"projection_years must be an integer, got {years!r}",
                'projection_years'
            )
        if not 1 <= years <= MAX_PROJECTION_YEARS:
            raise PreconditionError(
                f"projection_years must be between 1 and {MAX_PROJECTION_YEARS}, "
                f"got {years}",
                'projection_years'
            )

        for f in fields(self):
            if f.name in _TEXT_FIELDS or f.name == 'projection_years':
                continue
            if f.name in _SEQUENCE_FIELDS:
                values = getattr(self, f.name)
                if len(values) != years:
                    raise PreconditionError(
                        f"{f.name} must have {years} entries (one per projected "
                        f"year), got {len(values)}",
                        f.name
                    )
                for index, value in enumerate(values):
                    self._check_finite(f"{f.name}[{index}]", value)
                continue
            self._check_finite(f.name, getattr(self, f.name))

        for name in _UNIT_INTERVAL_FIELDS:
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise PreconditionError(
                    f"{name} must be between 0 and 1, got {value}", name
                )

        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise PreconditionError(
                    f"{name} cannot be negative, got {getattr(self, name)}", name
                )

        for name in _STRICTLY_POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise PreconditionError(
                    f"{name} must be positive, got {getattr(self, name)}", name
                )

        for index, rate in enumerate(self.revenue_growth_rates):
            if rate <= -1:
                raise PreconditionError(
                    f"revenue_growth_rates[{index}] must be greater than -1, got {rate}",
                    'revenue_growth_rates'
                )

        for index, rate in enumerate(self.capex_percent):
            if not 0 <= rate <= 1:
                raise PreconditionError(
                    f"capex_percent[{index}] must be between 0 and 1, got {rate}",
                    'capex_percent'
                )

    @staticmethod
    def _check_finite(name: str, value: Any) -> None:
        if not _is_number(value):
            raise PreconditionError(
                f"{name} must be numeric, got {value!r}", name
            )
        if not np.isfinite(value):
            raise PreconditionError(f"{name} must be finite, got {value}", name)

    @property
    def year_labels(self) -> Tuple[str, ...]:
        """Period labels: 'Historical', 'Year 1', ..., 'Year N'."""
        return ('Historical',) + tuple(
            f'Year {i}' for i in range(1, self.projection_years + 1)
        )

    def growth_rate(self, period: int) -> float:
        """Revenue growth for projected period (1-based)."""
        return self.revenue_growth_rates[period - 1]

    def capex_rate(self, period: int) -> float:
        """Capex % of revenue for projected period (1-based)."""
        return self.capex_percent[period - 1]

    @classmethod
    def required_fields(cls) -> Tuple[str, ...]:
        return tuple(
            f.name for f in fields(cls)
            if f.default is MISSING and f.default_factory is MISSING
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Assumptions':
        """
        Build assumptions from a mapping.

        Keys may be snake_case or the camelCase names produced by the
        assumption extraction service (historicalRevenue, baseSGAPercent,
        ...). Unknown keys are ignored.

        Args:
            data: Field values

        Returns:
            Validated Assumptions

        Raises:
            PreconditionError: If a required field is missing or invalid
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        ignored = []

        for key, value in data.items():
            name = _to_snake_case(key)
            if name in known:
                values[name] = value
            else:
                ignored.append(key)

        if ignored:
            logger.debug("Ignoring unknown assumption keys: %s", sorted(ignored))

        missing = [name for name in cls.required_fields() if name not in values]
        if missing:
            raise PreconditionError(
                f"Missing required assumptions: {', '.join(missing)}",
                missing[0]
            )

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = list(value) if f.name in _SEQUENCE_FIELDS else value
        return result


@dataclass(frozen=True)
class ProjectionConfig:
    """Engine settings that are not company assumptions."""
    # Reconciliation
    tolerance: float = 1e-2
    plug_threshold: float = 1e-3
    strict_cash_flow: bool = False
    carry_asset_anchor: bool = False

    # Revolver <-> interest resolution
    circularity_mode: str = 'single_pass'  # or 'iterative'
    max_iterations: int = 3
    convergence_tolerance: float = 1e-6

    # Opening balance sheet back-estimates
    common_stock_par: float = 5.0
    apic_share: float = 0.4
    gross_ppe_multiple: float = 1.5
    historical_capex_ratio: float = 0.1

    days_in_year: int = 365

    def __post_init__(self):
        if self.circularity_mode not in ('single_pass', 'iterative'):
            raise PreconditionError(
                f"circularity_mode must be 'single_pass' or 'iterative', "
                f"got {self.circularity_mode!r}",
                'circularity_mode'
            )
        if self.max_iterations < 1:
            raise PreconditionError(
                f"max_iterations must be at least 1, got {self.max_iterations}",
                'max_iterations'
            )
        if self.tolerance <= 0 or self.plug_threshold < 0:
            raise PreconditionError(
                "tolerance must be positive and plug_threshold non-negative",
                'tolerance'
            )
        if self.plug_threshold > self.tolerance:
            raise PreconditionError(
                f"plug_threshold ({self.plug_threshold}) cannot exceed "
                f"tolerance ({self.tolerance})",
                'plug_threshold'
            )
        if not 0 <= self.apic_share <= 1:
            raise PreconditionError(
                f"apic_share must be between 0 and 1, got {self.apic_share}",
                'apic_share'
            )
        if self.gross_ppe_multiple < 1:
            raise PreconditionError(
                f"gross_ppe_multiple must be at least 1, got {self.gross_ppe_multiple}",
                'gross_ppe_multiple'
            )
        if self.days_in_year <= 0:
            raise PreconditionError(
                f"days_in_year must be positive, got {self.days_in_year}",
                'days_in_year'
            )


def load_assumptions(path: Union[str, Path]) -> Assumptions:
    """
    Load assumptions from a YAML or JSON file.

    Args:
        path: File path (.yaml, .yml or .json)

    Returns:
        Validated Assumptions
    """
    path = Path(path)
    text = path.read_text()

    try:
        if path.suffix.lower() == '.json':
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PreconditionError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, Mapping):
        raise PreconditionError(
            f"{path} must contain a mapping of assumption values"
        )

    # Allow the assumptions to sit under a top-level 'assumptions' key
    if 'assumptions' in data and isinstance(data['assumptions'], Mapping):
        data = data['assumptions']

    return Assumptions.from_dict(data)
