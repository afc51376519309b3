# tests/test_utils.py
import math

import pytest

from financial_projection.utils import (
    average_balance,
    average_of,
    compound_growth_rate,
    days_balance,
    depreciation_and_amortization,
    glide_path,
    period_growth,
    safe_divide,
)


class TestGrowth:
    def test_cagr_of_ten_percent_growth(self):
        revenue = 100.0
        for _ in range(5):
            revenue *= 1.10
        assert revenue == pytest.approx(161.051)
        assert compound_growth_rate(100.0, revenue, 5) == pytest.approx(0.10)

    @pytest.mark.parametrize('start, end', [(0.0, 100.0), (-50.0, 100.0), (100.0, -5.0)])
    def test_cagr_non_positive_endpoints(self, start, end):
        assert compound_growth_rate(start, end, 5) == 0.0

    def test_cagr_requires_positive_periods(self):
        with pytest.raises(ValueError):
            compound_growth_rate(100.0, 110.0, 0)

    @pytest.mark.parametrize('denominator', [0.0, -2.0, math.nan, None])
    def test_safe_divide_guards(self, denominator):
        assert safe_divide(10.0, denominator) == 0.0

    def test_safe_divide(self):
        assert safe_divide(10.0, 4.0) == 2.5
        assert safe_divide(10.0, 0.0, default=-1.0) == -1.0

    def test_period_growth(self):
        assert period_growth([100.0, 110.0, 99.0]) == pytest.approx([0.0, 0.10, -0.10])
        assert period_growth([-10.0, 5.0]) == [0.0, 0.0]

    def test_average_balance(self):
        values = [100.0, 120.0, 80.0]
        assert average_balance(values, 0) == 100.0
        assert average_balance(values, 2) == 100.0

    def test_average_of(self):
        assert average_of([]) == 0.0
        assert average_of([0.1, 0.2, 0.3]) == pytest.approx(0.2)


class TestDrivers:
    def test_glide_path_endpoints(self):
        assert glide_path(0.35, 0.38, 0, 5) == pytest.approx(0.35)
        assert glide_path(0.35, 0.38, 5, 5) == pytest.approx(0.38)
        assert glide_path(0.35, 0.38, 2, 5) == pytest.approx(0.362)

    def test_glide_path_requires_horizon(self):
        with pytest.raises(ValueError):
            glide_path(0.35, 0.38, 1, 0)

    def test_depreciation_and_amortization(self):
        assert depreciation_and_amortization(1050.0, 0.03) == pytest.approx(31.5)

    def test_days_balance(self):
        assert days_balance(1000.0, 45.0) == pytest.approx(1000.0 * 45 / 365)
        assert days_balance(1000.0, 45.0, days_in_year=360) == pytest.approx(125.0)
