# tests/test_metrics.py
"""
Metrics Tests - Statistical Helpers

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.domain.metrics (helpers under test)
- assetdex.domain.chains (chain lookup tables)
"""
import pytest

from assetdex.domain import metrics
from assetdex.domain.chains import chain_id_for, chain_name_for
from assetdex.domain.errors import ScoringError


class TestTrend:
    def test_relative_change(self):
        assert metrics.calculate_trend([2.0, 5.0, 3.0]) == pytest.approx(0.5)

    def test_short_series_is_flat(self):
        assert metrics.calculate_trend([]) == 0.0
        assert metrics.calculate_trend([7.0]) == 0.0

    def test_zero_first_element_raises(self):
        with pytest.raises(ScoringError):
            metrics.calculate_trend([0.0, 1.0])


class TestRounding:
    @pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (93.75, 94)])
    def test_half_up(self, value, expected):
        assert metrics.round_half_up(value) == expected

    def test_clamp(self):
        assert metrics.clamp(1.5) == 1.0
        assert metrics.clamp(-0.1) == 0.0
        assert metrics.clamp(150, 0, 100) == 100


class TestDistribution:
    def test_gini_equal_holdings(self):
        assert metrics.calculate_gini_coefficient([5, 5, 5, 5]) == 0.0

    def test_gini_single_whale(self):
        assert metrics.calculate_gini_coefficient([0, 0, 0, 10]) == pytest.approx(0.75)

    def test_gini_empty(self):
        assert metrics.calculate_gini_coefficient([]) == 0.0
        assert metrics.calculate_gini_coefficient([0, 0]) == 0.0

    def test_concentration_neutral_on_degenerate_input(self):
        assert metrics.concentration_from_holders(0, 1_000) == 0.5
        assert metrics.concentration_from_holders(10, 0) == 0.5

    def test_concentration_ratio(self):
        assert metrics.concentration_from_holders(1_500, 1_000_000) == pytest.approx(0.999985)


class TestVolatility:
    def test_constant_prices(self):
        assert metrics.calculate_volatility([100, 100, 100]) == 0.0

    def test_symmetric_returns(self):
        assert metrics.calculate_volatility([100, 110, 99]) == pytest.approx(0.1)

    def test_too_few_prices(self):
        assert metrics.calculate_volatility([100]) == 0.0


class TestChains:
    def test_known_names(self):
        assert chain_id_for("Base") == 8453
        assert chain_id_for("Linea") == 59141
        assert chain_name_for(42161) == "Arbitrum"

    def test_unknown_falls_back_to_ethereum(self):
        assert chain_id_for("Fantom") == 1
        assert chain_name_for(999) == "Ethereum"
