# tests/test_scoring.py
"""
Scoring Tests - Rarity, Risk and Market Models

Unit tests for the bucket functions, tier boundaries and weighted totals,
plus fixed-input golden outputs for market prediction factors.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.domain.scoring (models under test)
- assetdex.domain.models (inputs and tiers)
"""
import pytest  # Testing framework for writing and running tests

from assetdex.domain import scoring
from assetdex.domain.errors import ScoringError
from assetdex.domain.models import (
    MarketDirection,
    MarketInput,
    RarityInput,
    RarityTier,
    RiskInput,
    RiskTier,
)


def market(prices, volume=(100.0, 100.0, 100.0, 100.0, 100.0), yields=(), sentiment=0.5):
    return MarketInput(
        price_history=tuple(prices),
        volume=tuple(volume),
        yield_changes=tuple(yields),
        market_cap=1_000_000.0,
        sentiment=sentiment,
    )


class TestRarityBuckets:
    @pytest.mark.parametrize("supply,expected", [
        (1_000, 1.0), (1_001, 0.8), (10_000, 0.8), (100_000, 0.6),
        (1_000_000, 0.4), (1_000_001, 0.2),
    ])
    def test_supply_score(self, supply, expected):
        assert scoring.calculate_supply_score(supply) == expected

    @pytest.mark.parametrize("age,expected", [
        (365, 1.0), (364, 0.8), (180, 0.8), (90, 0.6), (30, 0.4), (29, 0.2),
    ])
    def test_age_score(self, age, expected):
        assert scoring.calculate_age_score(age) == expected

    @pytest.mark.parametrize("cap,expected", [
        (1_000_000_000, 1.0), (100_000_000, 0.8), (10_000_000, 0.6),
        (1_000_000, 0.4), (999_999, 0.2),
    ])
    def test_market_cap_score(self, cap, expected):
        assert scoring.calculate_market_cap_score(cap) == expected

    def test_distribution_score_is_inverse(self):
        assert scoring.calculate_distribution_score(0.2) == pytest.approx(0.8)


class TestRarityScore:
    def test_weighted_total(self):
        data = RarityInput(
            total_supply=500,
            holder_count=50,
            holder_distribution=0.2,
            age_days=400,
            uniqueness=0.5,
            market_cap=2_000_000_000,
        )
        # 0.35 + 0.8*0.25 + 0.15 + 0.5*0.15 + 0.10
        assert scoring.calculate_rarity_score(data) == pytest.approx(87.5)

    def test_clamped_to_100(self):
        data = RarityInput(500, 50, 0.0, 400, 5.0, 2_000_000_000)
        assert scoring.calculate_rarity_score(data) == 100.0

    def test_clamped_to_0(self):
        data = RarityInput(10 ** 9, 1, 5.0, 0, 0.0, 0)
        assert scoring.calculate_rarity_score(data) == 0.0

    @pytest.mark.parametrize("score,tier", [
        (90, RarityTier.LEGENDARY), (89.99, RarityTier.EPIC), (75, RarityTier.EPIC),
        (74.99, RarityTier.RARE), (60, RarityTier.RARE), (40, RarityTier.UNCOMMON),
        (39.99, RarityTier.COMMON), (0, RarityTier.COMMON),
    ])
    def test_tier_boundaries_are_inclusive(self, score, tier):
        assert scoring.rarity_tier(score) is tier


class TestRisk:
    @pytest.mark.parametrize("liquidity,expected", [
        (10_000_000, 1.0), (1_000_000, 0.8), (100_000, 0.6), (10_000, 0.4), (9_999, 0.2),
    ])
    def test_liquidity_score(self, liquidity, expected):
        assert scoring.calculate_liquidity_score(liquidity) == expected

    def test_best_case_is_low_risk(self):
        result = scoring.assess_risk(RiskInput(True, 0.0, 10_000_000, 1.0, 0.0))
        assert result.score == pytest.approx(100.0)
        assert result.tier is RiskTier.LOW

    def test_unaudited_keeps_partial_audit_score(self):
        result = scoring.assess_risk(RiskInput(False, 0.0, 10_000_000, 1.0, 0.0))
        assert result.score == pytest.approx(82.5)

    def test_volatility_above_one_is_capped(self):
        result = scoring.assess_risk(RiskInput(False, 1.0, 0, 0.0, 2.0))
        # 0.3*0.25 + 0 + 0.2*0.25 + 0 + 0
        assert result.score == pytest.approx(12.5)
        assert result.tier is RiskTier.SPECULATIVE

    @pytest.mark.parametrize("score,tier", [
        (80, RiskTier.LOW), (79.9, RiskTier.MEDIUM), (60, RiskTier.MEDIUM),
        (40, RiskTier.HIGH), (39.9, RiskTier.SPECULATIVE),
    ])
    def test_tier_boundaries(self, score, tier):
        assert scoring.risk_tier(score) is tier


class TestMarketPrediction:
    def test_insufficient_data(self):
        result = scoring.predict_market_movement(market([100, 101, 102, 103]))
        assert result.direction is MarketDirection.NEUTRAL
        assert result.confidence == 50
        assert result.factors == ("insufficient data",)

    def test_bullish_golden(self):
        result = scoring.predict_market_movement(market(
            prices=(100.0, 105.0, 102.0, 108.0, 110.0),
            volume=(1_000_000.0, 1_200_000.0, 800_000.0, 1_500_000.0, 1_300_000.0),
            yields=(0.05, 0.052, 0.048, 0.055, 0.057),
            sentiment=0.7,
        ))
        assert result.direction is MarketDirection.BULLISH
        assert result.confidence == 94
        assert result.factors == (
            "Positive price momentum",
            "Increasing volume",
            "Improving yields",
            "Positive market sentiment",
        )

    def test_bearish_golden(self):
        result = scoring.predict_market_movement(market(
            prices=(110.0, 108.0, 105.0, 102.0, 100.0),
            volume=(1_500_000.0, 1_400_000.0, 1_200_000.0, 1_100_000.0, 1_000_000.0),
            yields=(0.06, 0.05, 0.04),
            sentiment=0.2,
        ))
        assert result.direction is MarketDirection.BEARISH
        assert result.confidence == 96
        assert result.factors == (
            "Negative price momentum",
            "Decreasing volume",
            "Declining yields",
            "Negative market sentiment",
        )

    def test_neutral_has_fixed_confidence(self):
        result = scoring.predict_market_movement(market(prices=(100.0,) * 5))
        assert result.direction is MarketDirection.NEUTRAL
        assert result.confidence == 50
        assert result.factors == ("Sideways price movement",)

    def test_only_last_five_prices_count(self):
        # an early crash outside the window does not matter
        prices = (500.0, 1.0, 100.0, 101.0, 100.0, 100.5, 101.0)
        result = scoring.predict_market_movement(market(prices=prices))
        assert result.factors[0] == "Sideways price movement"

    def test_zero_based_trend_raises(self):
        with pytest.raises(ScoringError):
            scoring.predict_market_movement(market(prices=(0.0, 1.0, 2.0, 3.0, 4.0)))


class TestHealthScore:
    def test_mean_rounded(self):
        assert scoring.health_score(87.5, 100.0) == 94

    def test_half_rounds_up(self):
        assert scoring.health_score(50, 51) == 51
        assert scoring.health_score(40, 41) == 41
