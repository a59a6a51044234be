# src/assetdex/domain/scoring.py
"""
Scoring Engine - Rarity, Risk and Market-Movement Models

Three independent, deterministic models. Each one is a weighted linear
combination of bucketed sub-scores; there is no learning and no I/O here.

Files that USE this module:
- assetdex.application.analysis_service (composite analysis)
- assetdex.application.discovery_service (tier mapping)
- tests.test_scoring (unit and golden-output tests)

Files that this module USES:
- assetdex.domain.models (scoring inputs and outputs)
- assetdex.domain.metrics (trend, rounding, clamping)
"""
from __future__ import annotations

from assetdex.domain.metrics import calculate_trend, clamp, round_half_up
from assetdex.domain.models import (
    MarketDirection,
    MarketInput,
    MarketPrediction,
    RarityInput,
    RarityTier,
    RiskAssessment,
    RiskInput,
    RiskTier,
)

RARITY_WEIGHTS = {
    "supply": 0.35,
    "distribution": 0.25,
    "age": 0.15,
    "uniqueness": 0.15,
    "market_cap": 0.10,
}

RISK_WEIGHTS = {
    "audit": 0.25,
    "centralization": 0.20,
    "liquidity": 0.25,
    "regulatory": 0.15,
    "volatility": 0.15,
}

MIN_PRICE_POINTS = 5
INSUFFICIENT_DATA = MarketPrediction(
    direction=MarketDirection.NEUTRAL,
    confidence=50,
    factors=("insufficient data",),
)


# --- Rarity -----------------------------------------------------------------

def calculate_supply_score(supply: float) -> float:
    """Smaller supply is rarer."""
    if supply <= 1_000:
        return 1.0
    if supply <= 10_000:
        return 0.8
    if supply <= 100_000:
        return 0.6
    if supply <= 1_000_000:
        return 0.4
    return 0.2


def calculate_distribution_score(holder_distribution: float) -> float:
    # lower concentration, higher score
    return 1 - holder_distribution


def calculate_age_score(age_days: float) -> float:
    if age_days >= 365:
        return 1.0
    if age_days >= 180:
        return 0.8
    if age_days >= 90:
        return 0.6
    if age_days >= 30:
        return 0.4
    return 0.2


def calculate_market_cap_score(market_cap: float) -> float:
    if market_cap >= 1_000_000_000:
        return 1.0
    if market_cap >= 100_000_000:
        return 0.8
    if market_cap >= 10_000_000:
        return 0.6
    if market_cap >= 1_000_000:
        return 0.4
    return 0.2


def calculate_rarity_score(data: RarityInput) -> float:
    """
    Weighted rarity score.

    Args:
        data: Rarity input with distribution and uniqueness in [0, 1]

    Returns:
        Score clamped to [0, 100]
    """
    total = (
        calculate_supply_score(data.total_supply) * RARITY_WEIGHTS["supply"]
        + calculate_distribution_score(data.holder_distribution) * RARITY_WEIGHTS["distribution"]
        + calculate_age_score(data.age_days) * RARITY_WEIGHTS["age"]
        + data.uniqueness * RARITY_WEIGHTS["uniqueness"]
        + calculate_market_cap_score(data.market_cap) * RARITY_WEIGHTS["market_cap"]
    )
    return clamp(total * 100, 0.0, 100.0)


def rarity_tier(score: float) -> RarityTier:
    """Map a rarity score to its tier; lower bounds are inclusive."""
    if score >= 90:
        return RarityTier.LEGENDARY
    if score >= 75:
        return RarityTier.EPIC
    if score >= 60:
        return RarityTier.RARE
    if score >= 40:
        return RarityTier.UNCOMMON
    return RarityTier.COMMON


# --- Risk -------------------------------------------------------------------

def calculate_liquidity_score(liquidity: float) -> float:
    if liquidity >= 10_000_000:
        return 1.0
    if liquidity >= 1_000_000:
        return 0.8
    if liquidity >= 100_000:
        return 0.6
    if liquidity >= 10_000:
        return 0.4
    return 0.2


def risk_tier(score: float) -> RiskTier:
    if score >= 80:
        return RiskTier.LOW
    if score >= 60:
        return RiskTier.MEDIUM
    if score >= 40:
        return RiskTier.HIGH
    return RiskTier.SPECULATIVE


def assess_risk(data: RiskInput) -> RiskAssessment:
    """
    Weighted risk score; higher means safer.

    An unaudited asset keeps a 0.3 audit sub-score: degraded, not worthless.

    Args:
        data: Risk input

    Returns:
        RiskAssessment with score in [0, 100] and its tier
    """
    audit_score = 1.0 if data.audit_status else 0.3
    total = (
        audit_score * RISK_WEIGHTS["audit"]
        + (1 - data.centralization) * RISK_WEIGHTS["centralization"]
        + calculate_liquidity_score(data.liquidity_depth) * RISK_WEIGHTS["liquidity"]
        + data.regulatory_clarity * RISK_WEIGHTS["regulatory"]
        + (1 - min(data.volatility, 1)) * RISK_WEIGHTS["volatility"]
    )
    score = clamp(total * 100, 0.0, 100.0)
    return RiskAssessment(score=score, tier=risk_tier(score))


# --- Market -----------------------------------------------------------------

def predict_market_movement(data: MarketInput) -> MarketPrediction:
    """
    Predict market direction from price, volume, yield and sentiment signals.

    Fewer than five price points returns the fixed neutral prediction.

    Args:
        data: Market input series and sentiment

    Returns:
        MarketPrediction with confidence as a percentage

    Raises:
        ScoringError: If a trend slice starts at zero
    """
    if len(data.price_history) < MIN_PRICE_POINTS:
        return INSUFFICIENT_DATA

    price_trend = calculate_trend(data.price_history[-5:])
    volume_trend = calculate_trend(data.volume[-5:])
    yield_trend = calculate_trend(data.yield_changes[-3:]) if data.yield_changes else 0.0

    score = 0.0
    factors = []

    # Price trend (40%)
    if price_trend > 0.02:
        score += 0.4
        factors.append("Positive price momentum")
    elif price_trend < -0.02:
        factors.append("Negative price momentum")
    else:
        score += 0.2
        factors.append("Sideways price movement")

    # Volume trend (20%)
    if volume_trend > 0.1:
        score += 0.2
        factors.append("Increasing volume")
    elif volume_trend < -0.1:
        factors.append("Decreasing volume")
    else:
        score += 0.1

    # Yield trend (20%)
    if yield_trend > 0:
        score += 0.2
        factors.append("Improving yields")
    elif yield_trend < 0:
        factors.append("Declining yields")
    else:
        score += 0.1

    # Sentiment (20%)
    score += data.sentiment * 0.2
    if data.sentiment > 0.6:
        factors.append("Positive market sentiment")
    elif data.sentiment < 0.4:
        factors.append("Negative market sentiment")

    if score > 0.6:
        direction, confidence = MarketDirection.BULLISH, score
    elif score < 0.4:
        direction, confidence = MarketDirection.BEARISH, 1 - score
    else:
        direction, confidence = MarketDirection.NEUTRAL, 0.5

    return MarketPrediction(
        direction=direction,
        confidence=int(clamp(round_half_up(confidence * 100), 0, 100)),
        factors=tuple(factors),
    )


def health_score(rarity_score: float, risk_score: float) -> int:
    """Composite health: mean of rarity and risk, rounded half-up."""
    return int(clamp(round_half_up((rarity_score + risk_score) / 2), 0, 100))
