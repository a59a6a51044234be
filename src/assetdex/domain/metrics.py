# src/assetdex/domain/metrics.py
"""
Metrics - Statistical Helpers for the Scoring Models

Small numeric helpers shared by the scoring models and the analysis
service: holder concentration, trend and volatility of a series.

Files that USE this module:
- assetdex.domain.scoring (trend for market prediction)
- assetdex.application.analysis_service (holder distribution, volatility)

Files that this module USES:
- assetdex.domain.errors (ScoringError for zero-based trends)
"""
from __future__ import annotations

import math
from typing import Sequence

from assetdex.domain.errors import ScoringError

NEUTRAL_DISTRIBUTION = 0.5


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def calculate_gini_coefficient(holdings: Sequence[float]) -> float:
    """
    Gini coefficient of a holdings distribution.

    0 means perfectly equal holdings; values approach 1 as a single holder
    owns everything.

    Args:
        holdings: Balance per holder

    Returns:
        Gini coefficient, 0.0 for empty or zero-sum input
    """
    if not holdings:
        return 0.0
    ordered = sorted(holdings)
    n = len(ordered)
    total = sum(ordered)
    if total == 0:
        return 0.0
    numerator = sum((2 * (i + 1) - n - 1) * value for i, value in enumerate(ordered))
    return numerator / (n * total)


def concentration_from_holders(holder_count: int, total_supply: float) -> float:
    """
    Approximate holder distribution from the holder/supply ratio.

    Degenerate inputs (no holders or no supply) return the neutral 0.5.

    Args:
        holder_count: Number of holders
        total_supply: Supply in human units

    Returns:
        Distribution estimate in [0, 1]
    """
    if holder_count <= 0 or total_supply <= 0:
        return NEUTRAL_DISTRIBUTION
    concentration = holder_count / total_supply
    return clamp(1 - concentration / 100)


def calculate_trend(values: Sequence[float]) -> float:
    """
    Relative change ``(last - first) / first`` over a series.

    Args:
        values: Series slice to evaluate

    Returns:
        Relative change, 0.0 when fewer than two points are given

    Raises:
        ScoringError: If the first element is zero
    """
    if len(values) < 2:
        return 0.0
    first = values[0]
    last = values[-1]
    if first == 0:
        raise ScoringError("Cannot compute trend of a series starting at zero")
    return (last - first) / first


def calculate_volatility(prices: Sequence[float]) -> float:
    """Population standard deviation of simple returns; 0.0 with fewer than two prices."""
    if len(prices) < 2:
        return 0.0
    returns = []
    for previous, current in zip(prices, prices[1:]):
        if previous == 0:
            raise ScoringError("Cannot compute returns from a zero price")
        returns.append((current - previous) / previous)
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance)
