# src/assetdex/application/analysis_service.py
"""
Analysis Service - Composite Asset Analysis

This module orchestrates a full analysis of one asset:

1. Fetch on-chain facts (mandatory), yield pools and art pieces
   (supplementary) concurrently
2. Classify the asset type from name/symbol keywords and source matches
3. Build rarity, risk and market inputs, substituting fixed placeholder
   history where no real history exists
4. Run the three scoring models and combine them into an Analysis

On-chain failure fails the whole request; pool or art failure only means
the analysis is built without them.

Files that USE this module:
- assetdex.app (scan command)
- tests.test_analysis_service (unit tests)

Files that this module USES:
- assetdex.adapters.providers.onchain (OnChainAdapter)
- assetdex.adapters.providers.defillama (DeFiLlamaAdapter)
- assetdex.adapters.providers.creatorbid (CreatorBidAdapter)
- assetdex.domain.scoring (rarity, risk, market and health models)
- assetdex.shared.ttl_cache (TTLCache)
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from assetdex.adapters.providers.creatorbid import ArtPiece, CreatorBidAdapter
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter, YieldPool
from assetdex.adapters.providers.onchain import OnChainAdapter
from assetdex.config import settings
from assetdex.domain import scoring
from assetdex.domain.chains import chain_name_for
from assetdex.domain.errors import MandatoryDataMissingError
from assetdex.domain.metrics import clamp
from assetdex.domain.models import (
    Analysis,
    AnalysisMetrics,
    AssetReference,
    AssetType,
    MarketInput,
    RarityInput,
    RawAssetFacts,
    RiskInput,
)
from assetdex.shared.ttl_cache import TTLCache

log = logging.getLogger(__name__)

DEFAULT_PRICE_HISTORY = (100.0, 105.0, 102.0, 108.0, 110.0)
DEFAULT_VOLUME_HISTORY = (1_000_000.0, 1_200_000.0, 800_000.0, 1_500_000.0, 1_300_000.0)
DEFAULT_YIELD_HISTORY = (0.05, 0.052, 0.048, 0.055, 0.057)
YIELD_SPREAD = (0.95, 1.0, 1.05)

DEFAULT_AGE_DAYS = 30.0
DEFAULT_AUDIT_STATUS = True
DEFAULT_VOLATILITY = 0.2
DEFAULT_SENTIMENT = 0.7

BASE_UNIQUENESS = {
    AssetType.TOKENIZED_TREASURY: 0.3,
    AssetType.REAL_ESTATE: 0.6,
    AssetType.ART: 0.8,
    AssetType.LUXURY_GOODS: 0.9,
    AssetType.PRIVATE_CREDIT: 0.5,
}

REGULATORY_CLARITY = {
    AssetType.TOKENIZED_TREASURY: 0.7,
    AssetType.REAL_ESTATE: 0.8,
    AssetType.ART: 0.4,
    AssetType.LUXURY_GOODS: 0.3,
    AssetType.PRIVATE_CREDIT: 0.6,
}


def holder_distribution(holders: int, supply: float) -> float:
    """Spread of holders relative to supply; neutral 0.5 when either is zero."""
    if holders == 0 or supply == 0:
        return 0.5
    return clamp(1 - (holders / supply) / 100)


def uniqueness(asset_type: AssetType, symbol: str) -> float:
    bonus = 0.2 if symbol and len(symbol) > 8 else 0.0
    return min(1.0, BASE_UNIQUENESS[asset_type] + bonus)


def estimate_liquidity(supply: float) -> float:
    """Fraction of supply assumed liquid, by supply bucket."""
    if supply > 1_000_000:
        return supply * 0.1
    if supply > 100_000:
        return supply * 0.05
    if supply > 10_000:
        return supply * 0.02
    return supply * 0.01


def match_pool(facts: RawAssetFacts, chain_id: int, pools: Sequence[YieldPool]) -> Optional[YieldPool]:
    """First pool on the same chain whose symbol contains the token symbol or whose project contains its name."""
    chain_name = chain_name_for(chain_id)
    symbol = (facts.symbol or "").lower()
    name = (facts.name or "").lower()
    for pool in pools:
        if pool.chain != chain_name:
            continue
        if (symbol and symbol in pool.symbol.lower()) or (name and name in pool.project.lower()):
            return pool
    return None


def match_art(facts: RawAssetFacts, pieces: Sequence[ArtPiece]) -> Optional[ArtPiece]:
    """First art piece whose title or artist contains the token name."""
    name = (facts.name or "").lower()
    if not name:
        return None
    for piece in pieces:
        if name in piece.title.lower() or name in piece.artist.lower():
            return piece
    return None


def classify_asset(facts: RawAssetFacts, pool: Optional[YieldPool], art: Optional[ArtPiece]) -> AssetType:
    symbol = (facts.symbol or "").lower()
    name = (facts.name or "").lower()
    if art is not None:
        return AssetType.ART
    if "real" in symbol or "real estate" in name:
        return AssetType.REAL_ESTATE
    if "luxury" in symbol or "luxury" in name:
        return AssetType.LUXURY_GOODS
    if "credit" in symbol or "credit" in name:
        return AssetType.PRIVATE_CREDIT
    if pool is not None and ("art" in pool.project.lower() or "art" in pool.symbol.lower()):
        return AssetType.ART
    return AssetType.TOKENIZED_TREASURY


def yield_history(art: Optional[ArtPiece], pool: Optional[YieldPool]) -> Tuple[float, ...]:
    if art is not None and art.yield_rate > 0:
        return tuple(art.yield_rate * k for k in YIELD_SPREAD)
    if pool is not None and pool.apy:
        return tuple(pool.apy * k for k in YIELD_SPREAD)
    return DEFAULT_YIELD_HISTORY


class AnalysisService:
    """Scores a single asset from on-chain and market facts."""

    def __init__(
        self,
        cache: TTLCache,
        onchain: OnChainAdapter,
        defillama: DeFiLlamaAdapter,
        creatorbid: Optional[CreatorBidAdapter] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.cache = cache
        self.onchain = onchain
        self.defillama = defillama
        self.creatorbid = creatorbid
        self.clock = clock

    async def _optional(self, source: str, coro) -> List[Any]:
        try:
            return await coro
        except Exception as e:
            log.warning("Supplementary source %s unavailable: %s", source, e)
            return []

    async def _no_art(self) -> List[ArtPiece]:
        return []

    async def analyze(self, ref: AssetReference) -> Analysis:
        """
        Run the full analysis for one asset.

        Args:
            ref: Asset to analyze

        Returns:
            Analysis with scores, tiers and metrics

        Raises:
            MandatoryDataMissingError: If on-chain facts cannot be read
            ScoringError: If a market series starts at zero
        """
        art_branch = self.creatorbid.fetch() if self.creatorbid else self._no_art()
        facts, pools, pieces = await asyncio.gather(
            self.onchain.fetch(ref),
            self._optional("defillama", self.defillama.fetch()),
            self._optional("creatorbid", art_branch),
            return_exceptions=True,
        )
        if isinstance(facts, BaseException):
            if isinstance(facts, MandatoryDataMissingError):
                raise facts
            raise MandatoryDataMissingError(ref.asset_id, f"on-chain read failed: {facts}") from facts

        pool = match_pool(facts, ref.chain_id, pools)
        art = match_art(facts, pieces)
        asset_type = classify_asset(facts, pool, art)
        art_price = art.current_bid if art else 0.0
        art_yield = art.yield_rate if art else 0.0
        supply = facts.supply_units

        distribution = holder_distribution(facts.holder_count, supply)
        rarity_input = RarityInput(
            total_supply=supply,
            holder_count=facts.holder_count,
            holder_distribution=distribution,
            age_days=DEFAULT_AGE_DAYS,
            uniqueness=uniqueness(asset_type, facts.symbol),
            market_cap=(pool.tvl if pool and pool.tvl else 0.0) or art_price or supply * 1,
        )
        rarity_score = scoring.calculate_rarity_score(rarity_input)

        risk_input = RiskInput(
            audit_status=DEFAULT_AUDIT_STATUS,
            centralization=1 - distribution,
            liquidity_depth=(pool.tvl if pool and pool.tvl else 0.0) or art_price or estimate_liquidity(supply),
            regulatory_clarity=REGULATORY_CLARITY.get(asset_type, 0.5),
            volatility=DEFAULT_VOLATILITY,
        )
        risk = scoring.assess_risk(risk_input)

        market_input = MarketInput(
            price_history=DEFAULT_PRICE_HISTORY,
            volume=DEFAULT_VOLUME_HISTORY,
            yield_changes=yield_history(art, pool),
            market_cap=rarity_input.market_cap,
            sentiment=DEFAULT_SENTIMENT,
        )
        prediction = scoring.predict_market_movement(market_input)

        analysis = Analysis(
            asset_id=ref.asset_id,
            rarity_score=rarity_score,
            rarity_tier=scoring.rarity_tier(rarity_score),
            risk_tier=risk.tier,
            market_direction=prediction.direction,
            prediction_confidence=prediction.confidence,
            health_score=scoring.health_score(rarity_score, risk.score),
            metrics=AnalysisMetrics(
                liquidity_depth=risk_input.liquidity_depth,
                holder_distribution=distribution,
                yield_rate=art_yield or (pool.apy if pool else 0.0) or 0.0,
                volatility=risk_input.volatility,
                age_days=rarity_input.age_days,
            ),
            timestamp=self.clock(),
            factors=prediction.factors,
        )
        log.info("Analysis complete for %s (%s): type=%s rarity=%s risk=%s",
                 facts.name, ref.asset_id, asset_type.name, analysis.rarity_tier.label, risk.tier.label)
        return analysis

    async def scan(self, ref: AssetReference) -> Dict[str, Any]:
        """Analysis payload for one asset, cached per (chain, address)."""
        key = f"scan:{ref.chain_id}:{ref.address}"

        async def produce() -> Dict[str, Any]:
            return (await self.analyze(ref)).to_dict()

        return await self.cache.get_or_set(key, produce, settings.scan_cache_seconds)
