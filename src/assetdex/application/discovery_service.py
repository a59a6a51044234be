# src/assetdex/application/discovery_service.py
"""
Discovery Service - Multi-Source Asset Discovery

This module fans out to every discovery source concurrently, turns each
source record into a scored DiscoveredAsset, and deduplicates the result:

1. RWA yield pools (top N by TVL)
2. Art marketplace pieces (first N)
3. Known RWA tokens, enriched with on-chain facts when reachable

A failed branch contributes nothing; the other branches are unaffected.
Records without a contract address get a synthetic one derived from
their source key, so repeated runs produce identical addresses.

Files that USE this module:
- assetdex.application.mint_service (mint_discovered consumes DiscoveredAsset)
- assetdex.app (discover command)
- tests.test_discovery_service (unit tests)

Files that this module USES:
- assetdex.adapters.providers.defillama (DeFiLlamaAdapter, YieldPool)
- assetdex.adapters.providers.creatorbid (CreatorBidAdapter, ArtPiece)
- assetdex.adapters.providers.onchain (OnChainAdapter)
- assetdex.adapters.formatting.metadata (token URIs)
- assetdex.shared.ttl_cache (TTLCache)
"""
from __future__ import annotations

import asyncio
import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from assetdex.adapters.formatting.metadata import build_token_uri
from assetdex.adapters.providers.creatorbid import ArtPiece, CreatorBidAdapter
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter, YieldPool
from assetdex.adapters.providers.onchain import OnChainAdapter
from assetdex.config import settings
from assetdex.domain.models import AssetReference, AssetType, DiscoveredAsset, RarityTier, RiskTier
from assetdex.shared.ttl_cache import TTLCache

log = logging.getLogger(__name__)

DISCOVER_CACHE_KEY = "discover-assets"
DISCOVER_CACHE_SECONDS = 300

RARE_PROJECTS = ("ondo", "maple", "centrifuge", "goldfinch", "truefi")
RARE_CHAINS = frozenset({"Linea", "Base", "Avalanche", "Arbitrum"})
ESTABLISHED_PROJECTS = ("aave", "compound", "morpho")


@dataclass(frozen=True)
class KnownAsset:
    address: str
    chain_id: int
    name: str
    symbol: str
    asset_type: AssetType


KNOWN_RWAS = (
    KnownAsset(
        address="0x1b19c19393e2d034d8ff31ff34c81252fcbbee92",
        chain_id=1,
        name="Ondo Short-Term U.S. Government Bond Fund",
        symbol="OUSG",
        asset_type=AssetType.TOKENIZED_TREASURY,
    ),
    KnownAsset(
        address="0x9A0E3e7960e3439F897015772e6EcaE7B632Ad9f",
        chain_id=1,
        name="Maple Finance Private Credit",
        symbol="MPL",
        asset_type=AssetType.PRIVATE_CREDIT,
    ),
)

KNOWN_RWA_RARITY_SCORE = 60
KNOWN_RWA_PREDICTION_SCORE = 70
KNOWN_RWA_YIELD_RATE = 50_000


def derive_address(source_key: str) -> str:
    """Stable synthetic address: first 20 bytes of the SHA-256 of the source key."""
    return "0x" + hashlib.sha256(source_key.encode("utf-8")).hexdigest()[:40]


def discovery_rarity_tier(score: int) -> RarityTier:
    """Tier thresholds used for discovered assets (stricter than analysis tiers)."""
    if score >= 85:
        return RarityTier.LEGENDARY
    if score >= 70:
        return RarityTier.EPIC
    if score >= 55:
        return RarityTier.RARE
    if score >= 40:
        return RarityTier.UNCOMMON
    return RarityTier.COMMON


def pool_risk_tier(tvl: float, apy: float) -> RiskTier:
    """Deep pools with moderate yield are low risk; shallow or very high-yield pools are not."""
    if tvl > 50_000_000 and apy < 0.15:
        return RiskTier.LOW
    if tvl > 10_000_000 and apy < 0.25:
        return RiskTier.MEDIUM
    if tvl > 1_000_000:
        return RiskTier.HIGH
    return RiskTier.SPECULATIVE


def pool_uniqueness(pool: YieldPool) -> int:
    project = (pool.project or "").lower()
    score = 0
    if any(name in project for name in RARE_PROJECTS):
        score += 15
    if pool.chain in RARE_CHAINS:
        score += 10
    if any(name in project for name in ESTABLISHED_PROJECTS):
        score += 5
    return min(25, score)


def asset_from_pool(pool: YieldPool) -> DiscoveredAsset:
    """
    Score a yield pool as a discovery candidate.

    Args:
        pool: Normalized RWA pool

    Returns:
        DiscoveredAsset with a synthetic address derived from the pool id
    """
    tvl = pool.tvl or 0.0
    apy = pool.apy or 0.0

    tvl_score = min(50, math.floor(tvl / 4_000_000))
    apy_score = min(25, math.floor(apy * 100))
    rarity_score = min(100, tvl_score + apy_score + pool_uniqueness(pool))
    prediction_score = min(100, math.floor(apy * 80 + min(20, tvl / 50_000_000)))

    symbol = pool.symbol or pool.project[:4].upper()
    return DiscoveredAsset(
        address=derive_address(pool.pool_id),
        chain_id=pool.chain_id,
        name=f"{pool.project} {pool.symbol} Pool",
        symbol=symbol,
        asset_type=AssetType.TOKENIZED_TREASURY,
        rarity_tier=discovery_rarity_tier(rarity_score),
        risk_tier=pool_risk_tier(tvl, apy),
        rarity_score=max(0, rarity_score),
        prediction_score=max(0, prediction_score),
        current_value=math.floor(tvl or 1_000_000),
        yield_rate=max(0, math.floor(apy * 10_000)),
        token_uri=build_token_uri(pool.project, pool.symbol or pool.project, AssetType.TOKENIZED_TREASURY),
        source="defillama",
    )


def asset_from_art(piece: ArtPiece) -> DiscoveredAsset:
    """
    Score an art piece as a discovery candidate.

    Art is always speculative; its yield is the upside to the high estimate.
    """
    bid = piece.current_bid or 1
    potential_return = piece.potential_return

    bid_score = min(40, math.floor(bid / 10_000))
    artist_score = 20 if piece.artist else 0
    provenance_score = 15 if len(piece.provenance) > 2 else 0
    rarity_score = min(100, bid_score + artist_score + provenance_score + 25)
    prediction_score = min(100, math.floor(potential_return * 100) + 30)

    symbol = f"ART-{piece.title[:3].upper()}"
    return DiscoveredAsset(
        address=derive_address(piece.piece_id),
        chain_id=1,
        name=piece.title,
        symbol=symbol,
        asset_type=AssetType.ART,
        rarity_tier=discovery_rarity_tier(rarity_score),
        risk_tier=RiskTier.SPECULATIVE,
        rarity_score=rarity_score,
        prediction_score=max(0, prediction_score),
        current_value=math.floor(bid * 1_000_000),
        yield_rate=max(0, math.floor(potential_return * 10_000)),
        token_uri=build_token_uri(piece.title, symbol, AssetType.ART),
        source="creatorbid",
    )


def dedupe(assets: Iterable[DiscoveredAsset]) -> List[DiscoveredAsset]:
    """Keep the first asset per (lowercase address, chain id), preserving order."""
    seen = set()
    unique = []
    for asset in assets:
        if asset.dedup_key in seen:
            continue
        seen.add(asset.dedup_key)
        unique.append(asset)
    return unique


class DiscoveryService:
    """Concurrent discovery across pools, art and known RWA tokens."""

    def __init__(
        self,
        cache: TTLCache,
        defillama: DeFiLlamaAdapter,
        creatorbid: CreatorBidAdapter,
        onchain: OnChainAdapter,
        pool_limit: Optional[int] = None,
        art_limit: Optional[int] = None,
    ):
        """
        Initialize discovery service.

        Args:
            cache: Shared TTL cache
            defillama: Yield pool source
            creatorbid: Art marketplace source
            onchain: ERC-20 reader used to enrich known RWAs
            pool_limit: Max pools kept (by TVL); defaults to settings
            art_limit: Max art pieces kept; defaults to settings
        """
        self.cache = cache
        self.defillama = defillama
        self.creatorbid = creatorbid
        self.onchain = onchain
        self.pool_limit = pool_limit or settings.discovery_pool_limit
        self.art_limit = art_limit or settings.discovery_agent_limit

    async def discover(self) -> List[DiscoveredAsset]:
        """
        Discover assets from every source.

        Returns:
            Deduplicated assets in branch order (pools, art, known RWAs)
        """
        branches = ("defillama", "creatorbid", "known-rwas")
        results = await asyncio.gather(
            self._discover_pools(),
            self._discover_art(),
            self._discover_known(),
            return_exceptions=True,
        )

        collected: List[DiscoveredAsset] = []
        for branch, result in zip(branches, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.warning("Discovery source %s unavailable: %s", branch, result)
                continue
            log.info("Discovery source %s contributed %d assets", branch, len(result))
            collected.extend(result)

        unique = dedupe(collected)
        log.info("Discovered %d assets (%d before dedup)", len(unique), len(collected))
        return unique

    async def discover_cached(self) -> List[Dict[str, Any]]:
        """JSON payloads of discover(), cached for five minutes."""
        async def produce() -> List[Dict[str, Any]]:
            return [asset.to_dict() for asset in await self.discover()]

        return await self.cache.get_or_set(DISCOVER_CACHE_KEY, produce, DISCOVER_CACHE_SECONDS)

    async def _discover_pools(self) -> List[DiscoveredAsset]:
        pools = await self.defillama.fetch()
        top = sorted(pools, key=lambda p: p.tvl or 0.0, reverse=True)[: self.pool_limit]
        log.info("Scoring top %d RWA pools by TVL (from %d)", len(top), len(pools))
        return [asset_from_pool(pool) for pool in top]

    async def _discover_art(self) -> List[DiscoveredAsset]:
        pieces = await self.creatorbid.fetch()
        return [asset_from_art(piece) for piece in pieces[: self.art_limit]]

    async def _discover_known(self) -> List[DiscoveredAsset]:
        results = await asyncio.gather(
            *(self.onchain.fetch(AssetReference(k.address, k.chain_id)) for k in KNOWN_RWAS),
            return_exceptions=True,
        )
        assets = []
        for known, facts in zip(KNOWN_RWAS, results):
            if isinstance(facts, BaseException):
                if not isinstance(facts, Exception):
                    raise facts
                log.warning("On-chain enrichment failed for %s: %s", known.symbol, facts)
                name, symbol, current_value = known.name, known.symbol, 0
            else:
                name = facts.name or known.name
                symbol = facts.symbol or known.symbol
                current_value = math.floor(facts.supply_units * 100)
            assets.append(DiscoveredAsset(
                address=known.address,
                chain_id=known.chain_id,
                name=name,
                symbol=symbol,
                asset_type=known.asset_type,
                rarity_tier=RarityTier.COMMON,
                risk_tier=RiskTier.MEDIUM,
                rarity_score=KNOWN_RWA_RARITY_SCORE,
                prediction_score=KNOWN_RWA_PREDICTION_SCORE,
                current_value=current_value,
                yield_rate=KNOWN_RWA_YIELD_RATE,
                token_uri=build_token_uri(known.name, known.symbol, known.asset_type),
                source="known-rwa",
            ))
        return assets
