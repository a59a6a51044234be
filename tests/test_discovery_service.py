# tests/test_discovery_service.py
"""
Discovery Service Tests - Branch Fan-Out, Scoring and Deduplication

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.application.discovery_service (DiscoveryService and scoring helpers)
- unittest.mock (AsyncMock sources)
"""
import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from assetdex.adapters.providers.creatorbid import ArtPiece
from assetdex.adapters.providers.defillama import YieldPool
from assetdex.application.discovery_service import (
    DISCOVER_CACHE_KEY,
    KNOWN_RWAS,
    DiscoveryService,
    asset_from_art,
    asset_from_pool,
    dedupe,
    derive_address,
    discovery_rarity_tier,
    pool_risk_tier,
)
from assetdex.domain.errors import MandatoryDataMissingError, SourceUnavailableError
from assetdex.domain.models import AssetType, RarityTier, RawAssetFacts, RiskTier

ONDO_POOL = YieldPool("pool-1", "Ethereum", 1, "ondo-finance", "USDY", 40_000_000.0, 0.08)
DAWN = ArtPiece("x1", "Digital Dreams", "CryptoPainter", 2.5, (1.5, 3.0), ("Minted 2023",), "", "Digital Art")


def make_service(cache, pools=(), pieces=(), onchain_error=None, pool_limit=100, art_limit=10):
    defillama = AsyncMock()
    defillama.fetch.return_value = list(pools)
    creatorbid = AsyncMock()
    creatorbid.fetch.return_value = list(pieces)
    onchain = AsyncMock()
    if onchain_error is not None:
        onchain.fetch.side_effect = onchain_error
    else:
        onchain.fetch.side_effect = lambda ref: RawAssetFacts(
            name=f"Token {ref.address[:6]}", symbol="TKN", total_supply=5 * 10 ** 18,
            holder_count=10, decimals=18, source="onchain",
        )
    return DiscoveryService(cache, defillama, creatorbid, onchain, pool_limit=pool_limit, art_limit=art_limit)


class TestScoringHelpers:
    def test_derive_address_is_stable(self):
        first = derive_address("pool-1")
        assert first == derive_address("pool-1")
        assert first != derive_address("pool-2")
        assert first.startswith("0x") and len(first) == 42

    @pytest.mark.parametrize("score,tier", [
        (85, RarityTier.LEGENDARY), (84, RarityTier.EPIC), (70, RarityTier.EPIC),
        (55, RarityTier.RARE), (40, RarityTier.UNCOMMON), (39, RarityTier.COMMON),
    ])
    def test_discovery_tiers(self, score, tier):
        assert discovery_rarity_tier(score) is tier

    @pytest.mark.parametrize("tvl,apy,tier", [
        (60_000_000, 0.10, RiskTier.LOW),
        (60_000_000, 0.20, RiskTier.MEDIUM),
        (20_000_000, 0.30, RiskTier.HIGH),
        (500_000, 0.01, RiskTier.SPECULATIVE),
    ])
    def test_pool_risk(self, tvl, apy, tier):
        assert pool_risk_tier(tvl, apy) is tier

    def test_asset_from_pool(self):
        asset = asset_from_pool(ONDO_POOL)
        # 10 (tvl) + 8 (apy) + 15 (rare project)
        assert asset.rarity_score == 33
        assert asset.rarity_tier is RarityTier.COMMON
        assert asset.risk_tier is RiskTier.MEDIUM
        assert asset.prediction_score == 7
        assert asset.current_value == 40_000_000
        assert asset.yield_rate == 800
        assert asset.address == derive_address("pool-1")
        assert asset.name == "ondo-finance USDY Pool"
        assert asset.asset_type is AssetType.TOKENIZED_TREASURY
        assert asset.token_uri.startswith("data:application/json;base64,")

    def test_rare_chain_bonus(self):
        pool = YieldPool("p", "Base", 8453, "maple", "USDC", 0.0, 0.0)
        assert asset_from_pool(pool).rarity_score == 25

    def test_asset_from_art(self):
        asset = asset_from_art(DAWN)
        # 0 (bid) + 20 (artist) + 0 (provenance) + 25
        assert asset.rarity_score == 45
        assert asset.rarity_tier is RarityTier.UNCOMMON
        assert asset.risk_tier is RiskTier.SPECULATIVE
        assert asset.prediction_score == 50
        assert asset.symbol == "ART-DIG"
        assert asset.current_value == 2_500_000
        assert asset.yield_rate == 2000

    def test_art_without_upside_has_zero_yield(self):
        piece = ArtPiece("x9", "Old", "", 5.0, (1.0, 2.0), (), "", "")
        assert asset_from_art(piece).yield_rate == 0

    def test_dedupe_is_case_insensitive_and_keeps_first(self):
        a = asset_from_pool(ONDO_POOL)
        b = asset_from_art(DAWN)
        upper = replace(a, address="0x" + a.address[2:].upper(), name="dup")
        assert dedupe([a, b, upper]) == [a, b]


class TestDiscover:
    def test_all_branches_contribute(self, cache):
        service = make_service(cache, pools=[ONDO_POOL], pieces=[DAWN])

        assets = asyncio.run(service.discover())

        assert [a.source for a in assets] == ["defillama", "creatorbid", "known-rwa", "known-rwa"]
        assert assets[2].address == KNOWN_RWAS[0].address
        assert assets[2].symbol == "TKN"
        # 5 tokens of 18 decimals, valued at 100 per token
        assert assets[2].current_value == 500

    def test_failed_branch_contributes_nothing(self, cache):
        service = make_service(cache, pieces=[DAWN])
        service.defillama.fetch.side_effect = SourceUnavailableError("defillama", "timeout")

        assets = asyncio.run(service.discover())

        assert [a.source for a in assets] == ["creatorbid", "known-rwa", "known-rwa"]

    def test_known_rwa_falls_back_to_static_facts(self, cache):
        error = MandatoryDataMissingError("1_0x", "rpc down")
        service = make_service(cache, onchain_error=error)

        assets = asyncio.run(service.discover())

        assert [a.symbol for a in assets] == [k.symbol for k in KNOWN_RWAS]
        assert all(a.current_value == 0 for a in assets)

    def test_pools_sorted_by_tvl_and_capped(self, cache):
        pools = [
            YieldPool(f"p{i}", "Ethereum", 1, "maple", "USDC", float(tvl), 0.05)
            for i, tvl in enumerate([10, 300, 20, 200])
        ]
        service = make_service(cache, pools=pools, pool_limit=2)

        assets = asyncio.run(service.discover())

        pool_assets = [a for a in assets if a.source == "defillama"]
        assert [a.address for a in pool_assets] == [derive_address("p1"), derive_address("p3")]

    def test_art_capped(self, cache):
        pieces = [ArtPiece(f"x{i}", f"Piece {i}", "", 1.0, (0.0, 1.5), (), "", "") for i in range(5)]
        service = make_service(cache, pieces=pieces, art_limit=3)
        assets = asyncio.run(service.discover())
        assert len([a for a in assets if a.source == "creatorbid"]) == 3

    def test_duplicate_pools_collapse(self, cache):
        service = make_service(cache, pools=[ONDO_POOL, ONDO_POOL])
        assets = asyncio.run(service.discover())
        assert len([a for a in assets if a.source == "defillama"]) == 1

    def test_discover_cached(self, cache, clock):
        service = make_service(cache, pools=[ONDO_POOL])

        first = asyncio.run(service.discover_cached())
        second = asyncio.run(service.discover_cached())

        assert first == second
        assert first[0]["currentValue"] == "40000000"
        service.defillama.fetch.assert_awaited_once()
        assert cache.exists(DISCOVER_CACHE_KEY)

        clock.advance(301)
        asyncio.run(service.discover_cached())
        assert service.defillama.fetch.await_count == 2
