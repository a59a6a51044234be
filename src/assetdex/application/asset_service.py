# src/assetdex/application/asset_service.py
"""
Asset Service - Asset Listing and Lookup

This module serves the asset listing (yield pools plus art pieces, filtered
by type and chain) and single-asset lookups. A lookup id is resolved by a
ladder, first match wins:

1. Numeric id → discovery card on the ledger
2. 0x address → live ERC-20 read on Ethereum
3. Listing search by id
4. Ledger "is discovered" check → minimal placeholder row

Files that USE this module:
- assetdex.app (assets command)
- tests.test_asset_service (unit tests)

Files that this module USES:
- assetdex.adapters.providers.defillama (DeFiLlamaAdapter)
- assetdex.adapters.providers.creatorbid (CreatorBidAdapter)
- assetdex.adapters.providers.onchain (OnChainAdapter)
- assetdex.application.ledger_service (card and discovered checks)
- assetdex.shared.ttl_cache (TTLCache)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from assetdex.adapters.providers.creatorbid import ArtPiece, CreatorBidAdapter
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter, YieldPool
from assetdex.adapters.providers.onchain import OnChainAdapter
from assetdex.application.ledger_service import LedgerService
from assetdex.config import settings
from assetdex.domain.errors import DomainError
from assetdex.domain.models import AssetListing, AssetReference, AssetType
from assetdex.shared.ttl_cache import TTLCache
from assetdex.shared.validators import is_token_id, validate_address

log = logging.getLogger(__name__)

DEFAULT_LISTING_LIMIT = 50
SEARCH_LIMIT = 1000


def listing_from_pool(pool: YieldPool) -> AssetListing:
    return AssetListing(
        id=pool.pool_id,
        name=pool.project,
        symbol=pool.symbol,
        address="",
        chain_id=1 if pool.chain == "Ethereum" else 8453,
        asset_type=AssetType.TOKENIZED_TREASURY,
        total_supply="0",
        market_cap=pool.tvl,
        liquidity=pool.tvl,
        source="defillama",
    )


def listing_from_art(piece: ArtPiece) -> AssetListing:
    return AssetListing(
        id=piece.piece_id,
        name=piece.title,
        symbol=f"ART-{piece.piece_id[:8]}",
        address="",
        chain_id=1,
        asset_type=AssetType.ART,
        total_supply="1",
        price=piece.current_bid,
        market_cap=piece.current_bid,
        liquidity=piece.current_bid,
        holders=1,
        source="creatorbid",
    )


class AssetService:
    """Cached asset listing and id lookups."""

    def __init__(
        self,
        cache: TTLCache,
        defillama: DeFiLlamaAdapter,
        creatorbid: CreatorBidAdapter,
        onchain: OnChainAdapter,
        ledger_service: LedgerService,
    ):
        self.cache = cache
        self.defillama = defillama
        self.creatorbid = creatorbid
        self.onchain = onchain
        self.ledger_service = ledger_service

    async def fetch_listings(self, asset_type: Optional[str] = None, chain: Optional[str] = None,
                             limit: int = DEFAULT_LISTING_LIMIT) -> List[AssetListing]:
        """
        Build the listing from pools and art, then filter.

        Args:
            asset_type: Type slug filter (e.g. 'real-estate')
            chain: Chain slug filter ('ethereum' means chain 1, anything else 8453)
            limit: Max rows; art contributes at most limit // 2

        Returns:
            At most `limit` rows, pools first
        """
        pools, pieces = await asyncio.gather(
            self.defillama.fetch(), self.creatorbid.fetch(), return_exceptions=True
        )
        listings: List[AssetListing] = []
        if isinstance(pools, Exception):
            log.warning("Asset listing without pools: %s", pools)
        else:
            listings.extend(listing_from_pool(pool) for pool in pools[:limit])
        if isinstance(pieces, Exception):
            log.warning("Asset listing without art: %s", pieces)
        else:
            listings.extend(listing_from_art(piece) for piece in pieces[: limit // 2])

        if asset_type:
            wanted = AssetType.from_slug(asset_type)
            listings = [row for row in listings if row.asset_type == wanted]
        if chain:
            chain_id = 1 if chain == "ethereum" else 8453
            listings = [row for row in listings if row.chain_id == chain_id]
        return listings[:limit]

    async def list_assets(self, asset_type: Optional[str] = None, chain: Optional[str] = None,
                          limit: int = DEFAULT_LISTING_LIMIT) -> List[Dict[str, Any]]:
        key = f"assets:{asset_type}:{chain}:{limit}"

        async def produce() -> List[Dict[str, Any]]:
            return [row.to_dict() for row in await self.fetch_listings(asset_type, chain, limit)]

        return await self.cache.get_or_set(key, produce, settings.assets_cache_seconds)

    async def get_asset(self, asset_id: str) -> Optional[Dict[str, Any]]:
        """
        Look up one asset by card id, address or listing id.

        Returns:
            Asset payload, or None when no source knows the id
        """
        return await self.cache.get_or_set(
            f"asset:{asset_id}", lambda: self.find_asset(asset_id), settings.asset_cache_seconds
        )

    async def find_asset(self, asset_id: str) -> Optional[Dict[str, Any]]:
        if is_token_id(asset_id):
            try:
                card = await self.ledger_service.discovery_card(int(asset_id))
            except DomainError as e:
                log.warning("Not a readable discovery card id %s: %s", asset_id, e)
            else:
                value = float(card["currentValue"])
                return AssetListing(
                    id=asset_id,
                    name=card["assetName"],
                    symbol=card["assetSymbol"],
                    address=card["assetAddress"],
                    chain_id=settings.ledger_chain_id,
                    asset_type=AssetType.from_code(card["assetType"]),
                    total_supply="1",
                    price=value,
                    market_cap=value,
                    holders=1,
                    source="ledger",
                ).to_dict()

        if validate_address(asset_id):
            try:
                facts = await self.onchain.fetch(AssetReference(asset_id, 1))
            except DomainError as e:
                log.warning("On-chain lookup failed for %s: %s", asset_id, e)
            else:
                return AssetListing(
                    id=asset_id,
                    name=facts.name or "Unknown Token",
                    symbol=facts.symbol or "UNKNOWN",
                    address=asset_id,
                    chain_id=1,
                    asset_type=AssetType.TOKENIZED_TREASURY,
                    total_supply=str(facts.total_supply),
                    holders=facts.holder_count,
                    source="onchain",
                ).to_dict()

        for row in await self.fetch_listings(limit=SEARCH_LIMIT):
            if row.id == asset_id:
                return row.to_dict()

        try:
            discovered = await self.ledger_service.is_asset_discovered(asset_id)
        except DomainError as e:
            log.warning("Discovery status check failed for %s: %s", asset_id, e)
            discovered = False
        if discovered:
            return AssetListing(
                id=asset_id,
                name="Discovered RWA Asset",
                symbol="RWA",
                address=asset_id,
                chain_id=settings.ledger_chain_id,
                asset_type=AssetType.TOKENIZED_TREASURY,
                source="ledger",
            ).to_dict()

        log.info("Asset %s not found in any source", asset_id)
        return None
