# src/assetdex/adapters/providers/holders.py
"""
Holder Count Resolution - Ordered Fallback Strategies

Holder counts are resolved by trying strategies in a fixed order, each
returning a definite count or None:

1. IndexerHolderCount - external token-holder indexer (needs an API key)
2. SupplyBucketHolderCount - proportional estimate from total supply
3. FixedHolderCount - per-chain constant, always succeeds

Without indexer credentials the result depends only on the total supply
and chain, so it is deterministic.

Files that USE this module:
- assetdex.adapters.providers.onchain (OnChainAdapter resolves holders)
- tests.test_holders (unit tests)

Files that this module USES:
- assetdex.adapters.providers.base (JsonHttpClient for the indexer)
- assetdex.adapters.providers.schemas (IndexerHoldersResponse)
- assetdex.config (settings for indexer URL and key)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

import requests
from pydantic import ValidationError as SchemaError

from assetdex.adapters.providers.base import JsonHttpClient
from assetdex.adapters.providers.schemas import IndexerHoldersResponse
from assetdex.config import settings
from assetdex.domain.errors import SourceUnavailableError

log = logging.getLogger(__name__)

INDEXER_CHAIN_NAMES: Dict[int, str] = {
    1: "eth-mainnet",
    8453: "base-mainnet",
    59141: "linea-mainnet",
    137: "matic-mainnet",
    42161: "arbitrum-mainnet",
}

FALLBACK_HOLDER_COUNTS: Dict[int, int] = {
    1: 1500,
    8453: 800,
    59141: 300,
}
DEFAULT_FALLBACK_HOLDERS = 200


class HolderCountStrategy(ABC):
    name = "strategy"

    @abstractmethod
    def holder_count(self, address: str, chain_id: int, supply_units: float) -> Optional[int]:
        """Return a holder count, or None when this strategy cannot answer."""
        raise NotImplementedError


class IndexerHolderCount(JsonHttpClient, HolderCountStrategy):
    """Token holder count from a Covalent-style indexer."""

    name = "indexer"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        super().__init__(
            base_url or settings.covalent_url,
            timeout or settings.http_timeout_seconds,
            session,
        )
        self.api_key = settings.covalent_api_key if api_key is None else api_key

    def holder_count(self, address: str, chain_id: int, supply_units: float) -> Optional[int]:
        if not self.api_key:
            return None
        chain_name = INDEXER_CHAIN_NAMES.get(chain_id)
        if not chain_name:
            return None

        url = f"{self.base_url}/{chain_name}/tokens/{address}/token_holders_v2/"
        try:
            payload = self._get_json(url, params={"key": self.api_key, "page-size": 100})
            response = IndexerHoldersResponse.model_validate(payload if isinstance(payload, dict) else {})
        except (SourceUnavailableError, SchemaError) as e:
            log.warning("Holder indexer failed for %s on chain %d: %s", address, chain_id, e)
            return None

        if response.error or response.data is None:
            log.warning("Holder indexer error for %s: %s", address, response.error_message)
            return None

        total = (response.data.pagination or {}).get("total_count")
        count = total if isinstance(total, int) and total > 0 else len(response.data.items)
        return count if count > 0 else None


class SupplyBucketHolderCount(HolderCountStrategy):
    """Estimate holders proportionally from supply across four size buckets."""

    name = "supply-estimate"

    def holder_count(self, address: str, chain_id: int, supply_units: float) -> Optional[int]:
        if supply_units is None or supply_units < 0 or supply_units != supply_units:
            raise ValueError(f"Cannot estimate holders from supply {supply_units!r}")
        if supply_units > 1_000_000_000:
            return min(50_000, int(supply_units // 20_000))
        if supply_units > 1_000_000:
            return min(10_000, int(supply_units // 1_000))
        if supply_units > 10_000:
            return min(1_000, int(supply_units // 100))
        return max(1, int(supply_units // 10))


class FixedHolderCount(HolderCountStrategy):
    """Per-chain constant used when nothing else works."""

    name = "fixed"

    def holder_count(self, address: str, chain_id: int, supply_units: float) -> Optional[int]:
        return FALLBACK_HOLDER_COUNTS.get(chain_id, DEFAULT_FALLBACK_HOLDERS)


class HolderCountResolver:
    """Try holder-count strategies in order until one answers."""

    def __init__(self, strategies: Optional[Sequence[HolderCountStrategy]] = None):
        """
        Initialize resolver.

        Args:
            strategies: Ordered strategies (defaults to indexer, supply estimate, fixed)
        """
        self.strategies = list(strategies) if strategies is not None else [
            IndexerHolderCount(),
            SupplyBucketHolderCount(),
            FixedHolderCount(),
        ]

    def resolve(self, address: str, chain_id: int, supply_units: float) -> int:
        """
        Resolve the holder count for a token.

        Args:
            address: Token contract address
            chain_id: Chain id
            supply_units: Total supply in human units

        Returns:
            Holder count from the first strategy that answers
        """
        for strategy in self.strategies:
            try:
                count = strategy.holder_count(address, chain_id, supply_units)
            except (ValueError, ArithmeticError) as e:
                log.warning("Holder strategy %s failed for %s: %s", strategy.name, address, e)
                continue
            if count is not None:
                log.debug("Holder count for %s from %s: %d", address, strategy.name, count)
                return count
        return FALLBACK_HOLDER_COUNTS.get(chain_id, DEFAULT_FALLBACK_HOLDERS)
