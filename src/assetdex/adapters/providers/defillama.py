# src/assetdex/adapters/providers/defillama.py
"""
DeFi Llama Yields Adapter for RWA Pools

This module implements the DeFi Llama yields client. The feed lists every
tracked pool; only pools whose project matches the RWA allow-list and that
live on a supported chain are kept.

Files that USE this module:
- assetdex.application.discovery_service (pool discovery branch)
- assetdex.application.analysis_service (supplementary TVL/APY facts)
- assetdex.application.asset_service (asset listing)
- tests.test_providers (unit tests)

Files that this module USES:
- assetdex.adapters.providers.base (HttpSourceAdapter)
- assetdex.adapters.providers.schemas (LlamaPool response schema)
- assetdex.domain.chains (chain name → id table)
- assetdex.config (settings for URL and timeout)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests
from pydantic import ValidationError as SchemaError

from assetdex.adapters.providers.base import HttpSourceAdapter, run_blocking
from assetdex.adapters.providers.schemas import LlamaPool
from assetdex.config import settings
from assetdex.domain.chains import chain_id_for
from assetdex.domain.errors import SourceUnavailableError

log = logging.getLogger(__name__)

RWA_PROJECTS = (
    "ondo",
    "maple",
    "centrifuge",
    "goldfinch",
    "truefi",
    "credix",
    "ribbon",
    "clearpool",
    "morpho",
    "compound",
    "aave",
    "mellow",
    "usdbc",
    "usdt",
    "usdc",
    "dai",
)

SUPPORTED_CHAINS = frozenset({
    "Ethereum",
    "Base",
    "Linea",
    "Solana",
    "Avalanche",
    "Polygon",
    "Arbitrum",
})


@dataclass(frozen=True)
class YieldPool:
    """
    Normalized RWA yield pool.

    Attributes:
        pool_id: DeFi Llama pool identifier (natural key of the pool)
        chain: Chain name as reported by the feed
        chain_id: Numeric chain id from the lookup table
        project: Protocol name
        symbol: Pool symbol
        tvl: Total value locked in USD (0.0 when unreported)
        apy: Annual yield (0.0 when unreported)
    """
    pool_id: str
    chain: str
    chain_id: int
    project: str
    symbol: str
    tvl: float
    apy: float


def is_rwa_project(project: str) -> bool:
    """True if the project name contains a known RWA protocol substring."""
    name = (project or "").lower()
    return any(rwa in name for rwa in RWA_PROJECTS)


class DeFiLlamaAdapter(HttpSourceAdapter):
    """DeFi Llama yields feed filtered to RWA pools on supported chains."""

    name = "defillama"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(
            base_url or settings.defillama_url,
            timeout or settings.http_timeout_seconds,
            session,
        )

    def fetch_pools(self) -> List[YieldPool]:
        """
        Fetch and filter the yields feed (blocking).

        Returns:
            RWA pools on supported chains, in feed order

        Raises:
            SourceUnavailableError: If the feed cannot be fetched or has no data list
        """
        payload = self._get_json(self.base_url)
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            log.error("DeFi Llama response missing 'data' list")
            raise SourceUnavailableError(self.name, "response missing 'data' list")

        raw_pools = payload["data"]
        log.info("Total pools from DeFi Llama: %d", len(raw_pools))

        pools: List[YieldPool] = []
        skipped = 0
        for raw in raw_pools:
            try:
                pool = LlamaPool.model_validate(raw)
            except SchemaError:
                skipped += 1
                continue
            if pool.chain not in SUPPORTED_CHAINS or not is_rwa_project(pool.project):
                continue
            pools.append(YieldPool(
                pool_id=pool.pool,
                chain=pool.chain,
                chain_id=chain_id_for(pool.chain),
                project=pool.project,
                symbol=pool.symbol,
                tvl=pool.tvl_usd,
                apy=pool.apy,
            ))

        if skipped:
            log.debug("Skipped %d malformed DeFi Llama pools", skipped)
        log.info("Filtered RWA pools: %d", len(pools))
        return pools

    async def fetch(self) -> List[YieldPool]:
        return await run_blocking(self.fetch_pools)
