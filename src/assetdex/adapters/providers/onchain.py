# src/assetdex/adapters/providers/onchain.py
"""
On-Chain ERC-20 Adapter

This module reads ERC-20 metadata (name, symbol, decimals, totalSupply)
directly from chain RPC endpoints with web3.py and resolves the holder
count through the ordered fallback strategies.

The four metadata calls are issued concurrently; all of them must succeed,
otherwise the fetch fails with MandatoryDataMissingError naming the asset
and the calls that failed.

Files that USE this module:
- assetdex.application.analysis_service (mandatory on-chain facts)
- assetdex.application.discovery_service (known RWA enrichment)
- assetdex.application.asset_service (live 0x-address lookup)
- assetdex.application.health (on-chain connectivity check)
- tests.test_onchain (unit tests)

Files that this module USES:
- assetdex.adapters.providers.base (AssetSourceAdapter, run_blocking)
- assetdex.adapters.providers.holders (HolderCountResolver)
- assetdex.config (settings for RPC URLs and timeout)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, Optional

from web3 import Web3

from assetdex.adapters.providers.base import AssetSourceAdapter, run_blocking
from assetdex.adapters.providers.holders import HolderCountResolver
from assetdex.config import settings
from assetdex.domain.errors import MandatoryDataMissingError
from assetdex.domain.models import AssetReference, RawAssetFacts

log = logging.getLogger(__name__)

ERC20_ABI = [
    {"constant": True, "inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "totalSupply", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]

METADATA_CALLS = ("name", "symbol", "decimals", "totalSupply")


class Web3Pool:
    """Lazily created Web3 clients, one per configured chain."""

    def __init__(self, rpc_urls: Optional[Mapping[int, str]] = None, timeout: Optional[int] = None,
                 clients: Optional[Dict[int, Web3]] = None):
        """
        Initialize the pool.

        Args:
            rpc_urls: RPC endpoint per chain id (defaults to settings.rpc_urls)
            timeout: RPC request timeout in seconds
            clients: Pre-built clients per chain id (tests inject fakes here)
        """
        self.rpc_urls = dict(rpc_urls if rpc_urls is not None else settings.rpc_urls)
        self.timeout = timeout or settings.rpc_timeout_seconds
        self._clients: Dict[int, Web3] = dict(clients or {})

    def supports(self, chain_id: int) -> bool:
        return chain_id in self._clients or chain_id in self.rpc_urls

    def get(self, chain_id: int) -> Web3:
        """
        Web3 client for a chain.

        Raises:
            KeyError: If no RPC endpoint is configured for the chain
        """
        if chain_id not in self._clients:
            url = self.rpc_urls[chain_id]
            self._clients[chain_id] = Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self.timeout}))
            log.debug("Created Web3 client for chain %d", chain_id)
        return self._clients[chain_id]


class OnChainAdapter(AssetSourceAdapter):
    """ERC-20 metadata reader for a single asset."""

    name = "onchain"

    def __init__(self, web3_pool: Optional[Web3Pool] = None,
                 holder_resolver: Optional[HolderCountResolver] = None):
        self.web3_pool = web3_pool or Web3Pool()
        self.holder_resolver = holder_resolver or HolderCountResolver()

    async def fetch(self, ref: AssetReference) -> RawAssetFacts:
        """
        Read token metadata and holder count.

        Args:
            ref: Asset to read

        Returns:
            RawAssetFacts with exact integer total supply

        Raises:
            MandatoryDataMissingError: If the chain is unsupported or any metadata call fails
        """
        if not self.web3_pool.supports(ref.chain_id):
            raise MandatoryDataMissingError(ref.asset_id, f"no RPC endpoint for chain {ref.chain_id}")

        w3 = self.web3_pool.get(ref.chain_id)
        contract = w3.eth.contract(address=Web3.to_checksum_address(ref.address), abi=ERC20_ABI)

        results = await asyncio.gather(
            *(run_blocking(getattr(contract.functions, call)().call) for call in METADATA_CALLS),
            return_exceptions=True,
        )
        failed = {
            call: result for call, result in zip(METADATA_CALLS, results)
            if isinstance(result, BaseException)
        }
        if failed:
            details = ", ".join(f"{call}() -> {err}" for call, err in failed.items())
            log.error("On-chain metadata read failed for %s: %s", ref.asset_id, details)
            raise MandatoryDataMissingError(ref.asset_id, f"token metadata unavailable: {details}")

        name, symbol, decimals, total_supply = results
        facts_without_holders = RawAssetFacts(
            name=name,
            symbol=symbol,
            total_supply=int(total_supply),
            holder_count=0,
            decimals=int(decimals),
            source=self.name,
        )
        holders = await run_blocking(
            self.holder_resolver.resolve,
            ref.address,
            ref.chain_id,
            facts_without_holders.supply_units,
        )
        log.info("On-chain facts for %s: %s (%s), supply=%d, holders=%d",
                 ref.asset_id, name, symbol, int(total_supply), holders)
        return RawAssetFacts(
            name=name,
            symbol=symbol,
            total_supply=int(total_supply),
            holder_count=holders,
            decimals=int(decimals),
            source=self.name,
        )
