# src/assetdex/adapters/ledger/discovery_card.py
"""
Web3 Discovery Ledger - RWADiscoveryCard and AssetDexterFactory contracts

This module implements DiscoveryLedger against the deployed contracts:
- RWADiscoveryCard: card storage (getDiscoveryCard, getDiscovererCards,
  isAssetDiscovered, totalDiscoveries, tokenURI)
- AssetDexterFactory: payable discoverRWA minting entry point that emits
  NewDiscovery(discoverer, tokenId, rarityScore)

Reads need only the contract addresses and an RPC endpoint. Writes also
need a signer key; without one write_discovery raises ConfigurationError.
All ledger integers stay exact Python ints.

Files that USE this module:
- assetdex.app (composition root builds the ledger from settings)
- tests.test_discovery_card (unit tests with a mocked Web3)

Files that this module USES:
- assetdex.adapters.ledger.base (DiscoveryLedger)
- assetdex.adapters.providers.base (run_blocking)
- assetdex.adapters.providers.chain_logs (ChainLogAdapter, NEW_DISCOVERY_ABI)
- assetdex.config (settings for addresses, RPC and signer)
"""
from __future__ import annotations

import logging
from typing import List, Optional

from web3 import Web3

from assetdex.adapters.ledger.base import BlockId, DiscoveryLedger
from assetdex.adapters.providers.base import run_blocking
from assetdex.adapters.providers.chain_logs import NEW_DISCOVERY_ABI, ChainLogAdapter
from assetdex.config import settings
from assetdex.domain.errors import ConfigurationError, SourceUnavailableError
from assetdex.domain.models import (
    AssetType,
    DiscoveryCard,
    DiscoveryEvent,
    MintReceipt,
    MintRequest,
    RarityTier,
    RiskTier,
)

log = logging.getLogger(__name__)

RECEIPT_TIMEOUT_SECONDS = 120

_CARD_COMPONENTS = [
    {"name": "tokenId", "type": "uint256"},
    {"name": "discoverer", "type": "address"},
    {"name": "discoveryTimestamp", "type": "uint256"},
    {"name": "assetType", "type": "uint8"},
    {"name": "rarity", "type": "uint8"},
    {"name": "risk", "type": "uint8"},
    {"name": "rarityScore", "type": "uint256"},
    {"name": "predictionScore", "type": "uint256"},
    {"name": "assetAddress", "type": "string"},
    {"name": "assetName", "type": "string"},
    {"name": "assetSymbol", "type": "string"},
    {"name": "currentValue", "type": "uint256"},
    {"name": "yieldRate", "type": "uint256"},
]

DISCOVERY_CARD_ABI = [
    {"inputs": [{"name": "tokenId", "type": "uint256"}], "name": "getDiscoveryCard",
     "outputs": [{"components": _CARD_COMPONENTS, "name": "", "type": "tuple"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "discoverer", "type": "address"}], "name": "getDiscovererCards",
     "outputs": [{"name": "", "type": "uint256[]"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "assetAddress", "type": "string"}], "name": "isAssetDiscovered",
     "outputs": [{"name": "", "type": "bool"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "totalDiscoveries",
     "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "tokenId", "type": "uint256"}], "name": "tokenURI",
     "outputs": [{"name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
]

FACTORY_ABI = [
    {"inputs": [
        {"name": "assetType", "type": "uint8"},
        {"name": "rarity", "type": "uint8"},
        {"name": "risk", "type": "uint8"},
        {"name": "rarityScore", "type": "uint256"},
        {"name": "predictionScore", "type": "uint256"},
        {"name": "assetAddress", "type": "string"},
        {"name": "assetName", "type": "string"},
        {"name": "assetSymbol", "type": "string"},
        {"name": "currentValue", "type": "uint256"},
        {"name": "yieldRate", "type": "uint256"},
        {"name": "tokenURI", "type": "string"},
    ], "name": "discoverRWA", "outputs": [], "stateMutability": "payable", "type": "function"},
    {"inputs": [], "name": "mintingFee",
     "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    NEW_DISCOVERY_ABI,
]


class Web3DiscoveryLedger(DiscoveryLedger):
    """DiscoveryLedger backed by the deployed contracts over JSON-RPC."""

    name = "discovery-ledger"

    def __init__(self, w3: Web3, discovery_card_address: str, factory_address: str,
                 signer_private_key: Optional[str] = None):
        """
        Initialize ledger.

        Args:
            w3: Connected Web3 client for the ledger chain
            discovery_card_address: RWADiscoveryCard contract address
            factory_address: AssetDexterFactory contract address
            signer_private_key: Key used for minting (optional for read-only use)

        Raises:
            ConfigurationError: If either contract address is missing
        """
        if not discovery_card_address or not factory_address:
            raise ConfigurationError("Contract addresses not configured")
        self.w3 = w3
        self.discovery_card = w3.eth.contract(
            address=Web3.to_checksum_address(discovery_card_address), abi=DISCOVERY_CARD_ABI
        )
        self.factory = w3.eth.contract(
            address=Web3.to_checksum_address(factory_address), abi=FACTORY_ABI
        )
        self.logs = ChainLogAdapter(w3, factory_address)
        self.signer_private_key = signer_private_key or None

    @classmethod
    def from_settings(cls) -> "Web3DiscoveryLedger":
        """
        Build a ledger from application settings.

        Raises:
            ConfigurationError: If contract addresses or the ledger RPC URL are missing
        """
        if not settings.ledger_configured:
            raise ConfigurationError("Contract addresses not configured")
        rpc_url = settings.ledger_rpc_url
        if not rpc_url:
            raise ConfigurationError(f"No RPC endpoint for ledger chain {settings.ledger_chain_id}")
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": settings.rpc_timeout_seconds}))
        return cls(
            w3,
            settings.discovery_card_address,
            settings.factory_address,
            settings.signer_private_key,
        )

    async def _read(self, what: str, func, *args):
        """Run a blocking contract read, reporting failures as SourceUnavailableError."""
        try:
            return await run_blocking(func, *args)
        except Exception as e:
            log.warning("Ledger read %s failed: %s", what, e)
            raise SourceUnavailableError(self.name, f"{what} failed: {e}") from e

    async def read_discovery_card(self, token_id: int) -> DiscoveryCard:
        functions = self.discovery_card.functions
        raw = await self._read("getDiscoveryCard", functions.getDiscoveryCard(int(token_id)).call)
        token_uri = await self._read("tokenURI", functions.tokenURI(int(token_id)).call)
        return self._card_from_tuple(raw, token_uri)

    async def read_total_discoveries(self) -> int:
        return int(await self._read("totalDiscoveries", self.discovery_card.functions.totalDiscoveries().call))

    async def is_asset_discovered(self, asset_address: str) -> bool:
        call = self.discovery_card.functions.isAssetDiscovered(asset_address).call
        return bool(await self._read("isAssetDiscovered", call))

    async def read_discoverer_cards(self, address: str) -> List[int]:
        call = self.discovery_card.functions.getDiscovererCards(Web3.to_checksum_address(address)).call
        return [int(token_id) for token_id in await self._read("getDiscovererCards", call)]

    async def query_discovery_events(self, from_block: BlockId = 0,
                                     to_block: BlockId = "latest") -> List[DiscoveryEvent]:
        return await self._read("getLogs", self.logs.read_events, from_block, to_block)

    async def write_discovery(self, request: MintRequest) -> MintReceipt:
        """
        Mint a discovery card through the factory and wait for the receipt.

        Raises:
            ConfigurationError: If no signer key is configured
        """
        if not self.signer_private_key:
            raise ConfigurationError("Signer private key not configured")
        return await run_blocking(self._send_discovery, request)

    def _send_discovery(self, request: MintRequest) -> MintReceipt:
        account = self.w3.eth.account.from_key(self.signer_private_key)
        fee = self.factory.functions.mintingFee().call()
        tx = self.factory.functions.discoverRWA(
            request.asset_type.value,
            request.rarity.value,
            request.risk.value,
            request.rarity_score,
            request.prediction_score,
            request.asset_address,
            request.asset_name,
            request.asset_symbol,
            request.current_value,
            request.yield_rate,
            request.token_uri,
        ).build_transaction({
            "from": account.address,
            "value": fee,
            "nonce": self.w3.eth.get_transaction_count(account.address),
        })
        signed = account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        log.info("Discovery mint sent for %s: %s", request.asset_symbol, tx_hash.hex())

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT_SECONDS)
        token_id = None
        for event in self.factory.events.NewDiscovery().process_receipt(receipt):
            token_id = int(event["args"]["tokenId"])
        return MintReceipt(tx_hash=tx_hash.hex(), token_id=token_id, discoverer=account.address.lower())

    @staticmethod
    def _card_from_tuple(raw, token_uri: str) -> DiscoveryCard:
        (token_id, discoverer, timestamp, asset_type, rarity, risk, rarity_score,
         prediction_score, asset_address, asset_name, asset_symbol, current_value, yield_rate) = raw
        return DiscoveryCard(
            token_id=int(token_id),
            discoverer=str(discoverer),
            discovery_timestamp=int(timestamp),
            asset_type=AssetType.from_code(asset_type),
            rarity=RarityTier(int(rarity)),
            risk=RiskTier(int(risk)),
            rarity_score=int(rarity_score),
            prediction_score=int(prediction_score),
            asset_address=asset_address,
            asset_name=asset_name,
            asset_symbol=asset_symbol,
            current_value=int(current_value),
            yield_rate=int(yield_rate),
            token_uri=token_uri,
        )
