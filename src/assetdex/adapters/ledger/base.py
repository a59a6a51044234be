# src/assetdex/adapters/ledger/base.py
"""
Discovery Ledger Interface

Abstract interface over the on-chain discovery ledger (the discovery card
NFT contract plus the factory that emits discovery events). The ledger
service only talks to this interface, so tests use in-memory fakes.

Files that USE this module:
- assetdex.adapters.ledger.discovery_card (Web3DiscoveryLedger implements it)
- assetdex.application.ledger_service (reads cards and events)
- assetdex.application.mint_service (writes discoveries)
- assetdex.application.health (ledger connectivity check)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Union

from assetdex.domain.models import DiscoveryCard, DiscoveryEvent, MintReceipt, MintRequest

BlockId = Union[int, str]


class DiscoveryLedger(ABC):
    """Read/write access to discovery cards and discovery events."""

    name: str = "ledger"

    @abstractmethod
    async def read_discovery_card(self, token_id: int) -> DiscoveryCard:
        """Fetch one discovery card by token id."""
        raise NotImplementedError

    @abstractmethod
    async def read_total_discoveries(self) -> int:
        raise NotImplementedError

    @abstractmethod
    async def is_asset_discovered(self, asset_address: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def read_discoverer_cards(self, address: str) -> List[int]:
        """Token ids of the cards minted by a discoverer."""
        raise NotImplementedError

    @abstractmethod
    async def query_discovery_events(self, from_block: BlockId = 0,
                                     to_block: BlockId = "latest") -> List[DiscoveryEvent]:
        """Discovery events in a block range, ordered by (block, log index)."""
        raise NotImplementedError

    @abstractmethod
    async def write_discovery(self, request: MintRequest) -> MintReceipt:
        """
        Mint one discovery card.

        Raises:
            ConfigurationError: If no signer is configured
        """
        raise NotImplementedError
