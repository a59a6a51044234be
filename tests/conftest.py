# tests/conftest.py
"""
Shared Test Fixtures - Fake Clock, Cache and In-Memory Ledger

Files that USE this module:
- pytest (fixtures are injected into every test module)

Files that this module USES:
- assetdex.shared.ttl_cache (TTLCache with a fake clock)
- assetdex.adapters.ledger.base (DiscoveryLedger interface for the fake)
- assetdex.domain.models (cards, events, receipts)
"""
from typing import Dict, List, Optional

import pytest  # Testing framework for writing and running tests

from assetdex.adapters.ledger.base import DiscoveryLedger
from assetdex.domain.errors import ConfigurationError
from assetdex.domain.models import (
    AssetType,
    DiscoveryCard,
    DiscoveryEvent,
    MintReceipt,
    MintRequest,
    RarityTier,
    RiskTier,
)
from assetdex.shared.ttl_cache import TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLedger(DiscoveryLedger):
    """In-memory discovery ledger that records every call."""

    name = "fake-ledger"

    def __init__(self, events: Optional[List[DiscoveryEvent]] = None, signer: Optional[str] = "0xsigner"):
        self.events = list(events or [])
        self.cards: Dict[int, DiscoveryCard] = {}
        self.discovered = set()
        self.signer = signer
        self.writes: List[MintRequest] = []
        self.event_reads = 0
        self.fail_on_write: Optional[int] = None

    async def read_discovery_card(self, token_id):
        if token_id not in self.cards:
            raise ConfigurationError(f"unknown token {token_id}")
        return self.cards[token_id]

    async def read_total_discoveries(self):
        return len(self.events)

    async def is_asset_discovered(self, asset_address):
        return asset_address.lower() in self.discovered

    async def read_discoverer_cards(self, address):
        return [e.token_id for e in self.events if e.discoverer == address.lower()]

    async def query_discovery_events(self, from_block=0, to_block="latest"):
        self.event_reads += 1
        return list(self.events)

    async def write_discovery(self, request):
        if not self.signer:
            raise ConfigurationError("Signer private key not configured")
        if self.fail_on_write is not None and len(self.writes) == self.fail_on_write:
            self.writes.append(request)
            raise RuntimeError("transaction reverted")
        self.writes.append(request)
        token_id = len(self.events) + 1
        discoverer = request.discoverer or self.signer
        self.events.append(DiscoveryEvent(discoverer, request.rarity_score, token_id))
        self.discovered.add(request.asset_address.lower())
        return MintReceipt(tx_hash=f"0x{token_id:064x}", token_id=token_id, discoverer=discoverer)


def make_card(token_id: int = 7, discoverer: str = "0x" + "ab" * 20) -> DiscoveryCard:
    return DiscoveryCard(
        token_id=token_id,
        discoverer=discoverer,
        discovery_timestamp=1_700_000_000,
        asset_type=AssetType.REAL_ESTATE,
        rarity=RarityTier.EPIC,
        risk=RiskTier.LOW,
        rarity_score=80,
        prediction_score=65,
        asset_address="0x" + "12" * 20,
        asset_name="Harbor Tower",
        asset_symbol="HBT",
        current_value=2 ** 70,
        yield_rate=450,
        token_uri="data:application/json;base64,e30=",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(sweep_probability=0.0, clock=clock)


@pytest.fixture
def ledger():
    return FakeLedger()
