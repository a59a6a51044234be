# src/assetdex/application/ledger_service.py
"""
Ledger Service - Discovery Leaderboard and User Statistics

This module turns the on-chain discovery ledger into leaderboard, rank and
per-user views. Discovery events are read genesis→latest with a bounded
log query and aggregated in memory:

- group by lowercase discoverer, in first-seen event order
- sum rarity scores as exact ints
- average = total // count (truncating)
- stable sort by total descending, so ties keep first-seen order
- contiguous 1-based ranks

Every view is cached in the shared TTL cache; invalidate_user drops the
entries a new mint makes stale. Missing contract configuration surfaces
as ServiceUnavailableError, never as a crash.

Files that USE this module:
- assetdex.application.mint_service (invalidate_user after mints)
- assetdex.application.asset_service (card and discovered-asset lookups)
- assetdex.app (leaderboard and rank commands)
- tests.test_ledger_service (unit tests)

Files that this module USES:
- assetdex.adapters.ledger.base (DiscoveryLedger interface)
- assetdex.domain.models (DiscoveryEvent, LeaderboardEntry, UserStats)
- assetdex.shared.ttl_cache (TTLCache)
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional, TypeVar

from assetdex.adapters.ledger.base import DiscoveryLedger
from assetdex.config import settings
from assetdex.domain.errors import ConfigurationError, ServiceUnavailableError
from assetdex.domain.models import DiscoveryEvent, LeaderboardEntry, UserStats
from assetdex.shared.ttl_cache import TTLCache

log = logging.getLogger(__name__)

RANK_CAP = 1000
NOT_RANKED = 0
DEFAULT_LEADERBOARD_LIMIT = 10

T = TypeVar("T")


def aggregate_events(events: Iterable[DiscoveryEvent]) -> List[LeaderboardEntry]:
    """
    Aggregate discovery events into ranked leaderboard entries.

    Args:
        events: Events in ledger order

    Returns:
        Entries sorted by total score (descending), ties in first-seen order
    """
    totals: Dict[str, List[int]] = {}
    for event in events:
        address = event.discoverer.lower()
        bucket = totals.setdefault(address, [0, 0])
        bucket[0] += int(event.rarity_score)
        bucket[1] += 1

    # dicts keep insertion order and sorted() is stable
    ordered = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)
    return [
        LeaderboardEntry(
            address=address,
            total_score=total,
            discovery_count=count,
            average_rarity=total // count,
            rank=position,
        )
        for position, (address, (total, count)) in enumerate(ordered, start=1)
    ]


class LedgerService:
    """Leaderboard, rank, stats and card views over the discovery ledger."""

    def __init__(self, cache: TTLCache, ledger: Optional[DiscoveryLedger]):
        """
        Initialize ledger service.

        Args:
            cache: Shared TTL cache
            ledger: Discovery ledger, or None when contracts are not configured
        """
        self.cache = cache
        self.ledger = ledger

    async def _call(self, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except ConfigurationError as e:
            raise ServiceUnavailableError("ledger", str(e)) from e

    def _require_ledger(self) -> DiscoveryLedger:
        if self.ledger is None:
            raise ServiceUnavailableError("ledger", "contract addresses not configured")
        return self.ledger

    async def ranked_entries(self) -> List[LeaderboardEntry]:
        """Every discoverer, ranked, from a full genesis→latest event read."""
        ledger = self._require_ledger()
        events = await self._call(ledger.query_discovery_events(0, "latest"))
        entries = aggregate_events(events)
        log.debug("Aggregated %d events into %d leaderboard entries", len(events), len(entries))
        return entries

    async def leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[Dict[str, Any]]:
        """Top `limit` leaderboard entries as JSON payloads."""
        async def produce() -> List[Dict[str, Any]]:
            return [entry.to_dict() for entry in (await self.ranked_entries())[:limit]]

        return await self.cache.get_or_set(f"leaderboard:{limit}", produce, settings.leaderboard_cache_seconds)

    async def user_rank(self, address: str) -> int:
        """1-based rank within the first RANK_CAP entries, or NOT_RANKED."""
        address = address.lower()

        async def produce() -> int:
            for entry in (await self.ranked_entries())[:RANK_CAP]:
                if entry.address == address:
                    return entry.rank
            return NOT_RANKED

        return await self.cache.get_or_set(f"user-rank:{address}", produce, settings.leaderboard_cache_seconds)

    async def user_stats(self, address: str) -> Dict[str, Any]:
        """Totals and rank for one discoverer; zeros when they have no discoveries."""
        address = address.lower()

        async def produce() -> Dict[str, Any]:
            for entry in await self.ranked_entries():
                if entry.address == address:
                    rank = entry.rank if entry.rank <= RANK_CAP else NOT_RANKED
                    return UserStats(address, entry.total_score, entry.discovery_count,
                                     entry.average_rarity, rank).to_dict()
            return UserStats(address, 0, 0, 0, NOT_RANKED).to_dict()

        return await self.cache.get_or_set(f"user-stats:{address}", produce, settings.user_stats_cache_seconds)

    async def user_cards(self, address: str) -> List[str]:
        """Token ids minted by a discoverer, as decimal strings."""
        address = address.lower()
        ledger = self._require_ledger()

        async def produce() -> List[str]:
            return [str(token_id) for token_id in await self._call(ledger.read_discoverer_cards(address))]

        return await self.cache.get_or_set(f"user-cards:{address}", produce, settings.user_cards_cache_seconds)

    async def discovery_card(self, token_id: int) -> Dict[str, Any]:
        ledger = self._require_ledger()

        async def produce() -> Dict[str, Any]:
            return (await self._call(ledger.read_discovery_card(int(token_id)))).to_dict()

        return await self.cache.get_or_set(
            f"discovery-card:{int(token_id)}", produce, settings.discovery_card_cache_seconds
        )

    async def total_discoveries(self) -> int:
        return await self._call(self._require_ledger().read_total_discoveries())

    async def is_asset_discovered(self, asset_address: str) -> bool:
        return await self._call(self._require_ledger().is_asset_discovered(asset_address))

    def invalidate_user(self, address: str) -> int:
        """
        Drop cached views a new discovery by this address makes stale.

        Args:
            address: Discoverer address

        Returns:
            Number of cache entries removed
        """
        address = address.lower()
        removed = 0
        for prefix in (f"user-cards:{address}", f"user-stats:{address}", f"user-rank:{address}", "leaderboard:"):
            removed += self.cache.invalidate(prefix)
        log.info("Invalidated %d cache entries for %s", removed, address)
        return removed
