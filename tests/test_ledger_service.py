# tests/test_ledger_service.py
"""
Ledger Service Tests - Leaderboard Aggregation, Ranks and Cache Invalidation

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.application.ledger_service (LedgerService, aggregate_events)
- tests.conftest (FakeLedger, make_card)
"""
import asyncio
from unittest.mock import patch

import pytest

from assetdex.application.ledger_service import NOT_RANKED, LedgerService, aggregate_events
from assetdex.domain.errors import ServiceUnavailableError
from assetdex.domain.models import DiscoveryEvent
from conftest import FakeLedger, make_card

ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
CAROL = "0x" + "cc" * 20


def events(*pairs):
    return [DiscoveryEvent(who, score, token_id) for token_id, (who, score) in enumerate(pairs, start=1)]


class TestAggregateEvents:
    def test_sums_counts_and_ranks(self):
        entries = aggregate_events(events((ALICE, 50), (BOB, 80), (ALICE, 30), (CAROL, 10)))

        assert [(e.address, e.total_score, e.discovery_count, e.rank) for e in entries] == [
            (ALICE, 80, 2, 1),
            (BOB, 80, 1, 2),
            (CAROL, 10, 1, 3),
        ]
        assert entries[0].average_rarity == 40

    def test_ties_keep_first_seen_order(self):
        entries = aggregate_events(events((BOB, 10), (ALICE, 10)))
        assert [e.address for e in entries] == [BOB, ALICE]

    def test_average_truncates(self):
        (entry,) = aggregate_events(events((ALICE, 1), (ALICE, 2)))
        assert entry.average_rarity == 1

    def test_addresses_are_lowercased(self):
        entries = aggregate_events(events((ALICE.upper().replace("0X", "0x"), 5), (ALICE, 5)))
        assert len(entries) == 1
        assert entries[0].discovery_count == 2

    def test_exact_big_integers(self):
        (entry,) = aggregate_events(events((ALICE, 2 ** 200), (ALICE, 1)))
        assert entry.total_score == 2 ** 200 + 1
        assert entry.to_dict()["totalScore"] == str(2 ** 200 + 1)

    def test_empty(self):
        assert aggregate_events([]) == []


class TestLeaderboard:
    def test_leaderboard_payload_and_limit(self, cache):
        ledger = FakeLedger(events((ALICE, 50), (BOB, 80), (ALICE, 30)))
        service = LedgerService(cache, ledger)

        board = asyncio.run(service.leaderboard(limit=1))

        assert board == [{
            "address": ALICE,
            "totalScore": "80",
            "discoveryCount": "2",
            "averageRarity": "40",
            "rank": 1,
        }]

    def test_leaderboard_is_cached(self, cache, clock):
        ledger = FakeLedger(events((ALICE, 50)))
        service = LedgerService(cache, ledger)

        asyncio.run(service.leaderboard())
        asyncio.run(service.leaderboard())
        assert ledger.event_reads == 1

        clock.advance(301)
        asyncio.run(service.leaderboard())
        assert ledger.event_reads == 2

    def test_user_rank(self, cache):
        service = LedgerService(cache, FakeLedger(events((ALICE, 50), (BOB, 80), (ALICE, 30))))
        assert asyncio.run(service.user_rank(BOB.upper().replace("0X", "0x"))) == 2
        assert asyncio.run(service.user_rank(CAROL)) == NOT_RANKED

    def test_rank_beyond_cap_is_not_ranked(self, cache):
        many = events(*[("0x" + f"{i:040x}", 100) for i in range(1, 6)])
        service = LedgerService(cache, FakeLedger(many))
        last = "0x" + f"{5:040x}"
        with patch("assetdex.application.ledger_service.RANK_CAP", 3):
            assert asyncio.run(service.user_rank(last)) == NOT_RANKED
            stats = asyncio.run(service.user_stats(last))
        assert stats["rank"] == NOT_RANKED
        assert stats["discoveryCount"] == "1"

    def test_user_stats(self, cache):
        service = LedgerService(cache, FakeLedger(events((ALICE, 50), (BOB, 80), (ALICE, 30))))
        assert asyncio.run(service.user_stats(ALICE)) == {
            "address": ALICE,
            "totalScore": "80",
            "discoveryCount": "2",
            "averageRarity": "40",
            "rank": 1,
        }

    def test_user_stats_without_discoveries(self, cache):
        service = LedgerService(cache, FakeLedger())
        stats = asyncio.run(service.user_stats(CAROL))
        assert stats["totalScore"] == "0"
        assert stats["rank"] == NOT_RANKED


class TestCardsAndLookups:
    def test_user_cards(self, cache):
        service = LedgerService(cache, FakeLedger(events((ALICE, 50), (BOB, 80), (ALICE, 30))))
        assert asyncio.run(service.user_cards(ALICE)) == ["1", "3"]

    def test_discovery_card(self, cache):
        ledger = FakeLedger()
        ledger.cards[7] = make_card(7)
        service = LedgerService(cache, ledger)

        card = asyncio.run(service.discovery_card(7))

        assert card["tokenId"] == "7"
        assert card["currentValue"] == str(2 ** 70)
        assert cache.exists("discovery-card:7")

    def test_total_and_discovered(self, cache):
        ledger = FakeLedger(events((ALICE, 50)))
        ledger.discovered.add("0xfeed")
        service = LedgerService(cache, ledger)
        assert asyncio.run(service.total_discoveries()) == 1
        assert asyncio.run(service.is_asset_discovered("0xFEED")) is True


class TestUnavailable:
    def test_no_ledger(self, cache):
        service = LedgerService(cache, None)
        with pytest.raises(ServiceUnavailableError, match="ledger unavailable"):
            asyncio.run(service.leaderboard())
        with pytest.raises(ServiceUnavailableError):
            asyncio.run(service.user_cards(ALICE))
        with pytest.raises(ServiceUnavailableError):
            asyncio.run(service.total_discoveries())

    def test_configuration_error_maps_to_unavailable(self, cache):
        service = LedgerService(cache, FakeLedger())
        with pytest.raises(ServiceUnavailableError, match="unknown token"):
            asyncio.run(service.discovery_card(99))


class TestInvalidateUser:
    def test_drops_user_entries_and_leaderboards(self, cache):
        service = LedgerService(cache, FakeLedger(events((ALICE, 50), (BOB, 80))))
        asyncio.run(service.leaderboard(10))
        asyncio.run(service.leaderboard(5))
        asyncio.run(service.user_cards(ALICE))
        asyncio.run(service.user_stats(ALICE))
        asyncio.run(service.user_rank(ALICE))
        asyncio.run(service.user_stats(BOB))

        removed = service.invalidate_user(ALICE.upper().replace("0X", "0x"))

        assert removed == 5
        assert cache.exists(f"user-stats:{BOB}")
        assert not cache.exists("leaderboard:10")
        assert not cache.exists(f"user-cards:{ALICE}")
