# tests/test_onchain.py
"""
On-Chain Adapter Tests - ERC-20 Reads and Discovery Log Decoding

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.adapters.providers.onchain (OnChainAdapter, Web3Pool)
- assetdex.adapters.providers.chain_logs (ChainLogAdapter)
- unittest.mock (Mock Web3 clients)
"""
import asyncio
from unittest.mock import Mock, patch

import pytest

from assetdex.adapters.providers.base import AssetSourceAdapter
from assetdex.adapters.providers.chain_logs import ChainLogAdapter
from assetdex.adapters.providers.onchain import OnChainAdapter, Web3Pool
from assetdex.domain.errors import MandatoryDataMissingError
from assetdex.domain.models import AssetReference

TOKEN = "0x" + "11" * 20
FACTORY = "0x" + "22" * 20


def fake_web3(name="Test Token", symbol="TST", decimals=18, supply=1_000_000 * 10 ** 18):
    w3 = Mock()
    functions = w3.eth.contract.return_value.functions
    functions.name.return_value.call.return_value = name
    functions.symbol.return_value.call.return_value = symbol
    functions.decimals.return_value.call.return_value = decimals
    functions.totalSupply.return_value.call.return_value = supply
    return w3


def adapter_for(w3, holders=1500):
    resolver = Mock()
    resolver.resolve.return_value = holders
    pool = Web3Pool(rpc_urls={1: "https://rpc.example"}, timeout=5, clients={1: w3})
    return OnChainAdapter(pool, resolver), resolver


class TestWeb3Pool:
    def test_supports_configured_chains(self):
        pool = Web3Pool(rpc_urls={1: "https://rpc.example"}, timeout=5)
        assert pool.supports(1)
        assert not pool.supports(8453)

    @patch("assetdex.adapters.providers.onchain.Web3")
    def test_client_created_once(self, mock_web3):
        pool = Web3Pool(rpc_urls={1: "https://rpc.example"}, timeout=7)
        first = pool.get(1)
        second = pool.get(1)
        assert first is second
        mock_web3.HTTPProvider.assert_called_once_with("https://rpc.example", request_kwargs={"timeout": 7})

    def test_unknown_chain(self):
        with pytest.raises(KeyError):
            Web3Pool(rpc_urls={}, timeout=5).get(1)


class TestOnChainAdapter:
    def test_is_single_asset_source(self):
        adapter, _ = adapter_for(fake_web3())
        assert isinstance(adapter, AssetSourceAdapter)
        assert adapter.name == "onchain"

    def test_fetch_reads_metadata_and_holders(self):
        adapter, resolver = adapter_for(fake_web3())

        facts = asyncio.run(adapter.fetch(AssetReference(TOKEN, 1)))

        assert facts.name == "Test Token"
        assert facts.symbol == "TST"
        assert facts.decimals == 18
        assert facts.total_supply == 1_000_000 * 10 ** 18
        assert facts.supply_units == pytest.approx(1_000_000)
        assert facts.holder_count == 1500
        assert facts.source == "onchain"
        resolver.resolve.assert_called_once_with(TOKEN, 1, pytest.approx(1_000_000))

    def test_supply_stays_exact(self):
        supply = 2 ** 200 + 1
        adapter, _ = adapter_for(fake_web3(supply=supply))
        facts = asyncio.run(adapter.fetch(AssetReference(TOKEN, 1)))
        assert facts.total_supply == supply

    def test_any_failed_call_is_mandatory_failure(self):
        w3 = fake_web3()
        w3.eth.contract.return_value.functions.decimals.return_value.call.side_effect = ValueError("execution reverted")
        adapter, resolver = adapter_for(w3)

        with pytest.raises(MandatoryDataMissingError, match=r"decimals\(\)"):
            asyncio.run(adapter.fetch(AssetReference(TOKEN, 1)))
        resolver.resolve.assert_not_called()

    def test_unsupported_chain(self):
        adapter, _ = adapter_for(fake_web3())
        with pytest.raises(MandatoryDataMissingError, match="no RPC endpoint"):
            asyncio.run(adapter.fetch(AssetReference(TOKEN, 10)))


class TestChainLogAdapter:
    def _adapter(self, raw_logs):
        w3 = Mock()
        w3.eth.get_logs.return_value = raw_logs
        event = w3.eth.contract.return_value.events.NewDiscovery.return_value
        event.process_log.side_effect = lambda raw: raw
        return ChainLogAdapter(w3, FACTORY), w3

    def _log(self, who, token_id, score, block, index):
        return {
            "args": {"discoverer": who, "tokenId": token_id, "rarityScore": score},
            "blockNumber": block,
            "logIndex": index,
        }

    def test_events_decoded_and_ordered(self):
        alice = "0x" + "AA" * 20
        bob = "0x" + "BB" * 20
        adapter, w3 = self._adapter([
            self._log(bob, 2, 80, 10, 1),
            self._log(alice, 1, 50, 10, 0),
            self._log(alice, 3, 30, 12, 0),
        ])

        events = adapter.read_events(0, "latest")

        assert [e.token_id for e in events] == [1, 2, 3]
        assert events[0].discoverer == alice.lower()
        assert events[1].rarity_score == 80
        query = w3.eth.get_logs.call_args[0][0]
        assert query["fromBlock"] == 0
        assert query["toBlock"] == "latest"
        assert query["topics"] == [adapter._topic]

    def test_empty_range(self):
        adapter, _ = self._adapter([])
        assert adapter.read_events(100, 200) == []
