# src/assetdex/adapters/providers/chain_logs.py
"""
Bounded Chain Log Reader for Discovery Events

Reads ``NewDiscovery`` events emitted by the factory contract between two
blocks with a single ``eth_getLogs`` query and decodes them into
DiscoveryEvent objects ordered by (block_number, log_index).

There is no persistent indexer: every call is an on-demand range query.

Files that USE this module:
- assetdex.adapters.ledger.discovery_card (Web3DiscoveryLedger.query_discovery_events)
- tests.test_onchain (ChainLogAdapter unit tests)

Files that this module USES:
- assetdex.domain.models (DiscoveryEvent)
"""
from __future__ import annotations

import logging
from typing import Any, List, Union

from web3 import Web3

from assetdex.domain.models import DiscoveryEvent

log = logging.getLogger(__name__)

NEW_DISCOVERY_SIGNATURE = "NewDiscovery(address,uint256,uint256)"

NEW_DISCOVERY_ABI = {
    "anonymous": False,
    "inputs": [
        {"indexed": True, "name": "discoverer", "type": "address"},
        {"indexed": False, "name": "tokenId", "type": "uint256"},
        {"indexed": False, "name": "rarityScore", "type": "uint256"},
    ],
    "name": "NewDiscovery",
    "type": "event",
}

BlockId = Union[int, str]


class ChainLogAdapter:
    """Decode NewDiscovery logs of one contract."""

    name = "chain-logs"

    def __init__(self, w3: Web3, contract_address: str):
        self.w3 = w3
        self.contract_address = Web3.to_checksum_address(contract_address)
        self._contract = w3.eth.contract(address=self.contract_address, abi=[NEW_DISCOVERY_ABI])
        self._topic = Web3.keccak(text=NEW_DISCOVERY_SIGNATURE)

    def read_events(self, from_block: BlockId = 0, to_block: BlockId = "latest") -> List[DiscoveryEvent]:
        """
        Read discovery events in a block range (blocking).

        Args:
            from_block: First block (inclusive)
            to_block: Last block (inclusive) or 'latest'

        Returns:
            Events sorted by (block_number, log_index)
        """
        raw_logs = self.w3.eth.get_logs({
            "address": self.contract_address,
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": [self._topic],
        })
        event = self._contract.events.NewDiscovery()
        events = [self._decode(event.process_log(raw)) for raw in raw_logs]
        events.sort(key=lambda e: (e.block_number, e.log_index))
        log.info("Read %d NewDiscovery events in blocks %s..%s", len(events), from_block, to_block)
        return events

    @staticmethod
    def _decode(entry: Any) -> DiscoveryEvent:
        args = entry["args"]
        return DiscoveryEvent(
            discoverer=str(args["discoverer"]).lower(),
            rarity_score=int(args["rarityScore"]),
            token_id=int(args["tokenId"]),
            block_number=int(entry["blockNumber"]),
            log_index=int(entry["logIndex"]),
        )
