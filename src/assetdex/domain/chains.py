# src/assetdex/domain/chains.py
"""
Chain Lookup Tables

Fixed mappings between the chain names used by external feeds and numeric
chain ids. Unknown names fall back to Ethereum mainnet (id 1).
"""
from typing import Dict

DEFAULT_CHAIN_ID = 1

CHAIN_IDS: Dict[str, int] = {
    "Ethereum": 1,
    "Base": 8453,
    "Linea": 59141,
    "Polygon": 137,
    "Arbitrum": 42161,
    "Solana": 101,
    "Avalanche": 43114,
}

CHAIN_NAMES: Dict[int, str] = {
    1: "Ethereum",
    8453: "Base",
    59141: "Linea",
    137: "Polygon",
    42161: "Arbitrum",
}


def chain_id_for(chain_name: str) -> int:
    """Numeric chain id for a feed chain name; unknown names map to 1."""
    return CHAIN_IDS.get(chain_name, DEFAULT_CHAIN_ID)


def chain_name_for(chain_id: int) -> str:
    """Feed chain name for a chain id; unknown ids map to 'Ethereum'."""
    return CHAIN_NAMES.get(chain_id, "Ethereum")
