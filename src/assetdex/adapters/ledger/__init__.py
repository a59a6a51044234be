# src/assetdex/adapters/ledger/__init__.py
"""
Ledger Adapters - Discovery Card Contracts

This package contains the discovery ledger interface and its web3
implementation.
"""

from assetdex.adapters.ledger.base import DiscoveryLedger
from assetdex.adapters.ledger.discovery_card import Web3DiscoveryLedger

__all__ = ["DiscoveryLedger", "Web3DiscoveryLedger"]
