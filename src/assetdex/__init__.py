# src/assetdex/__init__.py
"""
AssetDex - Real-World Asset Discovery & Scoring Pipeline

Backend core for wallet-gated RWA discovery cards: ingests asset data from
on-chain reads and third-party feeds, scores it with deterministic rarity,
risk and market models, caches the results, and ranks discoverers from the
on-chain discovery log.
"""

__version__ = "1.0.0"
__author__ = "AssetDexter Team"
