# src/assetdex/adapters/providers/__init__.py
"""
Provider Adapters - External Data Sources

This package contains adapters for the yield feed, the art marketplace,
ERC-20 chain reads, holder-count strategies and discovery event logs.
"""

from assetdex.adapters.providers.base import AssetSourceAdapter, SourceAdapter
from assetdex.adapters.providers.chain_logs import ChainLogAdapter
from assetdex.adapters.providers.creatorbid import ArtPiece, CreatorBidAdapter
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter, YieldPool
from assetdex.adapters.providers.holders import HolderCountResolver
from assetdex.adapters.providers.onchain import OnChainAdapter, Web3Pool

__all__ = [
    "AssetSourceAdapter",
    "SourceAdapter",
    "ChainLogAdapter",
    "ArtPiece",
    "CreatorBidAdapter",
    "DeFiLlamaAdapter",
    "YieldPool",
    "HolderCountResolver",
    "OnChainAdapter",
    "Web3Pool",
]
