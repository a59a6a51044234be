# src/assetdex/adapters/providers/schemas.py
"""
Response Schemas - Explicit Shapes of External API Payloads

Pydantic models for the loosely typed JSON returned by external sources.
Each model states which fields are optional and what a missing field
normalizes to, so adapters never pass undefined values downstream.

Files that USE this module:
- assetdex.adapters.providers.defillama (LlamaPool)
- assetdex.adapters.providers.creatorbid (ArtAssetSchema, AgentSchema)
- assetdex.adapters.providers.holders (IndexerHoldersResponse)

Files that this module USES:
- None (schema definitions only)
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LlamaPool(_Schema):
    """One entry of the DeFi Llama yields feed."""
    pool: str
    chain: str = ""
    project: str = ""
    symbol: str = ""
    tvl_usd: float = Field(default=0.0, alias="tvlUsd")
    apy: float = 0.0

    @field_validator("tvl_usd", "apy", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        # The feed reports null for pools without a computed value
        return 0.0 if v is None else v


class EstimateSchema(_Schema):
    low: float = 0.0
    high: float = 0.0


class ArtAssetSchema(_Schema):
    """One art/collectible piece from the agent marketplace."""
    id: str
    title: str = "Untitled"
    artist: str = ""
    current_bid: float = Field(default=0.0, alias="currentBid")
    estimate: Optional[EstimateSchema] = None
    provenance: List[str] = Field(default_factory=list)
    image_url: str = Field(default="", alias="imageUrl")
    category: str = ""


class AgentSchema(_Schema):
    address: str


class AgentsResponse(_Schema):
    agents: List[AgentSchema] = Field(default_factory=list)


class AgentMetadata(_Schema):
    art_assets: List[ArtAssetSchema] = Field(default_factory=list, alias="artAssets")


class IndexerHolderItem(_Schema):
    address: str = ""


class IndexerHoldersData(_Schema):
    items: List[IndexerHolderItem] = Field(default_factory=list)
    pagination: Optional[dict] = None


class IndexerHoldersResponse(_Schema):
    data: Optional[IndexerHoldersData] = None
    error: bool = False
    error_message: Optional[str] = None
