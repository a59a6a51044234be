# src/assetdex/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Asset references and per-source raw facts
- Scoring inputs and outputs (rarity, risk, market prediction)
- Composite analyses and discovered assets
- On-chain discovery cards, events and leaderboard entries
- Mint requests and receipts

Ledger quantities (scores, values, token ids) are exact Python ints. Every
``to_dict`` renders them as decimal strings so they survive a JSON boundary.

Files that USE this module:
- assetdex.domain.scoring (scoring inputs/outputs)
- assetdex.adapters.* (adapters create raw facts, cards and events)
- assetdex.application.* (services compose and return these models)
- tests.* (tests use domain models for fixtures)

Files that this module USES:
- assetdex.domain.errors (ValidationError for malformed references)
- assetdex.shared.validators (address format check)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from assetdex.domain.errors import ValidationError
from assetdex.shared.validators import validate_address


class AssetType(Enum):
    """Asset category; values match the discovery contract's uint8 encoding."""
    TOKENIZED_TREASURY = 0
    REAL_ESTATE = 1
    ART = 2
    LUXURY_GOODS = 3
    PRIVATE_CREDIT = 4

    @property
    def slug(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_slug(cls, slug: str) -> "AssetType":
        """Map a listing filter slug (e.g. 'real-estate') to an AssetType; unknown → treasury."""
        for member in cls:
            if member.slug == slug:
                return member
        return cls.TOKENIZED_TREASURY

    @classmethod
    def from_code(cls, code: int) -> "AssetType":
        try:
            return cls(int(code))
        except ValueError:
            return cls.TOKENIZED_TREASURY


class RarityTier(Enum):
    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


class RiskTier(Enum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    SPECULATIVE = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class MarketDirection(Enum):
    BULLISH = "Bullish"
    NEUTRAL = "Neutral"
    BEARISH = "Bearish"


@dataclass(frozen=True)
class AssetReference:
    """
    Identifies an asset uniquely.

    The address is lowercased on construction so references compare
    case-insensitively.

    Attributes:
        address: 20-byte hex address with 0x prefix
        chain_id: Positive EVM chain id
    """
    address: str
    chain_id: int

    def __post_init__(self) -> None:
        if not validate_address(self.address):
            raise ValidationError(f"Invalid asset address: {self.address!r}")
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int) or self.chain_id <= 0:
            raise ValidationError(f"Invalid chain id: {self.chain_id!r}")
        object.__setattr__(self, "address", self.address.lower())

    @property
    def asset_id(self) -> str:
        return f"{self.chain_id}_{self.address}"


@dataclass(frozen=True)
class RawAssetFacts:
    """
    Per-source snapshot of an asset.

    Optional fields are None when the source does not know them; they are
    never silently treated as zero by scoring.

    Attributes:
        name: Token or asset name
        symbol: Ticker symbol
        total_supply: Raw on-chain supply in base units (exact integer)
        holder_count: Number of holders (resolved or estimated)
        decimals: ERC-20 decimals, None for off-chain sources
        tvl: Total value locked in USD (yield sources)
        apy: Annual yield as a fraction (yield sources)
        current_bid: Current bid (marketplace sources)
        estimate_range: (low, high) valuation estimate (marketplace sources)
        source: Name of the adapter that produced the facts
    """
    name: str
    symbol: str
    total_supply: int
    holder_count: int
    decimals: Optional[int] = None
    tvl: Optional[float] = None
    apy: Optional[float] = None
    current_bid: Optional[float] = None
    estimate_range: Optional[Tuple[float, float]] = None
    source: str = "unknown"

    @property
    def supply_units(self) -> float:
        """Supply in human units; conversion to float happens only here."""
        if not self.decimals:
            return float(self.total_supply)
        return self.total_supply / (10 ** self.decimals)


@dataclass(frozen=True)
class RarityInput:
    total_supply: float
    holder_count: int
    holder_distribution: float
    age_days: float
    uniqueness: float
    market_cap: float


@dataclass(frozen=True)
class RiskInput:
    audit_status: bool
    centralization: float
    liquidity_depth: float
    regulatory_clarity: float
    volatility: float


@dataclass(frozen=True)
class MarketInput:
    price_history: Tuple[float, ...]
    volume: Tuple[float, ...]
    yield_changes: Tuple[float, ...]
    market_cap: float
    sentiment: float


@dataclass(frozen=True)
class RiskAssessment:
    score: float
    tier: RiskTier


@dataclass(frozen=True)
class MarketPrediction:
    """
    Market-movement prediction.

    Attributes:
        direction: Bullish, Neutral or Bearish
        confidence: Percentage 0-100
        factors: Which bucket each signal fell into, in evaluation order
    """
    direction: MarketDirection
    confidence: int
    factors: Tuple[str, ...]


@dataclass(frozen=True)
class AnalysisMetrics:
    liquidity_depth: float
    holder_distribution: float
    yield_rate: float
    volatility: float
    age_days: float


@dataclass(frozen=True)
class Analysis:
    """
    Composite analysis of one asset.

    Created once per (asset, cache epoch) and superseded, never mutated,
    when the cache entry expires.
    """
    asset_id: str
    rarity_score: float
    rarity_tier: RarityTier
    risk_tier: RiskTier
    market_direction: MarketDirection
    prediction_confidence: int
    health_score: int
    metrics: AnalysisMetrics
    timestamp: datetime
    factors: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "rarityScore": self.rarity_score,
            "rarityTier": self.rarity_tier.label,
            "riskTier": self.risk_tier.label,
            "marketPrediction": self.market_direction.value,
            "predictionConfidence": self.prediction_confidence,
            "healthScore": self.health_score,
            "factors": list(self.factors),
            "metrics": {
                "liquidityDepth": self.metrics.liquidity_depth,
                "holderDistribution": self.metrics.holder_distribution,
                "yield": self.metrics.yield_rate,
                "volatility": self.metrics.volatility,
                "age": self.metrics.age_days,
            },
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class DiscoveredAsset:
    """
    Candidate produced by the discovery aggregator.

    Attributes:
        address: Contract address, or a synthetic address derived from the source key
        chain_id: Chain the asset lives on
        yield_rate: Yield in basis points
        current_value: Value in the source's base unit (exact integer)
        token_uri: Self-describing data URI used as the mint metadata pointer
        source: Adapter that produced the candidate
    """
    address: str
    chain_id: int
    name: str
    symbol: str
    asset_type: AssetType
    rarity_tier: RarityTier
    risk_tier: RiskTier
    rarity_score: int
    prediction_score: int
    current_value: int
    yield_rate: int
    token_uri: str
    source: str = "unknown"

    @property
    def dedup_key(self) -> Tuple[str, int]:
        return (self.address.lower(), self.chain_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "chainId": self.chain_id,
            "name": self.name,
            "symbol": self.symbol,
            "assetType": self.asset_type.value,
            "rarity": self.rarity_tier.value,
            "risk": self.risk_tier.value,
            "rarityScore": self.rarity_score,
            "predictionScore": self.prediction_score,
            "currentValue": str(self.current_value),
            "yieldRate": str(self.yield_rate),
            "tokenURI": self.token_uri,
            "source": self.source,
        }


@dataclass(frozen=True)
class DiscoveryCard:
    """One discovery card as stored by the RWADiscoveryCard contract."""
    token_id: int
    discoverer: str
    discovery_timestamp: int
    asset_type: AssetType
    rarity: RarityTier
    risk: RiskTier
    rarity_score: int
    prediction_score: int
    asset_address: str
    asset_name: str
    asset_symbol: str
    current_value: int
    yield_rate: int
    token_uri: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenId": str(self.token_id),
            "discoverer": self.discoverer,
            "discoveryTimestamp": str(self.discovery_timestamp),
            "assetType": self.asset_type.value,
            "rarity": self.rarity.value,
            "risk": self.risk.value,
            "rarityScore": str(self.rarity_score),
            "predictionScore": str(self.prediction_score),
            "assetAddress": self.asset_address,
            "assetName": self.asset_name,
            "assetSymbol": self.asset_symbol,
            "currentValue": str(self.current_value),
            "yieldRate": str(self.yield_rate),
            "tokenURI": self.token_uri,
        }


@dataclass(frozen=True)
class DiscoveryEvent:
    """A NewDiscovery log entry: who discovered which token with what score."""
    discoverer: str
    rarity_score: int
    token_id: int
    block_number: int = 0
    log_index: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    address: str
    total_score: int
    discovery_count: int
    average_rarity: int
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "totalScore": str(self.total_score),
            "discoveryCount": str(self.discovery_count),
            "averageRarity": str(self.average_rarity),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class UserStats:
    address: str
    total_score: int
    discovery_count: int
    average_rarity: int
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "totalScore": str(self.total_score),
            "discoveryCount": str(self.discovery_count),
            "averageRarity": str(self.average_rarity),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class MintRequest:
    """Validated parameters of one discovery mint."""
    asset_address: str
    asset_name: str
    asset_symbol: str
    asset_type: AssetType
    rarity: RarityTier
    risk: RiskTier
    rarity_score: int
    prediction_score: int
    current_value: int
    yield_rate: int
    token_uri: str
    discoverer: Optional[str] = None


@dataclass(frozen=True)
class MintReceipt:
    tx_hash: str
    token_id: Optional[int] = None
    discoverer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "tokenId": str(self.token_id) if self.token_id is not None else None,
            "discoverer": self.discoverer,
        }


@dataclass(frozen=True)
class AssetListing:
    """One row of the asset listing served to the UI."""
    id: str
    name: str
    symbol: str
    address: str
    chain_id: int
    asset_type: AssetType
    total_supply: str = "0"
    price: float = 0.0
    market_cap: float = 0.0
    liquidity: float = 0.0
    holders: int = 0
    source: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "chainId": self.chain_id,
            "type": self.asset_type.value,
            "totalSupply": self.total_supply,
            "price": self.price,
            "marketCap": self.market_cap,
            "liquidity": self.liquidity,
            "holders": self.holders,
            "source": self.source,
        }
