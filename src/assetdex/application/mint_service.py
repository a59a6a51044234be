# src/assetdex/application/mint_service.py
"""
Mint Service - Discovery Card Minting

This module validates discovery mint parameters and writes them to the
ledger. Validation always happens before any I/O. Batches are minted
strictly one transaction at a time with a fixed delay in between, since
the signer's nonce ordering depends on it.

Files that USE this module:
- assetdex.app (composition root)
- tests.test_mint_service (unit tests)

Files that this module USES:
- assetdex.adapters.ledger.base (DiscoveryLedger.write_discovery)
- assetdex.application.ledger_service (cache invalidation after mints)
- assetdex.shared.validators (address and range checks)
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence

from assetdex.adapters.ledger.base import DiscoveryLedger
from assetdex.application.ledger_service import LedgerService
from assetdex.config import settings
from assetdex.domain.errors import ConfigurationError, ServiceUnavailableError, ValidationError
from assetdex.domain.models import (
    AssetType,
    DiscoveredAsset,
    MintReceipt,
    MintRequest,
    RarityTier,
    RiskTier,
)
from assetdex.shared.validators import validate_address, validate_int_range

log = logging.getLogger(__name__)

MAX_UINT256 = 2 ** 256 - 1

# Applied when a discovery payload omits the field
DEFAULT_ASSET_TYPE = AssetType.TOKENIZED_TREASURY.value
DEFAULT_RARITY = RarityTier.COMMON.value
DEFAULT_RISK = RiskTier.MEDIUM.value
DEFAULT_RARITY_SCORE = 50
DEFAULT_PREDICTION_SCORE = 60
DEFAULT_CURRENT_VALUE = 1_000_000
DEFAULT_YIELD_RATE = 50_000


@dataclass
class BatchMintResult:
    """Outcome of a batch mint; `failed_at` is the index of the item that stopped the batch."""
    receipts: List[MintReceipt] = field(default_factory=list)
    failed_at: Optional[int] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.failed_at is None

    def to_dict(self):
        return {
            "minted": len(self.receipts),
            "receipts": [receipt.to_dict() for receipt in self.receipts],
            "failedAt": self.failed_at,
            "error": self.error,
        }


def _field(params: Mapping[str, Any], name: str, default: Any) -> Any:
    value = params.get(name)
    return default if value is None or value == "" else value


def validate_mint_params(params: Mapping[str, Any]) -> MintRequest:
    """
    Validate a discovery mint payload.

    Args:
        params: Mapping with assetAddress, assetName, assetSymbol and optional
            assetType, rarity, risk, rarityScore, predictionScore,
            currentValue, yieldRate, tokenURI and discoverer

    Returns:
        MintRequest ready for the ledger

    Raises:
        ValidationError: On missing required fields or out-of-range values
    """
    address = params.get("assetAddress")
    name = params.get("assetName")
    symbol = params.get("assetSymbol")
    if not address or not name or not symbol:
        raise ValidationError("Missing required asset fields: address, name, or symbol")
    if not validate_address(address):
        raise ValidationError(f"Invalid asset address: {address!r}")

    asset_type = validate_int_range(_field(params, "assetType", DEFAULT_ASSET_TYPE), 0, len(AssetType) - 1)
    rarity = validate_int_range(_field(params, "rarity", DEFAULT_RARITY), 0, len(RarityTier) - 1)
    risk = validate_int_range(_field(params, "risk", DEFAULT_RISK), 0, len(RiskTier) - 1)
    if asset_type is None or rarity is None or risk is None:
        raise ValidationError("assetType, rarity and risk must be valid enum codes")

    rarity_score = validate_int_range(_field(params, "rarityScore", DEFAULT_RARITY_SCORE), 0, 100)
    prediction_score = validate_int_range(_field(params, "predictionScore", DEFAULT_PREDICTION_SCORE), 0, 100)
    if rarity_score is None or prediction_score is None:
        raise ValidationError("rarityScore and predictionScore must be integers between 0 and 100")

    current_value = validate_int_range(_field(params, "currentValue", DEFAULT_CURRENT_VALUE), 0, MAX_UINT256)
    yield_rate = validate_int_range(_field(params, "yieldRate", DEFAULT_YIELD_RATE), 0, MAX_UINT256)
    if current_value is None or yield_rate is None:
        raise ValidationError("currentValue and yieldRate must be non-negative integers")

    discoverer = params.get("discoverer")
    if discoverer and not validate_address(discoverer):
        raise ValidationError(f"Invalid discoverer address: {discoverer!r}")

    return MintRequest(
        asset_address=address,
        asset_name=str(name),
        asset_symbol=str(symbol),
        asset_type=AssetType(asset_type),
        rarity=RarityTier(rarity),
        risk=RiskTier(risk),
        rarity_score=rarity_score,
        prediction_score=prediction_score,
        current_value=current_value,
        yield_rate=yield_rate,
        token_uri=str(params.get("tokenURI") or ""),
        discoverer=discoverer.lower() if discoverer else None,
    )


def request_from_asset(asset: DiscoveredAsset) -> MintRequest:
    """Mint parameters for a discovered asset."""
    return validate_mint_params({
        "assetAddress": asset.address,
        "assetName": asset.name,
        "assetSymbol": asset.symbol,
        "assetType": asset.asset_type.value,
        "rarity": asset.rarity_tier.value,
        "risk": asset.risk_tier.value,
        "rarityScore": asset.rarity_score,
        "predictionScore": asset.prediction_score,
        "currentValue": asset.current_value,
        "yieldRate": asset.yield_rate,
        "tokenURI": asset.token_uri,
    })


class MintService:
    """Validated, sequential discovery minting."""

    def __init__(
        self,
        ledger: Optional[DiscoveryLedger],
        ledger_service: LedgerService,
        batch_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize mint service.

        Args:
            ledger: Discovery ledger, or None when contracts are not configured
            ledger_service: Used to invalidate cached views after a mint
            batch_delay: Seconds awaited between batch transactions
            sleep: Awaitable sleep (tests inject a recorder)
        """
        self.ledger = ledger
        self.ledger_service = ledger_service
        self.batch_delay = settings.mint_batch_delay_seconds if batch_delay is None else batch_delay
        self.sleep = sleep

    async def _write(self, request: MintRequest) -> MintReceipt:
        if self.ledger is None:
            raise ServiceUnavailableError("minting", "contract addresses not configured")
        try:
            receipt = await self.ledger.write_discovery(request)
        except ConfigurationError as e:
            raise ServiceUnavailableError("minting", str(e)) from e

        discoverer = receipt.discoverer or request.discoverer
        if discoverer:
            self.ledger_service.invalidate_user(discoverer)
        else:
            self.ledger_service.cache.invalidate("leaderboard:")
        log.info("Minted discovery card for %s (%s): tx=%s token=%s",
                 request.asset_name, request.asset_address, receipt.tx_hash, receipt.token_id)
        return receipt

    async def mint(self, params: Mapping[str, Any]) -> MintReceipt:
        """
        Validate and mint one discovery card.

        Raises:
            ValidationError: If the parameters are malformed (before any I/O)
            ServiceUnavailableError: If the ledger or signer is not configured
        """
        return await self._write(validate_mint_params(params))

    async def mint_batch(self, items: Sequence[Mapping[str, Any]]) -> BatchMintResult:
        """
        Validate every item, then mint them one at a time.

        A failed transaction stops the batch; receipts minted so far are
        reported together with the failing index.

        Raises:
            ValidationError: If any item is malformed (nothing is minted)
            ServiceUnavailableError: If the ledger or signer is not configured
        """
        requests = []
        for index, params in enumerate(items):
            try:
                requests.append(validate_mint_params(params))
            except ValidationError as e:
                raise ValidationError(f"Item {index}: {e}") from e
        return await self._mint_sequence(requests)

    async def mint_discovered(self, assets: Sequence[DiscoveredAsset]) -> BatchMintResult:
        """Mint discovery cards for aggregator output, in order."""
        return await self._mint_sequence([request_from_asset(asset) for asset in assets])

    async def _mint_sequence(self, requests: Sequence[MintRequest]) -> BatchMintResult:
        result = BatchMintResult()
        for index, request in enumerate(requests):
            if index > 0:
                await self.sleep(self.batch_delay)
            try:
                result.receipts.append(await self._write(request))
            except ServiceUnavailableError:
                raise
            except Exception as e:
                log.error("Batch mint stopped at item %d (%s): %s", index, request.asset_symbol, e)
                result.failed_at = index
                result.error = str(e)
                break
        log.info("Batch mint finished: %d of %d minted", len(result.receipts), len(requests))
        return result
