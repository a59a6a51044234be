# src/assetdex/application/health.py
"""
Health Checker - Source Connectivity Diagnostics

This module checks every external dependency of the pipeline: the yield
feed, an ERC-20 read on Ethereum, the discovery ledger and the holder
indexer. Optional components that are not configured are reported as
healthy with a "not configured" message; configured components that fail
are unhealthy.

Files that USE this module:
- assetdex.app (health command)
- tests.test_health (unit tests)

Files that this module USES:
- assetdex.adapters.providers.defillama (DeFiLlamaAdapter)
- assetdex.adapters.providers.onchain (OnChainAdapter)
- assetdex.adapters.providers.holders (IndexerHolderCount)
- assetdex.application.ledger_service (LedgerService.total_discoveries)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from assetdex.adapters.providers.base import run_blocking
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter
from assetdex.adapters.providers.holders import IndexerHolderCount
from assetdex.adapters.providers.onchain import OnChainAdapter
from assetdex.application.ledger_service import LedgerService
from assetdex.domain.models import AssetReference

log = logging.getLogger(__name__)

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@dataclass
class HealthStatus:
    """Represents the health status of a component."""
    is_healthy: bool
    message: str
    last_check: datetime
    details: Optional[Dict[str, Any]] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthChecker:
    """Connectivity checks for every pipeline dependency."""

    def __init__(self, defillama: DeFiLlamaAdapter, onchain: OnChainAdapter,
                 ledger_service: LedgerService, indexer: Optional[IndexerHolderCount] = None):
        self.defillama = defillama
        self.onchain = onchain
        self.ledger_service = ledger_service
        self.indexer = indexer

    async def check_defillama(self) -> HealthStatus:
        try:
            pools = await self.defillama.fetch()
            sample = [{"name": p.project, "symbol": p.symbol, "tvl": p.tvl} for p in pools[:3]]
            return HealthStatus(
                is_healthy=True,
                message=f"DeFi Llama healthy, {len(pools)} RWA pools",
                last_check=_now(),
                details={"pools": len(pools), "sample": sample},
            )
        except Exception as e:
            log.error("DeFi Llama health check failed: %s", e)
            return HealthStatus(is_healthy=False, message=f"DeFi Llama error: {e}", last_check=_now())

    async def check_onchain(self) -> HealthStatus:
        """Read USDC metadata on Ethereum."""
        try:
            facts = await self.onchain.fetch(AssetReference(USDC_ADDRESS, 1))
            return HealthStatus(
                is_healthy=True,
                message=f"On-chain reads healthy: {facts.name} ({facts.symbol})",
                last_check=_now(),
                details={"name": facts.name, "symbol": facts.symbol, "supply": str(facts.total_supply)},
            )
        except Exception as e:
            log.error("On-chain health check failed: %s", e)
            return HealthStatus(is_healthy=False, message=f"On-chain error: {e}", last_check=_now())

    async def check_ledger(self) -> HealthStatus:
        if self.ledger_service.ledger is None:
            return HealthStatus(
                is_healthy=True,
                message="Contract addresses not configured",
                last_check=_now(),
                details={"configured": False},
            )
        try:
            total = await self.ledger_service.total_discoveries()
            return HealthStatus(
                is_healthy=True,
                message=f"Connected to contracts, {total} discoveries",
                last_check=_now(),
                details={"configured": True, "totalDiscoveries": str(total)},
            )
        except Exception as e:
            log.error("Ledger health check failed: %s", e)
            return HealthStatus(is_healthy=False, message=f"Ledger error: {e}", last_check=_now())

    async def check_indexer(self) -> HealthStatus:
        if self.indexer is None or not self.indexer.api_key:
            return HealthStatus(
                is_healthy=True,
                message="Holder indexer API key not configured",
                last_check=_now(),
                details={"configured": False},
            )
        try:
            count = await run_blocking(self.indexer.holder_count, USDC_ADDRESS.lower(), 1, 0.0)
        except Exception as e:
            log.error("Holder indexer health check failed: %s", e)
            return HealthStatus(
                is_healthy=False,
                message=f"Holder indexer error: {e}",
                last_check=_now(),
                details={"configured": True},
            )
        if count is None:
            return HealthStatus(
                is_healthy=False,
                message="Holder indexer returned no data",
                last_check=_now(),
                details={"configured": True},
            )
        return HealthStatus(
            is_healthy=True,
            message=f"Holder indexer healthy, USDC holders: {count}",
            last_check=_now(),
            details={"configured": True, "holders": count},
        )

    async def check_all(self) -> Dict[str, Any]:
        """
        Run every check concurrently.

        Returns:
            Overall status plus per-component results; degraded if any check fails
        """
        names = ("defillama", "onchain", "ledger", "indexer")
        results = await asyncio.gather(
            self.check_defillama(),
            self.check_onchain(),
            self.check_ledger(),
            self.check_indexer(),
        )
        checks = dict(zip(names, results))
        failed = [name for name, check in checks.items() if not check.is_healthy]
        overall_healthy = not failed

        return {
            "overall_healthy": overall_healthy,
            "status": "healthy" if overall_healthy else "degraded",
            "message": "All systems healthy" if overall_healthy
            else f"Degraded - {len(failed)} component(s) failed: {', '.join(failed)}",
            "failed_components": failed,
            "timestamp": _now().isoformat(),
            "checks": {
                name: {
                    "healthy": check.is_healthy,
                    "message": check.message,
                    "last_check": check.last_check.isoformat(),
                    "details": check.details,
                }
                for name, check in checks.items()
            },
        }
