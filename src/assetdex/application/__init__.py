# src/assetdex/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the services that orchestrate adapters, scoring and
the shared cache: analysis, discovery, ledger views, asset listing,
minting and health checks.
"""

from assetdex.application.analysis_service import AnalysisService
from assetdex.application.asset_service import AssetService
from assetdex.application.discovery_service import DiscoveryService, derive_address
from assetdex.application.health import HealthChecker, HealthStatus
from assetdex.application.ledger_service import LedgerService, aggregate_events
from assetdex.application.mint_service import MintService, validate_mint_params

__all__ = [
    "AnalysisService",
    "AssetService",
    "DiscoveryService",
    "derive_address",
    "HealthChecker",
    "HealthStatus",
    "LedgerService",
    "aggregate_events",
    "MintService",
    "validate_mint_params",
]
