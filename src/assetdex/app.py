# src/assetdex/app.py
"""
Application Entry Point - Composition Root and Command Line

This module wires every adapter and service around a single TTLCache
created once per process, and exposes the pipeline as command line
sub-commands that print JSON:

    python -m assetdex scan 0x... --chain-id 1
    python -m assetdex discover
    python -m assetdex assets --type real-estate --chain ethereum --limit 20
    python -m assetdex leaderboard --limit 10
    python -m assetdex rank 0x...
    python -m assetdex health

Files that USE this module:
- python -m assetdex (module entry point)
- tests.test_app (unit tests)

Files that this module USES:
- assetdex.shared.logging_conf (setup_logging)
- assetdex.config (settings)
- assetdex.adapters.* (source adapters and ledger)
- assetdex.application.* (services)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from assetdex.adapters.ledger import DiscoveryLedger, Web3DiscoveryLedger
from assetdex.adapters.providers.creatorbid import CreatorBidAdapter
from assetdex.adapters.providers.defillama import DeFiLlamaAdapter
from assetdex.adapters.providers.holders import (
    FixedHolderCount,
    HolderCountResolver,
    IndexerHolderCount,
    SupplyBucketHolderCount,
)
from assetdex.adapters.providers.onchain import OnChainAdapter, Web3Pool
from assetdex.application.analysis_service import AnalysisService
from assetdex.application.asset_service import AssetService
from assetdex.application.discovery_service import DiscoveryService
from assetdex.application.health import HealthChecker
from assetdex.application.ledger_service import DEFAULT_LEADERBOARD_LIMIT, LedgerService
from assetdex.application.mint_service import MintService
from assetdex.config import settings
from assetdex.domain.errors import DomainError
from assetdex.domain.models import AssetReference
from assetdex.shared.logging_conf import setup_logging
from assetdex.shared.ttl_cache import TTLCache

log = logging.getLogger(__name__)


@dataclass
class Services:
    cache: TTLCache
    analysis: AnalysisService
    discovery: DiscoveryService
    ledger: LedgerService
    assets: AssetService
    mint: MintService
    health: HealthChecker


def build_ledger() -> Optional[DiscoveryLedger]:
    """Ledger from settings, or None when the contracts are not configured."""
    try:
        return Web3DiscoveryLedger.from_settings()
    except DomainError as e:
        log.warning("Discovery ledger unavailable: %s", e)
        return None


def build_services(cache: Optional[TTLCache] = None, ledger: Optional[DiscoveryLedger] = None) -> Services:
    """
    Create every adapter and service around one shared cache.

    Args:
        cache: Cache to share (a new one is created when omitted)
        ledger: Discovery ledger (built from settings when omitted)

    Returns:
        Wired services
    """
    if cache is None:
        cache = TTLCache(sweep_probability=settings.cache_sweep_probability)
    if ledger is None:
        ledger = build_ledger()

    indexer = IndexerHolderCount()
    holders = HolderCountResolver([indexer, SupplyBucketHolderCount(), FixedHolderCount()])
    onchain = OnChainAdapter(Web3Pool(), holders)
    defillama = DeFiLlamaAdapter()
    creatorbid = CreatorBidAdapter()

    ledger_service = LedgerService(cache, ledger)
    return Services(
        cache=cache,
        analysis=AnalysisService(cache, onchain, defillama, creatorbid),
        discovery=DiscoveryService(cache, defillama, creatorbid, onchain),
        ledger=ledger_service,
        assets=AssetService(cache, defillama, creatorbid, onchain, ledger_service),
        mint=MintService(ledger, ledger_service),
        health=HealthChecker(defillama, onchain, ledger_service, indexer),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="assetdex", description="RWA discovery and scoring pipeline")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Analyze one asset")
    scan.add_argument("address")
    scan.add_argument("--chain-id", type=int, default=1)

    commands.add_parser("discover", help="Discover assets from every source")

    assets = commands.add_parser("assets", help="List assets, or look one up by id")
    assets.add_argument("id", nargs="?")
    assets.add_argument("--type", dest="asset_type")
    assets.add_argument("--chain")
    assets.add_argument("--limit", type=int, default=50)

    leaderboard = commands.add_parser("leaderboard", help="Top discoverers")
    leaderboard.add_argument("--limit", type=int, default=DEFAULT_LEADERBOARD_LIMIT)

    rank = commands.add_parser("rank", help="Rank and stats of one discoverer")
    rank.add_argument("address")

    commands.add_parser("health", help="Check connectivity of every source")
    return parser


async def run_command(services: Services, args: argparse.Namespace) -> Any:
    if args.command == "scan":
        return await services.analysis.scan(AssetReference(args.address, args.chain_id))
    if args.command == "discover":
        assets = await services.discovery.discover_cached()
        return {"total": len(assets), "assets": assets}
    if args.command == "assets":
        if args.id:
            return await services.assets.get_asset(args.id)
        return await services.assets.list_assets(args.asset_type, args.chain, args.limit)
    if args.command == "leaderboard":
        return await services.ledger.leaderboard(args.limit)
    if args.command == "rank":
        stats = await services.ledger.user_stats(args.address)
        return {**stats, "rank": await services.ledger.user_rank(args.address)}
    if args.command == "health":
        return await services.health.check_all()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse arguments, run one command and print its JSON result.

    Returns:
        Process exit code (0 on success, 1 on a pipeline error)
    """
    args = build_parser().parse_args(argv)
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
        stream=sys.stderr,
    )

    services = build_services()
    try:
        result = asyncio.run(run_command(services, args))
    except DomainError as e:
        log.error("%s failed: %s", args.command, e)
        print(json.dumps({"error": type(e).__name__, "details": str(e)}, indent=2))
        return 1

    if result is None:
        print(json.dumps({"error": "NotFound", "details": "Asset not found"}, indent=2))
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
