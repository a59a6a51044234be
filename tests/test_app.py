# tests/test_app.py
"""
Application Entry Point Tests - Wiring and Command Dispatch

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- assetdex.app (build_services, build_parser, run_command, main)
- unittest.mock (patch for services and logging setup)
"""
import asyncio
import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from assetdex import app
from assetdex.domain.errors import ConfigurationError, MandatoryDataMissingError
from assetdex.domain.models import AssetReference
from conftest import FakeLedger

TOKEN = "0x" + "11" * 20


def mock_services():
    services = Mock()
    services.analysis.scan = AsyncMock(return_value={"assetId": f"1_{TOKEN}"})
    services.discovery.discover_cached = AsyncMock(return_value=[{"symbol": "OUSG"}])
    services.assets.get_asset = AsyncMock(return_value={"id": "7"})
    services.assets.list_assets = AsyncMock(return_value=[])
    services.ledger.leaderboard = AsyncMock(return_value=[{"rank": 1}])
    services.ledger.user_stats = AsyncMock(return_value={"totalScore": "80"})
    services.ledger.user_rank = AsyncMock(return_value=1)
    services.health.check_all = AsyncMock(return_value={"status": "healthy"})
    return services


def run(argv, services=None):
    services = services or mock_services()
    args = app.build_parser().parse_args(argv)
    return asyncio.run(app.run_command(services, args)), services


class TestBuildServices:
    def test_shares_one_cache(self, cache):
        ledger = FakeLedger()
        # an empty cache is falsy (len 0) but must still be used
        assert len(cache) == 0
        services = app.build_services(cache=cache, ledger=ledger)
        assert services.cache is cache
        assert services.analysis.cache is cache
        assert services.discovery.cache is cache
        assert services.assets.cache is cache
        assert services.ledger.cache is cache
        assert services.mint.ledger is ledger
        assert services.health.indexer is services.analysis.onchain.holder_resolver.strategies[0]

    @patch("assetdex.app.Web3DiscoveryLedger.from_settings")
    def test_missing_contracts_leave_ledger_unset(self, mock_from_settings, cache):
        mock_from_settings.side_effect = ConfigurationError("Contract addresses not configured")
        services = app.build_services(cache=cache)
        assert services.ledger.ledger is None
        assert services.mint.ledger is None


class TestRunCommand:
    def test_scan(self):
        result, services = run(["scan", TOKEN, "--chain-id", "8453"])
        assert result == {"assetId": f"1_{TOKEN}"}
        services.analysis.scan.assert_awaited_once_with(AssetReference(TOKEN, 8453))

    def test_discover(self):
        result, _ = run(["discover"])
        assert result == {"total": 1, "assets": [{"symbol": "OUSG"}]}

    def test_assets_list_and_lookup(self):
        _, services = run(["assets", "--type", "art", "--chain", "base", "--limit", "5"])
        services.assets.list_assets.assert_awaited_once_with("art", "base", 5)
        result, services = run(["assets", "7"])
        assert result == {"id": "7"}
        services.assets.get_asset.assert_awaited_once_with("7")

    def test_leaderboard_default_limit(self):
        _, services = run(["leaderboard"])
        services.ledger.leaderboard.assert_awaited_once_with(10)

    def test_rank(self):
        result, _ = run(["rank", TOKEN])
        assert result == {"totalScore": "80", "rank": 1}

    def test_health(self):
        result, _ = run(["health"])
        assert result == {"status": "healthy"}

    def test_command_required(self):
        with pytest.raises(SystemExit):
            app.build_parser().parse_args([])


class TestMain:
    @patch("assetdex.app.setup_logging")
    @patch("assetdex.app.build_services")
    def test_prints_json(self, mock_build, mock_logging, capsys):
        mock_build.return_value = mock_services()
        assert app.main(["leaderboard", "--limit", "3"]) == 0
        assert json.loads(capsys.readouterr().out) == [{"rank": 1}]
        mock_logging.assert_called_once()

    @patch("assetdex.app.setup_logging")
    @patch("assetdex.app.build_services")
    def test_domain_error_exit_code(self, mock_build, mock_logging, capsys):
        services = mock_services()
        services.analysis.scan.side_effect = MandatoryDataMissingError(f"1_{TOKEN}", "rpc down")
        mock_build.return_value = services

        assert app.main(["scan", TOKEN]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["error"] == "MandatoryDataMissingError"

    @patch("assetdex.app.setup_logging")
    @patch("assetdex.app.build_services")
    def test_missing_asset(self, mock_build, mock_logging, capsys):
        services = mock_services()
        services.assets.get_asset.return_value = None
        mock_build.return_value = services

        assert app.main(["assets", "nope"]) == 1
        assert json.loads(capsys.readouterr().out)["error"] == "NotFound"
