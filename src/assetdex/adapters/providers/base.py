# src/assetdex/adapters/providers/base.py
"""
Base Source Adapter Interface

This module defines the abstract base classes for all external data
sources. Every adapter wraps exactly one origin, makes a single attempt per
request with its own timeout, and reports failure as
SourceUnavailableError so callers can treat it as "contributed nothing".

Blocking clients (requests, web3) run in the default executor so adapters
can be fanned out concurrently from asyncio code.

Files that USE this module:
- assetdex.adapters.providers.defillama (DeFiLlamaAdapter extends HttpSourceAdapter)
- assetdex.adapters.providers.creatorbid (CreatorBidAdapter extends HttpSourceAdapter)
- assetdex.adapters.providers.holders (indexer strategy uses JsonHttpClient)
- assetdex.adapters.providers.onchain (OnChainAdapter extends AssetSourceAdapter, run_blocking)
- assetdex.adapters.ledger.* (run_blocking)

Files that this module USES:
- assetdex.domain.errors (SourceUnavailableError)
- assetdex.domain.models (AssetReference, RawAssetFacts)
"""
from __future__ import annotations

import asyncio
import functools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from assetdex.domain.errors import SourceUnavailableError
from assetdex.domain.models import AssetReference, RawAssetFacts

log = logging.getLogger(__name__)

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking call in the default executor.

    Args:
        func: Blocking callable
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Whatever func returns
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class SourceAdapter(ABC):
    """An external origin of asset data."""

    name: str = "source"

    @abstractmethod
    async def fetch(self) -> List[Any]:
        """Fetch normalized records from the source."""
        raise NotImplementedError


class AssetSourceAdapter(ABC):
    """An external origin of facts about one asset."""

    name: str = "asset-source"

    @abstractmethod
    async def fetch(self, ref: AssetReference) -> RawAssetFacts:
        """Fetch the facts for a single asset."""
        raise NotImplementedError


class JsonHttpClient:
    """Single-attempt JSON-over-HTTP helper shared by HTTP adapters."""

    name: str = "http"

    def __init__(self, base_url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        """
        Initialize HTTP source.

        Args:
            base_url: API base URL
            timeout: HTTP timeout in seconds for every request
            session: Optional requests session (tests inject mocks here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a URL and decode its JSON body (single attempt).

        Args:
            url: Absolute URL
            params: Optional query parameters
            headers: Optional request headers

        Returns:
            Decoded JSON

        Raises:
            SourceUnavailableError: On timeout, HTTP error or invalid JSON
        """
        try:
            log.debug("%s: GET %s", self.name, url)
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.Timeout as e:
            log.error("%s timeout after %d seconds for %s", self.name, self.timeout, url)
            raise SourceUnavailableError(self.name, f"timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            log.error("%s request failed for %s: %s", self.name, url, e)
            raise SourceUnavailableError(self.name, f"request failed: {e}") from e
        except ValueError as e:
            log.error("%s returned invalid JSON for %s: %s", self.name, url, e)
            raise SourceUnavailableError(self.name, f"invalid JSON: {e}") from e


class HttpSourceAdapter(JsonHttpClient, SourceAdapter):
    """Source adapter backed by a JSON-over-HTTP API."""

    name = "source"
