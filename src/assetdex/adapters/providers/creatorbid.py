# src/assetdex/adapters/providers/creatorbid.py
"""
CreatorBid Marketplace Adapter for Art and Collectibles

This module implements the CreatorBid agent-marketplace client. Agents are
listed first; the metadata of the first few agents is then queried for art
pieces. When the marketplace answers but lists no art at all, a fixed demo
catalogue is returned instead.

Files that USE this module:
- assetdex.application.discovery_service (art discovery branch)
- assetdex.application.analysis_service (art-piece matching)
- assetdex.application.asset_service (asset listing)
- tests.test_providers (unit tests)

Files that this module USES:
- assetdex.adapters.providers.base (HttpSourceAdapter)
- assetdex.adapters.providers.schemas (agent and art schemas)
- assetdex.config (settings for URL, timeout and agent cap)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import requests
from pydantic import ValidationError as SchemaError

from assetdex.adapters.providers.base import HttpSourceAdapter, run_blocking
from assetdex.adapters.providers.schemas import AgentMetadata, AgentsResponse
from assetdex.config import settings
from assetdex.domain.errors import SourceUnavailableError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtPiece:
    """
    Normalized art/collectible listing.

    Attributes:
        piece_id: Marketplace identifier (natural key of the piece)
        title: Piece title
        artist: Artist name ('' when anonymous)
        current_bid: Current bid
        estimate: (low, high) estimate; high defaults to 1.5x the bid
        provenance: Provenance notes
        image_url: Image location
        category: Marketplace category
    """
    piece_id: str
    title: str
    artist: str
    current_bid: float
    estimate: Tuple[float, float]
    provenance: Tuple[str, ...]
    image_url: str
    category: str

    @property
    def potential_return(self) -> float:
        """Relative upside from the current bid to the high estimate."""
        bid = self.current_bid or 1
        return (self.estimate[1] - bid) / bid

    @property
    def yield_rate(self) -> float:
        """Upside used as the piece's yield; 0 when there is no bid or no upside."""
        if self.current_bid <= 0:
            return 0.0
        gain = self.estimate[1] - self.current_bid
        return gain / self.current_bid if gain > 0 else 0.0


DEMO_CATALOGUE: Tuple[ArtPiece, ...] = (
    ArtPiece(
        piece_id="art-1",
        title="Digital Dreams",
        artist="CryptoPainter",
        current_bid=2.5,
        estimate=(1.5, 3.0),
        provenance=("Minted 2023", "First sale: 1.2 ETH"),
        image_url="https://example.com/art1.jpg",
        category="Digital Art",
    ),
    ArtPiece(
        piece_id="art-2",
        title="Neural Networks",
        artist="AI_Artist",
        current_bid=1.8,
        estimate=(1.0, 2.5),
        provenance=("AI Generated", "Limited edition of 100"),
        image_url="https://example.com/art2.jpg",
        category="AI Art",
    ),
    ArtPiece(
        piece_id="art-3",
        title="Blockchain Blues",
        artist="DeFi_DaVinci",
        current_bid=3.2,
        estimate=(2.0, 4.0),
        provenance=("Inspired by Ethereum", "Charity auction"),
        image_url="https://example.com/art3.jpg",
        category="Crypto Art",
    ),
)


class CreatorBidAdapter(HttpSourceAdapter):
    """CreatorBid agent marketplace art listings."""

    name = "creatorbid"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 agent_limit: Optional[int] = None, session: Optional[requests.Session] = None):
        super().__init__(
            base_url or settings.creatorbid_url,
            timeout or settings.http_timeout_seconds,
            session,
        )
        self.agent_limit = agent_limit or settings.discovery_agent_limit

    def fetch_agents(self) -> List[str]:
        """
        List agent addresses.

        Raises:
            SourceUnavailableError: If the listing cannot be fetched or parsed
        """
        payload = self._get_json(f"{self.base_url}/agents")
        try:
            agents = AgentsResponse.model_validate(payload if isinstance(payload, dict) else {})
        except SchemaError as e:
            raise SourceUnavailableError(self.name, f"malformed agents listing: {e}") from e
        return [agent.address for agent in agents.agents]

    def fetch_agent_art(self, agent_address: str) -> List[ArtPiece]:
        """Art pieces from one agent's metadata."""
        payload = self._get_json(f"{self.base_url}/agents/{agent_address}/metadata")
        metadata = AgentMetadata.model_validate(payload if isinstance(payload, dict) else {})
        pieces = []
        for art in metadata.art_assets:
            high = art.estimate.high if art.estimate and art.estimate.high else art.current_bid * 1.5
            low = art.estimate.low if art.estimate else 0.0
            pieces.append(ArtPiece(
                piece_id=art.id,
                title=art.title,
                artist=art.artist,
                current_bid=art.current_bid,
                estimate=(low, high),
                provenance=tuple(art.provenance),
                image_url=art.image_url,
                category=art.category,
            ))
        return pieces

    def fetch_art(self) -> List[ArtPiece]:
        """
        Collect art pieces from the first agents (blocking).

        Per-agent failures are logged and skipped.

        Returns:
            Art pieces, or the demo catalogue when no agent lists any

        Raises:
            SourceUnavailableError: If the agent listing itself fails
        """
        agents = self.fetch_agents()
        pieces: List[ArtPiece] = []
        for agent_address in agents[: self.agent_limit]:
            try:
                pieces.extend(self.fetch_agent_art(agent_address))
            except (SourceUnavailableError, SchemaError) as e:
                log.warning("Failed to fetch metadata for agent %s: %s", agent_address, e)

        if not pieces:
            log.info("No art assets listed by CreatorBid agents, using demo catalogue")
            return list(DEMO_CATALOGUE)
        log.info("Fetched %d art assets from %d CreatorBid agents",
                 len(pieces), min(len(agents), self.agent_limit))
        return pieces

    async def fetch(self) -> List[ArtPiece]:
        return await run_blocking(self.fetch_art)
