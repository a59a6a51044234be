# src/assetdex/adapters/formatting/metadata.py
"""
Discovery Card Token Metadata

This module builds the self-describing metadata document attached to every
discovery card mint. The document embeds a generated placeholder image, so
no external storage is involved, and the output is a pure function of
(name, symbol, asset_type).

Files that USE this module:
- assetdex.application.discovery_service (token URI for discovered assets)
- tests.test_metadata (unit tests)

Files that this module USES:
- assetdex.domain.models (AssetType)
"""
from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional
from xml.sax.saxutils import escape

from assetdex.domain.models import AssetType

ASSET_TYPE_COLORS: Dict[AssetType, str] = {
    AssetType.TOKENIZED_TREASURY: "3B82F6",
    AssetType.REAL_ESTATE: "10B981",
    AssetType.ART: "8B5CF6",
    AssetType.LUXURY_GOODS: "F59E0B",
    AssetType.PRIVATE_CREDIT: "EF4444",
}
DEFAULT_COLOR = "6B7280"

IMAGE_SIZE = 400


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_placeholder_image(symbol: str, asset_type: Optional[AssetType]) -> str:
    """
    Build the card image: a square SVG in the asset type's color with the symbol.

    Args:
        symbol: Text rendered in the middle of the card
        asset_type: Selects the background color (gray when unknown)

    Returns:
        ``data:image/svg+xml;base64,...`` URI
    """
    color = ASSET_TYPE_COLORS.get(asset_type, DEFAULT_COLOR)
    half = IMAGE_SIZE // 2
    svg = (
        f'<svg width="{IMAGE_SIZE}" height="{IMAGE_SIZE}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="{IMAGE_SIZE}" height="{IMAGE_SIZE}" fill="#{color}"/>'
        f'<text x="{half}" y="{half}" font-family="Arial" font-size="24" fill="white" '
        f'text-anchor="middle" dominant-baseline="middle">{escape(symbol)}</text>'
        f'<text x="{half}" y="{half + 30}" font-family="Arial" font-size="16" fill="white" '
        f'text-anchor="middle" dominant-baseline="middle">RWA</text>'
        f'</svg>'
    )
    return f"data:image/svg+xml;base64,{_b64(svg)}"


def build_token_metadata(name: str, symbol: str, asset_type: AssetType) -> Dict[str, Any]:
    """
    Build the ERC-721 style metadata document for a discovery card.

    Args:
        name: Asset name
        symbol: Asset symbol
        asset_type: Asset category

    Returns:
        Dict with name, description, image and attributes
    """
    return {
        "name": f"{name} Discovery Card",
        "description": f"Real World Asset Discovery Card for {name} ({symbol})",
        "image": build_placeholder_image(symbol, asset_type),
        "attributes": [
            {"trait_type": "Asset Type", "value": asset_type.name},
            {"trait_type": "Symbol", "value": symbol},
        ],
    }


def build_token_uri(name: str, symbol: str, asset_type: AssetType) -> str:
    """Metadata document as a compact-JSON base64 data URI."""
    document = json.dumps(build_token_metadata(name, symbol, asset_type), separators=(",", ":"))
    return f"data:application/json;base64,{_b64(document)}"
