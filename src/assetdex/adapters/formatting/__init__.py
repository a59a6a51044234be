# src/assetdex/adapters/formatting/__init__.py
"""
Formatting Adapters - Token Metadata

This package builds the self-describing metadata documents attached to
discovery cards.
"""

from assetdex.adapters.formatting.metadata import (
    build_placeholder_image,
    build_token_metadata,
    build_token_uri,
)

__all__ = [
    "build_placeholder_image",
    "build_token_metadata",
    "build_token_uri",
]
