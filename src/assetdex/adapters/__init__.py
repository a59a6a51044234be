# src/assetdex/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (HTTP feeds and chain reads)
- Ledger (discovery card contracts)
- Formatting (token metadata documents)
"""

__all__ = []
