"""
Shared Module

Cross-cutting utilities used by every layer: the TTL cache, logging
configuration and input validators.
"""

from assetdex.shared.logging_conf import setup_logging
from assetdex.shared.ttl_cache import TTLCache, sanitize

__all__ = ["TTLCache", "sanitize", "setup_logging"]
