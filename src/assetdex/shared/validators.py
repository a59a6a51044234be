# src/assetdex/shared/validators.py
"""
Input Validation Utilities - Address, Key and Parameter Validation

This module provides input validation functions used by configuration and
by the services before any network I/O is attempted: EVM addresses, signer
keys, API keys, URLs and bounded integers.

Files that USE this module:
- assetdex.config.settings (uses validation functions in Settings field validators)
- assetdex.domain.models (AssetReference address check)
- assetdex.application.mint_service (mint parameter validation)
- assetdex.application.asset_service (asset id classification)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Any, Optional

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def validate_address(address: str) -> bool:
    """
    Validate a 20-byte EVM address in 0x-prefixed hex form.

    Checksum casing is not enforced; addresses are compared lowercased.

    Args:
        address: Address to validate

    Returns:
        True if valid, False otherwise
    """
    if not address or not isinstance(address, str):
        return False
    return bool(_ADDRESS_RE.match(address))


def validate_private_key(key: str) -> bool:
    """
    Validate a signer private key (32 bytes hex, optional 0x prefix).

    Args:
        key: Private key to validate

    Returns:
        True if valid, False otherwise
    """
    if not key:
        return False
    return bool(_PRIVATE_KEY_RE.match(key))


def validate_api_key(api_key: str, min_length: int = 10) -> bool:
    """
    Validate API key format.

    Args:
        api_key: API key to validate
        min_length: Minimum length requirement

    Returns:
        True if valid, False otherwise
    """
    if not api_key:
        return False

    return len(api_key) >= min_length and not api_key.isspace()


def validate_url(url: str) -> bool:
    """Validate that a URL uses http(s) and has a host part."""
    if not url:
        return False
    return bool(re.match(r"^https?://[^\s/]+", url))


def validate_int_range(value: Any, min_val: int, max_val: int) -> Optional[int]:
    """
    Validate that a value is an integer within a range.

    Booleans are rejected even though they are ints in Python.

    Args:
        value: Value to validate
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive)

    Returns:
        The integer if valid, None otherwise
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not re.match(r"^-?\d+$", value.strip()):
            return None
        value = int(value.strip())
    if not isinstance(value, int):
        return None
    if min_val <= value <= max_val:
        return value
    return None


def is_token_id(value: str) -> bool:
    """True if the string is a non-negative decimal integer (ledger token id)."""
    return bool(value) and value.isdigit()
