# src/assetdex/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
business rule violations and pipeline failure classes.
"""
from typing import Optional


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class SourceUnavailableError(DomainError):
    """Raised when one external source failed; callers treat it as an empty contribution."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class MandatoryDataMissingError(DomainError):
    """Raised when a required fact (on-chain token metadata) could not be obtained."""

    def __init__(self, asset: str, message: str):
        self.asset = asset
        super().__init__(f"{asset}: {message}")


class ConfigurationError(DomainError):
    """Raised when contract addresses, RPC endpoints or the signer key are missing."""
    pass


class ServiceUnavailableError(DomainError):
    """Raised to callers when a feature cannot run in the current configuration."""

    def __init__(self, service: str, reason: Optional[str] = None):
        self.service = service
        self.reason = reason
        message = f"{service} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ValidationError(DomainError):
    """Raised when request parameters are malformed."""
    pass


class ScoringError(DomainError):
    """Raised when a scoring input is arithmetically degenerate."""
    pass
