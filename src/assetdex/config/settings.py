# src/assetdex/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables (or a local .env file) with validation.

Files that USE this module:
- assetdex.app (composition root wires services from settings)
- assetdex.adapters.providers.* (API URLs, keys and timeouts)
- assetdex.adapters.ledger.* (contract addresses, signer key, RPC URLs)
- assetdex.application.* (cache TTLs, discovery caps, mint delay)

Files that this module USES:
- assetdex.shared.validators (validation functions for settings)
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assetdex.shared.validators import (
    validate_address,
    validate_api_key,
    validate_private_key,
    validate_url,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- RPC endpoints ---
    eth_rpc_url: str = Field(default="https://eth.llamarpc.com", alias="ETH_RPC_URL")
    base_rpc_url: str = Field(default="https://mainnet.base.org", alias="BASE_RPC_URL")
    linea_rpc_url: str = Field(
        default="https://linea-sepolia-rpc.publicnode.com", alias="LINEA_RPC_URL"
    )
    mantle_rpc_url: str = Field(default="https://rpc.sepolia.mantle.xyz", alias="MANTLE_RPC_URL")

    # --- Ledger contracts ---
    ledger_chain_id: int = Field(default=59141, alias="LEDGER_CHAIN_ID", ge=1)
    discovery_card_address: str = Field(default="", alias="DISCOVERY_CARD_ADDRESS")
    factory_address: str = Field(default="", alias="FACTORY_ADDRESS")
    signer_private_key: str = Field(default="", alias="SIGNER_PRIVATE_KEY", repr=False)

    # --- External data feeds ---
    defillama_url: str = Field(default="https://yields.llama.fi/pools", alias="DEFILLAMA_URL")
    creatorbid_url: str = Field(default="https://creator.bid/api", alias="CREATORBID_URL")
    covalent_url: str = Field(default="https://api.covalenthq.com/v1", alias="COVALENT_URL")
    covalent_api_key: str = Field(default="", alias="COVALENT_API_KEY", repr=False)

    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    rpc_timeout_seconds: int = Field(default=10, alias="RPC_TIMEOUT_SECONDS", ge=1, le=60)

    # --- Cache Settings (in seconds) ---
    scan_cache_seconds: int = Field(default=600, alias="SCAN_CACHE_SECONDS", ge=1)
    assets_cache_seconds: int = Field(default=300, alias="ASSETS_CACHE_SECONDS", ge=1)
    asset_cache_seconds: int = Field(default=600, alias="ASSET_CACHE_SECONDS", ge=1)
    leaderboard_cache_seconds: int = Field(default=300, alias="LEADERBOARD_CACHE_SECONDS", ge=1)
    user_cards_cache_seconds: int = Field(default=600, alias="USER_CARDS_CACHE_SECONDS", ge=1)
    user_stats_cache_seconds: int = Field(default=300, alias="USER_STATS_CACHE_SECONDS", ge=1)
    discovery_card_cache_seconds: int = Field(
        default=300, alias="DISCOVERY_CARD_CACHE_SECONDS", ge=1
    )
    cache_sweep_probability: float = Field(
        default=0.01, alias="CACHE_SWEEP_PROBABILITY", ge=0.0, le=1.0
    )

    # --- Discovery caps ---
    discovery_pool_limit: int = Field(default=100, alias="DISCOVERY_POOL_LIMIT", ge=1)
    discovery_agent_limit: int = Field(default=10, alias="DISCOVERY_AGENT_LIMIT", ge=1)

    # --- Minting ---
    mint_batch_delay_seconds: float = Field(default=2.0, alias="MINT_BATCH_DELAY_SECONDS", ge=0.0)

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def rpc_urls(self) -> Dict[int, str]:
        """RPC endpoint per supported chain id."""
        return {
            1: self.eth_rpc_url,
            8453: self.base_rpc_url,
            59141: self.linea_rpc_url,
            5003: self.mantle_rpc_url,
        }

    @property
    def ledger_rpc_url(self) -> Optional[str]:
        return self.rpc_urls.get(self.ledger_chain_id)

    @property
    def ledger_configured(self) -> bool:
        """True when both discovery contracts are configured."""
        return bool(self.discovery_card_address and self.factory_address)

    @property
    def indexer_enabled(self) -> bool:
        return bool(self.covalent_api_key)

    @field_validator("discovery_card_address", "factory_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        """Validate contract address format (empty means not configured)."""
        if v and not validate_address(v):
            raise ValueError("Invalid contract address format")
        return v

    @field_validator("signer_private_key")
    @classmethod
    def validate_signer_key(cls, v: str) -> str:
        if v and not validate_private_key(v):
            raise ValueError("Invalid SIGNER_PRIVATE_KEY format")
        return v

    @field_validator("covalent_api_key")
    @classmethod
    def validate_covalent_key(cls, v: str) -> str:
        """Validate API key format (empty disables the holder indexer)."""
        if v and not validate_api_key(v):
            raise ValueError("Invalid COVALENT_API_KEY format")
        return v

    @field_validator(
        "eth_rpc_url",
        "base_rpc_url",
        "linea_rpc_url",
        "mantle_rpc_url",
        "defillama_url",
        "creatorbid_url",
        "covalent_url",
    )
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not validate_url(v):
            raise ValueError(f"Invalid URL: {v!r}")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v


# Global settings instance
settings = Settings()
