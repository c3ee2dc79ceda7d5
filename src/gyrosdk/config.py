"""Client configuration using pydantic-settings.

Every setting can be provided through a ``GYRO_``-prefixed environment
variable or a ``.env`` file, e.g. ``GYRO_RPC_URL=http://127.0.0.1:8545``.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gyrosdk.constants import GAS_LIMIT, TX_TIMEOUT


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GYRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Node / signer
    # ======================
    rpc_url: str = Field(
        default="http://127.0.0.1:8545", description="JSON-RPC endpoint of the node"
    )
    account: Optional[str] = Field(
        default=None, description="Account used to sign (defaults to the node's first account)"
    )

    # ======================
    # Transactions
    # ======================
    gas_limit: int = Field(default=GAS_LIMIT, description="Gas ceiling for mint/redeem/approve")
    approve_future: bool = Field(
        default=True, description="Approve an unlimited amount to skip future approvals"
    )
    tx_timeout: float = Field(
        default=TX_TIMEOUT, description="Seconds to wait for a transaction receipt"
    )

    # ======================
    # Deployments
    # ======================
    deployments: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Network name -> contract name -> address (JSON in env)",
    )
    deployments_file: Optional[str] = Field(
        default=None, description="JSON file with the same shape as `deployments`"
    )

    debug: bool = Field(default=False, description="Enable debug logging")

    def load_deployments(self) -> dict[str, dict[str, str]]:
        """Deployments from settings, with the deployments file merged on top."""
        merged = {network: dict(addrs) for network, addrs in self.deployments.items()}
        if self.deployments_file:
            with Path(self.deployments_file).open(encoding="utf-8") as f:
                from_file = json.load(f)
            for network, addrs in from_file.items():
                merged.setdefault(network, {}).update(addrs)
        return merged

    def get_safe_dict(self) -> dict:
        """Return settings dict suitable for display."""
        return {
            "rpc_url": self._redact_url(self.rpc_url),
            "account": self.account or "(node default)",
            "gas_limit": self.gas_limit,
            "approve_future": self.approve_future,
            "tx_timeout": self.tx_timeout,
            "networks": sorted(self.load_deployments().keys()),
            "debug": self.debug,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials or API keys embedded in an RPC URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            creds, host = rest.rsplit("@", 1)
            if ":" in creds:
                user, _ = creds.split(":", 1)
                return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
