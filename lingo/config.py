"""
Lingo configuration. All environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", "10"))

    # Chains
    DEFAULT_CHAIN: str = os.environ.get("DEFAULT_CHAIN", "base")

    # Swap / bridge routing (LI.FI)
    LIFI_API_URL: str = os.environ.get("LIFI_API_URL", "https://li.quest/v1")
    LIFI_API_KEY: str = os.environ.get("LIFI_API_KEY", "")
    SWAP_SLIPPAGE: float = float(os.environ.get("SWAP_SLIPPAGE", "0.03"))
    BRIDGE_SLIPPAGE: float = float(os.environ.get("BRIDGE_SLIPPAGE", "0.005"))
    QUOTE_TIMEOUT_SECONDS: float = 15.0

    # Claims
    CLAIM_EXPIRY_DAYS: int = int(os.environ.get("CLAIM_EXPIRY_DAYS", "7"))

    # SMS (Twilio)
    TWILIO_ACCOUNT_SID: str = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER: str = os.environ.get("TWILIO_PHONE_NUMBER", "")

    # Translation (Google Translate v2)
    GOOGLE_TRANSLATE_API_KEY: str = os.environ.get("GOOGLE_TRANSLATE_API_KEY", "")

    # Signing. The embedded-wallet provider owns user keys; this is only for
    # the server-held demo signer.
    SIGNER_PRIVATE_KEY: str = os.environ.get("SIGNER_PRIVATE_KEY", "")

    # Rate Limits
    CLAIM_LOOKUPS_PER_HOUR: int = 30  # per IP
    COMMANDS_PER_MINUTE: int = 30  # per wallet

    # Unconfirmed plans kept in memory before the oldest is evicted
    MAX_PENDING_PLANS: int = int(os.environ.get("MAX_PENDING_PLANS", "1000"))

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def PUBLIC_URL(self) -> str:
        url = os.environ.get("PUBLIC_URL")
        if url:
            return url.rstrip("/")
        return "http://localhost:8000" if self.ENVIRONMENT == "development" else "https://lingowallet.vercel.app"

    def rpc_url(self, chain: str) -> str | None:
        """Per-chain RPC override, e.g. RPC_URL_BASE."""
        return os.environ.get(f"RPC_URL_{chain.upper()}") or None


# Singleton instance
settings = Settings()

if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")
