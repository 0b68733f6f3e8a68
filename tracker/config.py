"""
Configuration management for the Shipment Tracker.
Handles loading credentials and settings from environment variables and .env files.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv


YUNEXPRESS_TRACK_URL = "https://api.yunexpress.com/LMS.API/api/WayBill/GetTrackInfo"
GLS_PUBLIC_TRACK_URL = "https://gls-group.eu/app/service/open/rest/PL/pl/rstt001"
GLS_AUTH_TRACK_URL = "https://api.gls-poland.com/tracking"


@dataclass(frozen=True)
class TrackerConfig:
    """Main configuration class for the tracker. Read once at process start."""

    # === YunExpress (primary carrier) ===
    yunexpress_api_key: str = ""
    yunexpress_customer_code: str = ""
    yunexpress_api_url: str = YUNEXPRESS_TRACK_URL

    # === GLS Poland (last-mile carrier) ===
    gls_api_url: str = GLS_PUBLIC_TRACK_URL
    gls_auth_api_url: str = GLS_AUTH_TRACK_URL
    gls_api_key: Optional[str] = None  # Enables the authenticated API

    # === Shopify storefront ===
    shopify_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-01"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = console only

    @property
    def shopify_base_url(self) -> str:
        """Storefront base URL; a bare domain is assumed to be HTTPS."""
        domain = self.shopify_domain.rstrip("/")
        if "://" in domain:
            return domain
        return f"https://{domain}"

    @property
    def gls_auth_enabled(self) -> bool:
        return bool(self.gls_api_key)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TrackerConfig":
        """Load configuration from environment variables."""

        # Try to load from .env file
        if env_file:
            load_dotenv(env_file)
        else:
            for env_path in ["config.env", ".env"]:
                if Path(env_path).exists():
                    load_dotenv(env_path)
                    break

        return cls(
            # YunExpress
            yunexpress_api_key=os.getenv("YUNEXPRESS_API_KEY", ""),
            yunexpress_customer_code=os.getenv("YUNEXPRESS_CUSTOMER_CODE", ""),
            yunexpress_api_url=os.getenv("YUNEXPRESS_API_URL", YUNEXPRESS_TRACK_URL),

            # GLS
            gls_api_url=os.getenv("GLS_API_URL", GLS_PUBLIC_TRACK_URL),
            gls_auth_api_url=os.getenv("GLS_AUTH_API_URL", GLS_AUTH_TRACK_URL),
            gls_api_key=os.getenv("GLS_API_KEY") or None,

            # Shopify
            shopify_domain=os.getenv("SHOPIFY_DOMAIN", ""),
            shopify_access_token=os.getenv("SHOPIFY_ACCESS_TOKEN", ""),
            shopify_api_version=os.getenv("SHOPIFY_API_VERSION", "2024-01"),

            # Server
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),

            # Logging
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.yunexpress_api_key:
            errors.append("YUNEXPRESS_API_KEY is required")
        if not self.yunexpress_customer_code:
            errors.append("YUNEXPRESS_CUSTOMER_CODE is required")

        # Shopify - order number lookups fail without it
        if not self.shopify_domain or not self.shopify_access_token:
            errors.append("Warning: Shopify not configured - order number lookups disabled")

        return errors


# Global config instance
_config: Optional[TrackerConfig] = None


def get_config() -> TrackerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = TrackerConfig.from_env()
    return _config


def init_config(env_file: Optional[str] = None) -> TrackerConfig:
    """Initialize configuration from environment."""
    global _config
    _config = TrackerConfig.from_env(env_file)
    return _config
