"""Relay configuration."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

from relay.errors import ConfigurationError

WEBHOOK_PATH = "/webhooks"

DEFAULT_QUERY_PREFIX = "query GetOrdersToRelease"


def _split_ids(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """Environment-driven settings for the reroute relay."""

    # Shopify Admin API
    shop_domain: str = ""
    admin_api_token: str = ""
    api_version: str = "2025-07"
    request_timeout: float = 30.0

    # Reroute mutation inputs (comma-separated location GIDs)
    included_location_ids: str = ""
    excluded_location_ids: str = ""

    # Only bulk operations whose query starts with this are processed
    expected_query_prefix: str = DEFAULT_QUERY_PREFIX

    # Inbound webhooks
    webhook_secret: str = ""
    webhook_base_url: str = ""

    # Tracked subscription id storage: "memory" or "redis"
    subscription_store: str = "memory"
    redis_url: str = "redis://localhost:6379/0"

    log_level: str = "INFO"

    model_config = {"env_prefix": "RELAY_", "env_file": ".env", "extra": "ignore"}

    @property
    def parsed_included_location_ids(self) -> list[str]:
        return _split_ids(self.included_location_ids)

    @property
    def parsed_excluded_location_ids(self) -> list[str]:
        return _split_ids(self.excluded_location_ids)

    @property
    def callback_url(self) -> str:
        return f"{self.webhook_base_url.rstrip('/')}{WEBHOOK_PATH}"

    def require_admin_api(self) -> None:
        """Raise ConfigurationError unless the Admin API can be called."""
        missing = [
            f"RELAY_{name.upper()}"
            for name in ("shop_domain", "admin_api_token")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return Settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
