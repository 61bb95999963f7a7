"""Storefront settings: environment variables over code defaults.

Every field can be overridden with a ``STOREFRONT_``-prefixed environment
variable, e.g. ``STOREFRONT_DATABASE_URI=postgresql://...``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CART_STORAGE_KEY = "ace-store-cart"
SERVICE_CATEGORY = "bots"


class StorefrontSettings(BaseSettings):
    """Runtime configuration for the storefront context."""

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", extra="ignore")

    env: str = "development"
    log_dir: str | None = None
    cart_storage_path: str = ".storefront/cart.json"
    cart_storage_key: str = CART_STORAGE_KEY
    database_uri: str = "sqlite:///storefront.db"
    service_category: str = SERVICE_CATEGORY
    orphan_grace_minutes: int = Field(default=15, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> StorefrontSettings:
    """Return the process-wide settings, read once from the environment."""
    return StorefrontSettings()
