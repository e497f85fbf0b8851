"""Configuration package for the credit portal."""

from credit_portal.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    PortalConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "PortalConfig",
    "clear_config_cache",
    "load_app_config",
]
