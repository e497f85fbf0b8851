"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is absent.

Usage:
    from credit_portal.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class DatabaseConfig:
    """Location of the SQLite store."""

    path: Path = Path("db/credits.db")


@dataclass
class PortalConfig:
    """Portal-wide display settings."""

    college_name: str = "Vidyalankar College"
    credit_target: int = 162


@dataclass
class AuthConfig:
    """Password hashing and session lifetime."""

    password_scheme: str = "pbkdf2_sha256"
    session_ttl_minutes: int = 480


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    portal: PortalConfig = field(default_factory=PortalConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/credits.db"},
        "portal": {
            "college_name": "Vidyalankar College",
            "credit_target": 162,
        },
        "auth": {
            "password_scheme": "pbkdf2_sha256",
            "session_ttl_minutes": 480,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = data.get("database") or {}
    database = DatabaseConfig(
        path=Path(db_data.get("path", defaults["database"]["path"])),
    )

    portal_data = data.get("portal") or {}
    portal = PortalConfig(
        college_name=portal_data.get("college_name", defaults["portal"]["college_name"]),
        credit_target=int(portal_data.get("credit_target", defaults["portal"]["credit_target"])),
    )

    auth_data = data.get("auth") or {}
    auth = AuthConfig(
        password_scheme=auth_data.get("password_scheme", defaults["auth"]["password_scheme"]),
        session_ttl_minutes=int(
            auth_data.get("session_ttl_minutes", defaults["auth"]["session_ttl_minutes"])
        ),
    )

    return AppConfig(database=database, portal=portal, auth=auth)


def load_app_config(force_reload: bool = False, config_file: Path | None = None) -> AppConfig:
    """Load application config, or defaults if no file exists.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternative config path (defaults to CONFIG_FILE).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload and config_file is None:
        return _cached_config

    path = config_file or CONFIG_FILE
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    config = _parse_config(data)
    if config_file is None:
        _cached_config = config
    return config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
