# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)
#     Default connection settings for MySQL sources whose
#     Database.details leave them out.
#
# - MongoConfig (dataclass)
#     Same, for MongoDB sources.
#
# - FingerprintConfig (dataclass)
#     truncation_size: int                (default 1234)
#     max_sample_rows: int                (default 10000)
#     max_refingerprint_field_count: int  (default 1000)
#     max_unique_tracked: int             (default 10000)
#     unsupported_engines: frozenset[str] (default {"googleanalytics"})
#
# - AppConfig (dataclass)
#     mysql, mongo, fingerprint, metadata_dir, log_level
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Drop the singleton (tests change the environment between cases).
#
# USAGE:
# ------
#   from fingerprint_sync.config import get_config
#   config = get_config()
#   print(config.fingerprint.truncation_size)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from pathlib import Path

from dotenv import load_dotenv

from fingerprint_sync.errors import ConfigError


@dataclass
class MySQLConfig:
    """MySQL source defaults."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"


@dataclass
class MongoConfig:
    """MongoDB source defaults."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None


@dataclass
class FingerprintConfig:
    """Knobs that bound the cost of one fingerprinting pass."""
    # Max characters of any value read while sampling
    truncation_size: int = 1234
    # Max rows streamed per table
    max_sample_rows: int = 10000
    # Re-scan budget: fields attempted per refingerprint_database call
    max_refingerprint_field_count: int = 1000
    # Cap on distinct values remembered per field
    max_unique_tracked: int = 10000
    unsupported_engines: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"googleanalytics"})
    )


@dataclass
class AppConfig:
    """Main application configuration."""
    mysql: MySQLConfig
    mongo: MongoConfig
    fingerprint: FingerprintConfig
    metadata_dir: str = "metadata/"
    log_level: str = "INFO"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _engines_env(name: str, default: str) -> FrozenSet[str]:
    raw = os.getenv(name) or default
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration

    Raises:
        ConfigError: If a numeric setting is not a positive integer
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=_int_env("MYSQL_PORT", 3306),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
    )

    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=_int_env("MONGO_PORT", 27017),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
    )

    fingerprint_config = FingerprintConfig(
        truncation_size=_int_env("FINGERPRINT_TRUNCATION_SIZE", 1234),
        max_sample_rows=_int_env("FINGERPRINT_MAX_SAMPLE_ROWS", 10000),
        max_refingerprint_field_count=_int_env("MAX_REFINGERPRINT_FIELD_COUNT", 1000),
        max_unique_tracked=_int_env("FINGERPRINT_MAX_UNIQUE_TRACKED", 10000),
        unsupported_engines=_engines_env("FINGERPRINT_UNSUPPORTED_ENGINES", "googleanalytics"),
    )

    _config_instance = AppConfig(
        mysql=mysql_config,
        mongo=mongo_config,
        fingerprint=fingerprint_config,
        metadata_dir=os.getenv("METADATA_DIR") or "metadata/",
        log_level=os.getenv("LOG_LEVEL") or "INFO",
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
