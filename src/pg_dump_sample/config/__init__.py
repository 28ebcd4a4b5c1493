"""Configuration management: profiles, TOML loading, and connection settings.

Usage:
    >>> from pg_dump_sample.config import load_db_config, ConnectionSettings
"""

from pg_dump_sample.config.loader import load_db_config
from pg_dump_sample.config.models import ConnectionSettings, DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "ConnectionSettings", "DatabaseConfig", "DatabaseProfile"]
