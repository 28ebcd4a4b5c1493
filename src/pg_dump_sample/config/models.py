"""Pydantic models for connection configuration."""

import getpass

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class DatabaseConfig(BaseModel):
    """Complete database configuration from db.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)


# ============================================================================
# Environment Settings
# ============================================================================


class ConnectionSettings(BaseSettings):
    """Connection parameters, defaulting to the standard libpq variables.

    Explicit keyword arguments (from the command line) take precedence
    over ``PGHOST``, ``PGPORT``, ``PGUSER``, ``PGPASSWORD``,
    ``PGDATABASE`` and ``PGSSLMODE``.

    Example:
        >>> settings = ConnectionSettings(host="db.internal", database="shop")
        >>> settings.port
        5432
    """

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    host: str = Field(default="/tmp", validation_alias="PGHOST")
    port: int = Field(default=5432, validation_alias="PGPORT")
    user: str = Field(default_factory=getpass.getuser, validation_alias="PGUSER")
    password: str | None = Field(default=None, validation_alias="PGPASSWORD")
    database: str | None = Field(default=None, validation_alias="PGDATABASE")
    sslmode: str = Field(default="disable", validation_alias="PGSSLMODE")
