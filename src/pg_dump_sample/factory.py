"""Database connection factory.

Supports two configuration modes:
1. Profile mode (db.toml): a named profile supplies the connection URL
2. Settings mode: libpq-style parameters from flags and PG* environment variables

``connect()`` opens the connection and, when the server asks for a
password that was not supplied, prompts for one on the terminal and tries
once more.
"""

import getpass
import logging
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

import psycopg
from psycopg.conninfo import conninfo_to_dict, make_conninfo

from pg_dump_sample.adapters.postgres import PostgresAdapter
from pg_dump_sample.config.loader import load_db_config
from pg_dump_sample.config.models import ConnectionSettings, DatabaseProfile
from pg_dump_sample.exceptions import ConnectionFailedError, ProfileNotFoundError

logger = logging.getLogger(__name__)


# ============================================================================
# Connection String Resolution
# ============================================================================


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def get_profile(profile_name: str, config_path: Path | None = None) -> DatabaseProfile:
    """Look up a profile in db.toml.

    Raises:
        ProfileNotFoundError: If db.toml is missing or has no such profile
    """
    try:
        config = load_db_config(config_path)
    except FileNotFoundError as e:
        raise ProfileNotFoundError(str(e)) from e

    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys()) or "none"
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found. Available: {available}"
        )
    return config.profiles[profile_name]


def build_conninfo(settings: ConnectionSettings) -> str:
    """Build a libpq connection string from settings."""
    return make_conninfo(
        host=settings.host,
        port=settings.port,
        user=settings.user,
        password=settings.password or None,
        dbname=settings.database or None,
        sslmode=settings.sslmode,
    )


# ============================================================================
# Connecting
# ============================================================================


def connect(
    conninfo: str,
    prompt_password: bool = True,
    password_reader: Callable[[str], str] = getpass.getpass,
) -> PostgresAdapter:
    """Open a connected adapter, asking for a password if the first try fails.

    Args:
        conninfo: libpq connection string or URL.
        prompt_password: Ask for a password after a failed first attempt.
        password_reader: Prompt function, ``getpass.getpass`` by default.

    Returns:
        Connected ``PostgresAdapter`` whose ``SELECT 1`` check succeeded.

    Raises:
        ConnectionFailedError: If connecting fails and no retry is possible,
            or the retry fails too.

    Example:
        adapter = connect(build_conninfo(ConnectionSettings(database="shop")))
    """
    try:
        return _open(conninfo)
    except psycopg.OperationalError as e:
        if not prompt_password:
            raise ConnectionFailedError(_describe(e)) from e
        logger.debug(f"First connection attempt failed: {_describe(e)}")
    except psycopg.Error as e:
        raise ConnectionFailedError(_describe(e)) from e

    user = conninfo_to_dict(conninfo).get("user") or getpass.getuser()
    password = password_reader(f"Password for {user}: ")

    try:
        return _open(make_conninfo(conninfo, password=password))
    except psycopg.Error as e:
        raise ConnectionFailedError(_describe(e)) from e


def _open(conninfo: str) -> PostgresAdapter:
    adapter = PostgresAdapter(conninfo)
    adapter.connect()
    try:
        adapter.test_connection()
    except psycopg.Error:
        adapter.close()
        raise
    return adapter


def _describe(error: psycopg.Error) -> str:
    return str(error).strip() or type(error).__name__
