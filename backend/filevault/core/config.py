"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env when present (no-op otherwise)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int | None = None) -> int | None:
    """Parse an integer from an environment variable.

    Blank values are treated as unset. A non-numeric value raises
    :class:`ValueError` at import time so misconfiguration fails loudly.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


def _refresh_expires_from_env() -> timedelta | None:
    days = env_int("REFRESH_TOKEN_EXPIRES_DAYS")
    return timedelta(days=days) if days else None


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints. Empty mounts routes at ``/``.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder.
    JWT_ACCESS_SECRET: str
        Key used to sign and verify access tokens.
    JWT_REFRESH_SECRET: str
        Key used to sign and verify refresh tokens. Must differ from the access
        secret so one token type can never be replayed as the other.
    JWT_ALGORITHM: str
        HMAC algorithm passed to PyJWT.
    ACCESS_TOKEN_EXPIRES: timedelta
        Access token lifetime.
    REFRESH_TOKEN_EXPIRES: timedelta | None
        Refresh token lifetime. ``None`` issues non-expiring refresh tokens and
        relies on ledger invalidation alone.
    REFRESH_COOKIE_NAME: str
        Cookie carrying the refresh token.
    REFRESH_COOKIE_MAX_AGE: int
        Cookie lifetime in seconds.
    REFRESH_COOKIE_SECURE: bool
        Adds the ``Secure`` attribute to the refresh cookie.
    REFRESH_COOKIE_SAMESITE: str
        ``SameSite`` attribute for the refresh cookie.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    FILE_UPLOAD_PATH: str
        Directory holding uploaded blobs.
    MAX_CONTENT_LENGTH: int
        Upper bound for request bodies, enforced by Werkzeug (413).
    STORAGE_SWEEP_GRACE_SECONDS: int
        Minimum age of an unreferenced blob before the sweeper removes it.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = ""

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=10)
    REFRESH_TOKEN_EXPIRES = _refresh_expires_from_env()

    # Refresh cookie
    REFRESH_COOKIE_NAME = "refreshToken"
    REFRESH_COOKIE_MAX_AGE = int(timedelta(days=30).total_seconds())
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", False)
    REFRESH_COOKIE_SAMESITE = "Strict"

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Storage
    FILE_UPLOAD_PATH = os.getenv("FILE_UPLOAD_PATH", "./uploads")
    MAX_CONTENT_LENGTH = (env_int("MAX_UPLOAD_MB", 50) or 50) * 1024 * 1024
    STORAGE_SWEEP_GRACE_SECONDS = env_int("STORAGE_SWEEP_GRACE_SECONDS", 3600)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = 600
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses fixed, distinct signing secrets.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    REFRESH_TOKEN_EXPIRES = None
    REFRESH_COOKIE_SECURE = False
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and marks the refresh cookie
    ``Secure`` unless explicitly overridden.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", True)


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
