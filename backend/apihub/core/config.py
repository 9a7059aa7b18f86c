"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Load .env during development (no-op when the file is absent)
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


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``.

    Raises
    ------
    ValueError
        When the variable is set but is not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


def build_engine_options(database_uri: str) -> dict[str, Any]:
    """Return SQLAlchemy engine options bounding every store round-trip.

    Parameters
    ----------
    database_uri: str
        Connection string the options are built for. Pool arguments are only
        valid for queue-based pools, so SQLite gets driver-level timeouts only.

    Returns
    -------
    dict[str, Any]
        Mapping suitable for ``SQLALCHEMY_ENGINE_OPTIONS``.
    """
    pool_timeout = env_int("DB_POOL_TIMEOUT", 5)
    statement_timeout_ms = env_int("DB_STATEMENT_TIMEOUT_MS", 5000)

    if database_uri.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"timeout": max(statement_timeout_ms / 1000, 1)},
        }

    options: dict[str, Any] = {"pool_pre_ping": True, "pool_timeout": pool_timeout}
    if database_uri.startswith("postgresql"):
        options["connect_args"] = {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return options


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str | None
        Process-wide signing secret for bearer tokens. There is no default:
        the application refuses to start without it.
    JWT_ACCESS_TOKEN_EXPIRES: bool
        ``False`` so minted tokens carry no ``exp`` claim; tokens live until
        revoked.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_ENGINE_OPTIONS: dict
        Pool and statement timeouts, see :func:`build_engine_options`.
    AUTH_PASSWORD_MIN_LENGTH: int
        Minimum accepted password length at signup and profile update.
    AUTH_NAME_MIN_LENGTH: int
        Minimum accepted display-name length.
    TOKEN_PREFIX_LENGTH: int
        Number of characters of a token exposed by token listings.
    PAGINATION_DEFAULT_LIMIT / PAGINATION_MAX_LIMIT: int
        Page-size defaults for resource listings.
    REDIS_URL: str | None
        Optional Redis used for rate-limit counters and health probes.
    RATELIMIT_STORAGE_URI: str
        Flask-Limiter backend; defaults to Redis when configured.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    ENV_NAME = "base"
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = False

    # Credential policy
    AUTH_PASSWORD_MIN_LENGTH = env_int("AUTH_PASSWORD_MIN_LENGTH", 5)
    AUTH_NAME_MIN_LENGTH = env_int("AUTH_NAME_MIN_LENGTH", 2)
    TOKEN_PREFIX_LENGTH = env_int("TOKEN_PREFIX_LENGTH", 20)

    # Rate limits (Flask-Limiter notation)
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "20 per 15 minutes")
    URL_SHORTEN_RATE_LIMIT = os.getenv("URL_SHORTEN_RATE_LIMIT", "30 per minute")

    # Listings
    PAGINATION_DEFAULT_LIMIT = env_int("PAGINATION_DEFAULT_LIMIT", 50)
    PAGINATION_MAX_LIMIT = env_int("PAGINATION_MAX_LIMIT", 100)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Redis & rate limiting
    REDIS_URL = os.getenv("REDIS_URL")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI") or REDIS_URL or "memory://"
    RATELIMIT_HEADERS_ENABLED = True

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

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

    ENV_NAME = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Ships a fixed signing secret so tokens are reproducible across runs.
    """

    ENV_NAME = "testing"
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv("TEST_JWT_SECRET_KEY", "testing-secret-key-with-enough-entropy")
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Startup checks additionally demand
    a non-placeholder ``SECRET_KEY`` and a long ``JWT_SECRET_KEY``.
    """

    ENV_NAME = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    JWT_SECRET_MIN_LENGTH = env_int("JWT_SECRET_MIN_LENGTH", 32)


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
