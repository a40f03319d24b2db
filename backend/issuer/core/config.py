"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Load .env in development (no-op when the file is missing)
load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[Mapping[str, str]] = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


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


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse a compact duration such as ``"15m"``, ``"7d"`` or ``"3600"``.

    Parameters
    ----------
    value: str | int | float | timedelta
        Bare numbers are seconds. Strings accept one of the suffixes
        ``s``, ``m``, ``h``, ``d`` or ``w``.

    Returns
    -------
    datetime.timedelta
        Parsed duration.

    Raises
    ------
    ValueError
        If the string does not match the supported syntax.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int | float):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    TOKEN_ISSUER: str
        ``iss`` claim stamped on and required from access tokens.
    TOKEN_AUDIENCE: str
        ``aud`` claim stamped on and required from access tokens.
    ACCESS_TOKEN_MAX_AGE: str
        Access token lifetime, also the maximum accepted token age.
    REFRESH_TOKEN_MAX_AGE: str
        Refresh token lifetime.
    KEY_MAX_AGE: str
        How long a key pair stays eligible for new issuance.
    CLOCK_TOLERANCE: str
        Clock skew accepted when validating time-based claims.
    KEY_PASSPHRASE: str | None
        Secret protecting private keys at rest. Key operations fail with
        ``ConfigurationError`` while it is unset.
    REDIS_URL: str | None
        Document store location. When unset an in-memory store is used.
    IDENTITY_SERVICE_URL: str | None
        Base URL of the identity service. When unset an in-memory
        directory is used.
    IDENTITY_TIMEOUT: float
        Per-request timeout (seconds) for identity service calls.
    CRYPTO_WORKERS: int
        Size of the thread pool running cryptographic operations.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Tokens
    TOKEN_ISSUER = os.getenv("TOKEN_ISSUER", "urn:issuer:auth")
    TOKEN_AUDIENCE = os.getenv("TOKEN_AUDIENCE", "urn:issuer:clients")
    ACCESS_TOKEN_MAX_AGE = os.getenv("ACCESS_TOKEN_MAX_AGE", "15m")
    REFRESH_TOKEN_MAX_AGE = os.getenv("REFRESH_TOKEN_MAX_AGE", "7d")
    CLOCK_TOLERANCE = os.getenv("CLOCK_TOLERANCE", "60s")

    # Keys
    KEY_MAX_AGE = os.getenv("KEY_MAX_AGE", "30d")
    KEY_PASSPHRASE = os.getenv("KEY_PASSPHRASE")
    CRYPTO_WORKERS = int(os.getenv("CRYPTO_WORKERS", "4"))

    # Collaborators
    REDIS_URL = os.getenv("REDIS_URL")
    IDENTITY_SERVICE_URL = os.getenv("IDENTITY_SERVICE_URL")
    IDENTITY_TIMEOUT = float(os.getenv("IDENTITY_TIMEOUT", "2.0"))

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Never talks to Redis or the identity service; in-memory doubles are
      wired instead.
    - Uses a fixed passphrase so generated keys can be decrypted.
    """

    TESTING = True
    DEBUG = False
    KEY_PASSPHRASE = "testing-passphrase"
    REDIS_URL = None
    IDENTITY_SERVICE_URL = None
    CRYPTO_WORKERS = 2
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled while relying on WSGI-level log configuration for
    noise control.
    """

    DEBUG = False
    PROPAGATE_EXCEPTIONS = False


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
