"""Configuration objects for the academy gateway."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Type

basedir = Path(__file__).resolve().parent

DEFAULT_BACKEND_API_BASE = "http://127.0.0.1:5000/api"
BACKEND_API_BASE_VARS = ("BACKEND_API_BASE", "PUBLIC_API_URL")


def _clean(value: str | None) -> str:
    return (value or "").strip().strip("'\"").strip()


def resolve_backend_base(environ: Mapping[str, str] | None = None) -> str:
    """Return the upstream API origin without trailing slashes.

    ``BACKEND_API_BASE`` wins over ``PUBLIC_API_URL``; blank values are
    skipped and the local development API is used when neither is set.
    """

    env = os.environ if environ is None else environ
    for name in BACKEND_API_BASE_VARS:
        candidate = _clean(env.get(name))
        if candidate:
            return candidate.rstrip("/")
    return DEFAULT_BACKEND_API_BASE


def _optional_float(value: str | None) -> float | None:
    if not value:
        return None
    return float(value)


class Config:
    """Base configuration shared by all environments."""

    JWT_SECRET_KEY: str = os.getenv("AUTH_SECRET", "dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES_DAYS: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_DAYS", "7"))
    ADMIN_EMAIL: str = _clean(os.getenv("ADMIN_EMAIL")).lower()
    ADMIN_PASSWORD: str = _clean(os.getenv("ADMIN_PASSWORD"))
    PUBLIC_CORS_ORIGIN: str = os.getenv("PUBLIC_CORS_ORIGIN", "http://localhost")
    UPSTREAM_TIMEOUT: float | None = _optional_float(os.getenv("UPSTREAM_TIMEOUT"))
    UPLOAD_FOLDER: str = os.getenv("UPLOAD_FOLDER", str(Path.cwd() / "uploads"))
    MAX_CONTENT_LENGTH: int = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SECURE_COOKIES: bool = False

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Expose configuration values for debugging and introspection."""

        return {key: getattr(cls, key) for key in dir(cls) if key.isupper()}


class DevelopmentConfig(Config):
    """Configuration suitable for local development."""

    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Configuration tailored for production deployments."""

    DEBUG = False
    SECURE_COOKIES = True


class TestingConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "test-secret"
    ADMIN_EMAIL = ""
    ADMIN_PASSWORD = ""
    UPSTREAM_TIMEOUT = None


CONFIG_MAP: Dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name: str | None) -> Type[Config]:
    """Retrieve the configuration class matching the supplied name."""

    if not name:
        return DevelopmentConfig
    return CONFIG_MAP.get(name.lower(), DevelopmentConfig)
