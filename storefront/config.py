from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env if present
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


def _engine_options(database_uri: str | None) -> dict:
    # search_path only applies to PostgreSQL connections
    if database_uri and database_uri.startswith("postgresql"):
        schema = os.getenv("DATABASE_SCHEMA", "storefront")
        return {
            "pool_pre_ping": True,
            "connect_args": {"options": f"-c search_path={schema}"},
        }
    return {"pool_pre_ping": True}


class Config:
    SECRET_KEY: str = os.getenv("SECRET_KEY", os.urandom(32).hex())

    SITE_NAME = os.getenv("SITE_NAME", "Storefront")

    # Database
    # Read from environment and then unset for security
    SQLALCHEMY_DATABASE_URI: str | None = os.environ.pop("DATABASE_URL", None)
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)

    # Sessions are issued by the external auth service; cookie hardening only
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV", "production") == "production"
    SESSION_COOKIE_SAMESITE = "Strict"

    # Caching (simple for dev)
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")
    CATEGORY_TREE_CACHE_TIMEOUT = int(os.getenv("CATEGORY_TREE_CACHE_TIMEOUT", "300"))

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Category hierarchy
    CATEGORY_PAGE_SIZE = int(os.getenv("CATEGORY_PAGE_SIZE", "10"))
    CATEGORY_PAGE_SIZE_MAX = int(os.getenv("CATEGORY_PAGE_SIZE_MAX", "100"))
    FEATURED_CATEGORY_LIMIT = int(os.getenv("FEATURED_CATEGORY_LIMIT", "4"))
    DEFAULT_CATEGORY_IMAGE = os.getenv("DEFAULT_CATEGORY_IMAGE", "/images/default-category.png")

    # Security headers
    SECURITY_CSP = (
        "default-src 'self'; "
        "img-src 'self' https:; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'"
    )
    SECURITY_HSTS_SECONDS = 31536000

    SECURITY_PERMISSIONS_POLICY = (
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=()"
    )

    # Flask env
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"
