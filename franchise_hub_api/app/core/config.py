"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with an empty environment.  In a production deployment
you should override at least ``SECRET_KEY`` and ``DATABASE_URL``.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Franchise Hub API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file.  Empty means console only.
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Path of the SQLite file backing the key-value storage.  A relative
    # path is resolved against the project root by ``core.db``.  The
    # special value ``:memory:`` keeps everything in a process-local dict.
    database_url: str = os.getenv("DATABASE_URL", "franchise_hub.db")

    # Every collection is stored under ``<prefix>_<collection>``.
    storage_key_prefix: str = os.getenv("STORAGE_KEY_PREFIX", "franchise_hub")

    currency: str = os.getenv("CURRENCY", "INR")

    # Application fee = base fee + franchise fee * rate, rounded.
    application_base_fee: float = float(os.getenv("APPLICATION_BASE_FEE", "5000"))
    application_fee_rate: float = float(os.getenv("APPLICATION_FEE_RATE", "0.001"))

    payment_request_due_days: int = int(os.getenv("PAYMENT_REQUEST_DUE_DAYS", "30"))
    notification_ttl_days: int = int(os.getenv("NOTIFICATION_TTL_DAYS", "30"))
    refund_processing_days: int = int(os.getenv("REFUND_PROCESSING_DAYS", "7"))

    # Seed the demo business and partner accounts at start-up.
    seed_demo_users: bool = _env_bool("SEED_DEMO_USERS", "true")
    demo_password: str = os.getenv("DEMO_PASSWORD", "password123")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class creation time, environment variables should
# be set before importing this module.
settings = Settings()
