"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration on a developer machine.  The
Kafka defaults are deliberately small: when no broker is running the
notifier gives up after a few hundred milliseconds instead of slowing
down every mutating request.
"""

import os
from dataclasses import dataclass
from typing import List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Movies API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3001"))

    # Comma‑separated list of origins allowed by the CORS middleware.
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Path or connection string for the SQLite database.  Relative paths
    # are resolved against the project root by the ``db`` module and
    # ``:memory:`` keeps everything in process (used by the tests).
    database_url: str = os.getenv("DATABASE_URL", "movies.db")

    # Signing key and freshness window for the bearer tokens issued by
    # ``/auth/fake-token``.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    token_freshness_seconds: int = int(os.getenv("TOKEN_FRESHNESS_SECONDS", "3600"))
    token_clock_skew_seconds: int = int(os.getenv("TOKEN_CLOCK_SKEW_SECONDS", "0"))

    kafka_enabled: bool = _env_bool("KAFKA_ENABLED", "true")
    kafka_brokers: str = os.getenv("KAFKA_BROKERS", "localhost:29092")
    kafka_client_id: str = os.getenv("KAFKA_CLIENT_ID", "movie-provider")
    kafka_retries: int = int(os.getenv("KAFKA_RETRIES", "2"))
    kafka_initial_retry_ms: int = int(os.getenv("KAFKA_INITIAL_RETRY_MS", "100"))
    kafka_max_retry_ms: int = int(os.getenv("KAFKA_MAX_RETRY_MS", "300"))

    # Every successfully published event is also appended here as one
    # JSON line, so test runs can inspect what was produced.
    event_log_path: str = os.getenv("EVENT_LOG_PATH", "movie-events.log")

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def kafka_broker_list(self) -> List[str]:
        return [b.strip() for b in self.kafka_brokers.split(",") if b.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at import time, environment variables should be set
# before importing this module.
settings = Settings()
