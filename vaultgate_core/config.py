"""
Unified configuration for vaultgate services.

This module provides a single Settings class that consolidates all
environment variables used by the authorization engine and its HTTP surface.
The authorization policy itself is built from these settings once, at
process start (see vaultgate_core.authz.policy).
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Unified settings for vaultgate.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables. List values are given as JSON, e.g.
    AUTHZ_HOLIDAYS='["2026-12-25"]'.
    """

    # Service identification
    SERVICE_NAME: str = "vaultgate"
    LOG_LEVEL: str = "INFO"

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8081

    # PostgreSQL
    POSTGRES_DSN: str = "host=localhost port=5432 dbname=vaultgate user=postgres password=postgres"
    POSTGRES_CONNECT_TIMEOUT_SECONDS: int = 2

    # Collaborator backends: "memory" or "postgres"
    AUDIT_BACKEND: str = "memory"
    SUBJECT_BACKEND: str = "memory"

    # Authorization engine
    AUTHZ_TIMEZONE: str = "UTC"
    AUTHZ_DEPENDENCY_TIMEOUT_SECONDS: float = 2.0
    AUTHZ_POLICY_FILE: str | None = None  # JSON policy, replaces the defaults below
    AUTHZ_BLOCKED_ORIGINS: list[str] = ["192.168.1.100", "10.0.0.50"]
    AUTHZ_SUSPICIOUS_ORIGINS: list[str] = ["192.168.1.100"]
    AUTHZ_HOLIDAYS: list[str] = ["2025-01-01", "2025-12-25", "2026-01-01", "2026-12-25"]
    AUTHZ_HIGH_RISK_ACTIONS: list[str] = ["transfer", "withdraw", "delete", "admin"]

    # Rate limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    EVALUATE_RATE_LIMIT: str = "120/minute"

    # Telemetry
    ENABLE_TELEMETRY: bool = False
    OTEL_SERVICE_NAME: str | None = None
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
