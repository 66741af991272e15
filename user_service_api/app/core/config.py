"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration.  Tests build their own
``Settings`` instance and hand it to ``create_app`` instead of
mutating the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "User Service API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``Database.from_settings``.
    database_url: str = os.getenv("DATABASE_URL", "users.db")

    # All user routes are mounted under ``{api_prefix}/users``.
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    # Name reported by the health probe.
    service_name: str = os.getenv("SERVICE_NAME", "UserService")

    # When disabled, spans are dropped by a no-op tracer.  When enabled the
    # OpenTelemetry API is used; exporters are configured by the hosting
    # environment (e.g. ``opentelemetry-instrument``).
    tracing_enabled: bool = _env_flag("TRACING_ENABLED", "true")
    tracer_name: str = os.getenv("TRACER_NAME", "user_service_api")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
