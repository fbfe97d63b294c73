"""
awaitguard Configuration — pydantic-settings based.

All settings are read from AWAITGUARD_* environment variables or a .env file.
Nothing is required; every field has a working default.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Root log level for app and CLI")

    # ── Scanning ──
    max_file_size_bytes: int = Field(
        default=500_000, description="Max file size to accept (bytes)"
    )

    # ── Cache ──
    cache_ttl_seconds: int = Field(
        default=3600, description="Time-to-live for file-level cache entries"
    )

    # ── Audit ──
    audit_enabled: bool = Field(
        default=False, description="Feature flag: append one JSON line per scan"
    )
    audit_log_path: str = Field(
        default="audit.jsonl", description="Path to JSON-lines audit log file"
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    model_config = {
        "env_prefix": "AWAITGUARD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance — imported by other modules
settings = Settings()
