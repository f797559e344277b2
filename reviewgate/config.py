"""
ReviewGate Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Nothing is required: every value has a working default for local use.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Server ──
    port: int = Field(default=3000, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    # ── Input limits (enforced before the core sees any source) ──
    max_code_bytes: int = Field(
        default=500_000, description="Max UTF-8 size of a single source file (bytes)"
    )
    max_files: int = Field(
        default=20, description="Max number of files accepted by a batch analysis"
    )

    # ── Review store ──
    reviews_path: str = Field(
        default="reviews.jsonl", description="Path to the JSON-lines review store"
    )
    reviews_list_limit: int = Field(
        default=50, description="Max summaries returned by GET /reviews"
    )

    # ── Decision engine ──
    decision_override_mode: Literal["severity", "comment"] = Field(
        default="severity",
        description=(
            "Security override trigger for the review decision: 'severity' uses "
            "CRITICAL-tagged issues, 'comment' matches legacy comment substrings"
        ),
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "REVIEWGATE_",
    }


# Singleton instance, imported by host modules only
settings = Settings()
