# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# All configuration is static and read once at process start.
#
# HOW IT WORKS:
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `GEMINI_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from interview_prep.config import settings
#   print(settings.worker_pacing_delay_ms)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults match the production pacing for the Gemini free tier.
    Tests construct their own Settings with small delays.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "CV Interview Question Service"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # LLM Provider
    # -------------------------------------------------------------------------
    # Supported providers:
    #   - "gemini": Google Gemini generateContent REST API (default)
    #   - "openai_compatible": any OpenAI-compatible chat completions API
    #
    # Example configs:
    #   Gemini:   LLM_PROVIDER=gemini, GEMINI_API_KEY=..., GEMINI_MODEL=gemini-2.0-flash
    #   DeepSeek: LLM_PROVIDER=openai_compatible, LLM_BASE_URL=https://api.deepseek.com/v1,
    #             LLM_API_KEY=..., LLM_MODEL=deepseek-chat
    # -------------------------------------------------------------------------
    llm_provider: Literal["gemini", "openai_compatible"] = "gemini"

    # No default key: the provider refuses to start without one.
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    llm_api_key: str | None = None   # Used by openai_compatible
    llm_base_url: str | None = None  # None = https://api.openai.com/v1
    llm_model: str = "gpt-4o-mini"

    # Per-call HTTP timeout. A timed-out call is a non-retryable failure.
    llm_timeout_seconds: float = 45.0

    # -------------------------------------------------------------------------
    # Admission Gates
    # -------------------------------------------------------------------------
    # Each public entry point has its own permit pool. A request arriving
    # when the pool is empty gets 429 immediately; it is never queued.
    # Both gates feed the same worker, so the sum of capacities is an
    # admission bound, not a throughput bound.
    # -------------------------------------------------------------------------
    analysis_gate_capacity: int = 5
    generation_gate_capacity: int = 10

    # -------------------------------------------------------------------------
    # Serialized Worker
    # -------------------------------------------------------------------------
    # worker_pacing_delay_ms: pause after EVERY task, success or failure.
    # max_retry_attempts: upstream calls per task before giving up on
    #   rate-limit errors. Non-rate-limit errors are never retried.
    # result_timeout_seconds: how long a caller waits on its result handle.
    # -------------------------------------------------------------------------
    worker_pacing_delay_ms: int = 10_000
    max_retry_attempts: int = 5
    result_timeout_seconds: float = 60.0

    # -------------------------------------------------------------------------
    # Prompt Budgets (characters)
    # -------------------------------------------------------------------------
    cv_char_limit: int = 4000
    job_description_char_limit: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    Tests pass their own Settings to create_app() instead of overriding this.
    """
    return Settings()


# ---------------------------------------------------------------------------
# Module-level convenience instance
# ---------------------------------------------------------------------------
settings = get_settings()
