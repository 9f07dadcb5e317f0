# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server configuration sourced from environment variables.

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env")

    port: int = 8080

    # ── Model access ─────────────────────────────────────────────────────────
    # SecretStr keeps the credential out of logs, repr(), and model_dump().
    # Empty string = not configured; the generation endpoint answers 503.
    gemini_api_key: SecretStr = SecretStr("")

    # "gemini" talks to the Google Gen AI API; "mock" returns canned drafts
    # for local development without a credential.
    model_backend: Literal["gemini", "mock"] = "gemini"
    text_model: str = "gemini-2.5-flash"
    image_model: str = "imagen-4.0-generate-001"
    image_aspect_ratio: str = "16:9"
    image_mime_type: str = "image/png"

    # ── Rate limiting ────────────────────────────────────────────────────────
    # Per-address sliding window on AI generation (limits string format).
    ai_rate_limit: str = "5/30 seconds"
    # limits storage URI: "async+memory://" (single process) or
    # "async+redis://host:6379" (shared across instances).
    rate_limit_storage_uri: str = "async+memory://"
    # Coarse outer limit on the HTTP route (slowapi format).
    rate_limit: str = "300/minute"

    # Comma-separated origins for CORS (e.g. "https://app.example.com,http://localhost:5173").
    # Empty string = deny all cross-origin requests (secure default).
    allowed_origins: str = ""

    # ── Limits ───────────────────────────────────────────────────────────────
    min_prompt_length: int = 10
    max_prompt_length: int = 2000
    max_image_bytes: int = 10 * 1024 * 1024

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True  # JSON logs for Cloud Logging


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
