from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PORTAL_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Supabase (auth and optional tag persistence)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None
    require_auth: bool = True

    # Tag registry persistence
    tag_store_backend: Literal["memory", "file", "supabase"] = "memory"
    tag_store_path: str = ".tag-store"
    tag_store_key: str = "cafe-tags"
    tag_store_table: str = "kv_store"

    # Markup tokenizer ceilings
    markup_max_source_length: int = 100_000  # Characters tokenized before the remainder is left as text
    markup_max_line_length: int = 10_000  # Longer lines skip inline parsing

    # Autocomplete
    tag_suggestion_limit: int = 5
    popular_tags_limit: int = 10


settings = Settings()
