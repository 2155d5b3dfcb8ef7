"""Application configuration.

Values come from `.env` and environment variables. The chat endpoint defaults
to a local Ollama server through its OpenAI-compatible API.
"""
from __future__ import annotations

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Ollama does not check the key, but the OpenAI SDK refuses an empty one.
    openai_api_key: str = "ollama"
    llm_base_url: str = Field(
        default="http://127.0.0.1:11434/v1",
        validation_alias=AliasChoices("LLM_BASE_URL", "OLLAMA_URL"),
    )
    llm_model: str = Field(
        default="llama3.2",
        validation_alias=AliasChoices("LLM_MODEL", "OLLAMA_MODEL"),
    )
    llm_temperature: float = 0.3
    llm_timeout_seconds: float = 120.0
    llm_max_retries: int = 3
    llm_backoff_seconds: float = 1.0

    repair_max_attempts: int = 2

    drawio_mcp_command: str = "npx"
    drawio_mcp_args: List[str] = ["@drawio/mcp"]
    excalidraw_mcp_command: str = "npx"
    excalidraw_mcp_args: List[str] = ["excalidraw-mcp"]
    mcp_timeout_seconds: float = 30.0
    mcp_max_retries: int = 2
    mcp_retry_delay_seconds: float = 2.0

    session_ttl_seconds: float = 3600.0
    session_max_entries: int = 500

    output_dir: str = "outputs"


settings = Settings()
