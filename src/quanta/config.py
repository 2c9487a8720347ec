from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables or a `.env`
    file. Every field can be overridden by the variable of the same name.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    GROQ_API_KEY: Optional[str] = None
    """API key for Groq. Without it the app falls back to the Echo LLM."""

    GROQ_MODEL: str = "llama3-8b-8192"
    """Model used for chat completions."""

    HOST: str = "127.0.0.1"
    """Interface the server binds to."""

    PORT: int = 3000
    """Port the server listens on."""

    DEBUG: bool = False
    """Run Dash in debug mode."""

    API_BASE: Optional[str] = None
    """Base URL of a remote relay. When unset, replies are generated in-process."""

    STORAGE_DIR: str = ".quanta"
    """Directory holding the persisted conversation."""

    STORAGE_KEY: str = "quanta.chat.v2"
    """Versioned key of the persisted conversation. Changing it discards old data."""

    REPLY_TIMEOUT: float = 30.0
    """Seconds before a reply request counts as failed."""

    PACING: bool = True
    """Hold replies back briefly so they read as if being typed."""

    MAX_CHARS: int = 3000
    """Maximum length of a composed message."""

    LOG_LEVEL: str = "INFO"
    """Level for the root logger (DEBUG, INFO, WARNING, ERROR)."""


@lru_cache
def get_settings() -> Settings:
    """Returns the process-wide settings, read once."""
    return Settings()
