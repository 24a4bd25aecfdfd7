"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "ChatRelay"
    app_version: str = "1.0.0"
    debug: bool = True

    # Security
    secret_key: str = "dev-secret-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # LLM Provider settings
    llm_provider: str = "gemini"
    llm_api_key: Optional[str] = None  # echo mode when unset
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_timeout: float = 120.0
    llm_temperature: float = 0.7
    llm_max_output_tokens: int = 2048
    llm_top_p: float = 0.8
    llm_top_k: int = 40

    # Legacy keys (still accepted)
    gemini_api_key: Optional[str] = None
    gemini_model: Optional[str] = None

    # Sessions
    default_session_title: str = "New Chat"
    app_url: Optional[str] = None  # public base address for share links

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/chatrelay.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True
    log_llm_calls: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def provider_api_key(self) -> Optional[str]:
        """Configured provider credential, falling back to the legacy name."""
        return self.llm_api_key or self.gemini_api_key or None

    @property
    def provider_model(self) -> Optional[str]:
        return self.llm_model or self.gemini_model or None


settings = Settings()
