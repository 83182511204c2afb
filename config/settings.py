"""
Centralized configuration for the Capital Code assistant.

All settings are loaded from environment variables via .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Brand
    brand_name: str = Field(default="Capital Code", env="BRAND_NAME")

    # Hosted completion API (OpenAI-compatible endpoint)
    llm_api_key: Optional[str] = Field(default=None, env="LLM_API_KEY")
    llm_base_url: str = Field(default="https://api.groq.com/openai/v1", env="LLM_BASE_URL")
    # Priority order is the list order: "name:max_tokens,name:max_tokens"
    llm_models: str = Field(
        default="llama-3.3-70b-versatile:32768,mixtral-8x7b-32768:32768,llama-3.1-8b-instant:8192",
        env="LLM_MODELS",
    )
    llm_timeout_seconds: float = Field(default=30.0, env="LLM_TIMEOUT_SECONDS")

    # Rate-limit retry policy
    max_attempts_per_model: int = Field(default=3, env="MAX_ATTEMPTS_PER_MODEL")
    retry_base_delay: float = Field(default=1.0, env="RETRY_BASE_DELAY")

    # Intent classification
    enable_llm_intent: bool = Field(default=False, env="ENABLE_LLM_INTENT")
    intent_timeout_seconds: float = Field(default=5.0, env="INTENT_TIMEOUT_SECONDS")

    # Post-processing: "replace" or "append"
    navigation_mode: str = Field(default="replace", env="NAVIGATION_MODE")

    # Database
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=8000, env="API_PORT")
    api_title: str = Field(default="Capital Code Assistant API", env="API_TITLE")
    api_version: str = Field(default="1.0.0", env="API_VERSION")
    cors_origins: str = Field(default="*", env="CORS_ORIGINS")
    rate_limit_per_minute: int = Field(default=30, env="RATE_LIMIT_PER_MINUTE")
    request_timeout_seconds: float = Field(default=60.0, env="REQUEST_TIMEOUT_SECONDS")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=False, env="DEBUG")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
