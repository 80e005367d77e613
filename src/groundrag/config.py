"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development.

Environment Variables:
    HF_API_KEY: HuggingFace API key for the feature-extraction endpoint
    EMBEDDING_MODEL: Model ID used to embed chunks and queries
    EMBEDDING_BASE_URL: Base URL of the feature-extraction pipeline
    EMBEDDING_TIMEOUT: Per-request timeout in seconds
    CHUNK_SIZE: Maximum characters per chunk
    EMBEDDING_BATCH_SIZE: Texts sent per embedding request
    RETRIEVAL_TOP_K: Default number of chunks returned by a query
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # API Keys
    # ==========================================================================
    hf_api_key: Optional[SecretStr] = Field(
        default=None,
        description="HuggingFace API key for the embedding endpoint",
    )

    # ==========================================================================
    # Embedding Provider
    # ==========================================================================
    embedding_model: str = Field(
        default="BAAI/bge-base-en-v1.5",
        description="Model ID used for chunk and query embeddings",
    )
    embedding_base_url: str = Field(
        default="https://api-inference.huggingface.co/pipeline/feature-extraction",
        description="Feature-extraction endpoint; the model ID is appended",
    )
    embedding_timeout: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Timeout in seconds for a single embedding request",
    )
    embedding_batch_size: int = Field(
        default=10,
        ge=1,
        le=256,
        description="Number of texts per embedding request",
    )

    # ==========================================================================
    # Chunking Configuration
    # ==========================================================================
    chunk_size: int = Field(
        default=500,
        ge=1,
        description="Maximum characters per chunk (single long sentences are kept whole)",
    )

    # ==========================================================================
    # Retrieval Configuration
    # ==========================================================================
    retrieval_top_k: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Number of chunks to retrieve per query",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("embedding_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slashes so the model ID can be appended."""
        return v.rstrip("/")

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def hf_api_key_value(self) -> Optional[str]:
        """Get the actual API key value (use sparingly)."""
        if self.hf_api_key:
            return self.hf_api_key.get_secret_value()
        return None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
