"""
Configuration management for the PDF Chat Backend.
Handles environment variables and application settings.
"""

from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from environment
    )

    # API Configuration
    app_name: str = Field(default="PDF Chat Backend")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(default=["*"])
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Google AI Configuration
    google_api_key: Optional[str] = Field(default=None)
    google_embedding_model: str = Field(default="models/gemini-embedding-001")
    google_chat_model: str = Field(default="gemini-2.5-flash")
    google_temperature: float = Field(default=0.2)
    google_max_tokens: int = Field(default=1024)

    # Vector index: "memory" keeps a throwaway index per request,
    # "qdrant" writes to a managed collection.
    vector_store: Literal["memory", "qdrant"] = Field(default="memory")
    qdrant_url: Optional[str] = Field(default=None)
    qdrant_api_key: Optional[str] = Field(default=None)
    qdrant_collection: str = Field(default="pdf-chat")

    # Retrieval Configuration
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    similarity_search_k: int = Field(default=4, gt=0)
    index_batch_size: int = Field(default=100, gt=0)
    preview_length: int = Field(default=150, gt=0)

    # Request limits
    max_files: int = Field(default=10, gt=0)
    max_file_size_mb: int = Field(default=50, gt=0)
    max_question_length: int = Field(default=1000, gt=0)
    allowed_file_types: List[str] = Field(default=["pdf"])


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def validate_required_settings(config: Optional[Settings] = None) -> None:
    """
    Validate that all required settings are present.

    Raises:
        ConfigurationError: listing every missing variable
    """
    config = config or settings

    required_settings = [("GOOGLE_API_KEY", config.google_api_key)]
    if config.vector_store == "qdrant":
        required_settings += [
            ("QDRANT_URL", config.qdrant_url),
            ("QDRANT_API_KEY", config.qdrant_api_key),
            ("QDRANT_COLLECTION", config.qdrant_collection),
        ]

    missing_settings = []
    for setting_name, setting_value in required_settings:
        if not setting_value:
            missing_settings.append(setting_name)

    if missing_settings:
        raise ConfigurationError(missing_settings)
