"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file="../.env",  # Root .env file (one level up from backend/)
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "imagehost-api"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    storage_type: str = "local"
    storage_base_path: str = "./storage/images"
    storage_base_url: str = "/images"
    storage_mount_path: str = "/images"  # Where the app serves local files
    metadata_file: str | None = None  # Defaults to <storage_base_path>/metadata.json

    # Image processing
    image_quality: int = 75  # WebP quality (1-100)
    image_max_size: int = 10 * 1024 * 1024  # 10MB
    image_allowed_types: str = "image/jpeg,image/png,image/webp"

    # Auth
    auth_enabled: bool = False
    auth_tokens: str = ""

    # CORS
    cors_origins: str = "*"

    @property
    def allowed_types_list(self) -> list[str]:
        """Parse allowed MIME types from comma-separated string."""
        return [t.strip() for t in self.image_allowed_types.split(",") if t.strip()]

    @property
    def auth_tokens_list(self) -> list[str]:
        """Parse API tokens from comma-separated string."""
        return [t.strip() for t in self.auth_tokens.split(",") if t.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def metadata_path(self) -> Path:
        """Location of the metadata JSON file."""
        if self.metadata_file:
            return Path(self.metadata_file)
        return Path(self.storage_base_path) / "metadata.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
