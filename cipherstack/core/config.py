from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "CipherStack"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Pipeline settings
    max_text_length: int = 50 * 1024 * 1024
    max_layers: int = 3
    require_active_layer: bool = True

    # Key generation
    default_rsa_key_size: int = 2048
    allowed_rsa_key_sizes: tuple[int, ...] = (1024, 2048, 4096)

    # Analysis settings
    self_keying_min_sample: int = 20

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
