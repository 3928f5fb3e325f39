"""Configuration management for the bus location proxy."""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Literal, Optional


class Settings(BaseSettings):
    """Application settings."""

    # TAGO Configuration
    tago_service_key: Optional[str] = None
    tago_base_url: str = "https://apis.data.go.kr/1613000/BusLcInfoInqireService"
    response_format: Literal["json", "xml"] = "json"
    num_of_rows: int = 100
    request_timeout_seconds: float = 5.0

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = Field(4000, validation_alias=AliasChoices("port", "api_port"))
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    debug: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def credential_configured(self) -> bool:
        return bool(self.tago_service_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
