from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Basic settings
    PROJECT_NAME: str = "Knowledge Hub"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Descope Authentication
    DESCOPE_PROJECT_ID: Optional[str] = None
    DESCOPE_MANAGEMENT_KEY: Optional[str] = None
    DESCOPE_BASE_URL: Optional[str] = None
    DESCOPE_AUDIENCE: Optional[str] = None

    # Database
    DATABASE_URL: str

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Timeline windows (today / week / month / year) are computed in this zone
    TIMEZONE: str = "UTC"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000

    # People import
    MAX_IMPORT_ROWS: int = 5000

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": True}


# Global settings instance
settings = Settings()
