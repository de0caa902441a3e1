from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Gemini Image Editor"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # External APIs
    GEMINI_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    GEMINI_MODEL: str = "gemini-2.5-flash-image"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: Optional[float] = None  # None waits for the response

    # Upload Limits
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # In-memory stores
    IMAGE_STORE_TTL_SECONDS: int = 60 * 60
    IMAGE_STORE_MAX_SIZE: int = 256
    SESSION_TTL_SECONDS: int = 60 * 60
    SESSION_MAX_SIZE: int = 256

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

    @property
    def is_gemini_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY)

    def warn_if_unconfigured(self) -> bool:
        """Print a startup warning when the Gemini key is missing.

        A missing key is not fatal at startup; every edit request fails
        until it is set.
        """
        if self.is_gemini_configured:
            return False
        print("⚠️ GEMINI_API_KEY environment variable not set. Image edits will fail until it is configured.")
        return True


def get_settings() -> Settings:
    """Dependency returning the global settings instance."""
    return settings

# Global settings instance
settings = Settings()
