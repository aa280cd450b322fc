"""
Application configuration using Pydantic Settings.

Configuration values can be set via environment variables or .env file.
The registry API origin is not configurable: the ENVIRONMENT mode flag picks
one of the two fixed origins below.
"""

from typing import Dict, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed registry API origins, selected by ENVIRONMENT
API_ORIGINS: Dict[str, str] = {
    "development": "http://localhost:5001/api",
    "production": "https://registry.example.com/api",
}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "Registry Console"
    VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "production"] = "development"
    DEV_MODE: bool = False

    # Local console server
    HOST: str = "127.0.0.1"
    PORT: int = 8600

    # Token persistence
    TOKEN_STORAGE_KEY: str = "token"
    TOKEN_STORE_URL: str = "sqlite:///./data/registry_console.db"
    ENCRYPT_STORED_TOKEN: bool = False
    SECRET_KEY: Optional[str] = None

    # Registry API
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Wallet provider; no URL means no provider is injected
    WALLET_PROVIDER: str = "jsonrpc"
    WALLET_PROVIDER_URL: Optional[str] = None

    @property
    def api_base_url(self) -> str:
        """Registry API origin for the current mode"""
        return API_ORIGINS[self.ENVIRONMENT]


# Global settings instance
settings = Settings()
