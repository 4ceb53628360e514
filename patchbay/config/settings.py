"""
Application settings using pydantic-settings

Loads environment variables from .env.local file
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Vendor credentials (a missing key makes that vendor's adapters report AUTH_MISSING)
    openai_api_key: Optional[str] = Field(
        default=None,
        alias="OPENAI_API_KEY",
        description="OpenAI API key",
    )
    google_api_key: Optional[str] = Field(
        default=None,
        alias="GOOGLE_API_KEY",
        description="Google API key for Gemini models",
    )
    anthropic_api_key: Optional[str] = Field(
        default=None,
        alias="ANTHROPIC_API_KEY",
        description="Anthropic API key",
    )

    # Transport
    proxy_base_url: str = Field(
        default="http://localhost:3000",
        alias="PROXY_BASE_URL",
        description="Local reverse proxy relaying vendor API calls",
    )
    bridge_url: Optional[str] = Field(
        default=None,
        alias="BRIDGE_URL",
        description="Relay endpoint of the browser-extension bridge",
    )
    adapter_timeout_seconds: float = Field(
        default=120.0,
        alias="ADAPTER_TIMEOUT_SECONDS",
        description="HTTP timeout for a single adapter request",
    )

    # MongoDB (optional - participants and analytics are only kept in memory without it)
    mongodb_uri: Optional[str] = Field(
        default=None,
        alias="MONGODB_URI",
        description="MongoDB connection URI",
    )
    mongodb_database: str = Field(
        default="patchbay",
        alias="MONGODB_DATABASE",
        description="MongoDB database name",
    )
    session_key: str = Field(
        default="default",
        alias="SESSION_KEY",
        description="Key under which participants and analytics are persisted",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    # API Security - JWT Configuration
    jwt_secret_key: str = Field(
        default="your-secret-key-change-in-production-min-32-chars",
        alias="JWT_SECRET_KEY",
        description="Secret key for JWT token signing (min 32 characters)",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        alias="JWT_ALGORITHM",
        description="JWT signing algorithm",
    )

    # API Clients - Format: client_id1=secret1,client_id2=secret2
    api_clients_raw: str = Field(
        default="",
        alias="API_CLIENTS",
        description="Comma-separated client_id=secret pairs for API authentication",
    )

    # CORS Origins
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        alias="CORS_ORIGINS",
        description="Comma-separated allowed CORS origins",
    )

    # API Server Configuration
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def api_clients(self) -> Dict[str, str]:
        """Parsed client_id -> secret pairs"""
        clients = {}
        for pair in self.api_clients_raw.split(","):
            if "=" in pair:
                cid, secret = pair.strip().split("=", 1)
                clients[cid.strip()] = secret.strip()
        return clients

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings

    Returns:
        Settings: Application settings instance
    """
    return Settings()
