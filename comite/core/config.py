"""
Application configuration settings
"""
import os
from pydantic_settings import BaseSettings
from typing import Optional

from .exceptions import ConfigurationException


class Settings(BaseSettings):
    """Application settings"""

    # App Configuration
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = "0.0.0.0"
    PORT: int = int(os.getenv("PORT", "8000"))

    # Firebase Configuration (optional, the in-memory store is used without it)
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_PRIVATE_KEY_ID: Optional[str] = None
    FIREBASE_PRIVATE_KEY: Optional[str] = None
    FIREBASE_CLIENT_EMAIL: Optional[str] = None
    FIREBASE_CLIENT_ID: Optional[str] = None
    FIREBASE_AUTH_URI: str = "https://accounts.google.com/o/oauth2/auth"
    FIREBASE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"

    # Document store
    DOCUMENTS_COLLECTION: str = "comite_documents"

    # Object storage for page and cover uploads
    STORAGE_BUCKET: Optional[str] = None
    STORAGE_API_ENDPOINT: Optional[str] = None  # e.g. an S3-interoperable host
    PUBLIC_CDN_BASE_URL: Optional[str] = None

    # Shared secret presented by the admin console when signing uploads
    ADMIN_SHARED_SECRET: Optional[str] = None

    # Comma-separated origin allow-list, or "*"
    CORS_ALLOW_ORIGIN: str = "*"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = 'ignore'

    @property
    def firebase_enabled(self) -> bool:
        """Check if Firebase credentials are configured"""
        return bool(self.FIREBASE_PROJECT_ID)

    @property
    def cors_allow_origins(self) -> list:
        """Parsed origin allow-list (empty when the wildcard is configured)"""
        if self.CORS_ALLOW_ORIGIN.strip() == "*":
            return []
        return [origin.strip() for origin in self.CORS_ALLOW_ORIGIN.split(",") if origin.strip()]

    def require(self, name: str) -> str:
        """Return a required setting or fail loudly"""
        value = getattr(self, name, None)
        if not value:
            raise ConfigurationException(f"{name} is required", details={"setting": name})
        return value


# Global settings instance
settings = Settings()
