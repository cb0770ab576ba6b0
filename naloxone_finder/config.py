"""
Configuration module for Naloxone Finder backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


class Settings:
    """Application settings loaded from environment variables."""

    # Perplexity chat-completion API
    PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "")
    PERPLEXITY_API_URL: str = os.getenv(
        "PERPLEXITY_API_URL", "https://api.perplexity.ai/chat/completions"
    )
    PERPLEXITY_MODEL: str = os.getenv("PERPLEXITY_MODEL", "sonar-pro")
    # Unset means no client-side deadline
    PERPLEXITY_TIMEOUT_SECONDS: Optional[float] = _optional_float("PERPLEXITY_TIMEOUT_SECONDS")

    # Search tuning
    SEARCH_TEMPERATURE: float = float(os.getenv("SEARCH_TEMPERATURE", "0.1"))
    SEARCH_MAX_TOKENS: int = int(os.getenv("SEARCH_MAX_TOKENS", "5000"))
    STREAM_MAX_TOKENS: int = int(os.getenv("STREAM_MAX_TOKENS", "2500"))
    STREAM_STATUS_INTERVAL_SECONDS: float = float(
        os.getenv("STREAM_STATUS_INTERVAL_SECONDS", "2.0")
    )

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings (production only, comma separated)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "PERPLEXITY_API_KEY": cls.PERPLEXITY_API_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # Outside production, warn but don't crash: search endpoints
        # report the missing key to the client instead
        if not settings.is_production():
            print(f"Warning: {e}")
            print("   Search endpoints will return a configuration error until the key is set.")
        else:
            raise
