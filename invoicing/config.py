"""
Configuration module for the invoicing backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    # The server is the only database client, so it uses a server-side key.
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")

    # Google Gemini API (bulk customer extraction)
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    EXTRACTION_MODEL: str = os.getenv("EXTRACTION_MODEL", "gemini-2.5-flash")

    # Session gate
    DEFAULT_APP_PASSWORD: str = os.getenv("DEFAULT_APP_PASSWORD", "bu2025")

    # Invoice numbering
    INVOICE_PREFIX: str = os.getenv("INVOICE_PREFIX", "BLH")
    # Earliest invoice number ever issued; the counter can never go below it
    INVOICE_NUMBER_FLOOR: int = int(os.getenv("INVOICE_NUMBER_FLOOR", "2799"))

    # Bulk processing and history
    BULK_MAX_LINES: int = int(os.getenv("BULK_MAX_LINES", "20"))
    INVOICE_HISTORY_LIMIT: int = int(os.getenv("INVOICE_HISTORY_LIMIT", "100"))

    # Branding
    LOGO_READ_REQUIRES_SESSION: bool = _env_bool("LOGO_READ_REQUIRES_SESSION")
    DEFAULT_LOGO_PATH: str = os.getenv(
        "DEFAULT_LOGO_PATH",
        os.path.join("attached_assets", "logo.png")
    )
    BUSINESS_NAME: str = os.getenv("BUSINESS_NAME", "BU HAIRS")
    INVOICE_FONT_PATH: str = os.getenv("INVOICE_FONT_PATH", "DejaVuSans.ttf")

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
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
            "SUPABASE_URL": cls.SUPABASE_URL,
            "SUPABASE_KEY": cls.SUPABASE_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if cls.INVOICE_NUMBER_FLOOR < 0:
            raise ValueError("INVOICE_NUMBER_FLOOR must not be negative")

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
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            raise
