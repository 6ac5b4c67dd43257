"""
Application settings and configuration.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Clinic Inbox"
    app_version: str = "1.0.0"
    debug: bool = False
    clinic_name: str = "Cosmique Clinic"

    # Database
    database_path: str = Field(default="clinic_inbox.db")
    database_timeout: float = 10.0

    # Clinic rules
    timezone: str = "Asia/Dubai"
    country_code: str = "971"
    clinic_open: str = "10:00"
    clinic_close: str = "22:00"
    default_service: str = "Consultation"
    redelivery_window_seconds: int = 120
    min_phone_digits: int = 7

    # WATI WhatsApp gateway
    wati_api_url: Optional[str] = None
    wati_api_key: Optional[str] = None
    wati_timeout: float = 10.0
    wati_max_retries: int = 3
    wa_max_message_length: int = 4096

    # Intent classifier (OpenAI)
    openai_api_key: Optional[str] = None
    classifier_model: str = "gpt-4o-mini"
    classifier_timeout: float = 15.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def is_whatsapp_configured(self) -> bool:
        """Check if the WATI gateway is properly configured."""
        return bool(self.wati_api_url and self.wati_api_key)

    def is_classifier_configured(self) -> bool:
        """Check if the external intent classifier is configured."""
        return bool(self.openai_api_key)


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
