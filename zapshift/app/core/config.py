"""
Configuration settings for the Zap Shift Backend.

This module handles application configuration using Pydantic settings.
Legacy variable names (URI, STRIPE_SECRET) are still accepted.
"""

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application
    app_name: str = "Zap Shift Backend"
    api_version: str = "v1"
    api_prefix: str = ""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Database Configuration
    database_url: str = Field(
        "mongodb://localhost:27017",
        validation_alias=AliasChoices("database_url", "uri"),
    )
    database_name: str = "zap_shift_data"

    # Payment provider (Stripe Checkout)
    stripe_secret_key: str = Field(
        "",
        validation_alias=AliasChoices("stripe_secret_key", "stripe_secret"),
    )
    stripe_api_base: str = "https://api.stripe.com/v1"
    checkout_currency: str = "usd"
    site_domain: str = "http://localhost:5173"

    # Identity verification
    identity_provider: str = "firebase"  # firebase | local
    firebase_project_id: str = ""
    firebase_certs_url: str = (
        "https://www.googleapis.com/robot/v1/metadata/x509/"
        "securetoken@system.gserviceaccount.com"
    )

    # Local token signing (identity_provider=local)
    secret_key: str = "your-secret-key-change-this-in-production-min-32-chars"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Outbound HTTP
    http_timeout_seconds: float = 10.0


settings = Settings()
