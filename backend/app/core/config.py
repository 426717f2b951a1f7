"""
Configuration settings for the Parcel Delivery Backend.

This module handles application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Parcel Delivery Backend"
    api_version: str = "v1"
    debug: bool = True
    log_level: str = "INFO"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # MongoDB Configuration
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "parcel_delivery"

    # Payment Provider (Stripe)
    stripe_secret_key: str = ""
    payment_currency: str = "usd"
    site_domain: str = "http://localhost:5173"

    # Identity Provider (Firebase)
    firebase_credentials_path: str = "firebase_verify_key.json"
    # When True, an invalid bearer token lets the request through without a
    # decoded email instead of rejecting it with 401.
    auth_fail_open: bool = False

    # Upper bound for a single identity/payment provider call
    provider_timeout_seconds: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
