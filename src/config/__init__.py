"""
Configuration Management.

This module provides centralized configuration using Pydantic Settings:

- settings: Main Settings class with environment variable loading

Configuration sources (in order of precedence):
1. Environment variables
2. .env file
3. Default values

All sensitive values (Slack and X tokens, Redis passwords) are loaded from
environment variables and never committed to source control.

Example:
    from src.config import get_settings

    settings = get_settings()
    credentials = settings.credentials()  # raises ConfigurationError if incomplete
"""

from src.config.settings import BotCredentials, Settings, get_settings

__all__ = [
    "BotCredentials",
    "Settings",
    "get_settings",
]
