"""
Configuration management for Backend Sivic.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for RPC, provider and AI configuration.
"""

from backend_sivic.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings_cache"]
