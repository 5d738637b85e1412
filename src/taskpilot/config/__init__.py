"""Configuration module."""

from .settings import Settings, credentials_from_settings

__all__ = ["Settings", "credentials_from_settings"]
