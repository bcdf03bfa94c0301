"""Configuration for the REST client."""

from .settings import ClientSettings, get_settings

__all__ = ["ClientSettings", "get_settings"]
