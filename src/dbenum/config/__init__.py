"""Configuration package for dbenum."""

from dbenum.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
