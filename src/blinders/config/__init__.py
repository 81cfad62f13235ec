"""Configuration management for blinders.

Loads and validates YAML-based configuration with Pydantic models.
Supports ``BLINDERS_``-prefixed environment variable overrides.
"""

from blinders.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
