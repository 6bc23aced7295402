"""Configuration adapters."""

from city_cycling.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
