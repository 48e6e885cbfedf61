"""Configuration module for xpack_user."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
