"""Configuration module for the realm services application."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
