"""Configuration loading for kclserver."""

from kclserver.config.loader import ConfigError, load_config
from kclserver.config.models import KclServerConfig

__all__ = ["ConfigError", "KclServerConfig", "load_config"]
