"""Scaffold pipeline configuration."""

from .config import Config, get_config, load_config, reload_config
from .logging_setup import configure_logging

__version__ = "0.1.0"

__all__ = ["Config", "configure_logging", "get_config", "load_config", "reload_config"]
