"""Core module - Application kernel components."""
from core.app_context import AppContext, ConfigLoader, load_config
from core.logging_config import setup_logging
from core.server import create_base_app
from core import database

__all__ = [
    "AppContext",
    "ConfigLoader",
    "load_config",
    "setup_logging",
    "create_base_app",
    "database",
]
