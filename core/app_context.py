"""
AppContext - Dependency Injection Container.
Implements the Dependency Inversion Principle (DIP).
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from pathlib import Path
import os
import logging

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./plex-guard.db"


@dataclass
class ConfigLoader:
    """Configuration loader from environment variables."""

    _config: Dict[str, Any] = field(default_factory=dict)

    def load(self, env_path: Optional[str] = None) -> None:
        """Load configuration from .env file."""
        if env_path:
            load_dotenv(env_path)
        else:
            # Try to find .env in project root
            project_root = Path(__file__).parent.parent
            env_file = project_root / ".env"
            if env_file.exists():
                load_dotenv(env_file)

        self._config = {
            "server": {
                "host": os.getenv("SERVER_HOST", "127.0.0.1"),
                "port": int(os.getenv("SERVER_PORT", "3001")),
                "base_url": os.getenv("BASE_URL", ""),
                "app_name": os.getenv("APP_NAME", "Plex Guard"),
            },
            "app": {
                "debug": os.getenv("APP_DEBUG", "false").lower() == "true",
                "log_level": os.getenv("APP_LOG_LEVEL", "INFO")
            },
            "database": {
                "url": os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
            },
            "security": {
                "bcrypt_rounds": int(os.getenv("BCRYPT_ROUNDS", "12")),
                "session_expire_days": int(os.getenv("SESSION_EXPIRE_DAYS", "7")),
                "cookie_secure": os.getenv("COOKIE_SECURE", "false").lower() == "true",
            },
            "backend": {
                "url": os.getenv("BACKEND_URL", "http://localhost:3001"),
                "timeout": float(os.getenv("PROXY_TIMEOUT_SECONDS", "10")),
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation key."""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


def load_config() -> ConfigLoader:
    """Create and load a ConfigLoader in one step."""
    loader = ConfigLoader()
    loader.load()
    return loader


class AppContext:
    """
    Application Context - Central Dependency Injection Container.
    """

    def __init__(self, config_loader: Optional[ConfigLoader] = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._config_loader = config_loader or load_config()

    @property
    def config(self) -> ConfigLoader:
        """Access the configuration loader."""
        return self._config_loader

    def log_event(self, message: str, level: str = "INFO") -> None:
        """Log a lifecycle event. SUCCESS and unknown levels log at INFO."""
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO
        self._logger.log(numeric_level, message)
