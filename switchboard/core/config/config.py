"""
Static configuration management for Switchboard.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults and type-safe parsing. Everything here is read once at
process startup; the runtime never mutates it afterwards.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to token, logging, handler paths and router toggles
- Validate critical settings before connecting
- Track which values came from the environment and which from defaults

Non-Responsibilities
--------------------
- Immutable per-client options (handled by ClientOptions)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Parse failures fall back to the documented default and are recorded
- Handler paths are resolved relative to the current working directory

Environment Variables
---------------------
Required to connect:
- DISCORD_TOKEN: Bot authentication token

Optional (with defaults):
- ENVIRONMENT: Environment type (default: development)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON / LOG_TO_FILE / LOGS_DIR: Logging sinks
- SWITCHBOARD_<KIND>_PATH: Handler directory roots
- RECEIVE_MESSAGE_COMPONENTS, RECEIVE_MODALS, RECEIVE_AUTOCOMPLETE,
  REPLY_ON_ERROR, SPLIT_CUSTOM_ID, USE_GUILD_COMMANDS: Router toggles
- SPLIT_CUSTOM_ID_ON: Custom id delimiter (default: "_")
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logging is not configured yet during bootstrap
            logging.warning("Unknown environment '%s', defaulting to development", value)
            return cls.DEVELOPMENT


class _ConfigLoadMetrics:
    """Tracks which values came from the environment and any parse errors."""

    def __init__(self) -> None:
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str) -> None:
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


class Config:
    """
    Centralized static configuration for a Switchboard client process.

    Usage
    -----
    >>> Config.load()
    >>> token = Config.DISCORD_TOKEN
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    """

    _metrics: Optional[_ConfigLoadMetrics] = None

    # =========================================================================
    # Discord
    # =========================================================================

    DISCORD_TOKEN: str = ""

    # =========================================================================
    # Environment & Logging
    # =========================================================================

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_TO_FILE: bool = False
    LOGS_DIR: Path = Path("logs")

    # =========================================================================
    # Handler Directories
    # =========================================================================

    EVENT_PATH: Path = Path("handlers/events")
    COMMAND_PATH: Path = Path("handlers/commands")
    CONTEXT_MENU_PATH: Optional[Path] = None
    BUTTON_PATH: Optional[Path] = None
    SELECT_MENU_PATH: Optional[Path] = None
    MODAL_PATH: Optional[Path] = None

    # =========================================================================
    # Router Toggles
    # =========================================================================

    RECEIVE_MESSAGE_COMPONENTS: bool = False
    RECEIVE_MODALS: bool = False
    RECEIVE_AUTOCOMPLETE: bool = False
    REPLY_ON_ERROR: bool = False
    SPLIT_CUSTOM_ID: bool = False
    SPLIT_CUSTOM_ID_ON: str = "_"
    USE_GUILD_COMMANDS: bool = False

    # =========================================================================
    # UI Colors
    # =========================================================================

    EMBED_COLOR_ERROR: int = 0x8B0000
    EMBED_COLOR_WARNING: int = 0x8B6914

    # =========================================================================
    # Parsing Helpers
    # =========================================================================

    @classmethod
    def _init_metrics(cls) -> None:
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            error = f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_optional_bool(cls, key: str) -> Optional[bool]:
        if os.getenv(key) is None:
            cls._init_metrics()
            cls._metrics.record_env_load(key, False, None)
            return None
        return cls._safe_bool(key, False)

    @classmethod
    def _safe_str(cls, key: str, default: str, required: bool = False) -> str:
        """Safely get string from environment."""
        cls._init_metrics()
        value = os.getenv(key, default)
        cls._metrics.record_env_load(key, key in os.environ, default)

        if required and not value:
            error = f"Required environment variable {key} is not set"
            logging.error(error)
            cls._metrics.record_validation_error(key, error)

        return value

    @classmethod
    def _safe_path(cls, key: str, default: Optional[Path]) -> Optional[Path]:
        """
        Read a directory path from environment.

        An empty value disables an optional path.
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        cls._metrics.record_env_load(key, True, default)
        raw_value = raw_value.strip()
        return Path(raw_value) if raw_value else None

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """Load all configuration from environment variables."""
        cls._metrics = _ConfigLoadMetrics()

        cls.DISCORD_TOKEN = cls._safe_str("DISCORD_TOKEN", "", required=True)

        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_optional_bool("LOG_JSON")
        cls.LOG_TO_FILE = cls._safe_bool("LOG_TO_FILE", False)
        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", Path("logs")) or Path("logs")

        cls.EVENT_PATH = cls._safe_path("SWITCHBOARD_EVENT_PATH", Path("handlers/events"))
        cls.COMMAND_PATH = cls._safe_path(
            "SWITCHBOARD_COMMAND_PATH", Path("handlers/commands")
        )
        cls.CONTEXT_MENU_PATH = cls._safe_path("SWITCHBOARD_CONTEXT_MENU_PATH", None)
        cls.BUTTON_PATH = cls._safe_path("SWITCHBOARD_BUTTON_PATH", None)
        cls.SELECT_MENU_PATH = cls._safe_path("SWITCHBOARD_SELECT_MENU_PATH", None)
        cls.MODAL_PATH = cls._safe_path("SWITCHBOARD_MODAL_PATH", None)

        cls.RECEIVE_MESSAGE_COMPONENTS = cls._safe_bool("RECEIVE_MESSAGE_COMPONENTS", False)
        cls.RECEIVE_MODALS = cls._safe_bool("RECEIVE_MODALS", False)
        cls.RECEIVE_AUTOCOMPLETE = cls._safe_bool("RECEIVE_AUTOCOMPLETE", False)
        cls.REPLY_ON_ERROR = cls._safe_bool("REPLY_ON_ERROR", False)
        cls.SPLIT_CUSTOM_ID = cls._safe_bool("SPLIT_CUSTOM_ID", False)
        cls.SPLIT_CUSTOM_ID_ON = cls._safe_str("SPLIT_CUSTOM_ID_ON", "_")
        cls.USE_GUILD_COMMANDS = cls._safe_bool("USE_GUILD_COMMANDS", False)

        cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls, require_token: bool = True) -> None:
        """
        Load and validate configuration.

        Raises
        ------
        ValueError:
            If ``require_token`` is set and DISCORD_TOKEN is missing.
        """
        logger = logging.getLogger(__name__)
        cls.load()

        if require_token and not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN environment variable is required")

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning("Invalid LOG_LEVEL '%s', using INFO", cls.LOG_LEVEL)
            cls.LOG_LEVEL = "INFO"

        logger.info(
            "Configuration loaded",
            extra={"config": cls.get_config_summary(), "load": cls._metrics.get_summary()},
        )
        if cls._metrics.validation_errors:
            logger.warning(
                "Configuration warnings",
                extra={"warnings": cls._metrics.validation_errors},
            )

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return Environment.from_string(cls.ENVIRONMENT) is Environment.PRODUCTION

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "discord_token_set": bool(cls.DISCORD_TOKEN),
            "event_path": str(cls.EVENT_PATH) if cls.EVENT_PATH else None,
            "command_path": str(cls.COMMAND_PATH) if cls.COMMAND_PATH else None,
            "receive_message_components": cls.RECEIVE_MESSAGE_COMPONENTS,
            "receive_modals": cls.RECEIVE_MODALS,
            "receive_autocomplete": cls.RECEIVE_AUTOCOMPLETE,
            "reply_on_error": cls.REPLY_ON_ERROR,
            "split_custom_id": cls.SPLIT_CUSTOM_ID,
            "use_guild_commands": cls.USE_GUILD_COMMANDS,
        }
