"""
DDLForge Configuration Module

Configuration is an explicit value handed to the loader, validator and help
renderer. It can be built directly or read from environment variables (and an
optional .env file).

Environment variables:
    DDL_LIBDIR                  Search path for DDL files (os.pathsep separated)
    DDL_MODE                    "client" (default) or "server"
    DDL_HELP_TEMPLATE_DIR       Directory holding help templates
    DDL_AGGREGATE_ENTRY_POINTS  Load aggregate functions from entry points (default true)
    DDL_LOG_LEVEL               Log level for the CLI (default INFO)

Usage:
    from ddlforge.config import DDLConfig, get_config

    config = DDLConfig(libdirs=["/usr/libexec/ddlforge"], mode="server")
    config = get_config()  # process default, read from the environment
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "DDLConfig",
    "MODES",
    "get_config",
    "set_config",
    "reset_config",
]

MODES = ("client", "server")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration validation fails"""
    pass


def _get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_env_list(key: str) -> list[str]:
    """Get an os.pathsep separated list, dropping empty entries."""
    value = os.getenv(key, "")
    return [part for part in value.split(os.pathsep) if part.strip()]


def _load_env_file() -> None:
    """Load the first .env file found, without overriding the environment."""
    env_paths = [
        Path.cwd() / ".env",
        Path(__file__).parent.parent / ".env",
    ]
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment from {env_path}")
            break


@dataclass
class DDLConfig:
    """
    DDLForge settings.

    Attributes:
        libdirs: Ordered library directories searched for DDL files
        mode: "client" or "server"; summarize blocks are skipped in server mode
        help_template_dir: Directory searched for help templates before the bundled ones
        aggregate_entry_points: Also read aggregate functions from entry points
        log_level: Log level used by the CLI
    """

    libdirs: list[str] = field(default_factory=lambda: [str(Path.cwd())])
    mode: str = "client"
    help_template_dir: str | None = None
    aggregate_entry_points: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.libdirs = [str(d) for d in self.libdirs]
        self.mode = self.mode.lower()
        self.log_level = self.log_level.upper()

        if self.mode not in MODES:
            raise ConfigError(f"Invalid mode '{self.mode}', expected one of: {', '.join(MODES)}")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level '{self.log_level}', expected one of: {', '.join(_LOG_LEVELS)}"
            )

    @property
    def is_server(self) -> bool:
        """True when this process is the authoritative server."""
        return self.mode == "server"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "DDLConfig":
        """Load configuration from environment variables."""
        if load_env_file:
            _load_env_file()

        kwargs = {
            "mode": _get_env("DDL_MODE", "client"),
            "help_template_dir": _get_env("DDL_HELP_TEMPLATE_DIR"),
            "aggregate_entry_points": _get_env_bool("DDL_AGGREGATE_ENTRY_POINTS", True),
            "log_level": _get_env("DDL_LOG_LEVEL", "INFO"),
        }
        libdirs = _get_env_list("DDL_LIBDIR")
        if libdirs:
            kwargs["libdirs"] = libdirs

        return cls(**kwargs)


# Process default
_config: DDLConfig | None = None


def get_config() -> DDLConfig:
    """Get the process default configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = DDLConfig.from_env()
    return _config


def set_config(config: DDLConfig) -> None:
    """Replace the process default configuration."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the process default so the next get_config() re-reads the environment."""
    global _config
    _config = None
