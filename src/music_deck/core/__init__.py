"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging and user-facing output (Loguru)
- Console management (Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    SORT_KEYS,
    Config,
    LoggingConfig,
    MusicConfig,
    PlayerConfig,
    UIConfig,
    create_default_config,
    ensure_directories,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
    parse_config,
)

# Output
from .output import log, setup_from_config, setup_loguru

# Console
from .console import get_console, get_error_console, print_error

__all__ = [
    # Config
    "SORT_KEYS",
    "Config",
    "LoggingConfig",
    "MusicConfig",
    "PlayerConfig",
    "UIConfig",
    "create_default_config",
    "ensure_directories",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "parse_config",
    # Output
    "log",
    "setup_from_config",
    "setup_loguru",
    # Console
    "get_console",
    "get_error_console",
    "print_error",
]
