"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Console management (Rich)
"""

# Configuration
from .config import (
    Config,
    IPCConfig,
    LoggingConfig,
    PlayerConfig,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_log_file_path,
    load_config,
    save_default_config,
)

# Console
from .console import get_console, get_error_console, print_error, safe_print

# Logging
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "IPCConfig",
    "LoggingConfig",
    "PlayerConfig",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_log_file_path",
    "load_config",
    "save_default_config",
    # Console
    "get_console",
    "get_error_console",
    "print_error",
    "safe_print",
    # Logging
    "log",
    "setup_loguru",
]
