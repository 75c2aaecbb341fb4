"""
Unified output system using Loguru.
Configures the log file sink and routes user-facing messages to both the
console and the log.
"""

import sys
from pathlib import Path

from loguru import logger

from .console import safe_print

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"
CONSOLE_FORMAT = "<level>{level}</level>: {name}:{line} - {message}"


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    console_output: bool = False,
) -> None:
    """
    Configure loguru with a rotating file sink and optional stderr output.

    Args:
        log_file: Path to log file
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        max_file_size_mb: Rotate the file after this size
        backup_count: Rotated files to keep
        console_output: Also log to stderr
    """
    # Remove default handler
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=f"{max_file_size_mb} MB",
        retention=backup_count,
        level=level,
        format=LOG_FORMAT,
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def log(message: str, level: str = "info", style: str | None = None) -> None:
    """
    Write a user-facing message to the log file and the console.

    Args:
        message: Message text
        level: Log level (debug, info, warning, error)
        style: Optional Rich style for the console
    """
    log_func = getattr(logger, level)
    log_func(message)
    safe_print(message, style=style)
