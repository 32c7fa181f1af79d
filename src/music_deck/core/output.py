"""
Unified output system using Loguru.
Replaces print() statements with dual output (console + file).
"""

import sys
import threading
from collections import deque
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

# Maximum number of status messages kept for the terminal UI
MAX_PENDING_MESSAGES = 50

# Global blessed mode tracking (set when the terminal UI starts)
_blessed_mode_active = False
_blessed_mode_lock = threading.Lock()

# Messages logged while the terminal UI owns the screen, drained by the UI loop
_pending_messages: deque[tuple[str, str]] = deque(maxlen=MAX_PENDING_MESSAGES)
_pending_messages_lock = threading.Lock()


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    return get_data_dir() / "music-deck.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    console_output: bool = False,
) -> Path:
    """
    Configure loguru with a rotating file sink and an optional stderr sink.

    Args:
        log_file: Path to log file (default: ~/.local/share/music-deck/music-deck.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        max_file_size_mb: Size at which the log file is rotated
        backup_count: Number of rotated files to keep
        console_output: Whether to also output logs to stderr

    Returns:
        Path of the active log file
    """
    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation=f"{max_file_size_mb} MB",
        retention=backup_count,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")
    return log_file


def setup_from_config(config: LoggingConfig) -> Path:
    """Configure loguru from the [logging] config section."""
    return setup_loguru(
        Path(config.log_file) if config.log_file else None,
        level=config.level,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
        console_output=config.console_output,
    )


def set_blessed_mode() -> None:
    """Enable blessed mode - suppresses stdout printing, queues messages for the UI."""
    global _blessed_mode_active
    with _blessed_mode_lock:
        _blessed_mode_active = True
        logger.debug("Blessed mode enabled - log() will queue messages for the UI")


def clear_blessed_mode() -> None:
    """Disable blessed mode - restores stdout printing."""
    global _blessed_mode_active
    with _blessed_mode_lock:
        _blessed_mode_active = False
        logger.debug("Blessed mode disabled - log() will print to stdout")


def drain_pending_messages() -> list[tuple[str, str]]:
    """
    Get and clear all pending status messages.

    Returns:
        List of (message, color) tuples
    """
    with _pending_messages_lock:
        messages = list(_pending_messages)
        _pending_messages.clear()
        return messages


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND shows the message to the user.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    # Background threads (library loads) log to file only
    if getattr(threading.current_thread(), "silent_logging", False):
        return

    with _blessed_mode_lock:
        if _blessed_mode_active:
            color_map = {
                "debug": "cyan",
                "info": "white",
                "warning": "yellow",
                "error": "red",
            }
            with _pending_messages_lock:
                _pending_messages.append((message, color_map.get(level, "white")))
        elif level != "debug":
            print(message)
