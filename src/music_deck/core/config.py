"""
Configuration management for Music Deck
"""

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

SORT_KEYS = ("title", "artist", "album", "duration", "dateAdded")

_HEX_COLOR = re.compile(r"^#?[0-9a-fA-F]{6}$")


@dataclass
class MusicConfig:
    """Configuration for music library settings."""

    library_paths: List[str] = field(
        default_factory=lambda: [str(Path.home() / "Music")]
    )
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus", ".aac"]
    )
    scan_recursive: bool = True
    ingest_workers: int = 8

    def validate(self) -> None:
        """Validate music configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.ingest_workers < 1:
            raise ValueError(f"ingest_workers must be >= 1, got {self.ingest_workers}")
        bad = [fmt for fmt in self.supported_formats if not fmt.startswith(".")]
        if bad:
            raise ValueError(f"Supported formats must start with '.': {bad}")


@dataclass
class PlayerConfig:
    """Configuration for music player settings."""

    mpv_socket_path: Optional[str] = None
    volume: float = 0.7  # 0.0 - 1.0
    shuffle_on_start: bool = False
    repeat_on_start: bool = False
    restart_threshold: float = 3.0  # seconds into a track before "previous" restarts it
    seek_step: float = 5.0
    volume_step: float = 0.1

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"volume must be between 0 and 1, got {self.volume}")
        if self.seek_step <= 0 or self.volume_step <= 0:
            raise ValueError("seek_step and volume_step must be positive")
        if self.restart_threshold < 0:
            raise ValueError("restart_threshold must not be negative")


@dataclass
class UIConfig:
    """Configuration for user interface."""

    accent_color: str = "#6ee7b7"
    default_sort: str = "dateAdded"
    refresh_rate: int = 10  # Hz

    def validate(self) -> None:
        """Validate UI configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not _HEX_COLOR.match(self.accent_color):
            raise ValueError(f"Invalid accent color: {self.accent_color!r}")
        if self.default_sort not in SORT_KEYS:
            raise ValueError(
                f"Invalid default sort: {self.default_sort!r}. "
                f"Valid keys are: {', '.join(SORT_KEYS)}"
            )
        if self.refresh_rate < 1:
            raise ValueError("refresh_rate must be at least 1")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/music-deck/music-deck.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    music: MusicConfig = field(default_factory=MusicConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "music-deck"
    return Path.home() / ".config" / "music-deck"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/music-deck (or ~/.config/music-deck)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "music-deck"
    return Path.home() / ".local" / "share" / "music-deck"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Music Deck Configuration

[music]
# Paths loaded when no paths are given on the command line
library_paths = ["~/Music"]

# Audio file extensions picked up when loading a folder
supported_formats = [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus", ".aac"]

# Recursively scan subdirectories
scan_recursive = true

# Number of files ingested in parallel
ingest_workers = 8

[player]
# Path for mpv socket (auto-detected if not specified)
# mpv_socket_path = "/tmp/mpv-socket"

# Initial volume (0.0 - 1.0)
volume = 0.7

# Start with shuffle / repeat enabled
shuffle_on_start = false
repeat_on_start = false

# Seconds into a track after which "previous" restarts it instead of going back
restart_threshold = 3.0

# Keyboard seek and volume steps
seek_step = 5.0
volume_step = 0.1

[ui]
# Accent color used for highlights
accent_color = "#6ee7b7"

# Initial sort key: title, artist, album, duration, dateAdded
default_sort = "dateAdded"

# Screen refresh rate in Hz
refresh_rate = 10

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/music-deck/music-deck.log)
# log_file = "/path/to/custom/music-deck.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def _section(data: dict, name: str, cls, validate: bool = True):
    """Build a config section from TOML data, falling back to defaults on bad values."""
    defaults = cls()
    values = {
        key: data[key] for key in defaults.__dataclass_fields__ if key in data
    }
    unknown = set(data) - set(defaults.__dataclass_fields__)
    if unknown:
        logger.warning(f"Ignoring unknown [{name}] keys: {sorted(unknown)}")

    try:
        section = cls(**values)
        if validate and hasattr(section, "validate"):
            section.validate()
        return section
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid [{name}] configuration: {e}. Using defaults.")
        return defaults


def parse_config(toml_data: dict) -> Config:
    """Map parsed TOML data onto a Config object."""
    config = Config()

    if "music" in toml_data:
        config.music = _section(toml_data["music"], "music", MusicConfig)
        config.music.library_paths = [
            str(Path(p).expanduser()) for p in config.music.library_paths
        ]
        config.music.supported_formats = [
            fmt.lower() for fmt in config.music.supported_formats
        ]

    if "player" in toml_data:
        config.player = _section(toml_data["player"], "player", PlayerConfig)

    if "ui" in toml_data:
        config.ui = _section(toml_data["ui"], "ui", UIConfig)

    if "logging" in toml_data:
        config.logging = _section(toml_data["logging"], "logging", LoggingConfig)
        config.logging.level = config.logging.level.upper()
        if config.logging.log_file:
            config.logging.log_file = str(Path(config.logging.log_file).expanduser())

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables override TOML values."""
    level = os.environ.get("MUSIC_DECK_LOG_LEVEL")
    if level:
        config.logging.level = level.upper()

    socket_path = os.environ.get("MUSIC_DECK_MPV_SOCKET")
    if socket_path:
        config.player.mpv_socket_path = socket_path

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - MUSIC_DECK_LOG_LEVEL
    - MUSIC_DECK_MPV_SOCKET
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_path}: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}. Using defaults.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(parse_config(toml_data))


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
