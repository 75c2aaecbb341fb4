"""
Configuration management for mp3player
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

# Built-in loguru level names
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class PlayerConfig:
    """Configuration for the mpv output backend and the session wait."""

    mpv_path: str = "mpv"
    audio_device: Optional[str] = None  # mpv --audio-device, None = system default
    extra_args: List[str] = field(default_factory=list)
    default_volume: float = 1.0  # Used when neither CLI nor playlist sets a volume
    poll_interval: float = 0.2  # Seconds between stop checks during the primary wait
    stop_grace_seconds: float = 2.0  # Wait after terminate before killing a sink

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.default_volume < 0:
            raise ValueError(f"default_volume must not be negative: {self.default_volume}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive: {self.poll_interval}")
        if self.stop_grace_seconds < 0:
            raise ValueError(f"stop_grace_seconds must not be negative: {self.stop_grace_seconds}")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/mp3player/mp3player.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output logs to stderr


@dataclass
class IPCConfig:
    """Configuration for the control socket used by ``mp3player stop``."""

    enabled: bool = True


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ipc: IPCConfig = field(default_factory=IPCConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "mp3player"
    return Path.home() / ".config" / "mp3player"


def get_config_path(explicit: Optional[str] = None) -> Path:
    """Get the main configuration file path.

    Checks in the following order:
    1. Path given with ``--config``
    2. Current working directory
    3. XDG_CONFIG_HOME/mp3player (or ~/.config/mp3player)
    """
    if explicit:
        return Path(explicit).expanduser()

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "mp3player"
    return Path.home() / ".local" / "share" / "mp3player"


def get_log_file_path(config: Config) -> Path:
    """Get the log file path, honouring a configured override."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "mp3player.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# mp3player Configuration

[player]
# mpv executable used for every sink
mpv_path = "mpv"

# mpv audio device (see `mpv --audio-device=help`), system default if unset
# audio_device = "pulse"

# Extra mpv options applied to every sink
extra_args = []

# Volume when neither the command line nor the playlist sets one (1.0 = 100%)
default_volume = 1.0

# Seconds between stop checks while waiting for the primary track
poll_interval = 0.2

# Seconds to wait for mpv to exit after terminate before killing it
stop_grace_seconds = 2.0

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/mp3player/mp3player.log)
# log_file = "/path/to/custom/mp3player.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to stderr (useful for debugging)
console_output = false

[ipc]
# Listen on a control socket so `mp3player stop` can end a session
enabled = true
""".strip()


def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from file, falling back to defaults.

    Environment variables override TOML values:
    - MP3PLAYER_MPV_PATH
    - MP3PLAYER_LOG_LEVEL
    """
    # Load .env file from config directory if it exists
    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path(config_file)
    config = Config()

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            config = _parse_config(toml_data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Error loading configuration from {config_path}: {e}")
            logger.warning("Using default configuration.")
            config = Config()
    elif config_file:
        logger.warning(f"Configuration file not found: {config_path}; using defaults")

    mpv_path = os.environ.get("MP3PLAYER_MPV_PATH")
    if mpv_path:
        config.player.mpv_path = mpv_path

    log_level = os.environ.get("MP3PLAYER_LOG_LEVEL")
    if log_level:
        config.logging.level = _log_level(log_level, "MP3PLAYER_LOG_LEVEL")

    return config


def _log_level(value, source: str) -> str:
    """Normalise a configured log level, falling back to INFO if loguru would reject it."""
    level = value.upper() if isinstance(value, str) else ""
    if level not in LOG_LEVELS:
        logger.warning(f"Invalid log level from {source}: {value!r}; using INFO")
        return "INFO"
    return level


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML sections."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_path=player_data.get("mpv_path", config.player.mpv_path),
            audio_device=player_data.get("audio_device"),
            extra_args=list(player_data.get("extra_args", config.player.extra_args)),
            default_volume=float(
                player_data.get("default_volume", config.player.default_volume)
            ),
            poll_interval=float(
                player_data.get("poll_interval", config.player.poll_interval)
            ),
            stop_grace_seconds=float(
                player_data.get("stop_grace_seconds", config.player.stop_grace_seconds)
            ),
        )
        # Validate player config
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}")
            logger.warning("Using default player configuration.")
            config.player = PlayerConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=_log_level(logging_data.get("level", config.logging.level), "[logging] level"),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "ipc" in toml_data:
        config.ipc = IPCConfig(enabled=toml_data["ipc"].get("enabled", config.ipc.enabled))

    return config


def save_default_config(path: Optional[Path] = None) -> Path:
    """Write the default configuration file if none exists yet."""
    config_path = path or (get_config_dir() / "config.toml")
    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(create_default_config() + "\n", encoding="utf-8")
    return config_path
