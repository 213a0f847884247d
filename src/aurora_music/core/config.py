"""
Configuration management for Aurora Music
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


@dataclass
class PlayerConfig:
    """Configuration for the per-session playback queue."""

    default_volume: float = 0.7  # 0.0 - 1.0
    tick_interval_ms: int = 250  # How often clients report elapsed time

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0.0 <= self.default_volume <= 1.0:
            raise ValueError(
                f"default_volume must be between 0.0 and 1.0, got {self.default_volume}"
            )
        if self.tick_interval_ms <= 0:
            raise ValueError(
                f"tick_interval_ms must be positive, got {self.tick_interval_ms}"
            )


@dataclass
class UploadConfig:
    """Configuration for song uploads."""

    max_file_size_mb: int = 20
    allowed_content_prefix: str = "audio/"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class WebConfig:
    """Configuration for the FastAPI backend."""

    host: str = "127.0.0.1"
    port: int = 8642
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173"]
    )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/aurora-music/aurora-music.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "aurora-music"
    return Path.home() / ".config" / "aurora-music"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/aurora-music (or ~/.config/aurora-music)
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
        return Path(data_home) / "aurora-music"
    return Path.home() / ".local" / "share" / "aurora-music"


def ensure_directories() -> None:
    """Create config and data directories if they don't exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Aurora Music Configuration

[player]
# Volume for new listening sessions (0.0 - 1.0)
default_volume = 0.7

# How often the browser reports elapsed playback time, in milliseconds
tick_interval_ms = 250

[upload]
# Largest accepted upload in MB
max_file_size_mb = 20

# Uploads must declare a content type starting with this prefix
allowed_content_prefix = "audio/"

[web]
host = "127.0.0.1"
port = 8642
allowed_origins = ["http://localhost:5173"]

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/aurora-music/aurora-music.log)
# log_file = "/path/to/custom/aurora-music.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def _apply_env_overrides(config: Config) -> None:
    """Environment variables win over TOML values."""
    volume = os.environ.get("AURORA_DEFAULT_VOLUME")
    if volume:
        try:
            config.player.default_volume = float(volume)
        except ValueError:
            logger.warning(f"Ignoring invalid AURORA_DEFAULT_VOLUME: {volume!r}")

    max_upload = os.environ.get("AURORA_MAX_UPLOAD_MB")
    if max_upload:
        try:
            config.upload.max_file_size_mb = int(max_upload)
        except ValueError:
            logger.warning(f"Ignoring invalid AURORA_MAX_UPLOAD_MB: {max_upload!r}")

    origins = os.environ.get("ALLOWED_ORIGINS", "")
    if origins:
        config.web.allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - AURORA_DEFAULT_VOLUME
    - AURORA_MAX_UPLOAD_MB
    - ALLOWED_ORIGINS (comma-separated)
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading config from {config_path}: {e}")
        logger.warning("Using default configuration.")
        config = Config()
        _apply_env_overrides(config)
        return config

    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            default_volume=float(
                player_data.get("default_volume", config.player.default_volume)
            ),
            tick_interval_ms=player_data.get(
                "tick_interval_ms", config.player.tick_interval_ms
            ),
        )
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}")
            logger.warning("Using default player configuration.")
            config.player = PlayerConfig()

    if "upload" in toml_data:
        upload_data = toml_data["upload"]
        config.upload = UploadConfig(
            max_file_size_mb=upload_data.get(
                "max_file_size_mb", config.upload.max_file_size_mb
            ),
            allowed_content_prefix=upload_data.get(
                "allowed_content_prefix", config.upload.allowed_content_prefix
            ),
        )

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=web_data.get("port", config.web.port),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get(
                "backup_count", config.logging.backup_count
            ),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    _apply_env_overrides(config)
    return config
