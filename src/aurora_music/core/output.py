"""
Logging setup using Loguru.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_file_path() -> Path:
    """Get the path to the default log file."""
    return get_data_dir() / "aurora-music.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: int = 5,
    console_output: bool = False,
) -> Path:
    """
    Configure loguru with a rotating file sink.

    Args:
        log_file: Path to log file (default: ~/.local/share/aurora-music/aurora-music.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        rotation: Size at which the log file rotates
        retention: Number of rotated files to keep
        console_output: Also log to stderr

    Returns:
        Path of the log file in use
    """
    log_path = log_file if log_file else get_log_file_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_path,
        rotation=rotation,
        retention=retention,
        level=level.upper(),
        format=LOG_FORMAT,
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level.upper(), format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_path} (level={level})")
    return log_path


def setup_logging_from_config(config: LoggingConfig) -> Path:
    """Configure loguru from the [logging] config section."""
    return setup_loguru(
        log_file=Path(config.log_file).expanduser() if config.log_file else None,
        level=config.level,
        rotation=f"{config.max_file_size_mb} MB",
        retention=config.backup_count,
        console_output=config.console_output,
    )
