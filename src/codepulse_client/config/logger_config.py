"""Logger configuration for the CodePulse client."""

import sys

from loguru import logger

from .settings import PulseConfig


def setup_logging(config: PulseConfig) -> None:
    """Configure loguru logger for both console and file output.

    Sets up structured logging with:
    - Console output on stderr with colored output
    - File output with rotation and retention based on settings
    - Configurable log level from settings
    """

    # Remove default loguru handler
    logger.remove()

    if config.log_to_console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=config.log_level,
            colorize=True,
        )

    if config.log_to_file:
        config.install_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(config.log_file_path),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=config.log_level,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="gz",
            enqueue=True,
        )

        logger.debug(f"File logging enabled: {config.log_file_path}")
        logger.debug(f"Log level: {config.log_level}")
