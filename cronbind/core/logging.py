"""
Logging setup for cronbind.

Library modules only call logging.getLogger(__name__); handlers are
attached by the application through setup_logging().
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from cronbind.core.config import CronbindConfig


def setup_logging(
    log_dir: Path | None = None,
    console_level: int | str = logging.WARNING,
    file_level: int | str = logging.DEBUG,
) -> logging.Logger:
    """
    Setup cronbind logging.

    Args:
        log_dir: Directory for log files (default: ~/.cronbind/logs)
        console_level: Minimum level for console output
        file_level: Minimum level for file output

    Returns:
        The configured logger
    """
    log_dir = (log_dir or Path.home() / ".cronbind" / "logs").expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("cronbind")
    logger.setLevel(logging.DEBUG)
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    log_file = log_dir / f"cronbind_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. File: {log_file}")

    return logger


def setup_logging_from_config(config: CronbindConfig) -> logging.Logger:
    """Configure logging from the [logging] config section."""
    return setup_logging(
        log_dir=config.get_log_dir(),
        console_level=config.logging.console_level.upper(),
        file_level=config.logging.file_level.upper(),
    )
