"""
Logging configuration for proctrace.

Everything goes to stderr so that stdout only carries the monitored
command's own output and the final report.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "proctrace"


def parse_level(level: Union[int, str]) -> int:
    """Accept either a logging constant or a level name such as "debug"."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logger(
    level: Union[int, str] = logging.WARNING,
    log_file: Optional[Path] = None,
    name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Logging level for the console handler
        log_file: Optional file path for a more detailed log
        name: Logger to configure (child loggers inherit its handlers)

    Returns:
        Configured logger instance
    """
    level = parse_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[ProcTrace] %(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
