"""
ChoirStats - Logging Configuration

This module provides centralized logging configuration for the application.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_dir: Path = Path("data/logs")
) -> logging.Logger:
    """
    Configure application-wide logging.

    Console output goes to stderr so CLI JSON on stdout stays clean.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional log file name (default: choirstats.log)
        log_dir: Directory for log files

    Returns:
        Root logger instance
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    if log_file is None:
        log_file = "choirstats.log"

    log_path = log_dir / log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_format = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(console_format)
    root_logger.addHandler(console_handler)

    # File handler with detailed format and rotation
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)  # Always capture debug to file
    file_format = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_format)
    root_logger.addHandler(file_handler)

    configure_module_loggers(level)

    return root_logger


def configure_module_loggers(default_level: int = logging.INFO) -> None:
    """
    Configure logging levels for specific modules.

    Args:
        default_level: Default logging level for application modules
    """
    app_modules = [
        "choirstats.aggregators",
        "choirstats.calculators",
        "choirstats.cache",
        "choirstats.models",
        "choirstats.views",
        "choirstats.service"
    ]

    for module in app_modules:
        logging.getLogger(module).setLevel(default_level)

    # Third-party libraries - reduce noise
    for lib in ["redis", "asyncio"]:
        logging.getLogger(lib).setLevel(logging.WARNING)
