"""
Logging configuration for birdsock.

Library modules only create loggers; handlers are installed here by
applications such as the command line front end.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_dir: str | None = None,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
    enable_console: bool = True,
    enable_file: bool = False,
) -> logging.Logger:
    """
    Set up logging for birdsock.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Custom log file path (overrides log_dir)
        log_dir: Directory for log files (defaults to ~/.birdsock/logs)
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
        enable_console: Enable console logging
        enable_file: Enable file logging

    Returns:
        Configured package logger
    """
    logger = logging.getLogger("birdsock")
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    console_fmt = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_fmt = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(name)-20s | %(module)-15s | '
            '%(funcName)-20s | %(lineno)-4d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if enable_console:
        # stderr keeps command output on stdout clean for --json
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logger.level)
        console_handler.setFormatter(console_fmt)
        logger.addHandler(console_handler)

    if enable_file:
        if log_file:
            log_path = Path(log_file)
        elif log_dir:
            log_path = Path(log_dir) / "birdsock.log"
        else:
            log_path = Path.home() / ".birdsock" / "logs" / "birdsock.log"

        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_fmt)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module (e.g. 'birdsock.session')."""
    return logging.getLogger(name)


def configure_logging(debug: bool = False, log_to_file: bool = False) -> None:
    """
    Quick logging configuration.

    Args:
        debug: Enable debug logging
        log_to_file: Enable file logging
    """
    level = "DEBUG" if debug else "WARNING"
    setup_logging(
        level=level,
        enable_console=True,
        enable_file=log_to_file,
    )
