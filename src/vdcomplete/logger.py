"""Logging configuration for vdcomplete using loguru."""

import os
import sys
from loguru import logger
from typing import Optional

# Store the configured log file path to ensure consistency
_log_file_path: Optional[str] = None


def setup_logger(
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    console_output: bool = True,
) -> None:
    """
    Configure loguru logger with console and optional file output.

    Args:
        log_file: Path to the log file (if None, uses VDCOMPLETE_LOG_FILE or the previously configured path)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rotation: Log rotation size
        retention: How long to keep old logs
        compression: Compression format for old logs
        console_output: Whether to output to stderr
    """
    global _log_file_path

    if log_file is None:
        log_file = os.getenv("VDCOMPLETE_LOG_FILE") or _log_file_path
    if log_file is not None:
        log_file = os.path.abspath(log_file)
        _log_file_path = log_file

    # Remove default handler
    logger.remove()

    # Console output with colors
    if console_output:
        logger.add(
            sys.stderr,
            level=log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            colorize=True,
        )

    # File output
    if log_file is not None:
        logger.add(
            log_file,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            rotation=rotation,
            retention=retention,
            compression=compression,
            encoding="utf-8",
        )


def get_logger(name: Optional[str] = None):
    """
    Get a configured logger instance.

    Args:
        name: Optional name for the logger

    Returns:
        Logger instance
    """
    return logger.bind(name=name or "vdcomplete")


# Unbound records still need a name for the format strings above
logger.configure(extra={"name": "vdcomplete"})
setup_logger(log_level=os.getenv("VDCOMPLETE_LOG_LEVEL", "WARNING"))
