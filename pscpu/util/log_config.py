"""
Logging configuration for pscpu.

Diagnostics go to stderr: stdout is reserved for the one line per sample.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

ROOT_LOGGER = "pscpu"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for log output
        stream: Console stream (default: sys.stderr, resolved at call time)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler with clean formatting
    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level)

    # Clean format: [LEVEL] message
    console_formatter = logging.Formatter(
        fmt='[%(levelname)s] %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Optional file handler with more detailed format
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def configure_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Re-apply level and file output to every pscpu logger created so far"""
    names = [
        name for name, item in list(logging.root.manager.loggerDict.items())
        if isinstance(item, logging.Logger)
        and (name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."))
    ]
    for name in names:
        setup_logger(name, level=level, log_file=log_file)
