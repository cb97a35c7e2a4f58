"""
Logging Configuration Module

Logging setup for hosts and the CLI. Library modules only create loggers;
nothing is configured until a host calls setup_logging().
"""

import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER = 'brains'
LOG_LEVEL_ENV = 'BRAINS_LOG_LEVEL'


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Turn a level number or name into a logging level.

    None falls back to BRAINS_LOG_LEVEL, then INFO.

    Raises:
        ValueError: On an unknown level name
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, 'INFO')
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging for the brains package.

    Args:
        level: Level number or name; None reads BRAINS_LOG_LEVEL
        log_file: Optional file that receives the same records
        format_string: Custom format string for log messages

    Returns:
        logging.Logger: The package logger
    """
    if format_string is None:
        format_string = "[%(asctime)s] %(levelname)s [%(name)s]: %(message)s"

    numeric_level = resolve_level(level)
    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)

    if log_file:
        path = os.path.abspath(log_file)
        # One file handler per path, even if setup runs again
        if not any(getattr(h, 'baseFilename', None) == path for h in package_logger.handlers):
            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(logging.Formatter(format_string))
            package_logger.addHandler(file_handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger inside the package namespace.

    Names outside it (e.g. '__main__' when run with `python -m`) are
    nested under 'brains' so package-level settings still apply.
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
