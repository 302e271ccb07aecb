"""
Logging configuration for the schema.org parser.
"""

import logging
import os
import sys
from typing import Optional, Union

# Overridable from the environment (or a .env file loaded by run_parser.py)
DEFAULT_LEVEL = os.getenv("SCHEMAORG_PARSER_LOG_LEVEL", "INFO").upper()

_FORMATTER = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def setup_logger(
    name: str = "schemaorg_parser",
    level: Union[int, str] = DEFAULT_LEVEL,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Safe to call repeatedly: the console handler is attached once, later
    calls only change the level and add a file handler when asked for.

    Args:
        name: Logger name
        level: Logging level, int or level name (default: $SCHEMAORG_PARSER_LOG_LEVEL or INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        # stderr, so JSON written to stdout by the CLI stays parseable
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_FORMATTER)
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(_FORMATTER)
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


# Default logger instance, created once at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Args:
        module_name: Name of the module (e.g., 'handler', 'parser')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"schemaorg_parser.{module_name}")
