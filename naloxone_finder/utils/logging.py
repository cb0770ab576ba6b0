"""
Logging utilities for Naloxone Finder Backend.

Provides standardized logger configuration.

SECURITY RULES:
- NEVER log the Perplexity API key or Authorization headers
- Raw model output may be logged (truncated); it contains public
  provider listings only, never user data beyond the ZIP code
"""

import logging
from typing import Optional


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from naloxone_finder.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Search request received")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
