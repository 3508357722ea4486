"""
Logging utilities for the invoicing backend.

Provides standardized logger configuration following privacy rules.

RULES:
- NEVER log the app password or session tokens
- NEVER log logo payloads (base64 data URIs) or rendered file bytes
- NEVER log the full raw text of a bulk request (customer PII)

Acceptable logging:
- High-level events (e.g., "Bulk batch started", "Invoice rendered")
- Invoice numbers, row counts, formats
- Error codes and sanitized error messages
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
        >>> from invoicing.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
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
