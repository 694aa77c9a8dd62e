"""
rostrum.logging - Centralized logging configuration.

Provides a simple logging setup with optional verbose mode for debugging.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("rostrum")


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the rostrum namespace.

    Args:
        name: Module name (usually ``__name__``)

    Returns:
        Logger named ``rostrum.<suffix>``
    """
    if name == "rostrum" or name.startswith("rostrum."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the rostrum package.

    Args:
        verbose: If True, enable DEBUG level logging; otherwise WARNING level
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s",
    )
    logger.setLevel(level)
