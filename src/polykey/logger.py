"""logger.py - Logging helper shared by all polykey modules."""

from __future__ import annotations

import logging

# Library code never configures handlers; applications do.
logging.getLogger("polykey").addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (normally ``__name__``)."""
    return logging.getLogger(name)
