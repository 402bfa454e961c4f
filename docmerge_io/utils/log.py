"""
RESPONSIBILITIES
- Provide an IO-local logger helper sharing the core docmerge logging setup.
PROCESS OVERVIEW
1. Callers request get_logger(name) at import time.
2. A child logger named ``docmerge.io.<name>`` is returned without touching handlers.
3. Handlers are attached once the application calls docmerge.core.logger.get_logger().
"""

from __future__ import annotations

import logging

from docmerge.core.logger import LOGGER_NAME


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger for IO modules."""

    return logging.getLogger(LOGGER_NAME).getChild(f"io.{name}")
