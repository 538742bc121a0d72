"""Logging utilities for the fx_normalizer package."""

from __future__ import annotations

import logging
from typing import Optional

_CONFIGURED: Optional[bool] = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "fx_normalizer") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    global _CONFIGURED
    if _CONFIGURED is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _CONFIGURED = True
    return logging.getLogger(name)
