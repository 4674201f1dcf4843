"""Elapsed-time logging helpers."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def track_time(description: str) -> Iterator[None]:
    """Log how long the wrapped block took, at debug level."""
    start = time.monotonic()
    try:
        yield
    finally:
        elapsed = time.monotonic() - start
        logger.debug(f"{description} took {elapsed:.3f}s")
