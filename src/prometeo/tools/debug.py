"""Opt-in timing hooks, switched on with ``PROMETEO_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

_ENABLED_VALUES = frozenset({"1", "true", "yes", "on"})


def debug_enabled() -> bool:
    # Read on every call so tests and long-running sessions can toggle it.
    return os.environ.get("PROMETEO_DEBUG", "").strip().lower() in _ENABLED_VALUES


@contextmanager
def time_block(label: str, *, emitter: Callable[[str], None] | None = None) -> Iterator[None]:
    """
    Report how long the ``with`` body took.

    Messages go to ``emitter`` when given, else to this module's logger at
    DEBUG level. Nothing is measured while debugging is off.
    """
    if not debug_enabled():
        yield
        return

    started = time.perf_counter()
    try:
        yield
    finally:
        message = f"{label}: {1000.0 * (time.perf_counter() - started):.3f} ms"
        if emitter is None:
            logger.debug(message)
        else:
            emitter(message)
