from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_BASELINE_WINDOW = 200
# Midpoint reference used before the session baseline is known.
DEFAULT_FALLBACK_BASELINE = 512.0


@dataclass
class BaselineCalibrator:
    """
    Per-session DC reference for raw ADC readings.

    The first ``window_size`` observed readings are averaged once; after that
    the baseline is frozen for the session. Until then :meth:`center` uses
    ``fallback`` so early samples are only approximately centered. Samples
    centered before readiness are not revisited.
    """

    window_size: int = DEFAULT_BASELINE_WINDOW
    fallback: float = DEFAULT_FALLBACK_BASELINE

    baseline: Optional[float] = field(init=False, default=None)
    _window: List[float] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.window_size <= 0:
            raise ValueError("window_size must be positive")

    @property
    def ready(self) -> bool:
        return self.baseline is not None

    @property
    def collected(self) -> int:
        """Number of readings gathered towards the baseline so far."""
        return self.window_size if self.ready else len(self._window)

    def observe(self, raw: float) -> bool:
        """Feed one raw reading; returns True on the call that makes the baseline ready."""
        if self.ready:
            return False
        self._window.append(float(raw))
        if len(self._window) < self.window_size:
            return False
        self.baseline = compute_baseline(self._window)
        self._window = []
        logger.info("Baseline ready: %.1f", self.baseline)
        return True

    def center(self, raw: float) -> float:
        reference = self.baseline if self.baseline is not None else self.fallback
        return float(raw) - reference

    def reset(self) -> None:
        self.baseline = None
        self._window = []


def compute_baseline(samples: List[float]) -> float:
    """Arithmetic mean of ``samples``."""
    if not samples:
        raise ValueError("compute_baseline() requires at least one sample")
    return float(np.mean(np.asarray(samples, dtype=np.float64)))
