"""
Throttled band-power estimation over the most recent centered samples.

:class:`SpectralEstimator` is a cooperative rate limiter: it is polled on
every packet and only computes when the cooldown has elapsed and enough data
(and, for the spectral variant, a plausible sample rate) is available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import BETA
from ..tools.debug import time_block
from .bands import DEFAULT_BANDS, BandRange, band_powers
from .features import rms_beta_power
from .fft import windowed_power_spectrum

ESTIMATOR_SPECTRAL = "spectral"
ESTIMATOR_RMS = "rms"
ESTIMATORS = (ESTIMATOR_SPECTRAL, ESTIMATOR_RMS)


def compute_band_powers(
    window: ArrayLike,
    sample_rate_hz: float,
    bands: Mapping[str, BandRange] = DEFAULT_BANDS,
    *,
    transform: str = "fft",
) -> Dict[str, float]:
    """Hann-windowed one-sided spectrum integrated into log-compressed band powers."""
    freqs, power = windowed_power_spectrum(window, sample_rate_hz, transform=transform)
    return band_powers(freqs, power, bands)


def compute_rms_band_powers(window: ArrayLike) -> Dict[str, float]:
    """Single-band variant: only ``beta`` from the RMS energy proxy."""
    return {BETA: rms_beta_power(window)}


@dataclass
class SpectralEstimator:
    """
    Gatekeeper for band-power updates.

    An update runs only when all of the following hold:

    * at least ``update_interval_ms`` have passed since the last update
      (the first eligible call always runs),
    * the buffer holds at least ``window_length`` samples,
    * for the spectral variant, the sample rate is known and
      ``>= min_sample_rate_hz``.
    """

    bands: Mapping[str, BandRange] = field(default_factory=lambda: dict(DEFAULT_BANDS))
    window_length: int = 256
    update_interval_ms: int = 250
    min_sample_rate_hz: float = 20.0
    estimator: str = ESTIMATOR_SPECTRAL
    transform: str = "fft"

    last_update_ms: Optional[int] = field(init=False, default=None)
    update_count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.estimator not in ESTIMATORS:
            raise ValueError(f"unknown estimator {self.estimator!r}")
        if self.window_length < 2:
            raise ValueError("window_length must be >= 2")

    def _cooling_down(self, now_ms: int) -> bool:
        return self.last_update_ms is not None and now_ms - self.last_update_ms < self.update_interval_ms

    def ready(self, n_samples: int, sample_rate_hz: Optional[float], now_ms: int) -> bool:
        if self._cooling_down(int(now_ms)):
            return False
        if self.estimator == ESTIMATOR_SPECTRAL:
            if sample_rate_hz is None or sample_rate_hz < self.min_sample_rate_hz:
                return False
        return n_samples >= self.window_length

    def estimate(self, window: np.ndarray, sample_rate_hz: Optional[float]) -> Dict[str, float]:
        """Compute band powers for ``window`` without touching the throttle state."""
        if self.estimator == ESTIMATOR_RMS:
            return compute_rms_band_powers(window)
        if sample_rate_hz is None or sample_rate_hz <= 0:
            raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
        return compute_band_powers(window, sample_rate_hz, self.bands, transform=self.transform)

    def maybe_update(
        self,
        samples: ArrayLike,
        sample_rate_hz: Optional[float],
        now_ms: int,
    ) -> Optional[Dict[str, float]]:
        """
        Return a fresh band-power set, or ``None`` when gated.

        ``samples`` are the buffered centered samples, oldest first; only the
        newest ``window_length`` are analysed.
        """
        buffer = np.asarray(samples, dtype=float).reshape(-1)
        if not self.ready(buffer.size, sample_rate_hz, now_ms):
            return None
        window = buffer[-self.window_length:]
        with time_block(f"band power update ({self.estimator})"):
            powers = self.estimate(window, sample_rate_hz)
        self.last_update_ms = int(now_ms)
        self.update_count += 1
        return powers

    def reset(self) -> None:
        self.last_update_ms = None
        self.update_count = 0
