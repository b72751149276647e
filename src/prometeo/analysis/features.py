"""Time-domain features of a sample block."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import SignalQuality
from .fft import as_signal_block
from .filters import remove_dc

# Windows shorter than this give a meaningless RMS power proxy.
MIN_RMS_SAMPLES = 100


def rms(signal: ArrayLike) -> float:
    """Root-mean-square of a non-empty 1-D block."""
    arr = as_signal_block(signal)
    return float(np.sqrt(np.mean(arr * arr)))


def rms_beta_power(signal: ArrayLike, *, min_samples: int = MIN_RMS_SAMPLES) -> float:
    """
    Coarse energy proxy ``10 * log1p(RMS(x - mean(x)))``.

    No frequency selectivity: this is the cheap single-value estimator used
    for threshold-style control. Returns 0.0 for empty or too short windows.
    """
    arr = np.asarray(signal, dtype=float).reshape(-1)
    if arr.size < max(1, int(min_samples)):
        return 0.0
    value = 10.0 * math.log1p(rms(remove_dc(arr)))
    return max(0.0, value)


def signal_quality(signal: ArrayLike) -> SignalQuality:
    arr = as_signal_block(signal)
    return SignalQuality(
        mean=float(arr.mean()),
        std=float(arr.std()),
        minimum=float(arr.min()),
        maximum=float(arr.max()),
    )
