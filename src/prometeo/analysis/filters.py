"""Pre-processing applied to a centered sample block before energy estimates."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike
from scipy import signal


def remove_dc(block: ArrayLike) -> np.ndarray:
    """
    Subtract the block mean.

    The baseline calibrator removes the long-term DC level, but a window can
    still sit off zero (electrode drift, a baseline taken during movement).
    """
    return signal.detrend(np.asarray(block, dtype=float), type="constant")
